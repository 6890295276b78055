"""Flit encoding of packets travelling through the network-on-chip.

A flit is 34 bits: two type bits (10 header, 01 tail, 00 body) above a
32-bit payload. A header payload carries the source id in bits 31-28,
the destination id in bits 27-24 and the data type in bits 23-22; body
and tail payloads carry an IEEE-754 single-precision value.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

DATA_BIAS = 0
DATA_WEIGHTS = 1
DATA_IMAGE = 2

_PAYLOAD_MASK = 0xFFFF_FFFF
_FLIT_LIMIT = 1 << 34


class FlitKind(IntEnum):
    """Values of the two type bits of a flit."""

    BODY = 0b00
    TAIL = 0b01
    HEADER = 0b10


@dataclass(frozen=True)
class Header:
    """Routing information carried by a header flit."""

    source_id: int
    dest_id: int
    data_type: int


@dataclass
class Packet:
    """A routed packet of float values."""

    source_id: int
    dest_id: int
    data_type: int
    datas: list[float] = field(default_factory=list)


def float_to_bits(value: float) -> int:
    """Bit pattern of a value as a single-precision float."""
    return struct.unpack("<I", struct.pack("<f", value))[0]


def bits_to_float(bits: int) -> float:
    """Single-precision float with the given 32-bit pattern."""
    return struct.unpack("<f", struct.pack("<I", bits & _PAYLOAD_MASK))[0]


def _check_field(name: str, value: int, width: int) -> None:
    if not 0 <= value < (1 << width):
        raise ValueError(f"{name} {value} does not fit in {width} bits")


def make_header(source_id: int, dest_id: int, data_type: int) -> int:
    """Encode a header flit."""
    _check_field("source id", source_id, 4)
    _check_field("destination id", dest_id, 4)
    _check_field("data type", data_type, 2)
    return (FlitKind.HEADER << 32) | (source_id << 28) | (dest_id << 24) | (data_type << 22)


def make_body(value: float) -> int:
    """Encode a body flit carrying a value."""
    return (FlitKind.BODY << 32) | float_to_bits(value)


def make_tail(value: float) -> int:
    """Encode a tail flit carrying the last value of a packet."""
    return (FlitKind.TAIL << 32) | float_to_bits(value)


def flit_kind(flit: int) -> FlitKind:
    """Type of a flit; type bits other than header or tail count as body."""
    if not 0 <= flit < _FLIT_LIMIT:
        raise ValueError(f"flit {flit:#x} is not a 34-bit value")
    bits = flit >> 32
    if bits == FlitKind.HEADER:
        return FlitKind.HEADER
    if bits == FlitKind.TAIL:
        return FlitKind.TAIL
    return FlitKind.BODY


def parse_header(flit: int) -> Header:
    """Decode the routing fields of a header flit."""
    if flit_kind(flit) is not FlitKind.HEADER:
        raise ValueError(f"flit {flit:#x} is not a header")
    return Header(
        source_id=(flit >> 28) & 0xF,
        dest_id=(flit >> 24) & 0xF,
        data_type=(flit >> 22) & 0x3,
    )


def flit_value(flit: int) -> float:
    """Float carried in the payload of a body or tail flit."""
    flit_kind(flit)
    return bits_to_float(flit & _PAYLOAD_MASK)