import math

import pytest

from alexnoc.flit import (
    DATA_IMAGE,
    DATA_WEIGHTS,
    FlitKind,
    Header,
    Packet,
    bits_to_float,
    flit_kind,
    flit_value,
    float_to_bits,
    make_body,
    make_header,
    make_tail,
    parse_header,
)


def test_float_bits_of_one():
    assert float_to_bits(1.0) == 0x3F800000
    assert bits_to_float(0x3F800000) == 1.0


@pytest.mark.parametrize("value", [0.0, -2.5, 0.15625, 1e-20, 3.0e30])
def test_float_round_trip(value):
    assert bits_to_float(float_to_bits(value)) == pytest.approx(value, rel=1e-6)


def test_nan_round_trip():
    bits = float_to_bits(float("nan"))
    assert (bits >> 23) & 0xFF == 0xFF
    assert bits & 0x7FFFFF > 0
    assert math.isnan(bits_to_float(bits)) is True


@pytest.mark.parametrize("src,dst,kind", [(0, 1, DATA_WEIGHTS), (8, 7, DATA_IMAGE), (15, 15, 3)])
def test_header_round_trip(src, dst, kind):
    flit = make_header(src, dst, kind)
    assert flit_kind(flit) is FlitKind.HEADER
    assert parse_header(flit) == Header(src, dst, kind)
    assert flit & ((1 << 22) - 1) == 0


@pytest.mark.parametrize("args", [(16, 0, 0), (0, -1, 0), (0, 0, 4)])
def test_header_rejects_wide_fields(args):
    with pytest.raises(ValueError):
        make_header(*args)


def test_body_and_tail():
    body = make_body(-0.75)
    tail = make_tail(-0.75)
    assert flit_kind(body) is FlitKind.BODY
    assert flit_kind(tail) is FlitKind.TAIL
    assert flit_value(body) == -0.75
    assert flit_value(tail) == -0.75
    assert tail ^ body == 1 << 32


def test_unknown_type_bits_count_as_body():
    assert flit_kind((0b11 << 32) | float_to_bits(1.0)) is FlitKind.BODY


def test_flit_kind_rejects_out_of_range():
    with pytest.raises(ValueError):
        flit_kind(1 << 34)
    with pytest.raises(ValueError):
        flit_kind(-1)


def test_parse_header_rejects_body():
    with pytest.raises(ValueError):
        parse_header(make_body(1.0))


def test_packet_defaults_to_empty_data():
    first = Packet(1, 2, DATA_IMAGE)
    second = Packet(1, 2, DATA_IMAGE)
    first.datas.append(1.0)
    assert second.datas == []
    assert first.datas == [1.0]