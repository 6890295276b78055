"""Small clocked circuits: linear feedback shift registers, a shift register,
a FIFO channel and a 4-bit adder."""

from __future__ import annotations

from collections import deque

_NIBBLE = 0xF
_FIFO_DEPTH = 16


def _check_nibble(name: str, value: int) -> None:
    if not 0 <= value <= _NIBBLE:
        raise ValueError(f"{name} {value} is not a 4-bit value")


def _bit(value: int, index: int) -> int:
    return (value >> index) & 1


class DualLfsr:
    """Two 4-bit linear feedback shift registers clocked together.

    Bit ``i`` of each state is register ``D_i``. Each step outputs the
    current states and then shifts: the first register feeds its top bit
    back into bits 0 and 1, the second into bits 0 and 2.
    """

    def __init__(self, g1: int = 0b0010, g2: int = 0b0010) -> None:
        _check_nibble("g1", g1)
        _check_nibble("g2", g2)
        self.g1 = g1
        self.g2 = g2

    def step(self) -> tuple[int, int]:
        """Return the outputs for this clock edge and advance both registers."""
        out = (self.g1, self.g2)
        d0, d1, d2, d3 = (_bit(self.g1, i) for i in range(4))
        self.g1 = d3 | ((d0 ^ d3) << 1) | (d1 << 2) | (d2 << 3)
        d4, d5, d6, d7 = (_bit(self.g2, i) for i in range(4))
        self.g2 = d7 | (d4 << 1) | ((d5 ^ d7) << 2) | (d6 << 3)
        return out


class ShiftRegister:
    """Three flip-flops in a chain; outputs show the registers before each shift.

    Registers start unknown, represented as None.
    """

    def __init__(self) -> None:
        self.registers: tuple[int | None, int | None, int | None] = (None, None, None)

    def step(self, data_in: int) -> tuple[int | None, int | None, int | None]:
        """Output (Q1, Q2, Q3) and shift data_in into the first flip-flop."""
        if data_in not in (0, 1):
            raise ValueError(f"data_in must be 0 or 1, got {data_in!r}")
        out = self.registers
        ff1, ff2, _ = self.registers
        self.registers = (data_in, ff1, ff2)
        return out


class FifoChannel:
    """Passes two 4-bit inputs through a pair of bounded FIFOs."""

    def __init__(self, depth: int = _FIFO_DEPTH) -> None:
        if depth <= 0:
            raise ValueError("FIFO depth must be positive")
        self.depth = depth
        self._fifos: tuple[deque[int], deque[int]] = (deque(), deque())

    def _push(self, fifo: deque[int], value: int) -> None:
        if len(fifo) >= self.depth:
            raise OverflowError("FIFO is full")
        fifo.append(value)

    def transfer(self, g1: int, g2: int) -> tuple[int, int]:
        """Write g1 and g2 into their FIFOs and read the oldest values back out."""
        _check_nibble("g1", g1)
        _check_nibble("g2", g2)
        first, second = self._fifos
        self._push(first, g1)
        self._push(second, g2)
        return first.popleft(), second.popleft()


def full_adder(a: int, b: int, carry_in: int) -> tuple[int, int]:
    """Add three 4-bit values in 5 bits; return (4-bit sum, carry out)."""
    _check_nibble("a", a)
    _check_nibble("b", b)
    _check_nibble("carry_in", carry_in)
    total = (a + b + carry_in) & 0x1F
    return total & _NIBBLE, _bit(total, 4)