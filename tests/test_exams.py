import itertools

import pytest

from alexnoc.exams import DualLfsr, FifoChannel, ShiftRegister, full_adder


def _period(outputs):
    first = outputs[0]
    return next(i for i, value in enumerate(outputs[1:], start=1) if value == first)


def test_lfsr_first_output_is_initial_state():
    assert DualLfsr().step() == (0b0010, 0b0010)


def test_lfsr_periods():
    lfsr = DualLfsr()
    steps = [lfsr.step() for _ in range(40)]
    assert _period([g1 for g1, _ in steps]) == 15
    assert _period([g2 for _, g2 in steps]) == 6


def test_lfsr_never_reaches_zero():
    lfsr = DualLfsr()
    for g1, g2 in (lfsr.step() for _ in range(100)):
        assert g1 != 0 and g2 != 0
        assert 0 <= g1 <= 15 and 0 <= g2 <= 15


def test_lfsr_zero_state_stays_zero():
    lfsr = DualLfsr(0, 0)
    assert [lfsr.step() for _ in range(3)] == [(0, 0)] * 3


def test_lfsr_rejects_wide_state():
    with pytest.raises(ValueError):
        DualLfsr(16, 1)


def test_shift_register_starts_unknown():
    assert ShiftRegister().step(1) == (None, None, None)


def test_shift_register_delays_input():
    reg = ShiftRegister()
    inputs = [1, 0, 1, 1, 0, 0, 1]
    outputs = [reg.step(bit) for bit in inputs]
    for k in range(len(inputs) - 3):
        assert outputs[k + 1][0] == inputs[k]
        assert outputs[k + 2][1] == inputs[k]
        assert outputs[k + 3][2] == inputs[k]


def test_shift_register_rejects_non_bit():
    with pytest.raises(ValueError):
        ShiftRegister().step(2)


def test_fifo_channel_passes_values_through():
    channel = FifoChannel()
    pairs = [(3, 9), (15, 0), (7, 7)]
    assert [channel.transfer(a, b) for a, b in pairs] == pairs


def test_fifo_channel_rejects_wide_value():
    with pytest.raises(ValueError):
        FifoChannel().transfer(16, 0)


def test_fifo_channel_rejects_bad_depth():
    with pytest.raises(ValueError):
        FifoChannel(0)


def test_full_adder_overflow():
    assert full_adder(15, 1, 0) == (0, 1)


def test_full_adder_matches_five_bit_sum():
    for a, b, c in itertools.product(range(16), range(16), (0, 1, 15)):
        total, carry = full_adder(a, b, c)
        assert 0 <= total <= 15
        assert total + 16 * carry == (a + b + c) % 32


@pytest.mark.parametrize("args", [(-1, 0, 0), (0, 16, 0), (0, 0, 16)])
def test_full_adder_rejects_out_of_range(args):
    with pytest.raises(ValueError):
        full_adder(*args)