import itertools

import pytest

from pdpunix.alu import (
    Flags,
    ash,
    ashc,
    branch_taken,
    branch_target,
    clear_flags,
    divide,
    mfps,
    mul,
    set_flags,
    sob,
    xor,
)


def signed16(v):
    return v - 0x10000 if v & 0x8000 else v


def signed32(v):
    return v - (1 << 32) if v & 0x80000000 else v


def test_branch_target_single_words():
    assert branch_target(0o1000, 0o001001) == 0o1002
    assert branch_target(0o1000, 0o001377) == 0o776


def test_branch_target_wraps():
    assert branch_target(0, 0o377) == 0o177776


@pytest.mark.parametrize("offset", [1, 5, 0o77, 0o177])
def test_branch_forward_and_back_round_trip(offset):
    pc = 0o4000
    forward = branch_target(pc, offset)
    assert forward > pc
    assert branch_target(forward, (-offset) & 0o377) == pc


@pytest.mark.parametrize(
    "mnemonic, flags, taken",
    [
        ("br", Flags(), True),
        ("bne", Flags(z=True), False),
        ("beq", Flags(z=True), True),
        ("bpl", Flags(n=True), False),
        ("bmi", Flags(n=True), True),
        ("bhi", Flags(), True),
        ("bhi", Flags(c=True), False),
        ("blos", Flags(z=True), True),
        ("bvc", Flags(v=True), False),
        ("bvs", Flags(v=True), True),
        ("bcc", Flags(c=True), False),
        ("bcs", Flags(c=True), True),
        ("bge", Flags(n=True, v=True), True),
        ("blt", Flags(n=True), True),
        ("ble", Flags(z=True), True),
        ("ble", Flags(), False),
        ("bgt", Flags(), True),
        ("bgt", Flags(z=True), False),
    ],
)
def test_branch_taken(mnemonic, flags, taken):
    assert branch_taken(mnemonic, flags) is taken


def test_unknown_branch_raises():
    with pytest.raises(ValueError):
        branch_taken("bxx", Flags())


def test_set_and_clear_all_flags():
    all_set = set_flags(Flags(), 0o277)
    assert all_set == Flags(True, True, True, True)
    assert clear_flags(all_set, 0o257) == Flags()


def test_set_flags_selects_bits():
    assert set_flags(Flags(), 0o261) == Flags(c=True)
    assert clear_flags(Flags(n=True, c=True), 0o241) == Flags(n=True)


def test_sob_loops_back():
    assert sob(3, 0o1000, 0o077002) == (2, 0o774)


def test_sob_falls_through_at_zero():
    assert sob(1, 0o1000, 0o077002) == (0, 0o1000)


@pytest.mark.parametrize("bits", list(itertools.product([False, True], repeat=4)))
def test_mfps_round_trip(bits):
    flags = Flags(*bits)
    byte, after = mfps(flags)
    assert set_flags(Flags(), byte) == flags
    assert after.z == (byte == 0)
    assert after.v is False
    assert after.c == flags.c


@pytest.mark.parametrize("shift", range(1, 12))
def test_ash_left_then_right_round_trip(shift):
    value, _ = ash(5, shift, Flags())
    back, flags = ash(value, (-shift) & 0o77, Flags())
    assert back == 5
    assert flags.v is False


def test_ash_overflow_into_sign():
    result, flags = ash(0o40000, 1, Flags())
    assert result == 0o100000
    assert flags.v and flags.n and not flags.c


def test_ash_right_keeps_sign():
    result, flags = ash(-8 & 0xFFFF, (-2) & 0o77, Flags())
    assert signed16(result) == -8 >> 2
    assert flags.n


def test_ash_right_carry():
    result, flags = ash(1, (-1) & 0o77, Flags())
    assert result == 0
    assert flags.c and flags.z


def test_ash_zero_count_keeps_value_and_carry():
    result, flags = ash(0o100007, 0, Flags(c=True, v=True))
    assert result == 0o100007
    assert flags.n and flags.c and not flags.v


@pytest.mark.parametrize("value, shift", [(1, 3), (0x1234, 8), (-100, 4)])
def test_ashc_left_right_round_trip(value, shift):
    v = value & 0xFFFFFFFF
    high, low, _ = ashc(v >> 16, v & 0xFFFF, shift, Flags())
    assert signed32((high << 16) | low) == value << shift
    high, low, _ = ashc(high, low, (-shift) & 0o77, Flags())
    assert signed32((high << 16) | low) == value


def test_ashc_into_sign_bit():
    high, low, flags = ashc(0, 1, 31, Flags())
    assert (high, low) == (0o100000, 0)
    assert flags.n and flags.v


@pytest.mark.parametrize(
    "a, b", [(3, 4), (-5, 7), (-300, -300), (32767, -32768), (0, 17)]
)
def test_mul(a, b):
    high, low, flags = mul(a & 0xFFFF, b & 0xFFFF, Flags(c=True, v=True))
    assert signed32((high << 16) | low) == a * b
    assert flags.n == (a * b < 0)
    assert flags.z == (a * b == 0)
    assert not flags.c and not flags.v


@pytest.mark.parametrize(
    "dividend, divisor", [(100, 7), (-100, 7), (100, -7), (-100, -7), (123456, 1000)]
)
def test_divide(dividend, divisor):
    v = dividend & 0xFFFFFFFF
    q, r, flags = divide(v >> 16, v & 0xFFFF, divisor & 0xFFFF, Flags(c=True))
    quotient, remainder = signed16(q), signed16(r)
    assert quotient * divisor + remainder == dividend
    assert abs(remainder) < abs(divisor)
    assert flags.n == (quotient < 0)
    assert not flags.v and not flags.c


def test_divide_by_zero():
    high, low, flags = divide(0o12, 0o34, 0, Flags())
    assert (high, low) == (0o12, 0o34)
    assert flags.c and flags.v


def test_divide_overflow():
    _, _, flags = divide(0x7FFF, 0, 1, Flags())
    assert flags.v


@pytest.mark.parametrize("a, b", [(0o123456, 0o654321 & 0xFFFF), (0, 0o177777), (0o777, 0o777)])
def test_xor_involution(a, b):
    result, flags = xor(a, b, Flags(v=True))
    back, _ = xor(result, b, Flags())
    assert back == a
    assert flags.z == (a == b)
    assert flags.v is False
    assert flags.n == bool(result & 0o100000)