"""PDP-11 branches, condition-code instructions and extended arithmetic."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

WORD = 0o177777
SIGN = 0o100000
LONG = 0xFFFFFFFF
LONG_SIGN = 0x80000000

CC_N = 0o10
CC_Z = 0o04
CC_V = 0o02
CC_C = 0o01


@dataclass(frozen=True)
class Flags:
    """The four processor condition codes."""

    n: bool = False
    z: bool = False
    v: bool = False
    c: bool = False


def _signed16(value: int) -> int:
    value &= WORD
    return value - 0x10000 if value & SIGN else value


def _signed32(value: int) -> int:
    value &= LONG
    return value - (1 << 32) if value & LONG_SIGN else value


def branch_target(pc: int, ir: int) -> int:
    """Return PC after taking a branch whose word offset is the low byte of ``ir``."""
    offset = ir & 0o377
    if offset & 0o200:
        offset += 0o177400
    return (pc + offset * 2) & WORD


_CONDITIONS: dict[str, Callable[[Flags], bool]] = {
    "br": lambda f: True,
    "bne": lambda f: not f.z,
    "beq": lambda f: f.z,
    "bpl": lambda f: not f.n,
    "bmi": lambda f: f.n,
    "bhi": lambda f: not f.z and not f.c,
    "blos": lambda f: f.c or f.z,
    "bvc": lambda f: not f.v,
    "bvs": lambda f: f.v,
    "bcc": lambda f: not f.c,
    "bcs": lambda f: f.c,
    "bge": lambda f: f.n == f.v,
    "blt": lambda f: f.n != f.v,
    "ble": lambda f: f.n != f.v or f.z,
    "bgt": lambda f: f.n == f.v and not f.z,
}


def branch_taken(mnemonic: str, flags: Flags) -> bool:
    """Tell whether the named conditional branch is taken under ``flags``."""
    try:
        condition = _CONDITIONS[mnemonic.lower()]
    except KeyError:
        raise ValueError(f"unknown branch instruction {mnemonic!r}") from None
    return condition(flags)


def set_flags(flags: Flags, ir: int) -> Flags:
    """Set the condition codes selected by the low bits of ``ir``."""
    return Flags(
        n=flags.n or bool(ir & CC_N),
        z=flags.z or bool(ir & CC_Z),
        v=flags.v or bool(ir & CC_V),
        c=flags.c or bool(ir & CC_C),
    )


def clear_flags(flags: Flags, ir: int) -> Flags:
    """Clear the condition codes selected by the low bits of ``ir``."""
    return Flags(
        n=flags.n and not ir & CC_N,
        z=flags.z and not ir & CC_Z,
        v=flags.v and not ir & CC_V,
        c=flags.c and not ir & CC_C,
    )


def sob(reg: int, pc: int, ir: int) -> tuple[int, int]:
    """Subtract one and branch back; return the new register and PC."""
    reg = (reg - 1) & WORD
    if reg:
        pc = (pc - (ir & 0o77) * 2) & WORD
    return reg, pc


def mfps(flags: Flags) -> tuple[int, Flags]:
    """Return the condition-code byte and the flags after moving it."""
    byte = (
        (CC_N if flags.n else 0)
        | (CC_Z if flags.z else 0)
        | (CC_V if flags.v else 0)
        | (CC_C if flags.c else 0)
    )
    return byte, replace(flags, n=bool(byte & 0o200), z=byte == 0, v=False)


def ash(value: int, count: int, flags: Flags) -> tuple[int, Flags]:
    """Arithmetic shift of a word by a signed six-bit count."""
    value &= WORD
    shift = count & 0o77
    if shift == 0:
        return value, replace(flags, n=bool(value & SIGN), z=value == 0, v=False)
    result = value
    carry = flags.c
    if shift & 0o40:
        sign = value & SIGN
        for _ in range(0o100 - shift):
            carry = bool(result & 1)
            result = (result >> 1) | sign
    else:
        for _ in range(shift):
            carry = bool(result & SIGN)
            result = (result << 1) & WORD
    return result, Flags(
        n=bool(result & SIGN),
        z=result == 0,
        v=(value & SIGN) != (result & SIGN),
        c=carry,
    )


def ashc(high: int, low: int, count: int, flags: Flags) -> tuple[int, int, Flags]:
    """Arithmetic shift of a register pair by a signed six-bit count."""
    value = ((high & WORD) << 16) | (low & WORD)
    shift = count & 0o77
    if shift == 0:
        return high & WORD, low & WORD, replace(
            flags, n=bool(value & LONG_SIGN), z=value == 0, v=False
        )
    result = value
    carry = flags.c
    if shift & 0o40:
        sign = value & LONG_SIGN
        for _ in range(0o100 - shift):
            carry = bool(result & 1)
            result = (result >> 1) | sign
    else:
        for _ in range(shift):
            carry = bool(result & LONG_SIGN)
            result = (result << 1) & LONG
    new_flags = Flags(
        n=bool(result & LONG_SIGN),
        z=result == 0,
        v=(value & LONG_SIGN) != (result & LONG_SIGN),
        c=carry,
    )
    return result >> 16, result & WORD, new_flags


def mul(a: int, b: int, flags: Flags) -> tuple[int, int, Flags]:
    """Signed multiply of two words; return the high word, low word and flags."""
    product = (_signed16(a) * _signed16(b)) & LONG
    return product >> 16, product & WORD, Flags(n=bool(product & LONG_SIGN), z=product == 0)


def divide(high: int, low: int, divisor: int, flags: Flags) -> tuple[int, int, Flags]:
    """Signed divide of a register pair; return quotient, remainder and flags.

    A zero divisor leaves the registers unchanged and sets C and V.
    """
    if divisor & WORD == 0:
        return high & WORD, low & WORD, replace(flags, c=True, v=True)
    dividend = _signed32(((high & WORD) << 16) | (low & WORD))
    d = _signed16(divisor)
    quotient = abs(dividend) // abs(d)
    if (dividend < 0) != (d < 0):
        quotient = -quotient
    remainder = dividend - quotient * d
    new_flags = Flags(
        n=quotient < 0,
        z=quotient == 0,
        v=not -0o100000 <= quotient <= 0o77777,
        c=False,
    )
    return quotient & WORD, remainder & WORD, new_flags


def xor(a: int, b: int, flags: Flags) -> tuple[int, Flags]:
    """Exclusive or of two words."""
    result = (a ^ b) & WORD
    return result, replace(flags, n=bool(result & SIGN), z=result == 0, v=False)