"""A small formatter with %d, %o, %c and %s conversions on 16-bit integers."""

from __future__ import annotations


def format_number(n: int, base: int) -> str:
    """Return the digits of the non-negative ``n`` in ``base``."""
    if n < 0:
        raise ValueError("negative number")
    digits = []
    while True:
        n, digit = divmod(n, base)
        digits.append(chr(digit + ord("0")))
        if not n:
            break
    return "".join(reversed(digits))


def _signed16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def oldformat(fmt: str, *args: object) -> str:
    """Format ``args`` according to ``fmt``; unknown conversions print as written."""
    out: list[str] = []
    remaining = list(args)
    i = 0
    while i < len(fmt):
        ch = fmt[i]
        i += 1
        if ch != "%":
            out.append(ch)
            continue
        conv = fmt[i] if i < len(fmt) else ""
        if conv not in ("d", "o", "c", "s"):
            out.append("%")
            continue
        i += 1
        if not remaining:
            raise TypeError("not enough arguments for format")
        x = remaining.pop(0)
        if conv in ("d", "o"):
            value = _signed16(int(x))
            if value == -0x8000:
                out.append("100000" if conv == "o" else "-32768")
                continue
            if value < 0:
                out.append("-")
                value = -value
            out.append(format_number(value, 8 if conv == "o" else 10))
        elif conv == "c":
            out.append(x if isinstance(x, str) else chr(int(x)))
        else:
            out.append(str(x))
    return "".join(out)