"""Expand ``*``, ``?`` and ``[...]`` patterns in a command's arguments and run it."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence

_MAGIC = "*?["


def _amatch(s: str, p: str, si: int, pi: int) -> bool:
    scc = s[si] if si < len(s) else ""
    c = p[pi] if pi < len(p) else ""
    if c == "[":
        ok = False
        lc = 0o77777
        q = pi
        while True:
            q += 1
            if q >= len(p):
                return False
            cc = p[q]
            if cc == "]":
                return ok and _amatch(s, p, si + 1, q + 1)
            if cc == "-":
                cc = p[q + 1] if q + 1 < len(p) else ""
                if scc and cc and lc <= ord(scc) <= ord(cc):
                    ok = True
            lc = ord(cc) if cc else 0
            if scc and scc == cc:
                ok = True
    if c == "*":
        return _umatch(s, p, si, pi + 1)
    if c == "":
        return not scc
    if c == "?" or c == scc:
        return bool(scc) and _amatch(s, p, si + 1, pi + 1)
    return False


def _umatch(s: str, p: str, si: int, pi: int) -> bool:
    if pi >= len(p):
        return True
    return any(_amatch(s, p, k, pi) for k in range(si, len(s)))


def match(name: str, pattern: str) -> bool:
    """Tell whether ``name`` matches ``pattern``; a leading dot must be explicit."""
    if name.startswith(".") and not pattern.startswith("."):
        return False
    return _amatch(name, pattern, 0, 0)


def has_magic(arg: str) -> bool:
    """Tell whether ``arg`` holds a pattern character."""
    return any(ch in arg for ch in _MAGIC)


def expand(pattern: str, directory: Optional[str] = None) -> list[str]:
    """Return the sorted names in a directory that match the last part of ``pattern``."""
    first = min(pattern.index(ch) for ch in _MAGIC if ch in pattern)
    slash = pattern.rfind("/", 0, first)
    prefix = pattern[: slash + 1] if slash >= 0 else ""
    rest = pattern[slash + 1 :]
    if slash >= 0:
        dirname = pattern[:slash] or "/"
    else:
        dirname = "."
    if directory is not None and not os.path.isabs(dirname):
        dirname = os.path.join(directory, dirname)
    try:
        entries = [".", "..", *os.listdir(dirname)]
    except OSError as exc:
        raise FileNotFoundError("No directory") from exc
    return sorted(prefix + name for name in entries if match(name, rest))


def build_argv(args: Sequence[str], directory: Optional[str] = None) -> list[str]:
    """Expand every pattern argument; raise ValueError if nothing is left to run."""
    result: list[str] = []
    for arg in args:
        if has_magic(arg):
            result.extend(expand(arg, directory))
        else:
            result.append(arg)
    if len(result) <= 1:
        raise ValueError("No match")
    return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print("Arg count")
        return 1
    try:
        av = build_argv(args)
    except (ValueError, FileNotFoundError) as exc:
        print(exc)
        return 1
    name = av[0]
    for candidate in (name, "/bin/" + name, "/usr/bin/" + name):
        try:
            os.execv(candidate, [candidate, *av[1:]])
        except OSError:
            continue
    usr = "/usr/bin/" + name
    if os.path.exists(usr):
        try:
            os.execv("/bin/sh", ["/bin/sh", usr, *av[1:]])
        except OSError:
            pass
    print("No command")
    return 1