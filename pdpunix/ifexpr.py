"""Evaluate a conditional expression and run the command that follows it."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence


class IfError(Exception):
    """Raised on a malformed expression."""


class _Parser:
    def __init__(self, args: Sequence[str]) -> None:
        self.args = list(args)
        self.pos = 0

    def next(self) -> Optional[str]:
        value = self.args[self.pos] if self.pos < len(self.args) else None
        self.pos += 1
        return value

    def exp(self) -> bool:
        p1 = self.e1()
        if self.next() == "-o":
            return self.exp() | p1
        self.pos -= 1
        return p1

    def e1(self) -> bool:
        p1 = self.e2()
        if self.next() == "-a":
            return self.e1() & p1
        self.pos -= 1
        return p1

    def e2(self) -> bool:
        if self.next() == "!":
            return not self.e3()
        self.pos -= 1
        return self.e3()

    def e3(self) -> bool:
        a = self.next()
        if a is None:
            raise IfError("if error")
        if a == "(":
            p1 = self.exp()
            if self.next() != ")":
                raise IfError("if error")
            return p1
        if a == "-r":
            return _can_open(self.next(), os.O_RDONLY)
        if a == "-w":
            return _can_open(self.next(), os.O_WRONLY)
        if a == "-c":
            self.next()
            return True
        op = self.next()
        if op == "=":
            return a == self.next()
        if op == "!=":
            return a != self.next()
        raise IfError("if error")


def _can_open(path: Optional[str], flags: int) -> bool:
    if path is None:
        return False
    try:
        fd = os.open(path, flags)
    except OSError:
        return False
    os.close(fd)
    return True


def evaluate(args: Sequence[str]) -> tuple[bool, list[str]]:
    """Evaluate the expression at the head of ``args``; return it and the command."""
    parser = _Parser(args)
    result = parser.exp()
    return bool(result), parser.args[parser.pos :]


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        return 0
    try:
        result, command = evaluate(args)
    except IfError as exc:
        print(exc)
        return 1
    if not result or not command:
        return 0
    name = command[0]
    for candidate in (name, "/bin/" + name, "/usr/bin/" + name):
        try:
            os.execv(candidate, [candidate, *command[1:]])
        except OSError:
            continue
    print("no command")
    return 1