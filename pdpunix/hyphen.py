"""Find words hyphenated across line ends and print them joined."""

from __future__ import annotations

import sys
from typing import Iterator, Optional, Sequence

_SPACE = (" ", "\t", "\n")


def _is_letter(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def hyphenated_words(text: str) -> Iterator[str]:
    """Yield each word broken by a hyphen at a line end, with the pieces joined."""
    chars = iter(text)
    word: list[str] = []
    joined = False
    while True:
        ch = next(chars, None)
        if ch is None:
            return
        if _is_letter(ch):
            word.append(ch)
            continue
        if ch == "-":
            word.append(ch)
            nxt = next(chars, None)
            if nxt is None:
                return
            if nxt != "\n":
                word.append(nxt)
                continue
            if len(word) == 1:
                word, joined = [], False
                continue
            joined = True
            nxt = next(chars, None)
            while nxt is not None and nxt in _SPACE:
                nxt = next(chars, None)
            if nxt is None:
                return
            word.append(nxt)
            continue
        if ch == "\n" and not joined:
            word, joined = [], False
            continue
        if joined:
            yield "".join(word)
        word, joined = [], False


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        for word in hyphenated_words(sys.stdin.read()):
            print(word)
        return 0
    for name in args:
        print(f"{name}:\n ")
        try:
            with open(name, encoding="latin-1") as handle:
                text = handle.read()
        except OSError:
            print("cannot open input file")
            return 1
        for word in hyphenated_words(text):
            print(word)
    return 0