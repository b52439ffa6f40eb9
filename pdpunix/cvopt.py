"""Convert code-generation table source into assembler data statements."""

from __future__ import annotations

import sys
from typing import Optional, Sequence


class _Converter:
    def __init__(self, text: str, nofloat: bool) -> None:
        self.text = text
        self.pos = 0
        self.peekc = ""
        self.nofloat = int(bool(nofloat))
        self.out: list[str] = []

    def getchar(self) -> str:
        if self.pos >= len(self.text):
            return ""
        ch = self.text[self.pos]
        self.pos += 1
        return ch

    def getc(self) -> str:
        ifcnt = 0
        while True:
            if self.peekc:
                t, self.peekc = self.peekc, ""
            else:
                t = self.getchar()
            if not t:
                return ""
            if t == "{":
                ifcnt += 1
                t = self.getchar()
            if t == "}":
                t = self.getc()
                ifcnt -= 1
                if ifcnt == 0 and t == "\n":
                    t = self.getc()
            if ifcnt & self.nofloat:
                continue
            return t

    def flag(self) -> int:
        f = 0
        codes = {"w": 1, "i": 2, "b": 3, "f": 4, "d": 5}
        while True:
            c = self.getc()
            if c in codes and c:
                f = codes[c]
            elif c == "p":
                f += 16
            else:
                self.peekc = c
                return f

    def put(self, s: str) -> None:
        self.out.append(s)

    def subtree(self) -> None:
        t = ord("A")
        steps = {"*": 1, "S": 2, "C": 4, "1": 8}
        while True:
            c = self.getc()
            if c and c in steps:
                t += steps[c]
            else:
                self.peekc = c
                self.put(chr(t))
                return

    def percent(self) -> None:
        sizes = {"a": 16, "i": 12, "z": 4, "c": 8, "e": 20, "n": 63}
        while True:
            c = self.getc()
            if not c:
                raise ValueError("unexpected end of input in table entry")
            if c == ",":
                self.put(";")
            elif c in sizes:
                m = sizes[c]
                t = 0 if c in ("z", "c") else self.flag()
                nxt = self.getc()
                if nxt == "*":
                    m += 0o100
                else:
                    self.peekc = nxt
                self.put(f".byte {m:o},{t:o}")
            elif c == "\n":
                self.put(";1f\n")
                return
            else:
                self.put(c)

    def run(self) -> str:
        smode = nlflg = snlflg = ssmode = False
        simple = {"I": "M", "#": None}
        while True:
            c = self.getc()
            if c not in ("\n", "\t"):
                nlflg = False
            if ssmode and c != "%":
                ssmode = False
                self.put(".data\n1:<")
            if c == "":
                self.put(".text; 0\n")
                return "".join(self.out)
            if c == ":":
                self.put(":" if smode else "=.+2; 0")
            elif c == "A":
                c = self.getc()
                if c in ("1", "2") and c:
                    self.put(chr(ord(c) + ord("A") - ord("1")))
                else:
                    self.put("O")
                    self.peekc = c
            elif c == "B":
                self.put({"1": "C", "2": "D", "E": "L", "F": "P"}.get(self.getc() or "?", "?"))
            elif c == "C":
                nxt = self.getc()
                code = ((ord(nxt) if nxt else 0) + ord("E") - ord("1")) & 0o377
                if code:
                    self.put(chr(code))
            elif c in ("F", "H", "S"):
                self.put({"F": "G", "H": "H", "S": "K"}[c])
                snlflg = True
                self.subtree()
            elif c == "R":
                c = self.getc()
                if c == "1":
                    self.put("J")
                else:
                    self.put("I")
                    self.peekc = c
            elif c == "I":
                self.put(simple["I"])
            elif c == "M":
                self.put("N")
                snlflg = True
            elif c == "#":
                self.put("#" if self.getc() == "1" else '"')
            elif c == "%":
                if smode:
                    self.put(".text;")
                self.percent()
                ssmode = nlflg = smode = True
            elif c == "\t":
                if nlflg:
                    nlflg = False
                else:
                    self.put("\t")
            elif c == "\n":
                if not smode:
                    self.put("\n")
                elif nlflg:
                    nlflg = False
                    self.put("\\0>\n.text\n")
                    smode = False
                else:
                    if not snlflg:
                        self.put("\\n")
                    snlflg = False
                    self.put(">\n<")
                    nlflg = True
            else:
                self.put(c)


def convert(text: str, nofloat: bool = False) -> str:
    """Translate table source ``text``; with ``nofloat`` text in braces is dropped."""
    return _Converter(text, nofloat).run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if args:
        with open(args[0], encoding="latin-1") as handle:
            text = handle.read()
    else:
        text = sys.stdin.read()
    try:
        result = convert(text)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    if len(args) > 1:
        with open(args[1], "w", encoding="latin-1") as handle:
            handle.write(result)
    else:
        sys.stdout.write(result)
    return 0