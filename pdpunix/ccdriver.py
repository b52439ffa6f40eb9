"""Drive the C compiler passes, the assembler and the loader over a list of files."""

from __future__ import annotations

import contextlib
import os
import signal
import subprocess
import sys
import tempfile
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

Runner = Callable[[str, Sequence[str]], int]

CRT0 = "/lib/crt0.o"
CRT20 = "/lib/crt20.o"
SOH = b"\x01"


class CompileError(Exception):
    """Raised when a file cannot be prepared or a pass fails fatally."""


@dataclass
class _CcPlan:
    sources: list[str] = field(default_factory=list)
    objects: list[str] = field(default_factory=list)
    crt0: str = CRT0
    f20: bool = False
    compile_only: bool = False


def source_suffix(name: str, suffix: str) -> bool:
    """Tell whether the last path component of ``name`` is a short ``x.<suffix>`` name."""
    base = name.rsplit("/", 1)[-1]
    return 2 < len(base) <= 8 and base.endswith("." + suffix)


def object_name(name: str) -> str:
    """Return ``name`` with its one-letter suffix replaced by ``o``."""
    if not name:
        raise ValueError("empty file name")
    return name[:-1] + "o"


def _lines(data: bytes) -> list[bytes]:
    parts = data.split(b"\n")
    lines = [part + b"\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def expand_includes(path: str, out: str) -> str:
    """Expand ``%file`` lines of a source that starts with ``%``.

    Returns the name of the file to compile: ``path`` itself when there is
    nothing to expand, otherwise ``out``, which receives the expansion with
    each included line marked by a leading SOH byte.
    """
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError:
        return path
    if not data.startswith(b"%"):
        return path
    result = bytearray()
    for line in _lines(data):
        if not line.startswith(b"%"):
            result += line
            continue
        header = line[1:]
        if header.endswith(b"\n"):
            header = header[:-1]
        header = header.replace(b" ", b"")
        if header:
            name = os.fsdecode(header)
            try:
                with open(name, "rb") as handle:
                    included = handle.read()
            except OSError:
                raise CompileError(f"Missing file {name}") from None
            for inc_line in _lines(included):
                result += SOH + inc_line
        result += b"\n"
    with open(out, "wb") as handle:
        handle.write(result)
    return out


def plan_cc(args: Sequence[str]) -> _CcPlan:
    """Sort the command arguments into sources, link objects and options."""
    plan = _CcPlan()
    for arg in args:
        if arg.startswith("-") and arg[1:2] == "c":
            plan.compile_only = True
            continue
        if arg.startswith("-") and arg[1:2] == "2":
            plan.crt0 = CRT20
            plan.f20 = True
            continue
        if source_suffix(arg, "c"):
            plan.sources.append(arg)
            obj = object_name(arg)
            if obj in plan.objects:
                continue
            plan.objects.append(obj)
        else:
            plan.objects.append(arg)
    return plan


def _run_program(program: str, argv: Sequence[str]) -> int:
    try:
        proc = subprocess.run(list(argv), executable=program)
    except FileNotFoundError:
        print(f"Can't find {program}")
        return 1
    except OSError:
        print("Try again")
        return 1
    if proc.returncode < 0:
        sig = -proc.returncode
        if sig == signal.SIGALRM:
            return 0
        if sig == signal.SIGINT:
            raise CompileError("interrupted")
        raise CompileError(f"Fatal error in {program}")
    return proc.returncode


def _compile(source: str, plan: _CcPlan, temps: list[str], runner: Runner) -> bool:
    tmp1, tmp2, tmp3, tmp4 = temps
    try:
        expanded = expand_includes(source, tmp4)
    except CompileError as exc:
        print(exc)
        return False
    if runner("/lib/c0", ["c0", expanded, tmp1, tmp2]):
        return False
    if runner("/lib/c1", ["c1", tmp1, tmp2, tmp3]):
        return False
    as_args = ["as", "-", *(["/lib/20.s"] if plan.f20 else []), tmp3]
    runner("/bin/as", as_args)
    obj = object_name(source)
    with contextlib.suppress(OSError):
        os.unlink(obj)
    try:
        os.replace("a.out", obj)
    except OSError:
        print(f"move failed: {obj}")
        return False
    return True


def run_cc(args: Sequence[str], runner: Optional[Runner] = None) -> int:
    """Compile every C source in ``args`` and link the result; return 0 on success."""
    runner = runner or _run_program
    plan = plan_cc(args)
    status = 0
    link_blocked = plan.compile_only
    with tempfile.TemporaryDirectory(prefix="ctm") as tmp:
        temps = [os.path.join(tmp, f"ctm{n}") for n in range(1, 5)]
        for source in plan.sources:
            if len(plan.sources) > 1:
                print(f"{source}:")
            if not _compile(source, plan, temps, runner):
                link_blocked = True
                status = 1
    if link_blocked or not plan.objects:
        return status
    libs = ["-l2"] if plan.f20 else ["/lib/libc.a", "-l"]
    program = "/usr/lib/ld20" if plan.f20 else "/bin/ld"
    rc = runner(program, ["ld", plan.crt0, *plan.objects, *libs])
    if len(plan.sources) == 1 and len(plan.objects) == 1:
        with contextlib.suppress(OSError):
            os.unlink(plan.objects[0])
    return 1 if rc else status


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        return run_cc(args)
    except (CompileError, OSError) as exc:
        print(exc)
        return 1