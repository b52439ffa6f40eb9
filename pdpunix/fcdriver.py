"""Drive the Fortran compiler, the assembler and the loader over a list of files."""

from __future__ import annotations

import contextlib
import os
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from .ccdriver import CompileError, object_name, source_suffix

Runner = Callable[[str, Sequence[str]], int]

TEMP_OUTPUT = "f.tmp1"


@dataclass
class _FcPlan:
    entries: list[tuple[str, bool]] = field(default_factory=list)
    compile_only: bool = False

    @property
    def sources(self) -> list[str]:
        return [name for name, is_source in self.entries if is_source]

    @property
    def objects(self) -> list[str]:
        result: list[str] = []
        for name, is_source in self.entries:
            obj = object_name(name) if is_source else name
            if obj not in result:
                result.append(obj)
        return result


def plan_fc(args: Sequence[str]) -> _FcPlan:
    """Sort the command arguments into Fortran sources and link files."""
    plan = _FcPlan()
    for arg in args:
        if source_suffix(arg, "f"):
            plan.entries.append((arg, True))
        elif arg.startswith("-c"):
            plan.compile_only = True
        else:
            plan.entries.append((arg, False))
    return plan


def _run_program(program: str, argv: Sequence[str]) -> int:
    try:
        proc = subprocess.run(list(argv), executable=program)
    except FileNotFoundError:
        print(f"Can't find {program}")
        return 255
    except OSError as exc:
        raise CompileError("Try again") from exc
    if proc.returncode < 0:
        raise CompileError(f"Fatal error in {program}")
    return proc.returncode


def run_fc(args: Sequence[str], runner: Optional[Runner] = None) -> int:
    """Compile every Fortran source in ``args`` and link the result; return 0 on success."""
    runner = runner or _run_program
    plan = plan_fc(args)
    blocked = plan.compile_only
    status = 0
    link: list[str] = []
    for name, is_source in plan.entries:
        if is_source:
            print(f"{name}:")
            if runner("/usr/fort/fc1", ["fc", name]) != 0:
                blocked = True
                status = 1
                continue
            runner("/bin/as", ["as", "-", TEMP_OUTPUT])
            obj = object_name(name)
            with contextlib.suppress(OSError):
                os.unlink(obj)
            try:
                os.replace("a.out", obj)
            except OSError:
                print(f"move failed: {obj}")
                return 1
            name = obj
        if name not in link:
            link.append(name)
    with contextlib.suppress(OSError):
        os.unlink(TEMP_OUTPUT)
    if blocked or not link:
        return status
    rc = runner("/bin/ld", ["ld", "/lib/fr0.o", *link, "-lf", "/lib/filib.a", "-l"])
    return 1 if rc else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        return run_fc(args)
    except (CompileError, OSError) as exc:
        print(exc)
        return 1