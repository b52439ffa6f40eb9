"""Copy one file to another, or into a directory under the same name."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence

_BLOCK = 512


def copy(old: str, new: str) -> int:
    """Copy ``old`` to ``new`` and return the number of bytes copied."""
    try:
        src = open(old, "rb")
    except OSError as exc:
        raise OSError(exc.errno, "Cannot open old file.", old) from exc
    with src:
        mode = os.fstat(src.fileno()).st_mode & 0o777
        target = new
        if os.path.isdir(new):
            target = os.path.join(new, os.path.basename(old))
        try:
            fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        except OSError as exc:
            raise OSError(exc.errno, "Cannot creat new file.", target) from exc
        total = 0
        with os.fdopen(fd, "wb") as dst:
            for block in iter(lambda: src.read(_BLOCK), b""):
                dst.write(block)
                total += len(block)
    return total


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print("Usage: cp oldfile newfile")
        return 1
    try:
        copy(args[0], args[1])
    except OSError as exc:
        print(exc.strerror)
        return 1
    return 0