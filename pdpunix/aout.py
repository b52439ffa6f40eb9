"""Parse and load PDP-11 UNIX a.out executables into a 64K address space.

Several UNIX flavours share the same magic numbers, so the flavour is
told apart by a second magic word taken from the start-up code, and
the memory layout, stack and registers are set up to match.
"""

from __future__ import annotations

import enum
import os
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterable, Optional, Sequence, Union

PDP_MEM_SIZE = 0x10000
EIGHT_K = 8192
NOVL = 15
V12_MEMBASE = 0o40000
KE11LO = 0o177300
MAX_ARGS = 200
SCRIPT_LINESIZE = 512

A68_DATA = 0o107116
V2_M2 = 0o177304
V6_M2 = 0o010600
V7_M2 = 0o016600
BSD_M2 = 0o162706

BASE_HEADER_SIZE = 16
HEADER_SIZE = 48
_HEADER = struct.Struct("<8Hh15H")

DEFAULT_ENVIRONMENT = (
    "PATH=/bin:/usr/bin:/usr/sbin:/usr/ucb:/usr/games:/usr/local/bin:.",
    "HOME=/",
    "TERM=vt100",
    "USER=root",
)

StrOrBytes = Union[str, bytes]


class Magic(enum.IntEnum):
    """Magic numbers found in the first word of an a.out file."""

    A68_MAGIC = 0
    V1_NORMAL = 0o405
    ANY_NORMAL = 0o407
    ANY_ROTEXT = 0o410
    ANY_SPLITID = 0o411
    BSD_OVERLAY = 0o430
    BSD_ROVERLAY = 0o431
    ANY_SCRIPT = 0o20443
    UNKNOWN_AOUT = 0o34567
    V1_RAW = 0o104421


_RECOGNISED = frozenset(
    {
        Magic.V1_NORMAL,
        Magic.ANY_NORMAL,
        Magic.ANY_ROTEXT,
        Magic.ANY_SPLITID,
        Magic.BSD_OVERLAY,
        Magic.BSD_ROVERLAY,
        Magic.A68_MAGIC,
    }
)
_OVERLAY_MAGICS = frozenset({Magic.BSD_OVERLAY, Magic.BSD_ROVERLAY})


class UnixVersion(enum.IntEnum):
    """The UNIX flavour an executable was built for."""

    UNKNOWN = 0
    A68 = 1
    V1 = 2
    V2 = 3
    V5 = 4
    V6 = 5
    V7 = 6
    BSD211 = 7


class AoutError(Exception):
    """Raised when an executable cannot be read or loaded."""


@dataclass(frozen=True)
class ExecHeader:
    """The a.out header, including the 2.11BSD overlay extension."""

    magic: int
    text: int = 0
    data: int = 0
    bss: int = 0
    syms: int = 0
    entry: int = 0
    unused: int = 0
    flag: int = 0
    max_ovl: int = 0
    ov_siz: tuple[int, ...] = (0,) * NOVL

    @property
    def magic2(self) -> int:
        """The start-up code word that tells the UNIX flavours apart."""
        return self.ov_siz[0]

    @classmethod
    def parse(cls, data: bytes) -> "ExecHeader":
        """Decode a header from at least 16 bytes; missing overlay fields are zero."""
        if len(data) < BASE_HEADER_SIZE:
            raise AoutError("a.out header is too short")
        fields = _HEADER.unpack(bytes(data[:HEADER_SIZE]).ljust(HEADER_SIZE, b"\0"))
        return cls(*fields[:9], ov_siz=tuple(fields[9:]))


@dataclass(frozen=True)
class MemoryLayout:
    """Where each segment of an executable goes in the emulated memory."""

    split_id: bool
    file_offset: int
    text_base: int
    text_size: int
    data_base: int
    data_size: int
    bss_base: int
    bss_size: int
    dwrite_base: int
    entry: int
    overlay_base: Optional[int] = None


@dataclass
class LoadedImage:
    """An executable loaded into memory with its registers set up."""

    header: ExecHeader
    version: UnixVersion
    layout: MemoryLayout
    ispace: bytearray
    dspace: bytearray
    registers: list[int]
    argv: list[StrOrBytes]
    overlays: tuple[Optional[bytes], ...] = field(default_factory=tuple)


def read_header(stream: BinaryIO) -> ExecHeader:
    """Read an a.out header from ``stream``.

    A shell script comes back with the script magic and only its first two
    bytes consumed; an unrecognised file comes back with UNKNOWN_AOUT.
    """
    first = stream.read(2)
    if len(first) < 2:
        raise AoutError("cannot read a.out header")
    magic = int.from_bytes(first, "little")
    if magic == Magic.ANY_SCRIPT:
        return ExecHeader(magic=Magic.ANY_SCRIPT)
    if magic not in _RECOGNISED:
        return ExecHeader(magic=Magic.UNKNOWN_AOUT)
    rest = stream.read(HEADER_SIZE - 2)
    if len(rest) < BASE_HEADER_SIZE - 2:
        raise AoutError("cannot read a.out header")
    return ExecHeader.parse(first + rest)


def identify(
    header: ExecHeader,
    resolver: Optional[Callable[[ExecHeader], UnixVersion]] = None,
) -> UnixVersion:
    """Tell which UNIX flavour the executable belongs to.

    ``resolver`` decides for shared magic numbers whose start-up word is not
    recognised; without one such files are UNKNOWN.
    """
    magic = header.magic
    if magic == Magic.A68_MAGIC:
        return UnixVersion.A68 if header.data == A68_DATA else UnixVersion.UNKNOWN
    if magic == Magic.V1_NORMAL:
        return UnixVersion.V1
    if magic in _OVERLAY_MAGICS:
        return UnixVersion.BSD211
    if magic in (Magic.ANY_NORMAL, Magic.ANY_ROTEXT, Magic.ANY_SPLITID):
        by_magic2 = {
            V2_M2: UnixVersion.V2,
            V6_M2: UnixVersion.V6,
            V7_M2: UnixVersion.V7,
            BSD_M2: UnixVersion.BSD211,
        }
        if header.magic2 in by_magic2:
            return by_magic2[header.magic2]
        return resolver(header) if resolver is not None else UnixVersion.UNKNOWN
    return UnixVersion.UNKNOWN


def parse_script_line(line: str) -> list[str]:
    """Split the first line of a ``#!`` script into interpreter and arguments."""
    if line.startswith("#!"):
        line = line[2:]
    words: list[str] = []
    for word in line.replace("\t", " ").replace("\n", " ").split(" "):
        if word:
            words.append(word)
            if len(words) >= MAX_ARGS:
                break
    return words


def _round8k(size: int) -> int:
    if abs(size) % EIGHT_K:
        return EIGHT_K * (1 + int(size / EIGHT_K))
    return size


def layout(header: ExecHeader, version: UnixVersion) -> MemoryLayout:
    """Work out the memory layout for ``header`` under ``version``."""
    magic = header.magic
    if magic == Magic.V1_NORMAL:
        # First Edition headers hold the bss size where later ones hold syms.
        return MemoryLayout(
            split_id=False,
            file_offset=0,
            text_base=V12_MEMBASE,
            text_size=header.text,
            data_base=header.text,
            data_size=0,
            bss_base=header.text,
            bss_size=header.syms,
            dwrite_base=0,
            entry=V12_MEMBASE,
        )
    if magic == Magic.A68_MAGIC:
        text = (header.ov_siz[0] + 1) & 0xFFFF
        return MemoryLayout(
            split_id=False,
            file_offset=0,
            text_base=0,
            text_size=text,
            data_base=0,
            data_size=0,
            bss_base=text,
            bss_size=0o160000 - text,
            dwrite_base=0,
            entry=header.flag,
        )
    if magic == Magic.ANY_NORMAL:
        base = V12_MEMBASE if version == UnixVersion.V2 else 0
        return MemoryLayout(
            split_id=False,
            file_offset=BASE_HEADER_SIZE,
            text_base=base,
            text_size=header.text,
            data_base=header.text + base,
            data_size=header.data,
            bss_base=header.text + header.data + base,
            bss_size=header.bss,
            dwrite_base=0 if version < UnixVersion.V7 else header.text,
            entry=V12_MEMBASE if version == UnixVersion.V2 else header.entry,
        )
    overlay_base = (
        _round8k(header.text) & 0xFFFF
        if magic in _OVERLAY_MAGICS and version == UnixVersion.BSD211
        else None
    )
    if magic in (Magic.ANY_ROTEXT, Magic.BSD_OVERLAY):
        size = _round8k(header.text)
        if magic == Magic.BSD_OVERLAY:
            size += _round8k(header.max_ovl)
        size &= 0xFFFF
        return MemoryLayout(
            split_id=False,
            file_offset=BASE_HEADER_SIZE if magic == Magic.ANY_ROTEXT else HEADER_SIZE,
            text_base=0,
            text_size=header.text,
            data_base=size,
            data_size=header.data,
            bss_base=size + header.data,
            bss_size=header.bss,
            dwrite_base=size,
            entry=header.entry,
            overlay_base=overlay_base,
        )
    if magic in (Magic.ANY_SPLITID, Magic.BSD_ROVERLAY):
        return MemoryLayout(
            split_id=True,
            file_offset=BASE_HEADER_SIZE if magic == Magic.ANY_SPLITID else HEADER_SIZE,
            text_base=0,
            text_size=header.text,
            data_base=0,
            data_size=header.data,
            bss_base=header.data,
            bss_size=header.bss,
            dwrite_base=0 if version == UnixVersion.BSD211 else 2,
            entry=header.entry,
            overlay_base=overlay_base,
        )
    raise AoutError(f"unknown a.out format 0{magic:o}")


def _store_word(memory: bytearray, addr: int, value: int) -> None:
    memory[addr : addr + 2] = (value & 0xFFFF).to_bytes(2, "little")


def _as_bytes(value: StrOrBytes) -> bytes:
    return value.encode("latin-1") if isinstance(value, str) else bytes(value)


def build_stack(
    memory: bytearray,
    argv: Sequence[StrOrBytes],
    envp: Optional[Sequence[StrOrBytes]] = None,
    want_env: bool = True,
    top: int = PDP_MEM_SIZE - 2,
) -> int:
    """Lay out argc, argv and the environment below ``top``; return the new SP.

    Without ``want_env`` no environment is written and the argument
    pointers are followed by -1 instead of 0.
    """
    environment = list(envp) if envp else list(DEFAULT_ENVIRONMENT)
    posn = top
    _store_word(memory, posn, 0)

    def place_strings(strings: Iterable[StrOrBytes]) -> list[int]:
        nonlocal posn
        positions = []
        for text in reversed(list(strings)):
            payload = _as_bytes(text) + b"\0"
            posn -= len(payload)
            if posn < 0:
                raise AoutError("out of stack space for arguments")
            memory[posn : posn + len(payload)] = payload
            positions.append(posn)
        positions.reverse()
        return positions

    env_positions = place_strings(environment) if want_env else []
    arg_positions = place_strings(argv)

    needed = 2 * (len(arg_positions) + len(env_positions) + 3)
    if posn - needed < 0:
        raise AoutError("out of stack space for arguments")

    posn -= 2
    _store_word(memory, posn, 0)
    if want_env:
        for address in reversed(env_positions):
            posn -= 2
            _store_word(memory, posn, address)
        posn -= 2
        _store_word(memory, posn, 0)
    else:
        _store_word(memory, posn, 0xFFFF)
    for address in reversed(arg_positions):
        posn -= 2
        _store_word(memory, posn, address)
    posn -= 2
    _store_word(memory, posn, len(arg_positions))
    return posn


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    payload = stream.read(size)
    if len(payload) != size:
        raise AoutError("unexpected end of file")
    return payload


def _place(memory: bytearray, base: int, payload: bytes) -> None:
    if base < 0 or base + len(payload) > len(memory):
        raise AoutError("segment does not fit in memory")
    memory[base : base + len(payload)] = payload


def load(
    path: Union[str, os.PathLike],
    argv: Optional[Sequence[StrOrBytes]] = None,
    envp: Optional[Sequence[StrOrBytes]] = None,
    want_env: bool = True,
    resolver: Optional[Callable[[ExecHeader], UnixVersion]] = None,
) -> LoadedImage:
    """Load the executable at ``path`` and set up its stack and registers.

    A ``#!`` script loads its interpreter instead, with the interpreter's
    words and the script path placed before the remaining arguments.
    """
    path = os.fspath(path)
    arguments: list[StrOrBytes] = list(argv) if argv else [path]
    return _load(path, path, arguments, envp, want_env, resolver)


def _load(
    file: str,
    origpath: str,
    argv: list[StrOrBytes],
    envp: Optional[Sequence[StrOrBytes]],
    want_env: bool,
    resolver: Optional[Callable[[ExecHeader], UnixVersion]],
) -> LoadedImage:
    try:
        stream = open(file, "rb")
    except OSError as exc:
        raise AoutError(f"cannot open {file}: {exc.strerror}") from exc
    with stream:
        header = read_header(stream)
        if header.magic == Magic.ANY_SCRIPT:
            line = stream.readline(SCRIPT_LINESIZE - 1)
            if not line:
                raise AoutError("could not read 1st line of script")
            words = parse_script_line(line.decode("latin-1"))
            if not words:
                raise AoutError("script names no interpreter")
            if len(argv) + len(words) > MAX_ARGS:
                raise AoutError("out of argv space in script")
            new_argv: list[StrOrBytes] = [*words, origpath, *argv[1:]]
            stream.close()
            return _load(words[0], origpath, new_argv, envp, want_env, resolver)

        version = identify(header, resolver)
        if header.magic == Magic.UNKNOWN_AOUT or (
            header.magic == Magic.A68_MAGIC and version == UnixVersion.UNKNOWN
        ):
            raise AoutError(f"unknown a.out file {file}")
        mem = layout(header, version)
        if version == UnixVersion.UNKNOWN:
            raise AoutError(f"unknown Unix version for {file}")

        ispace = bytearray(PDP_MEM_SIZE)
        dspace = bytearray(PDP_MEM_SIZE) if mem.split_id else ispace

        stream.seek(mem.file_offset)
        _place(ispace, mem.text_base, _read_exact(stream, mem.text_size))

        overlays: tuple[Optional[bytes], ...] = ()
        if mem.overlay_base is not None:
            overlays = tuple(
                _read_exact(stream, size) if size else None for size in header.ov_siz
            )

        _place(dspace, mem.data_base, _read_exact(stream, mem.data_size))
        if mem.bss_size:
            _place(dspace, mem.bss_base, bytes(mem.bss_size))

    registers = [0] * 8
    registers[7] = mem.entry
    if version == UnixVersion.A68:
        registers[5] = header.max_ovl & 0xFFFF
        registers[4] = 0o160000
    top = (
        KE11LO - 2
        if version in (UnixVersion.V1, UnixVersion.V2)
        else PDP_MEM_SIZE - 2
    )
    registers[6] = build_stack(dspace, argv, envp, want_env, top)
    return LoadedImage(
        header=header,
        version=version,
        layout=mem,
        ispace=ispace,
        dspace=dspace,
        registers=registers,
        argv=list(argv),
        overlays=overlays,
    )