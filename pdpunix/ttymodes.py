"""Translate between old-style terminal mode structures and a termios-like state.

Old programs set terminal modes through ``sgttyb``, ``tchars`` and
``ltchars`` structures; a modern terminal is described by termios flags,
speeds and control characters.  The functions here convert one to the
other in both directions.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Mapping


class Ioctl(enum.IntEnum):
    """Terminal ioctl request codes understood by the emulated system."""

    FIOCLEX = 0x20006601
    TIOCGETP = 0x40067408
    TIOCSETP = 0x40067409
    TIOCSETN = 0x8006740A
    TIOCSETC = 0x80067411
    TIOCGETD = 0x40027400
    TIOCSETD = 0x80027401
    TIOCGETC = 0x40067412
    TIOCGLTC = 0x40067474
    TIOCSLTC = 0x80067475
    TIOCGWINSZ = 0x40087468
    TIOCSWINSZ = 0x40027467
    FIOSETOWN = 0x8002667B
    TIOCMGET = 0x4002746A
    TIOCGPGRP = 0x40027477
    TIOCSPGRP = 0x80027476


# sg_flags bits.
TANDEM = 0x0001
CBREAK = 0x0002
ECHO_FLAG = 0x0008
CRMOD = 0x0010
RAW = 0x0020
ODDP = 0x0040
EVENP = 0x0080
ANYP = 0x00C0
XTABS = 0x0400

# Speed codes, indexed by code; the value is the baud rate.
BAUD_RATES = (0, 50, 75, 110, 134, 150, 200, 300, 600, 1200, 1800, 2400, 4800, 9600, 19200, 38400)

# termios output flags.
OPOST = 0x00000001
ONLCR = 0x00000002
OXTABS = 0x00000004
# termios control flags.
CSIZE = 0x00000300
CS8 = 0x00000300
PARENB = 0x00001000
PARODD = 0x00002000
# termios local flags.
ECHO = 0x00000008
ISIG = 0x00000080
ICANON = 0x00000100
IEXTEN = 0x00000400
# termios input flags.
BRKINT = 0x00000002
INPCK = 0x00000010
ISTRIP = 0x00000020
ICRNL = 0x00000100
IXON = 0x00000200

CONTROL_CHARS = (
    "VEOF", "VEOL", "VERASE", "VKILL", "VINTR", "VQUIT", "VSUSP", "VDSUSP",
    "VSTART", "VSTOP", "VLNEXT", "VDISCARD", "VREPRINT", "VMIN", "VTIME",
)


@dataclass(frozen=True)
class Sgttyb:
    """Speeds, erase and kill characters and mode flags."""

    ispeed: int = 0
    ospeed: int = 0
    erase: int = 0
    kill: int = 0
    flags: int = 0


@dataclass(frozen=True)
class Tchars:
    """Interrupt, quit, flow-control, end-of-file and break characters."""

    intrc: int = 0
    quitc: int = 0
    startc: int = 0
    stopc: int = 0
    eofc: int = 0
    brkc: int = 0


@dataclass(frozen=True)
class Ltchars:
    """Job-control and line-editing characters."""

    suspc: int = 0
    dsuspc: int = 0
    rprntc: int = 0
    flushc: int = 0
    werasc: int = 0
    lnextc: int = 0


@dataclass(frozen=True)
class TermState:
    """A terminal's termios settings; speeds are baud rates, ``cc`` is keyed by name."""

    ispeed: int = 0
    ospeed: int = 0
    iflag: int = 0
    oflag: int = 0
    cflag: int = 0
    lflag: int = 0
    cc: Mapping[str, int] = field(default_factory=dict)

    def char(self, name: str) -> int:
        """Return the control character ``name``, or 0 if it is unset."""
        if name not in CONTROL_CHARS:
            raise KeyError(name)
        return self.cc.get(name, 0)


def speed_code(baud: int) -> int:
    """Return the old speed code for ``baud``; unknown rates give code 0."""
    try:
        return BAUD_RATES.index(baud)
    except ValueError:
        return 0


def code_speed(code: int) -> int:
    """Return the baud rate of an old speed code; unknown codes give 0."""
    return BAUD_RATES[code] if 0 <= code < len(BAUD_RATES) else 0


def to_sgttyb(state: TermState) -> Sgttyb:
    """Describe ``state`` as an sgttyb structure."""
    flags = 0
    if state.oflag & OXTABS:
        flags |= XTABS
    if state.cflag & PARENB:
        flags |= ODDP if state.cflag & PARODD else EVENP
    else:
        flags |= ANYP
    if state.oflag & ONLCR:
        flags |= CRMOD
    if state.lflag & ECHO:
        flags |= ECHO_FLAG
    if not state.lflag & ICANON:
        flags |= RAW if state.lflag & ECHO else CBREAK
    return Sgttyb(
        ispeed=speed_code(state.ispeed),
        ospeed=speed_code(state.ospeed),
        erase=state.char("VERASE"),
        kill=state.char("VKILL"),
        flags=flags,
    )


def apply_sgttyb(sg: Sgttyb, state: TermState) -> TermState:
    """Return ``state`` changed as setting ``sg`` on the terminal would change it."""
    cc = dict(state.cc)
    cc["VERASE"] = sg.erase
    cc["VKILL"] = sg.kill
    oflag = state.oflag & ~(OXTABS | ONLCR)
    cflag = state.cflag & ~(PARENB | PARODD)
    lflag = state.lflag & ~ECHO
    flags = sg.flags

    if flags & XTABS:
        oflag |= OXTABS
    if flags & ODDP:
        cflag |= PARENB
        cflag &= ~PARODD
    if flags & EVENP:
        cflag |= PARENB | PARODD
    if flags & ANYP:
        cflag &= ~PARENB
    if flags & CRMOD:
        oflag |= ONLCR
    if flags & ECHO_FLAG:
        lflag |= ECHO
    if flags & RAW:
        lflag &= ~(ECHO | ICANON | IEXTEN | ISIG | BRKINT | ICRNL | INPCK | ISTRIP | IXON)
        cflag &= ~(CSIZE | PARENB)
        cflag |= CS8
        oflag &= ~OPOST
        cc["VMIN"] = 1
        cc["VTIME"] = 0
    if flags & CBREAK:
        lflag &= ~(ECHO | ICANON)
        cc["VMIN"] = 1
        cc["VTIME"] = 0

    return replace(
        state,
        ispeed=code_speed(sg.ispeed),
        ospeed=code_speed(sg.ospeed),
        oflag=oflag,
        cflag=cflag,
        lflag=lflag,
        cc=cc,
    )


def to_tchars(state: TermState) -> Tchars:
    """Describe the special characters of ``state`` as a tchars structure."""
    return Tchars(
        intrc=state.char("VINTR"),
        quitc=state.char("VQUIT"),
        startc=state.char("VSTART"),
        stopc=state.char("VSTOP"),
        eofc=state.char("VEOF"),
        brkc=state.char("VEOL"),
    )


def to_ltchars(state: TermState) -> Ltchars:
    """Describe the local special characters of ``state`` as an ltchars structure.

    The word-erase character is taken from the erase character.
    """
    return Ltchars(
        suspc=state.char("VSUSP"),
        dsuspc=state.char("VDSUSP"),
        rprntc=state.char("VREPRINT"),
        flushc=state.char("VDISCARD"),
        werasc=state.char("VERASE"),
        lnextc=state.char("VLNEXT"),
    )


def apply_tchars(tc: Tchars, state: TermState) -> TermState:
    """Return ``state`` with the characters of ``tc`` set."""
    cc = dict(state.cc)
    cc.update(
        VINTR=tc.intrc,
        VQUIT=tc.quitc,
        VSTART=tc.startc,
        VSTOP=tc.stopc,
        VEOF=tc.eofc,
        VEOL=tc.brkc,
    )
    return replace(state, cc=cc)


def apply_ltchars(ltc: Ltchars, state: TermState) -> TermState:
    """Return ``state`` with the characters of ``ltc`` set; word erase sets erase."""
    cc = dict(state.cc)
    cc.update(
        VSUSP=ltc.suspc,
        VDSUSP=ltc.dsuspc,
        VREPRINT=ltc.rprntc,
        VDISCARD=ltc.flushc,
        VERASE=ltc.werasc,
        VLNEXT=ltc.lnextc,
    )
    return replace(state, cc=cc)