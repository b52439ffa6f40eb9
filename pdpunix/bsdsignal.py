"""Signal numbers and per-signal actions of the emulated BSD system."""

from __future__ import annotations

import enum
import signal as _host_signal
from dataclasses import dataclass
from typing import Callable, Optional

NBSDSIG = 32

SIG_ERR = -1
SIG_DFL = 0
SIG_IGN = 1

SA_ONSTACK = 0x0001
SA_RESTART = 0x0002
SA_DISABLE = 0x0004
SA_NOCLDSTOP = 0x0008


class BsdSignal(enum.IntEnum):
    """Signal numbers as the emulated programs see them."""

    HUP = 1
    INT = 2
    QUIT = 3
    ILL = 4
    TRAP = 5
    IOT = 6
    EMT = 7
    FPE = 8
    KILL = 9
    BUS = 10
    SEGV = 11
    SYS = 12
    PIPE = 13
    ALRM = 14
    TERM = 15
    URG = 16
    STOP = 17
    TSTP = 18
    CONT = 19
    CHLD = 20
    TTIN = 21
    TTOU = 22
    IO = 23
    XCPU = 24
    XFSZ = 25
    VTALRM = 26
    PROF = 27
    WINCH = 28
    USR1 = 30
    USR2 = 31

    @property
    def host(self) -> Optional[int]:
        """The host's number for this signal, or None if the host has none."""
        return getattr(_host_signal, "SIG" + self.name, None)


_UNCATCHABLE = frozenset({BsdSignal.KILL, BsdSignal.STOP})


@dataclass(frozen=True)
class SigAction:
    """A handler address, the mask applied while it runs, and option flags."""

    handler: int = SIG_DFL
    mask: int = 0
    flags: int = 0


def mask_to_signals(mask: int) -> list[int]:
    """Return the signal numbers whose bits are set in ``mask``."""
    return [sig for sig in range(1, NBSDSIG) if mask & (1 << (sig - 1))]


HostHook = Callable[[BsdSignal, SigAction], None]


class SignalTable:
    """The action recorded for every signal of one emulated process.

    ``host`` is told of every action that is installed, so that the
    matching host signals can be arranged to reach the emulator.
    """

    def __init__(self, host: Optional[HostHook] = None) -> None:
        self._host = host
        self.actions: list[SigAction] = [SigAction() for _ in range(NBSDSIG)]
        self.reset()

    def reset(self) -> None:
        """Set every signal back to its default action."""
        self.actions = [SigAction() for _ in range(NBSDSIG)]
        if self._host is not None:
            for sig in BsdSignal:
                self._host(sig, self.actions[sig])

    def sigaction(self, sig: int, action: Optional[SigAction] = None) -> SigAction:
        """Install ``action`` for ``sig`` if given and return the previous action.

        Raises ValueError for numbers that are not signals and for signals
        whose action cannot be changed.
        """
        try:
            signo = BsdSignal(sig)
        except ValueError:
            raise ValueError(f"invalid signal {sig}") from None
        old = self.actions[signo]
        if action is None:
            return old
        if signo in _UNCATCHABLE:
            raise ValueError(f"cannot change the action of signal {signo.name}")
        if self._host is not None:
            self._host(signo, action)
        self.actions[signo] = action
        return old