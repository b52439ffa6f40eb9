"""KE11-A extended arithmetic element (EAE) of the PDP-11/20.

The unit is driven through eight word registers on the Unibus: writing
to the divide, multiply, normalize and shift registers performs the
arithmetic, and the status register reflects the contents of AC and MQ.
"""

from __future__ import annotations

from dataclasses import dataclass

DMASK = 0o177777


def _sign_b(value: int) -> int:
    return (value >> 7) & 1


def _sign_w(value: int) -> int:
    return (value >> 15) & 1


def _sign_l(value: int) -> int:
    return (value >> 31) & 1


def _signed16(value: int) -> int:
    value &= DMASK
    return value - 0x10000 if value & 0x8000 else value


def _signed32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


@dataclass
class EAE:
    """State and register interface of one KE11-A unit."""

    ac: int = 0
    mq: int = 0
    sc: int = 0
    sr: int = 0

    # Register offsets from the unit's base address.
    DIV = 0o00
    AC = 0o02
    MQ = 0o04
    MUL = 0o06
    SC = 0o10
    NOR = 0o12
    LSH = 0o14
    ASH = 0o16

    # Status register bits.
    SR_C = 0o001
    SR_SXT = 0o002
    SR_Z = 0o004
    SR_MQZ = 0o010
    SR_ACZ = 0o020
    SR_ACM1 = 0o040
    SR_N = 0o100
    SR_NXV = 0o200
    SR_DYN = SR_SXT | SR_Z | SR_MQZ | SR_ACZ | SR_ACM1

    def read(self, offset: int) -> int:
        """Return the word read from the register at ``offset``."""
        reg = offset & 0o16
        if reg == self.AC:
            return self.ac
        if reg == self.MQ:
            return self.mq
        if reg == self.NOR:
            return self.sc
        if reg == self.SC:
            return (self.update_status() << 8) | self.sc
        return 0

    def write(self, offset: int, data: int, byte: bool = False) -> None:
        """Write ``data`` to the register at ``offset``, performing any operation."""
        data &= 0o377 if byte else DMASK
        reg = offset & 0o17
        if byte and reg in (self.DIV, self.AC, self.MQ, self.MUL) and _sign_b(data):
            data |= 0o177400
        if reg == self.SC and byte:
            return
        handler = {
            self.DIV: self._divide,
            self.AC: self._load_ac,
            self.AC + 1: self._load_ac_high,
            self.MQ: self._load_mq,
            self.MQ + 1: self._load_mq_high,
            self.MUL: self._multiply,
            self.SC: self._load_counter,
            self.NOR: self._normalize,
            self.LSH: self._logical_shift,
            self.ASH: self._arithmetic_shift,
        }.get(reg)
        if handler is None:
            return
        handler(data)
        self.update_status()

    def update_status(self) -> int:
        """Recompute the dynamic status bits from AC and MQ and return SR."""
        self.sr &= ~self.SR_DYN & 0o377
        if self.mq == 0:
            self.sr |= self.SR_MQZ
        if self.ac == 0:
            self.sr |= self.SR_ACZ
            if _sign_w(self.mq) == 0:
                self.sr |= self.SR_SXT
            if self.mq == 0:
                self.sr |= self.SR_Z
        if self.ac == DMASK:
            self.sr |= self.SR_ACM1
            if _sign_w(self.mq) == 1:
                self.sr |= self.SR_SXT
        return self.sr

    def reset(self) -> None:
        """Clear every register."""
        self.ac = self.mq = self.sc = self.sr = 0

    # Operations -------------------------------------------------------

    def _result_sign(self) -> None:
        if _sign_w(self.ac):
            self.sr ^= self.SR_N | self.SR_NXV

    def _divide(self, data: int) -> None:
        self.sr = 0
        dividend = _signed32((self.ac << 16) | self.mq)
        divisor = _signed16(data)
        if abs(dividend) >> 16 >= abs(divisor):
            # The hardware gives up after one step of the division.
            sign = _sign_w(self.ac ^ data) ^ 1
            partial = (self.ac << 1) | (self.mq >> 15)
            self.ac = (partial - divisor if sign else partial + divisor) & DMASK
            self.mq = ((self.mq << 1) | sign) & DMASK
            if _sign_w(self.ac ^ data) == 0:
                self.sr |= self.SR_C
            self.sc = 15
            self.sr |= self.SR_NXV
        else:
            self.sc = 0
            quotient = abs(dividend) // abs(divisor)
            if (dividend < 0) != (divisor < 0):
                quotient = -quotient
            remainder = dividend - quotient * divisor
            self.mq = quotient & DMASK
            self.ac = remainder & DMASK
            if not -32768 <= quotient <= 32767:
                self.sr |= self.SR_NXV
        if _sign_w(self.mq):
            self.sr ^= self.SR_N | self.SR_NXV

    def _load_ac(self, data: int) -> None:
        self.ac = data & DMASK

    def _load_ac_high(self, data: int) -> None:
        self.ac = ((self.ac & 0o377) | (data << 8)) & DMASK

    def _extend_mq(self) -> None:
        self.ac = DMASK if _sign_w(self.mq) else 0

    def _load_mq(self, data: int) -> None:
        self.mq = data & DMASK
        self._extend_mq()

    def _load_mq_high(self, data: int) -> None:
        self.mq = ((self.mq & 0o377) | (data << 8)) & DMASK
        self._extend_mq()

    def _multiply(self, data: int) -> None:
        self.sc = 0
        product = _signed16(self.mq) * _signed16(data)
        self.ac = (product >> 16) & DMASK
        self.mq = product & DMASK
        self.sr = self.SR_N | self.SR_NXV if _sign_w(self.ac) else 0

    def _load_counter(self, data: int) -> None:
        self.sr = (data >> 8) & (self.SR_NXV | self.SR_N | self.SR_C)
        self.sc = data & 0o77

    def _is_normalized(self) -> bool:
        special = self.ac == 0o140000 and self.mq == 0
        return special or bool(_sign_w(self.ac ^ (self.ac << 1)))

    def _normalize(self, _data: int) -> None:
        count = 0
        while count < 31 and not self._is_normalized():
            self.ac = ((self.ac << 1) | (self.mq >> 15)) & DMASK
            self.mq = (self.mq << 1) & DMASK
            count += 1
        self.sc = count
        self.sr = self.SR_N | self.SR_NXV if _sign_w(self.ac) else 0

    def _store(self, value: int) -> None:
        self.ac = (value >> 16) & DMASK
        self.mq = value & DMASK

    def _logical_shift(self, data: int) -> None:
        self.sc = 0
        self.sr = 0
        count = data & 0o77
        if count:
            sign = _sign_w(self.ac)
            value = _signed32((self.ac << 16) | self.mq)
            if count < 32:
                lost = (value >> (32 - count)) | (-sign << count)
                value = (value << count) & 0xFFFFFFFF
                if lost != (-1 if _sign_l(value) else 0):
                    self.sr |= self.SR_NXV
                if lost & 1:
                    self.sr |= self.SR_C
            else:
                if (value >> (63 - count)) & 1:
                    self.sr |= self.SR_C
                value = (value & 0xFFFFFFFF) >> (64 - count) if count != 32 else 0
            self._store(value)
        self._result_sign()

    def _arithmetic_shift(self, data: int) -> None:
        self.sc = 0
        self.sr = 0
        count = data & 0o77
        if count:
            sign = _sign_w(self.ac)
            value = _signed32((self.ac << 16) | self.mq)
            if count < 32:
                lost = (value >> (31 - count)) | (-sign << count)
                value = (value & 0x80000000) | ((value << count) & 0x7FFFFFFF)
                if lost != (-1 if _sign_l(value) else 0):
                    self.sr |= self.SR_NXV
                if lost & 1:
                    self.sr |= self.SR_C
            else:
                if (value >> (63 - count)) & 1:
                    self.sr |= self.SR_C
                if count != 32:
                    value = ((value & 0xFFFFFFFF) >> (64 - count)) | (-sign << (count - 32))
                else:
                    value = -sign
            self._store(value)
        self._result_sign()