import signal

import pytest

from pdpunix.bsdsignal import (
    NBSDSIG,
    SIG_DFL,
    SIG_IGN,
    BsdSignal,
    SigAction,
    SignalTable,
    mask_to_signals,
)


def test_mask_bits_follow_signal_numbers():
    assert mask_to_signals(1 << 0) == [BsdSignal.HUP]
    assert mask_to_signals(1 << 8) == [BsdSignal.KILL]
    assert mask_to_signals(1 << 29) == [BsdSignal.USR1]


def test_host_mapping_for_interrupt():
    assert BsdSignal(2).host == signal.SIGINT


def test_mask_to_signals_empty():
    assert mask_to_signals(0) == []


def test_mask_to_signals_selects_bits():
    mask = (1 << (BsdSignal.INT - 1)) | (1 << (BsdSignal.TERM - 1))
    assert mask_to_signals(mask) == [BsdSignal.INT, BsdSignal.TERM]


def test_mask_to_signals_ignores_bit_beyond_last_signal():
    assert mask_to_signals(1 << (NBSDSIG - 1)) == []


def test_new_table_is_all_default():
    table = SignalTable()
    assert all(action == SigAction() for action in table.actions)
    assert len(table.actions) == NBSDSIG


def test_sigaction_returns_previous_and_stores_new():
    table = SignalTable()
    first = SigAction(handler=0o1234, mask=1 << 1, flags=0)
    second = SigAction(handler=SIG_IGN)
    assert table.sigaction(BsdSignal.INT, first) == SigAction()
    assert table.sigaction(BsdSignal.INT, second) == first
    assert table.sigaction(BsdSignal.INT) == second


def test_reset_restores_defaults():
    table = SignalTable()
    table.sigaction(BsdSignal.HUP, SigAction(handler=SIG_IGN))
    table.reset()
    assert table.actions[BsdSignal.HUP].handler == SIG_DFL


@pytest.mark.parametrize("sig", [0, 29, 32, -1])
def test_invalid_signal_numbers_raise(sig):
    with pytest.raises(ValueError):
        SignalTable().sigaction(sig, SigAction())


@pytest.mark.parametrize("sig", [BsdSignal.KILL, BsdSignal.STOP])
def test_uncatchable_signals_keep_default(sig):
    table = SignalTable()
    with pytest.raises(ValueError):
        table.sigaction(sig, SigAction(handler=SIG_IGN))
    assert table.actions[sig] == SigAction()


def test_host_hook_sees_installed_actions():
    seen = []
    table = SignalTable(host=lambda sig, action: seen.append((sig, action)))
    assert len(seen) == len(BsdSignal)
    seen.clear()
    action = SigAction(handler=0o500)
    table.sigaction(BsdSignal.ALRM, action)
    assert seen == [(BsdSignal.ALRM, action)]