from __future__ import annotations

import pytest

from quickdraw.events import DuelEvent, EventHub
from quickdraw.scheduler import TimerQueue
from quickdraw.state import DuelState
from quickdraw.stun import StunScheduler


def _stun():
    state = DuelState()
    timers = TimerQueue()
    events = EventHub()
    changes: list[tuple[int, bool]] = []
    events.subscribe(DuelEvent.STUN_CHANGED, lambda pid, stunned: changes.append((pid, stunned)))
    return state, timers, StunScheduler(state, timers, events, duration_ms=2000), changes


def test_stun_expires_after_duration() -> None:
    state, timers, stun, changes = _stun()
    stun.stun(2)
    assert state.player(2).stunned
    assert state.player(2).stun_started_at == 0

    timers.advance_to(1999)
    assert state.player(2).stunned
    timers.advance_to(2000)
    assert not state.player(2).stunned
    assert state.player(2).stun_started_at is None
    assert changes == [(2, True), (2, False)]


def test_remaining_fraction_is_pure_in_time() -> None:
    state, timers, stun, _ = _stun()
    stun.stun(1)
    assert stun.remaining_fraction(1, now=0) == 1.0
    assert stun.remaining_fraction(1, now=500) == pytest.approx(0.75)
    assert stun.remaining_fraction(1, now=1500) == pytest.approx(0.25)
    assert stun.remaining_fraction(1, now=4000) == 0.0
    assert stun.remaining_fraction(2, now=500) == 0.0


def test_restun_restarts_the_window() -> None:
    state, timers, stun, _ = _stun()
    stun.stun(1)
    timers.advance_to(1500)
    stun.stun(1)
    timers.advance_to(2500)
    assert state.player(1).stunned
    timers.advance_to(3500)
    assert not state.player(1).stunned


def test_clear_all_cancels_outstanding_timers() -> None:
    state, timers, stun, changes = _stun()
    stun.stun(1)
    stun.stun(2)
    assert stun.clear_all() == 2
    assert not state.player(1).stunned
    assert not state.player(2).stunned
    timers.advance_to(10_000)
    assert changes.count((1, False)) == 1
    assert changes.count((2, False)) == 1
