from __future__ import annotations

import random

from conftest import ScriptedRoll

from quickdraw.events import DuelEvent, EventHub
from quickdraw.scheduler import TimerQueue
from quickdraw.settings import DamageSettings
from quickdraw.shots import ShotResolver, ShotTier
from quickdraw.state import DuelState, Phase
from quickdraw.stun import StunScheduler


def _resolver(rng=None, damage: DamageSettings | None = None):
    state = DuelState()
    timers = TimerQueue()
    events = EventHub()
    stun = StunScheduler(state, timers, events)
    cleans: list[bool] = []
    resolver = ShotResolver(
        state, stun, events, damage, rng=rng or random.Random(3), on_clean_shot=lambda: cleans.append(True)
    )
    return state, timers, resolver, cleans


def test_clean_shot_during_draw() -> None:
    state, _, resolver, cleans = _resolver()
    state.phase = Phase.DRAW
    outcome = resolver.resolve(1)

    assert outcome is not None
    assert outcome.tier is ShotTier.CLEAN
    assert outcome.damage == 30
    assert outcome.target_health_after == 70
    assert state.player(2).health == 70
    assert state.player(2).stunned
    assert state.player(1).shot_fired
    assert cleans == [True]


def test_dirty_shot_damage_stays_in_range() -> None:
    for seed in range(200):
        state, _, resolver, cleans = _resolver(rng=random.Random(seed))
        state.phase = Phase.ALERT_2
        outcome = resolver.resolve(2)
        assert outcome is not None
        assert outcome.tier is ShotTier.DIRTY
        assert 10 <= outcome.damage <= 20
        assert cleans == []


def test_health_is_clamped_at_zero() -> None:
    state, _, resolver, _ = _resolver(rng=ScriptedRoll(20))
    state.player(2).health = 15
    state.phase = Phase.ALERT_1
    outcome = resolver.resolve(1)
    assert outcome.target_health_after == 0
    assert state.player(2).health == 0


def test_ineligible_shots_are_silent_no_ops() -> None:
    state, _, resolver, _ = _resolver()
    emitted: list[object] = []
    resolver.events.subscribe(DuelEvent.SHOT_FIRED, emitted.append)

    for phase in (Phase.READY, Phase.ROUND_END, Phase.GAME_OVER):
        state.phase = phase
        assert resolver.resolve(1) is None

    state.phase = Phase.ALERT_3
    state.player(1).stunned = True
    assert resolver.resolve(1) is None

    assert resolver.resolve(2) is not None
    assert resolver.resolve(2) is None
    assert len(emitted) == 1
    assert state.player(1).health < 100


def test_draw_only_window_when_dirty_shots_disabled() -> None:
    state, _, resolver, _ = _resolver(damage=DamageSettings(allow_dirty_shots=False))
    state.phase = Phase.ALERT_1
    assert not resolver.can_fire(1)
    assert resolver.resolve(1) is None
    state.phase = Phase.DRAW
    assert resolver.resolve(1).tier is ShotTier.CLEAN
