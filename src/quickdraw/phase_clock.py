"""Randomized countdown for a single round.

Each transition is a queued callback bound to the phase it expects to leave.
When it fires it only acts if that phase is still current, so a timer that
outlived its round (abort, double shot, game over) does nothing at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from itertools import accumulate
from typing import Callable, Protocol
import logging
import random

from .events import DuelEvent, EventHub
from .exceptions import PhaseOrderError
from .scheduler import TimerGroup, TimerHandle, TimerQueue
from .settings import TimingSettings
from .state import DuelState, Phase
from .utils import remaining_fraction

logger = logging.getLogger(__name__)

COUNTDOWN: tuple[Phase, ...] = (Phase.READY, Phase.ALERT_3, Phase.ALERT_2, Phase.ALERT_1)


class DelaySource(Protocol):
    def round_delays(self) -> tuple[int, int, int, int]:
        """Start delay followed by the three inter-alert delays, in ms."""
        ...


class RandomDelays:
    """Uniform integer delays drawn from the configured inclusive ranges."""

    def __init__(self, timing: TimingSettings, rng: random.Random | None = None) -> None:
        timing.validate()
        self.timing = timing
        self.rng = rng or random.Random()

    def round_delays(self) -> tuple[int, int, int, int]:
        t = self.timing
        start = self.rng.randint(t.start_delay_min_ms, t.start_delay_max_ms)
        a3, a2, a1 = (self.rng.randint(t.alert_delay_min_ms, t.alert_delay_max_ms) for _ in range(3))
        return start, a3, a2, a1


class FixedDelays:
    """Scripted delays; repeats the last script once it runs out."""

    def __init__(self, *rounds: tuple[int, int, int, int]) -> None:
        if not rounds:
            raise ValueError("FixedDelays needs at least one delay tuple")
        self._rounds = list(rounds)

    def round_delays(self) -> tuple[int, int, int, int]:
        if len(self._rounds) > 1:
            return self._rounds.pop(0)
        return self._rounds[0]


@dataclass(frozen=True, slots=True)
class PhaseStep:
    """One planned transition, relative to the round start."""

    expected: Phase
    target: Phase
    at_ms: int


class PhaseClock:
    """Schedules and race-guards one round's phase transitions."""

    def __init__(
        self,
        state: DuelState,
        timers: TimerQueue,
        events: EventHub,
        delays: DelaySource,
        draw_duration_ms: int = 1000,
        on_draw_expired: Callable[[], None] | None = None,
    ) -> None:
        self.state = state
        self.timers = timers
        self.events = events
        self.delays = delays
        self.draw_duration_ms = draw_duration_ms
        self.on_draw_expired = on_draw_expired
        self.plan: list[PhaseStep] = []
        self._tokens = TimerGroup(timers, "phase")
        self._draw_timer: TimerHandle | None = None
        self._draw_started_at: int | None = None

    @property
    def running(self) -> bool:
        return self._tokens.active

    def start(self) -> list[PhaseStep]:
        """Draw this round's delays and queue the four countdown transitions."""
        self.abort()
        offsets = accumulate(self.delays.round_delays())
        self.plan = [
            PhaseStep(expected=phase, target=phase.successor, at_ms=at)
            for phase, at in zip(COUNTDOWN, offsets)
        ]
        for step in self.plan:
            self._tokens.call_later(
                step.at_ms,
                partial(self._transition, step.expected, step.target),
                label=f"{step.expected.value}->{step.target.value}",
            )
        logger.info(
            "Round %d countdown armed: %s",
            self.state.round,
            ", ".join(f"{step.target.value}@{step.at_ms}ms" for step in self.plan),
        )
        return self.plan

    def _transition(self, expected: Phase, target: Phase) -> None:
        if self.state.phase is not expected:
            logger.debug(
                "Stale %s -> %s timer skipped; phase is %s", expected.value, target.value, self.state.phase.value
            )
            return
        if expected.successor is not target:
            raise PhaseOrderError(expected, target)

        self.state.phase = target
        self.events.emit(DuelEvent.PHASE_CHANGED, target)
        if target is Phase.DRAW:
            self._arm_draw_timer()

    def _arm_draw_timer(self) -> None:
        self._draw_started_at = self.timers.now
        self._draw_timer = self._tokens.call_later(
            self.draw_duration_ms, partial(self._draw_elapsed, Phase.DRAW), label="draw-window"
        )

    def _draw_elapsed(self, expected: Phase) -> None:
        if self.state.phase is not expected:
            return
        self._draw_timer = None
        self._draw_started_at = None
        logger.info("Round %d draw window elapsed", self.state.round)
        if self.on_draw_expired is not None:
            self.on_draw_expired()

    def cancel_draw_timer(self) -> bool:
        """Stop the draw-duration timer only; the rest of the round stays armed."""
        handle, self._draw_timer = self._draw_timer, None
        self._draw_started_at = None
        return handle.cancel() if handle is not None else False

    def abort(self) -> int:
        """Invalidate every pending token of the round; idempotent."""
        self._draw_timer = None
        self._draw_started_at = None
        return self._tokens.cancel_all()

    def draw_remaining_fraction(self, now: int | None = None) -> float:
        """Share of the draw window left, for the countdown ring."""
        if self.state.phase is not Phase.DRAW:
            return 0.0
        when = self.timers.now if now is None else now
        return remaining_fraction(self._draw_started_at, when, self.draw_duration_ms)
