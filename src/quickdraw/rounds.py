"""Round lifecycle: start, post-shot checks, round end and game over."""

from __future__ import annotations

from functools import partial
from typing import Callable, Union
import logging

from .events import DuelEvent, EventHub
from .exceptions import InvariantViolation
from .phase_clock import PhaseClock
from .scheduler import TimerGroup, TimerQueue
from .settings import TieBreak, TimingSettings
from .shots import ShotOutcome, ShotTier
from .state import DuelState, Phase
from .stun import StunScheduler
from .utils import PLAYER_IDS

logger = logging.getLogger(__name__)

Gate = Union[bool, Callable[[], bool], None]


def gate_closed(gate: Gate) -> bool:
    """True when nothing external is blocking a round start."""
    if gate is None:
        return True
    if callable(gate):
        return not gate()
    return not gate


def resolve_winner(
    state: DuelState,
    dead: list[int],
    tie_break: TieBreak,
    last_shooter: int | None = None,
) -> int:
    """Pick the winner once at least one duelist is down.

    A lone survivor wins. If both are down the higher remaining health wins,
    and an exact tie falls to ``tie_break``.
    """
    if len(dead) == 1:
        return state.opponent_of(dead[0])

    first, second = PLAYER_IDS
    h1 = state.player(first).health
    h2 = state.player(second).health
    if h1 != h2:
        return first if h1 > h2 else second
    if tie_break is TieBreak.SECOND_PLAYER:
        return second
    if tie_break is TieBreak.LAST_SHOOTER and last_shooter is not None:
        return last_shooter
    return first


class RoundController:
    """Drives a round from READY through ROUND_END back to READY or GAME_OVER."""

    def __init__(
        self,
        state: DuelState,
        timers: TimerQueue,
        events: EventHub,
        clock: PhaseClock,
        stun: StunScheduler,
        timing: TimingSettings | None = None,
        tie_break: TieBreak = TieBreak.FIRST_PLAYER,
        gate: Gate = None,
    ) -> None:
        self.state = state
        self.timers = timers
        self.events = events
        self.clock = clock
        self.stun = stun
        self.timing = timing or TimingSettings()
        self.tie_break = tie_break
        self.gate = gate
        self.winner: int | None = None
        self.last_shooter: int | None = None
        self._tokens = TimerGroup(timers, "round")
        self._closing_round: int | None = None
        self.clock.on_draw_expired = self.end_round

    def reset(self) -> None:
        """Cancel everything in flight; used on new match and restart."""
        self._tokens.cancel_all()
        self.clock.abort()
        self.stun.clear_all()
        self.winner = None
        self.last_shooter = None
        self._closing_round = None

    def start_round(self, gate: Gate = None) -> bool:
        """Kick off the countdown; a no-op unless READY, idle and ungated."""
        if self.state.phase is not Phase.READY or self.clock.running:
            return False
        if not gate_closed(gate if gate is not None else self.gate):
            logger.debug("Round %d start blocked by gate", self.state.round)
            return False
        self._closing_round = None
        self.clock.start()
        return True

    def on_shot_fired(self, outcome: ShotOutcome) -> None:
        """Post-shot checks: game over first, then whether the round is done."""
        self.last_shooter = outcome.shooter_id
        if self.check_game_over():
            return
        if not self.state.phase.in_firing_window:
            return
        if not (self.state.both_fired() or outcome.tier is ShotTier.CLEAN):
            return
        if self._closing_round == self.state.round:
            return
        self._closing_round = self.state.round
        self._tokens.call_later(
            self.timing.round_end_grace_ms,
            partial(self._close_round, self.state.round),
            label="round-grace",
        )

    def _close_round(self, expected_round: int) -> None:
        if self.state.round != expected_round:
            return
        self.end_round()

    def end_round(self) -> bool:
        """Latch ROUND_END, halt the round's timers and queue the next READY."""
        if self.state.phase in (Phase.GAME_OVER, Phase.ROUND_END):
            return False

        self.state.phase = Phase.ROUND_END
        self._tokens.cancel_all()
        self.clock.abort()
        finished = self.state.round
        logger.info("Round %d ended", finished)
        self.events.emit(DuelEvent.PHASE_CHANGED, Phase.ROUND_END)
        self.events.emit(DuelEvent.ROUND_ENDED, finished)

        self._tokens.call_later(
            self.timing.round_end_delay_ms,
            partial(self._advance_round, finished),
            label="round-advance",
        )
        return True

    def _advance_round(self, finished: int) -> None:
        if self.state.phase is not Phase.ROUND_END or self.state.round != finished:
            return
        self.state.round += 1
        self.state.reset_round()
        self._closing_round = None
        self.events.emit(DuelEvent.PHASE_CHANGED, Phase.READY)

    def check_game_over(self) -> bool:
        """Latch GAME_OVER when a duelist is down; returns whether the match is over."""
        if self.state.phase is Phase.GAME_OVER:
            logger.debug("Game over already latched, keeping winner %s", self.winner)
            return True
        dead = self.state.dead_players()
        if not dead:
            return False

        self.state.phase = Phase.GAME_OVER
        self._tokens.cancel_all()
        self.clock.abort()
        self.stun.clear_all()
        self.winner = resolve_winner(self.state, dead, self.tie_break, self.last_shooter)
        logger.info("Game over after round %d, player %s wins", self.state.round, self.winner)
        self.events.emit(DuelEvent.PHASE_CHANGED, Phase.GAME_OVER)
        self.events.emit(DuelEvent.GAME_OVER, self.winner)
        return True

    def recover(self, error: InvariantViolation) -> None:
        """Handle an internal defect by forcing the round back to READY."""
        logger.error("Invariant violation in round %d: %s", self.state.round, error, exc_info=error)
        self._tokens.cancel_all()
        self.clock.abort()
        self._closing_round = None
        if self.state.phase is Phase.GAME_OVER:
            return
        self.state.reset_round()
        self.events.emit(DuelEvent.PHASE_CHANGED, Phase.READY)
