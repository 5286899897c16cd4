"""Match-level API used by the presentation layer."""

from __future__ import annotations

import logging
import random

from .events import DuelEvent, EventHub, Handler
from .exceptions import InvariantViolation
from .phase_clock import DelaySource, PhaseClock, RandomDelays
from .player import PlayerView
from .rounds import Gate, RoundController
from .scheduler import TimerQueue
from .settings import GameSettings
from .shots import DamageRoll, ShotOutcome, ShotResolver
from .state import DuelState, Phase
from .stun import StunScheduler

logger = logging.getLogger(__name__)


class MatchController:
    """Owns one duel and wires its components together.

    All state lives on this instance; the UI calls ``fire``/``start_round``,
    feeds ``update`` with the loop clock and listens through ``subscribe``.
    """

    def __init__(
        self,
        settings: GameSettings | None = None,
        timers: TimerQueue | None = None,
        rng: random.Random | None = None,
        delays: DelaySource | None = None,
        damage_rng: DamageRoll | None = None,
        gate: Gate = None,
    ) -> None:
        self.settings = settings or GameSettings()
        self.settings.validate()
        rng = rng or random.Random(self.settings.seed)

        self.timers = timers or TimerQueue()
        self.events = EventHub()
        self.state = DuelState(initial_health=self.settings.damage.initial_health)
        timing = self.settings.timing

        self.stun = StunScheduler(self.state, self.timers, self.events, timing.stun_duration_ms)
        self.clock = PhaseClock(
            self.state,
            self.timers,
            self.events,
            delays or RandomDelays(timing, rng),
            draw_duration_ms=timing.draw_duration_ms,
        )
        self.shots = ShotResolver(
            self.state,
            self.stun,
            self.events,
            self.settings.damage,
            rng=damage_rng or rng,
            on_clean_shot=self.clock.cancel_draw_timer,
        )
        self.rounds = RoundController(
            self.state,
            self.timers,
            self.events,
            self.clock,
            self.stun,
            timing=timing,
            tie_break=self.settings.tie_break,
            gate=gate,
        )
        self._last_outcome: ShotOutcome | None = None

    def subscribe(self, event: DuelEvent, handler: Handler):
        return self.events.subscribe(event, handler)

    def new_match(self) -> None:
        """Fresh match: every timer cancelled, full health, round 1, READY."""
        self.rounds.reset()
        self.state.reset_match(self.settings.damage.initial_health)
        self._last_outcome = None
        logger.info("New match started")
        self.events.emit(DuelEvent.PHASE_CHANGED, Phase.READY)

    def restart_match(self) -> None:
        """Full reset; names and other UI-owned identity are left untouched."""
        self.new_match()

    def start_round(self, gate: Gate = None) -> bool:
        return self.rounds.start_round(gate)

    def fire(self, player_id: int) -> ShotOutcome | None:
        """Resolve a shot and run the post-shot checks before anything else."""
        outcome = self.shots.resolve(player_id)
        if outcome is None:
            return None
        self._last_outcome = outcome
        self.rounds.on_shot_fired(outcome)
        return outcome

    def update(self, now_ms: int) -> int:
        """Advance the timer queue to ``now_ms``; returns how many callbacks ran."""
        try:
            return self.timers.advance_to(now_ms)
        except InvariantViolation as exc:
            self.rounds.recover(exc)
            return 0

    def current_phase(self) -> Phase:
        return self.state.phase

    def current_round(self) -> int:
        return self.state.round

    round = current_round

    def player(self, player_id: int) -> PlayerView:
        return PlayerView.of(self.state.player(player_id))

    def can_fire(self, player_id: int) -> bool:
        return self.shots.can_fire(player_id)

    def stun_remaining_fraction(self, player_id: int, now: int | None = None) -> float:
        return self.stun.remaining_fraction(player_id, now)

    def draw_remaining_fraction(self, now: int | None = None) -> float:
        return self.clock.draw_remaining_fraction(now)

    def last_shot_outcome(self) -> ShotOutcome | None:
        return self._last_outcome

    def winner(self) -> int | None:
        """Winning player id; only set once the phase is GAME_OVER."""
        if self.state.phase is not Phase.GAME_OVER:
            return None
        return self.rounds.winner
