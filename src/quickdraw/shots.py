"""Shot resolution: eligibility, damage tier and its effects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol
import logging
import random

from .events import DuelEvent, EventHub
from .settings import DamageSettings
from .state import DuelState, Phase
from .stun import StunScheduler

logger = logging.getLogger(__name__)


class ShotTier(str, Enum):
    """Damage tier decided by the phase a shot lands in."""

    CLEAN = "clean"
    DIRTY = "dirty"


class DamageRoll(Protocol):
    def randint(self, a: int, b: int) -> int: ...


@dataclass(frozen=True, slots=True)
class ShotOutcome:
    """Result of an eligible shot."""

    shooter_id: int
    target_id: int
    damage: int
    tier: ShotTier
    target_health_after: int
    phase: Phase


class ShotResolver:
    """Turns a fire action into damage and a stun on the opponent."""

    def __init__(
        self,
        state: DuelState,
        stun: StunScheduler,
        events: EventHub,
        damage: DamageSettings | None = None,
        rng: DamageRoll | None = None,
        on_clean_shot: Callable[[], None] | None = None,
    ) -> None:
        self.state = state
        self.stun = stun
        self.events = events
        self.damage = damage or DamageSettings()
        self.rng = rng or random.Random()
        self.on_clean_shot = on_clean_shot

    def in_firing_window(self, phase: Phase) -> bool:
        if not self.damage.allow_dirty_shots:
            return phase is Phase.DRAW
        return phase.in_firing_window

    def can_fire(self, player_id: int) -> bool:
        shooter = self.state.player(player_id)
        return not (shooter.shot_fired or shooter.stunned) and self.in_firing_window(self.state.phase)

    def roll_damage(self, phase: Phase) -> tuple[int, ShotTier]:
        if phase is Phase.DRAW:
            return self.damage.clean_damage, ShotTier.CLEAN
        return self.rng.randint(self.damage.dirty_min, self.damage.dirty_max), ShotTier.DIRTY

    def resolve(self, shooter_id: int) -> ShotOutcome | None:
        """Fire for ``shooter_id``; None when the shot is not allowed right now."""
        if not self.can_fire(shooter_id):
            return None

        phase = self.state.phase
        shooter = self.state.player(shooter_id)
        target_id = self.state.opponent_of(shooter_id)
        target = self.state.player(target_id)

        shooter.shot_fired = True
        amount, tier = self.roll_damage(phase)
        health_after = target.take_damage(amount)
        self.stun.stun(target_id)

        outcome = ShotOutcome(
            shooter_id=shooter_id,
            target_id=target_id,
            damage=amount,
            tier=tier,
            target_health_after=health_after,
            phase=phase,
        )
        logger.info(
            "Round %d: player %s %s shot for %d, player %s at %d",
            self.state.round,
            shooter_id,
            tier.value,
            amount,
            target_id,
            health_after,
        )
        if tier is ShotTier.CLEAN and self.on_clean_shot is not None:
            self.on_clean_shot()

        self.events.emit(DuelEvent.DAMAGE, target_id, amount, tier)
        self.events.emit(DuelEvent.SHOT_FIRED, outcome)
        return outcome
