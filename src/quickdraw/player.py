"""Per-duelist runtime state."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class PlayerState:
    """Health, stun and shot status for one duelist."""

    player_id: int
    max_health: int = 100
    health: int = 100
    stunned: bool = False
    shot_fired: bool = False
    stun_started_at: int | None = None

    def reset_match(self, initial_health: int) -> None:
        """Restore full health and clear every per-match flag."""
        self.max_health = initial_health
        self.health = initial_health
        self.stunned = False
        self.shot_fired = False
        self.stun_started_at = None

    def reset_round(self) -> None:
        """Reset runtime state for a new round; health and stun carry over."""
        self.shot_fired = False

    def take_damage(self, amount: int) -> int:
        """Apply damage clamped at zero and return the health left."""
        self.health = max(0, self.health - amount)
        return self.health

    @property
    def alive(self) -> bool:
        return self.health > 0


@dataclass(frozen=True, slots=True)
class PlayerView:
    """Read-only snapshot handed to the presentation layer."""

    player_id: int
    health: int
    max_health: int
    stunned: bool
    shot_fired: bool

    @classmethod
    def of(cls, player: PlayerState) -> PlayerView:
        return cls(
            player_id=player.player_id,
            health=player.health,
            max_health=player.max_health,
            stunned=player.stunned,
            shot_fired=player.shot_fired,
        )
