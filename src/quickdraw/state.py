"""Authoritative duel record: phase, round number and both duelists."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .exceptions import UnknownPlayer
from .player import PlayerState
from .utils import PLAYER_IDS


class Phase(str, Enum):
    """Stages of a round, in countdown order."""

    READY = "ready"
    ALERT_3 = "alert-3"
    ALERT_2 = "alert-2"
    ALERT_1 = "alert-1"
    DRAW = "draw"
    ROUND_END = "round-end"
    GAME_OVER = "game-over"

    @property
    def successor(self) -> Phase | None:
        """Next phase of the countdown, or None outside of it."""
        return _SUCCESSORS.get(self)

    @property
    def in_firing_window(self) -> bool:
        return self in FIRING_WINDOW


_SUCCESSORS = {
    Phase.READY: Phase.ALERT_3,
    Phase.ALERT_3: Phase.ALERT_2,
    Phase.ALERT_2: Phase.ALERT_1,
    Phase.ALERT_1: Phase.DRAW,
}

FIRING_WINDOW = frozenset({Phase.ALERT_3, Phase.ALERT_2, Phase.ALERT_1, Phase.DRAW})


@dataclass(slots=True)
class DuelState:
    """Mutable match-level state, one instance per match."""

    initial_health: int = 100
    phase: Phase = Phase.READY
    round: int = 1
    players: dict[int, PlayerState] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.players:
            self.players = {pid: PlayerState(player_id=pid) for pid in PLAYER_IDS}
        self.reset_match()

    def reset_match(self, initial_health: int | None = None) -> None:
        """Fresh match: round 1, READY, both duelists at full health."""
        if initial_health is not None:
            self.initial_health = initial_health
        self.phase = Phase.READY
        self.round = 1
        for player in self.players.values():
            player.reset_match(self.initial_health)

    def reset_round(self) -> None:
        """Back to READY with shots cleared; health and stun persist."""
        self.phase = Phase.READY
        for player in self.players.values():
            player.reset_round()

    def player(self, player_id: int) -> PlayerState:
        try:
            return self.players[player_id]
        except KeyError:
            raise UnknownPlayer(player_id) from None

    def opponent_of(self, player_id: int) -> int:
        self.player(player_id)
        return PLAYER_IDS[1] if player_id == PLAYER_IDS[0] else PLAYER_IDS[0]

    def both_fired(self) -> bool:
        return all(player.shot_fired for player in self.players.values())

    def dead_players(self) -> list[int]:
        return [pid for pid, player in self.players.items() if not player.alive]
