"""Push notifications from the duel core to the presentation layer."""

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import Any, Callable


class DuelEvent(str, Enum):
    """Events emitted by the core, with their payloads."""

    PHASE_CHANGED = "phase_changed"  # (phase)
    DAMAGE = "damage"  # (target_id, amount, tier)
    STUN_CHANGED = "stun_changed"  # (player_id, stunned)
    SHOT_FIRED = "shot_fired"  # (outcome)
    ROUND_ENDED = "round_ended"  # (round)
    GAME_OVER = "game_over"  # (winner_id)


Handler = Callable[..., Any]


class EventHub:
    """Synchronous fan-out of core events to subscribed handlers."""

    def __init__(self) -> None:
        self._handlers: dict[DuelEvent, list[Handler]] = defaultdict(list)

    def subscribe(self, event: DuelEvent, handler: Handler) -> Callable[[], None]:
        """Register a handler; returns a callable that removes it again."""
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def emit(self, event: DuelEvent, *payload: Any) -> None:
        for handler in list(self._handlers[event]):
            handler(*payload)
