"""Per-duelist stun timers."""

from __future__ import annotations

from functools import partial
import logging

from .events import DuelEvent, EventHub
from .scheduler import TimerHandle, TimerQueue
from .state import DuelState
from .utils import remaining_fraction

logger = logging.getLogger(__name__)


class StunScheduler:
    """Disables firing for a fixed window after a duelist is hit.

    Stun timers live on the shared queue but outside the round token set, so
    a stun applied at the end of one round still runs into the next.
    """

    def __init__(self, state: DuelState, timers: TimerQueue, events: EventHub, duration_ms: int = 2000) -> None:
        self.state = state
        self.timers = timers
        self.events = events
        self.duration_ms = duration_ms
        self._handles: dict[int, TimerHandle] = {}

    def stun(self, player_id: int) -> None:
        """(Re)start the stun window for a duelist."""
        player = self.state.player(player_id)
        existing = self._handles.pop(player_id, None)
        if existing is not None:
            existing.cancel()

        player.stunned = True
        player.stun_started_at = self.timers.now
        self._handles[player_id] = self.timers.call_later(
            self.duration_ms, partial(self._expire, player_id), label=f"stun-{player_id}"
        )
        logger.debug("Player %s stunned at %d ms", player_id, self.timers.now)
        self.events.emit(DuelEvent.STUN_CHANGED, player_id, True)

    def _expire(self, player_id: int) -> None:
        self._handles.pop(player_id, None)
        self._release(player_id)

    def _release(self, player_id: int) -> None:
        player = self.state.player(player_id)
        if not player.stunned:
            return
        player.stunned = False
        player.stun_started_at = None
        self.events.emit(DuelEvent.STUN_CHANGED, player_id, False)

    def remaining_fraction(self, player_id: int, now: int | None = None) -> float:
        """Share of the stun window left at ``now``, in [0, 1]."""
        player = self.state.player(player_id)
        if not player.stunned:
            return 0.0
        when = self.timers.now if now is None else now
        return remaining_fraction(player.stun_started_at, when, self.duration_ms)

    def clear_all(self) -> int:
        """Cancel every outstanding stun timer and lift the stuns."""
        cancelled = sum(1 for handle in self._handles.values() if handle.cancel())
        self._handles.clear()
        for player_id in self.state.players:
            self._release(player_id)
        return cancelled
