"""Cooperative one-shot timer queue driven by the game loop clock.

Nothing here sleeps or spawns threads. The owner of the loop feeds the queue
the current time (``pygame.time.get_ticks()`` in the front end, a hand-advanced
counter in tests) and due callbacks run synchronously, in deadline order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


@dataclass(order=True, slots=True)
class TimerHandle:
    """A scheduled callback; ordering is (deadline, scheduling sequence)."""

    deadline: int
    seq: int
    callback: Callback = field(compare=False)
    label: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)
    fired: bool = field(default=False, compare=False)

    def cancel(self) -> bool:
        """Invalidate the timer; returns whether it was still pending."""
        if self.cancelled or self.fired:
            return False
        self.cancelled = True
        return True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class TimerQueue:
    """Deadline-ordered queue of one-shot callbacks in milliseconds."""

    def __init__(self, start_ms: int = 0) -> None:
        self.now = start_ms
        self._heap: list[TimerHandle] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: int, callback: Callback, label: str = "") -> TimerHandle:
        """Schedule ``callback`` to run ``delay_ms`` after the current time."""
        handle = TimerHandle(
            deadline=self.now + max(0, int(delay_ms)),
            seq=next(self._seq),
            callback=callback,
            label=label,
        )
        heapq.heappush(self._heap, handle)
        return handle

    def advance_to(self, now_ms: int) -> int:
        """Run every callback due by ``now_ms``; returns how many ran."""
        target = max(self.now, int(now_ms))
        ran = 0
        while self._heap and self._heap[0].deadline <= target:
            handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self.now = handle.deadline
            handle.fired = True
            ran += 1
            handle.callback()
        self.now = target
        return ran

    def advance(self, delta_ms: int) -> int:
        return self.advance_to(self.now + delta_ms)

    def pending(self) -> list[TimerHandle]:
        """Live handles in dispatch order."""
        return sorted(handle for handle in self._heap if handle.active)

    def next_deadline(self) -> int | None:
        live = self.pending()
        return live[0].deadline if live else None


class TimerGroup:
    """Token set of related timers that can be invalidated together."""

    def __init__(self, queue: TimerQueue, name: str) -> None:
        self.queue = queue
        self.name = name
        self._handles: list[TimerHandle] = []

    def call_later(self, delay_ms: int, callback: Callback, label: str = "") -> TimerHandle:
        self._handles = [handle for handle in self._handles if handle.active]
        handle = self.queue.call_later(delay_ms, callback, label=label or self.name)
        self._handles.append(handle)
        return handle

    def cancel_all(self) -> int:
        """Invalidate every pending token; idempotent."""
        cancelled = sum(1 for handle in self._handles if handle.cancel())
        self._handles.clear()
        if cancelled:
            logger.debug("Cancelled %d %s timer(s)", cancelled, self.name)
        return cancelled

    @property
    def active(self) -> bool:
        return any(handle.active for handle in self._handles)
