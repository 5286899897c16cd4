"""Exception hierarchy for the duel core.

Timing races (firing while ineligible, starting a round mid-countdown) are
silent no-ops and never raise. Exceptions here mark programming errors or
internal defects.
"""

from __future__ import annotations


class QuickdrawError(Exception):
    """Base class for every Quickdraw error."""


class UnknownPlayer(QuickdrawError):
    """A player id outside the two duelists."""

    def __init__(self, player_id: object) -> None:
        self.player_id = player_id
        super().__init__(f"Unknown player {player_id!r}")


class InvalidSettings(QuickdrawError):
    """A timing range or duration that cannot be scheduled."""


class InvariantViolation(QuickdrawError):
    """Internal defect; handled by forcing the round back to READY."""


class PhaseOrderError(InvariantViolation):
    """A phase transition that does not follow the countdown order."""

    def __init__(self, expected: object, target: object) -> None:
        self.expected = expected
        self.target = target
        super().__init__(f"Illegal phase transition {expected} -> {target}")
