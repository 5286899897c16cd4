"""Pytest configuration for headless pygame tests and scripted duels."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from quickdraw.match import MatchController  # noqa: E402
from quickdraw.phase_clock import FixedDelays  # noqa: E402
from quickdraw.settings import GameSettings  # noqa: E402


class ScriptedRoll:
    """Damage roll that replays fixed values, then sticks to the last one."""

    def __init__(self, *values: int) -> None:
        self.values = list(values)
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


# Countdown lands on DRAW at 100 + 200 + 300 + 400 = 1000 ms.
DELAYS = (100, 200, 300, 400)
DRAW_AT = sum(DELAYS)


@pytest.fixture()
def roll() -> ScriptedRoll:
    return ScriptedRoll(15)


@pytest.fixture()
def match(roll: ScriptedRoll) -> MatchController:
    controller = MatchController(GameSettings(), delays=FixedDelays(DELAYS), damage_rng=roll)
    controller.new_match()
    return controller


def run_to_draw(controller: MatchController) -> None:
    assert controller.start_round()
    controller.update(controller.timers.now + DRAW_AT)
