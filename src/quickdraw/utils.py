"""Shared constants and utility helpers for Quickdraw."""

from __future__ import annotations

from pathlib import Path
from typing import Any
import json

SCREEN_WIDTH = 960
SCREEN_HEIGHT = 640
FPS = 60

BG_COLOR = (24, 14, 8)
PANEL_COLOR = (48, 30, 18)
TEXT_COLOR = (245, 230, 200)
SHADOW_COLOR = (10, 6, 3)

SAND = (222, 184, 135)
YELLOW = (255, 214, 64)
ORANGE = (255, 140, 40)
GREEN = (110, 220, 110)
RED = (230, 70, 60)
BLUE = (90, 160, 255)
WHITE = (255, 255, 255)

PLAYER_IDS = (1, 2)

DATA_DIR = Path(".quickdraw")
SETTINGS_FILE = DATA_DIR / "settings.json"


def ensure_data_dirs() -> None:
    """Create data directories for save files."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp a value into a closed interval."""
    return max(minimum, min(maximum, value))


def remaining_fraction(started_at: int | None, now: int, duration_ms: int) -> float:
    """Fraction of a timed window still left at ``now``; 0 when not started."""
    if started_at is None or duration_ms <= 0:
        return 0.0
    return clamp((duration_ms - (now - started_at)) / duration_ms, 0.0, 1.0)


def load_json(path: Path, default: Any) -> Any:
    """Load JSON data, returning default when missing or malformed."""
    if not path.exists():
        return default
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except (json.JSONDecodeError, OSError):
        return default


def save_json(path: Path, payload: Any) -> None:
    """Save JSON data with deterministic formatting."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)
