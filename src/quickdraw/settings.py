"""Settings persistence and runtime configuration."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any
import pygame

from .exceptions import InvalidSettings
from .utils import SETTINGS_FILE, ensure_data_dirs, load_json, save_json


class TieBreak(str, Enum):
    """Who wins when both duelists drop to zero with equal health."""

    FIRST_PLAYER = "first_player"
    SECOND_PLAYER = "second_player"
    LAST_SHOOTER = "last_shooter"


@dataclass(slots=True)
class TimingSettings:
    """Countdown and timer durations in milliseconds."""

    start_delay_min_ms: int = 500
    start_delay_max_ms: int = 3000
    alert_delay_min_ms: int = 500
    alert_delay_max_ms: int = 5000
    draw_duration_ms: int = 1000
    stun_duration_ms: int = 2000
    round_end_grace_ms: int = 500
    round_end_delay_ms: int = 2000

    def validate(self) -> None:
        """Raise InvalidSettings for ranges that cannot be drawn from."""
        for name, low, high in (
            ("start_delay", self.start_delay_min_ms, self.start_delay_max_ms),
            ("alert_delay", self.alert_delay_min_ms, self.alert_delay_max_ms),
        ):
            if low < 0 or low > high:
                raise InvalidSettings(f"{name} range [{low}, {high}] is not a valid interval")
        for name in ("draw_duration_ms", "stun_duration_ms", "round_end_grace_ms", "round_end_delay_ms"):
            if getattr(self, name) < 0:
                raise InvalidSettings(f"{name} must not be negative")
        if self.stun_duration_ms == 0:
            raise InvalidSettings("stun_duration_ms must be positive")


@dataclass(slots=True)
class DamageSettings:
    """Health pool and shot damage."""

    initial_health: int = 100
    clean_damage: int = 30
    dirty_min: int = 10
    dirty_max: int = 20
    allow_dirty_shots: bool = True

    def validate(self) -> None:
        if self.initial_health <= 0:
            raise InvalidSettings("initial_health must be positive")
        if self.dirty_min < 0 or self.dirty_min > self.dirty_max:
            raise InvalidSettings(f"dirty damage range [{self.dirty_min}, {self.dirty_max}] is not a valid interval")
        if self.clean_damage < 0:
            raise InvalidSettings("clean_damage must not be negative")


@dataclass(slots=True)
class DisplaySettings:
    """Display-related options."""

    fullscreen: bool = False
    screen_shake: bool = True
    show_draw_ring: bool = True


@dataclass(slots=True)
class ControlScheme:
    """Key bindings for both duelists and the shared controls."""

    player1_fire: int = pygame.K_LSHIFT
    player2_fire: int = pygame.K_RCTRL
    start: int = pygame.K_SPACE
    restart: int = pygame.K_r
    player1_rules: int = pygame.K_F1
    player2_rules: int = pygame.K_F2


@dataclass(slots=True)
class GameSettings:
    """Persistent settings for the game."""

    master_volume: float = 0.8
    sfx_volume: float = 0.8
    tie_break: TieBreak = TieBreak.FIRST_PLAYER
    seed: int | None = None
    log_level: str = "INFO"
    player_names: dict[str, str] = field(default_factory=lambda: {"1": "PLAYER 1", "2": "PLAYER 2"})
    timing: TimingSettings = field(default_factory=TimingSettings)
    damage: DamageSettings = field(default_factory=DamageSettings)
    display: DisplaySettings = field(default_factory=DisplaySettings)
    controls: ControlScheme = field(default_factory=ControlScheme)

    def validate(self) -> None:
        self.timing.validate()
        self.damage.validate()

    def player_name(self, player_id: int) -> str:
        return self.player_names.get(str(player_id), f"PLAYER {player_id}")


class SettingsManager:
    """Load, save, and mutate game settings."""

    def __init__(self) -> None:
        ensure_data_dirs()
        self.settings = self.load()

    def load(self) -> GameSettings:
        """Load game settings from disk with safe defaults."""
        raw = load_json(SETTINGS_FILE, {})
        if not isinstance(raw, dict):
            raw = {}
        settings = GameSettings()

        settings.master_volume = float(raw.get("master_volume", settings.master_volume))
        settings.sfx_volume = float(raw.get("sfx_volume", settings.sfx_volume))
        settings.log_level = str(raw.get("log_level", settings.log_level)).upper()

        if raw.get("tie_break") in {e.value for e in TieBreak}:
            settings.tie_break = TieBreak(raw["tie_break"])
        if isinstance(raw.get("seed"), int):
            settings.seed = raw["seed"]

        names = raw.get("player_names", {})
        if isinstance(names, dict):
            for key in ("1", "2"):
                if isinstance(names.get(key), str) and names[key].strip():
                    settings.player_names[key] = names[key].strip()

        settings.timing = self._load_section(raw.get("timing", {}), TimingSettings(), int)
        settings.damage = self._load_section(raw.get("damage", {}), DamageSettings(), None)
        settings.display = self._load_section(raw.get("display", {}), DisplaySettings(), bool)
        settings.controls = self._load_section(raw.get("controls", {}), ControlScheme(), int)

        try:
            settings.validate()
        except InvalidSettings:
            settings.timing = TimingSettings()
            settings.damage = DamageSettings()
        return settings

    @staticmethod
    def _load_section(payload: Any, defaults: Any, cast: Any) -> Any:
        if not isinstance(payload, dict):
            return defaults
        for name, current in asdict(defaults).items():
            if name not in payload:
                continue
            convert = cast or type(current)
            try:
                setattr(defaults, name, convert(payload[name]))
            except (TypeError, ValueError):
                continue
        return defaults

    def save(self) -> None:
        """Persist settings to disk."""
        payload = asdict(self.settings)
        payload["tie_break"] = self.settings.tie_break.value
        save_json(SETTINGS_FILE, payload)

    def set_player_name(self, player_id: int, name: str) -> None:
        """Rename a duelist and persist; blank names fall back to the default."""
        self.settings.player_names[str(player_id)] = name.strip() or f"PLAYER {player_id}"
        self.save()
