from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from quickdraw.exceptions import InvalidSettings
from quickdraw.settings import GameSettings, SettingsManager, TieBreak, TimingSettings
from quickdraw.state import Phase
from quickdraw.utils import load_json, remaining_fraction, save_json


@pytest.fixture()
def data_dir(monkeypatch):
    with tempfile.TemporaryDirectory() as tmp:
        from quickdraw import settings, utils

        monkeypatch.setattr(utils, "DATA_DIR", Path(tmp))
        monkeypatch.setattr(utils, "SETTINGS_FILE", Path(tmp) / "settings.json")
        monkeypatch.setattr(settings, "SETTINGS_FILE", Path(tmp) / "settings.json")
        yield Path(tmp)


def test_settings_load_save_round_trip(data_dir) -> None:
    mgr = SettingsManager()
    mgr.settings.timing.draw_duration_ms = 750
    mgr.settings.tie_break = TieBreak.SECOND_PLAYER
    mgr.set_player_name(1, "  Clint ")

    loaded = SettingsManager()
    assert loaded.settings.timing.draw_duration_ms == 750
    assert loaded.settings.tie_break is TieBreak.SECOND_PLAYER
    assert loaded.settings.player_name(1) == "Clint"
    assert loaded.settings.player_name(2) == "PLAYER 2"


def test_invalid_timing_on_disk_falls_back_to_defaults(data_dir) -> None:
    save_json(data_dir / "settings.json", {"timing": {"alert_delay_min_ms": 9000, "alert_delay_max_ms": 10}})
    loaded = SettingsManager()
    assert loaded.settings.timing == TimingSettings()


def test_malformed_settings_file_uses_defaults(data_dir) -> None:
    (data_dir / "settings.json").write_text("{not json", encoding="utf-8")
    assert SettingsManager().settings.tie_break is TieBreak.FIRST_PLAYER


def test_tie_break_and_volume_come_from_settings_file(data_dir) -> None:
    from quickdraw.match import MatchController

    save_json(data_dir / "settings.json", {"tie_break": "last_shooter", "master_volume": 0.25})
    mgr = SettingsManager()
    assert mgr.settings.tie_break is TieBreak.LAST_SHOOTER
    assert mgr.settings.master_volume == 0.25
    assert MatchController(mgr.settings).rounds.tie_break is TieBreak.LAST_SHOOTER

    save_json(data_dir / "settings.json", {"tie_break": "coin_flip"})
    assert SettingsManager().settings.tie_break is TieBreak.FIRST_PLAYER


def test_audio_without_cue_files_stays_silent(data_dir) -> None:
    from quickdraw.audio import AudioManager

    audio = AudioManager(data_dir)
    audio.load_assets()
    audio.set_volume(0.5, 0.5)
    audio.play("clean")
    audio.play("no-such-cue")
    assert audio.cues == {}
    assert audio.sound_dir == data_dir / "assets" / "sounds"


def test_validate_rejects_bad_ranges() -> None:
    settings = GameSettings()
    settings.damage.dirty_min = 25
    with pytest.raises(InvalidSettings):
        settings.validate()


def test_json_helpers() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        p = Path(tmp) / "x.json"
        save_json(p, {"ok": True})
        assert load_json(p, {}) == {"ok": True}


def test_remaining_fraction_helper() -> None:
    assert remaining_fraction(None, 100, 1000) == 0.0
    assert remaining_fraction(0, 250, 1000) == 0.75
    assert remaining_fraction(0, 5000, 1000) == 0.0


def test_integration_front_end_runs_a_round(data_dir) -> None:
    from quickdraw.game import QuickdrawGame

    game = QuickdrawGame(root=data_dir)
    controls = game.settings.controls

    game._handle_key(controls.player1_rules)
    assert game.rules_visible()
    game._handle_key(controls.start)
    assert not game.match.clock.running

    game._handle_key(controls.player1_rules)
    game._handle_key(controls.start)
    assert game.match.clock.running
    game._render()

    game.match.update(game.match.timers.now + 60_000)
    assert game.match.current_phase() is Phase.READY
    assert game.match.current_round() == 2
    game._render()

    game._handle_key(controls.restart)
    assert game.match.current_round() == 1
