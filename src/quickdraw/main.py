"""Executable entrypoint for Quickdraw."""

from __future__ import annotations

from pathlib import Path
import logging

from .game import QuickdrawGame
from .settings import SettingsManager


def main() -> None:
    """Launch the game."""
    manager = SettingsManager()
    logging.basicConfig(
        level=getattr(logging, manager.settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    root = Path(__file__).resolve().parents[2]
    QuickdrawGame(root=root, settings_manager=manager).run()


if __name__ == "__main__":
    main()
