"""Sound cues for the duel: alert beeps, the draw call, shots and results."""

from __future__ import annotations

from pathlib import Path
import pygame

# Cue name -> file under assets/sounds. Shot cues are keyed by ShotTier value.
SOUND_FILES = {
    "alert": "alert.wav",
    "draw": "draw.wav",
    "clean": "clean_shot.wav",
    "dirty": "dirty_shot.wav",
    "round_end": "round_end.wav",
    "victory": "victory.wav",
}


class AudioManager:
    """Plays a cue per duel event; the duel runs silently without a mixer or files."""

    def __init__(self, root: Path) -> None:
        self.sound_dir = root / "assets" / "sounds"
        self.cues: dict[str, pygame.mixer.Sound] = {}
        try:
            pygame.mixer.init()
            self.sound_enabled = True
        except pygame.error:
            self.sound_enabled = False

    def load_assets(self) -> None:
        """Load whichever cue files exist; missing cues stay mute."""
        if not self.sound_enabled:
            return
        for cue, filename in SOUND_FILES.items():
            path = self.sound_dir / filename
            if not path.exists():
                continue
            try:
                self.cues[cue] = pygame.mixer.Sound(str(path))
            except pygame.error:
                continue

    def set_volume(self, master: float, sfx: float) -> None:
        for sound in self.cues.values():
            sound.set_volume(master * sfx)

    def play(self, cue: str) -> None:
        """Play ``cue`` if it was loaded: a phase beep, a shot tier or a result."""
        sound = self.cues.get(cue) if self.sound_enabled else None
        if sound:
            sound.play()
