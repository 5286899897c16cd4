"""pygame front end: input wiring, rendering and effects around the duel core."""

from __future__ import annotations

from pathlib import Path
import math
import pygame

from .audio import AudioManager
from .events import DuelEvent
from .match import MatchController
from .settings import GameSettings, SettingsManager
from .shots import ShotOutcome, ShotTier
from .state import Phase
from .utils import (
    BG_COLOR,
    BLUE,
    FPS,
    GREEN,
    ORANGE,
    PANEL_COLOR,
    PLAYER_IDS,
    RED,
    SAND,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    SHADOW_COLOR,
    TEXT_COLOR,
    WHITE,
    YELLOW,
)

PHASE_LABELS = {
    Phase.READY: "READY",
    Phase.ALERT_3: "3",
    Phase.ALERT_2: "2",
    Phase.ALERT_1: "1",
    Phase.DRAW: "DRAW!",
    Phase.ROUND_END: "END",
    Phase.GAME_OVER: "",
}

RULES_TEXT = [
    "Wait for the countdown: 3 - 2 - 1 - DRAW!",
    "Fire during DRAW for a clean shot: 30 damage.",
    "Fire early for a dirty shot: 10-20 damage.",
    "One shot per round. A hit stuns the target for 2s.",
    "First duelist to 0 health loses.",
]


class QuickdrawGame:
    """Two duelists on one keyboard; all game rules live in MatchController."""

    def __init__(self, root: Path, settings_manager: SettingsManager | None = None) -> None:
        pygame.init()
        pygame.font.init()

        self.root = root
        self.settings_manager = settings_manager or SettingsManager()
        self.settings: GameSettings = self.settings_manager.settings

        flags = pygame.FULLSCREEN if self.settings.display.fullscreen else 0
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), flags)
        pygame.display.set_caption("Quickdraw")
        self.clock = pygame.time.Clock()

        self.title_font = pygame.font.SysFont("consolas", 96, bold=True)
        self.body_font = pygame.font.SysFont("consolas", 28, bold=True)
        self.small_font = pygame.font.SysFont("consolas", 18)

        self.audio = AudioManager(self.root)
        self.audio.load_assets()
        self.audio.set_volume(self.settings.master_volume, self.settings.sfx_volume)

        self.rules_open = {pid: False for pid in PLAYER_IDS}
        self.match = MatchController(self.settings, gate=self.rules_visible)
        self.match.subscribe(DuelEvent.PHASE_CHANGED, self._on_phase_changed)
        self.match.subscribe(DuelEvent.SHOT_FIRED, self._on_shot_fired)
        self.match.subscribe(DuelEvent.ROUND_ENDED, self._on_round_ended)
        self.match.subscribe(DuelEvent.GAME_OVER, self._on_game_over)

        self.message = ""
        self.shot_marks: dict[int, ShotTier | None] = {pid: None for pid in PLAYER_IDS}
        self.screen_shake_frames = 0
        self.screen_shake_magnitude = 0
        self.flash_color: tuple[int, int, int] | None = None
        self.flash_frames = 0
        self.reset_match()

    def reset_match(self) -> None:
        """Start a fresh match; player names survive because settings own them."""
        self.match.restart_match()
        self.shot_marks = {pid: None for pid in PLAYER_IDS}
        self.message = "PRESS SPACE TO DUEL"

    def rules_visible(self) -> bool:
        return any(self.rules_open.values())

    def run(self) -> None:
        """Main event/update/render loop."""
        running = True
        while running:
            self.clock.tick(FPS)
            running = self._handle_events()
            if not running:
                break
            self.match.update(pygame.time.get_ticks())
            self._render()

        pygame.quit()

    def _handle_events(self) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type != pygame.KEYDOWN:
                continue
            if event.key == pygame.K_ESCAPE:
                return False
            self._handle_key(event.key)
        return True

    def _handle_key(self, key: int) -> None:
        controls = self.settings.controls
        if key == controls.player1_fire:
            self.match.fire(1)
        elif key == controls.player2_fire:
            self.match.fire(2)
        elif key == controls.start:
            if self.match.start_round():
                self.message = "STEADY..."
                self.shot_marks = {pid: None for pid in PLAYER_IDS}
        elif key == controls.restart:
            self.reset_match()
        elif key == controls.player1_rules:
            self._toggle_rules(1)
        elif key == controls.player2_rules:
            self._toggle_rules(2)

    def _toggle_rules(self, player_id: int) -> None:
        if self.match.current_phase() not in (Phase.READY, Phase.ROUND_END, Phase.GAME_OVER):
            return
        if self.match.clock.running and self.match.current_phase() is Phase.READY:
            return
        self.rules_open[player_id] = not self.rules_open[player_id]

    def _on_phase_changed(self, phase: Phase) -> None:
        if phase in (Phase.ALERT_3, Phase.ALERT_2, Phase.ALERT_1):
            self.message = ""
            self.audio.play("alert")
        elif phase is Phase.DRAW:
            self.message = ""
            self.audio.play("draw")
        elif phase is Phase.READY:
            self.shot_marks = {pid: None for pid in PLAYER_IDS}
            if self.message != "PRESS SPACE TO DUEL":
                self.message = "NEXT ROUND - PRESS SPACE"

    def _on_shot_fired(self, outcome: ShotOutcome) -> None:
        self.shot_marks[outcome.shooter_id] = outcome.tier
        clean = outcome.tier is ShotTier.CLEAN
        self.message = "CLEAN SHOT!" if clean else "DIRTY SHOT!"
        self.audio.play(outcome.tier.value)
        self.flash_color = WHITE if clean else ORANGE
        self.flash_frames = 9 if clean else 7
        if self.settings.display.screen_shake:
            self.screen_shake_frames = 30
            self.screen_shake_magnitude = 10 if clean else 6

    def _on_round_ended(self, round_number: int) -> None:
        self.message = f"ROUND {round_number} OVER"
        self.audio.play("round_end")

    def _on_game_over(self, winner_id: int) -> None:
        self.message = f"{self.settings.player_name(winner_id)} WINS!"
        self.audio.play("victory")

    def _render(self) -> None:
        shake_x = shake_y = 0
        if self.screen_shake_frames > 0:
            self.screen_shake_frames -= 1
            ticks = pygame.time.get_ticks()
            shake_x = int(ticks % self.screen_shake_magnitude) - self.screen_shake_magnitude // 2
            shake_y = int((ticks // 2) % self.screen_shake_magnitude) - self.screen_shake_magnitude // 2

        frame = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SRCALPHA)
        frame.fill(BG_COLOR)
        for pid in PLAYER_IDS:
            self._render_player_panel(frame, pid)
        self._render_phase_banner(frame)
        if self.settings.display.show_draw_ring:
            self._render_draw_ring(frame)
        self._render_hud(frame)

        if self.match.current_phase() is Phase.GAME_OVER:
            self._render_game_over(frame)
        elif self.rules_visible():
            self._render_rules(frame)

        if self.flash_frames > 0 and self.flash_color is not None:
            self.flash_frames -= 1
            flash = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SRCALPHA)
            flash.fill((*self.flash_color, 25 * self.flash_frames))
            frame.blit(flash, (0, 0))

        self.screen.fill((0, 0, 0))
        self.screen.blit(frame, (shake_x, shake_y))
        pygame.display.flip()

    def _panel_rect(self, player_id: int) -> pygame.Rect:
        width = SCREEN_WIDTH // 2 - 60
        left = 30 if player_id == 1 else SCREEN_WIDTH // 2 + 30
        return pygame.Rect(left, SCREEN_HEIGHT - 230, width, 190)

    def _render_player_panel(self, surface: pygame.Surface, player_id: int) -> None:
        view = self.match.player(player_id)
        rect = self._panel_rect(player_id)
        pygame.draw.rect(surface, PANEL_COLOR, rect, border_radius=10)

        name = self.body_font.render(self.settings.player_name(player_id), True, SAND)
        surface.blit(name, (rect.x + 16, rect.y + 12))

        bar = pygame.Rect(rect.x + 16, rect.y + 56, rect.width - 32, 26)
        pygame.draw.rect(surface, SHADOW_COLOR, bar, border_radius=6)
        share = view.health / view.max_health if view.max_health else 0
        hp_color = RED if view.health <= 30 else GREEN
        pygame.draw.rect(surface, hp_color, (bar.x, bar.y, int(bar.width * share), bar.height), border_radius=6)
        hp_text = self.small_font.render(f"{view.health}", True, TEXT_COLOR)
        surface.blit(hp_text, (bar.right - hp_text.get_width() - 8, bar.y + 4))

        if view.stunned:
            stun_bar = pygame.Rect(rect.x + 16, rect.y + 96, rect.width - 32, 10)
            fraction = self.match.stun_remaining_fraction(player_id)
            pygame.draw.rect(surface, SHADOW_COLOR, stun_bar, border_radius=4)
            pygame.draw.rect(surface, BLUE, (stun_bar.x, stun_bar.y, int(stun_bar.width * fraction), stun_bar.height))
            stun_text = self.small_font.render("STUNNED", True, BLUE)
            surface.blit(stun_text, (stun_bar.x, stun_bar.bottom + 6))

        mark = self.shot_marks.get(player_id)
        if mark is not None:
            label = "BANG!" if mark is ShotTier.CLEAN else "pfft"
            shot = self.body_font.render(label, True, YELLOW if mark is ShotTier.CLEAN else ORANGE)
            surface.blit(shot, (rect.right - shot.get_width() - 16, rect.y + 12))

        ready = self.match.can_fire(player_id)
        key_hint = "FIRE READY" if ready else "---"
        hint = self.small_font.render(key_hint, True, GREEN if ready else TEXT_COLOR)
        surface.blit(hint, (rect.x + 16, rect.bottom - 30))

    def _render_phase_banner(self, surface: pygame.Surface) -> None:
        phase = self.match.current_phase()
        label = PHASE_LABELS[phase]
        if not label:
            return
        color = YELLOW if phase is Phase.DRAW else TEXT_COLOR
        shadow = self.title_font.render(label, True, SHADOW_COLOR)
        text = self.title_font.render(label, True, color)
        x = SCREEN_WIDTH // 2 - text.get_width() // 2
        surface.blit(shadow, (x + 4, 154))
        surface.blit(text, (x, 150))

    def _render_draw_ring(self, surface: pygame.Surface) -> None:
        fraction = self.match.draw_remaining_fraction()
        if fraction <= 0:
            return
        center = (SCREEN_WIDTH // 2, 205)
        rect = pygame.Rect(0, 0, 220, 220)
        rect.center = center
        start = math.pi / 2
        pygame.draw.arc(surface, YELLOW, rect, start, start + 2 * math.pi * fraction, 8)

    def _render_hud(self, surface: pygame.Surface) -> None:
        round_text = self.body_font.render(f"ROUND {self.match.current_round()}", True, SAND)
        surface.blit(round_text, (SCREEN_WIDTH // 2 - round_text.get_width() // 2, 24))

        if self.message:
            msg = self.body_font.render(self.message, True, ORANGE)
            surface.blit(msg, (SCREEN_WIDTH // 2 - msg.get_width() // 2, 300))

        helper = self.small_font.render(
            "LShift / RCtrl fire | Space duel | R restart | F1/F2 rules | Esc quit", True, TEXT_COLOR
        )
        surface.blit(helper, (SCREEN_WIDTH // 2 - helper.get_width() // 2, SCREEN_HEIGHT - 28))

    def _render_rules(self, surface: pygame.Surface) -> None:
        overlay = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 190))
        surface.blit(overlay, (0, 0))
        title = self.body_font.render("RULES", True, YELLOW)
        surface.blit(title, (SCREEN_WIDTH // 2 - title.get_width() // 2, 120))
        for idx, line in enumerate(RULES_TEXT):
            text = self.small_font.render(line, True, TEXT_COLOR)
            surface.blit(text, (SCREEN_WIDTH // 2 - text.get_width() // 2, 180 + idx * 32))
        prompt = self.small_font.render("Press F1/F2 again to close", True, SAND)
        surface.blit(prompt, (SCREEN_WIDTH // 2 - prompt.get_width() // 2, 380))

    def _render_game_over(self, surface: pygame.Surface) -> None:
        overlay = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SRCALPHA)
        overlay.fill((4, 2, 0, 170))
        surface.blit(overlay, (0, 0))

        winner = self.match.winner()
        headline = self.title_font.render("VICTORY", True, YELLOW)
        detail = self.body_font.render(
            f"{self.settings.player_name(winner)} wins!" if winner is not None else "", True, TEXT_COLOR
        )
        prompt = self.small_font.render("Press R for a rematch", True, SAND)
        surface.blit(headline, (SCREEN_WIDTH // 2 - headline.get_width() // 2, SCREEN_HEIGHT // 2 - 120))
        surface.blit(detail, (SCREEN_WIDTH // 2 - detail.get_width() // 2, SCREEN_HEIGHT // 2 - 10))
        surface.blit(prompt, (SCREEN_WIDTH // 2 - prompt.get_width() // 2, SCREEN_HEIGHT // 2 + 40))
