import math
import random
import pygame
from typing import Optional

from redlight.api import Game, FrameData
from redlight.api.frame_data import ORIGIN, Frame, Point
from redlight.detect.color_capture import capture_color_at, random_player_color
from redlight.game.state import Phase
from redlight.render.shapes import draw_text, format_time, frame_to_surface


# Colors
HUD_COLOR = (235, 235, 235)
MOVE_COLOR = (50, 200, 80)
FREEZE_COLOR = (220, 50, 50)
SETUP_COLOR = (70, 130, 230)
OVER_COLOR = (130, 130, 130)
WARN_COLOR = (255, 200, 0)
DIM_ALPHA = 110                    # camera background dimming (0..255)

# Layout
BORDER_W = 8
MARKER_RADIUS = 16
BANNER_FLASH_MS = 1200             # "MOVE!" / "FREEZE!" banner after a transition
THRESHOLD_STEP = 5                 # px per Up/Down press
THRESHOLD_MIN = 5
THRESHOLD_MAX = 100

PHASE_COLORS = {
    Phase.SETUP: SETUP_COLOR,
    Phase.MOVE: MOVE_COLOR,
    Phase.FREEZE: FREEZE_COLOR,
    Phase.GAME_OVER: OVER_COLOR,
}

SETUP_HELP = [
    "N add player   Tab select   Backspace remove",
    "Click camera image: capture color for selected player",
    "1/2/3 easy/medium/hard   Up/Down threshold",
    "Space start",
]


class RedLightGreenLight(Game):
    def on_load(self, ctx, manifest):
        self.ctx = ctx
        self.manifest = manifest
        self.state = ctx.state
        self.machine = ctx.machine
        self.w, self.h = ctx.screen_size
        self.fw, self.fh = ctx.cfg.frame_size

        self.rng = random.Random()
        self.selected: Optional[str] = next(iter(self.state.players), None)
        self.latest: Optional[FrameData] = None
        self.last_frame: Optional[Frame] = None
        self.banner_until_ms = 0

        self.machine.add_listener(self._on_transition)

    # ------------- helpers -------------
    def _on_transition(self, old: Phase, new: Phase) -> None:
        if new in (Phase.MOVE, Phase.FREEZE):
            self.banner_until_ms = pygame.time.get_ticks() + BANNER_FLASH_MS

    def _to_screen(self, p: Point) -> tuple[int, int]:
        return int(p.x * self.w / self.fw), int(p.y * self.h / self.fh)

    def _to_frame(self, x: int, y: int) -> tuple[float, float]:
        if self.ctx.cfg.mirror:
            x = (self.w - 1) - x
        return x * self.fw / float(self.w), y * self.fh / float(self.h)

    def _add_player(self):
        player_id = f"player{len(self.state.players) + 1}"
        while player_id in self.state.players:
            player_id += "'"
        if self.machine.add_player(player_id, random_player_color(self.rng)):
            self.selected = player_id

    def _remove_selected(self):
        if self.selected and self.machine.remove_player(self.selected):
            self.selected = next(iter(self.state.players), None)

    def _select_next(self):
        ids = list(self.state.players)
        if not ids:
            self.selected = None
            return
        i = ids.index(self.selected) + 1 if self.selected in ids else 0
        self.selected = ids[i % len(ids)]

    def _nudge_threshold(self, delta: int):
        px = self.state.detection_threshold + delta
        px = max(THRESHOLD_MIN, min(THRESHOLD_MAX, px))
        self.machine.set_detection_threshold(px)

    def _capture_color(self, pos):
        if self.last_frame is None or self.selected is None:
            return
        fx, fy = self._to_frame(*pos)
        color = capture_color_at(self.last_frame, fx, fy)
        self.machine.update_player_color(self.selected, color)

    # ------------- loop hooks -------------
    def on_update(self, dt_ms: float, frame: FrameData) -> None:
        self.latest = frame
        if frame.frame is not None:
            self.last_frame = frame.frame

    def on_draw(self, surface: pygame.Surface) -> None:
        self._draw_background(surface)
        phase = self.state.phase
        color = PHASE_COLORS[phase]
        pygame.draw.rect(surface, color, (0, 0, self.w, self.h), width=BORDER_W)

        self._draw_markers(surface)
        self._draw_hud(surface, color)
        self._draw_roster(surface)

        if phase == Phase.SETUP:
            for i, line in enumerate(SETUP_HELP):
                draw_text(surface, line, (24, self.h - 150 + i * 24), (200, 200, 200), size=22)
        elif phase == Phase.GAME_OVER:
            self._draw_game_over(surface)
        elif pygame.time.get_ticks() < self.banner_until_ms:
            msg = "MOVE!" if phase == Phase.MOVE else "FREEZE!"
            draw_text(surface, msg, (self.w // 2 - 90, self.h // 2 - 40), color, size=96)

    def _draw_background(self, surface: pygame.Surface) -> None:
        if self.last_frame is None:
            return
        bg = frame_to_surface(self.last_frame, (self.w, self.h))
        surface.blit(bg, (0, 0))
        shade = pygame.Surface((self.w, self.h), pygame.SRCALPHA)
        shade.fill((0, 0, 0, DIM_ALPHA))
        surface.blit(shade, (0, 0))

    def _draw_markers(self, surface: pygame.Surface) -> None:
        for p in self.state:
            if p.position == ORIGIN:
                continue  # never located
            x, y = self._to_screen(p.position)
            pygame.draw.circle(surface, p.color, (x, y), MARKER_RADIUS, width=3)
            if p.eliminated:
                d = MARKER_RADIUS
                pygame.draw.line(surface, FREEZE_COLOR, (x - d, y - d), (x + d, y + d), 4)
                pygame.draw.line(surface, FREEZE_COLOR, (x - d, y + d), (x + d, y - d), 4)
            elif self.state.phase == Phase.FREEZE:
                # allowed drift around the freeze baseline
                lx, ly = self._to_screen(p.last_position)
                r = max(2, int(self.state.detection_threshold * self.w / self.fw))
                pygame.draw.circle(surface, (200, 200, 200), (lx, ly), r, width=1)
            draw_text(surface, p.id, (x + MARKER_RADIUS + 4, y - 8), HUD_COLOR, size=20)

    def _draw_hud(self, surface: pygame.Surface, color) -> None:
        st = self.state
        title = st.phase.value.replace("_", " ")
        if st.game_active:
            title += f"  {format_time(st.time_remaining_ms)}"
            if not st.timer_active:
                title += "  (paused)"
        draw_text(surface, title, (24, 20), color, size=40)
        draw_text(
            surface,
            f"Round {st.current_round} | {st.difficulty.value} | threshold {st.detection_threshold:.0f}px"
            f" | players {st.active_players}/{len(st.players)}",
            (24, 60), HUD_COLOR, size=24)

        if not st.camera_ready:
            draw_text(surface, "Camera not ready", (self.w - 260, 20), WARN_COLOR, size=30)
        elif self.latest is not None and self.latest.scene_motion:
            draw_text(surface, "scene motion", (self.w - 200, 20), WARN_COLOR, size=24)

    def _draw_roster(self, surface: pygame.Surface) -> None:
        leader = self.state.leading_player
        x = 24
        y = 96
        for p in self.state:
            pygame.draw.circle(surface, p.color, (x + 8, y + 9), 8)
            label = f"{p.id}  {p.score}"
            if p.eliminated:
                label += "  OUT"
            if p.id == leader and p.score > 0:
                label += "  *"
            text_color = WARN_COLOR if p.id == self.selected and self.state.phase == Phase.SETUP else HUD_COLOR
            draw_text(surface, label, (x + 24, y), text_color, size=22)
            y += 24

    def _draw_game_over(self, surface: pygame.Surface) -> None:
        cx, cy = self.w // 2, self.h // 2
        draw_text(surface, "Game Over", (cx - 130, cy - 90), HUD_COLOR, size=64)
        winner = self.state.winner
        msg = f"Winner: {winner}" if winner else "No players survived!"
        draw_text(surface, msg, (cx - 130, cy - 20), WARN_COLOR, size=40)
        # pulse the replay hint
        t = pygame.time.get_ticks() * 0.004
        shade = int(180 + 60 * math.sin(t))
        draw_text(surface, "Press R to play again", (cx - 130, cy + 40), (shade, shade, shade), size=30)

    def on_event(self, event: pygame.event.Event) -> None:
        phase = self.state.phase
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_r:
                self.machine.reset_game()
            elif event.key == pygame.K_p:
                self.machine.toggle_timer()
            elif phase == Phase.SETUP:
                if event.key in (pygame.K_SPACE, pygame.K_RETURN):
                    self.machine.start_game()
                elif event.key == pygame.K_n:
                    self._add_player()
                elif event.key == pygame.K_BACKSPACE:
                    self._remove_selected()
                elif event.key == pygame.K_TAB:
                    self._select_next()
                elif event.key == pygame.K_1:
                    self.machine.set_difficulty("easy")
                elif event.key == pygame.K_2:
                    self.machine.set_difficulty("medium")
                elif event.key == pygame.K_3:
                    self.machine.set_difficulty("hard")
                elif event.key == pygame.K_UP:
                    self._nudge_threshold(THRESHOLD_STEP)
                elif event.key == pygame.K_DOWN:
                    self._nudge_threshold(-THRESHOLD_STEP)

        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and phase == Phase.SETUP:
            self._capture_color(event.pos)

    def on_unload(self) -> None:
        pass


def get_game():
    return RedLightGreenLight()
