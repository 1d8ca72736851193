from __future__ import annotations
import pygame
from typing import Dict, Mapping, Optional, Tuple

from redlight.api.config import EngineConfig
from redlight.api.frame_data import Point

_BUTTONS = {1: "left", 2: "middle", 3: "right"}


class DebugPointInjector:
    """
    Stand-in for the camera while testing without colored markers.

    Holding a mouse button "detects" the player mapped to that button under
    the cursor, every tracking tick, until the button is released. Window
    coordinates are converted to camera-frame pixels (mirrored with --mirror).
    """

    def __init__(self, cfg: EngineConfig, debug_manifest: Optional[Mapping] = None):
        debug_manifest = debug_manifest or {}
        self.enabled = bool(cfg.debug and debug_manifest.get("enabled", False))
        self.mirror = cfg.mirror
        self.frame_size = cfg.frame_size
        self.players_by_button: Dict[str, str] = dict(
            debug_manifest.get("buttons", {"left": "player1"}))

        # player id -> held frame position
        self._held: Dict[str, Point] = {}

    @property
    def held(self) -> Dict[str, Point]:
        return dict(self._held)

    def window_to_frame(self, pos: Tuple[int, int], screen_size: Tuple[int, int]) -> Point:
        x, y = pos
        w, h = screen_size
        if self.mirror:
            x = (w - 1) - x
        fw, fh = self.frame_size
        return Point(x * fw / float(w), y * fh / float(h))

    def handle_pygame_event(self, event: pygame.event.Event, screen_size: Tuple[int, int]) -> None:
        if not self.enabled:
            return

        if event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP):
            player_id = self.players_by_button.get(_BUTTONS.get(event.button, ""))
            if not player_id:
                return
            if event.type == pygame.MOUSEBUTTONDOWN:
                self._held[player_id] = self.window_to_frame(event.pos, screen_size)
            else:
                self._held.pop(player_id, None)

        elif event.type == pygame.MOUSEMOTION and self._held:
            p = self.window_to_frame(event.pos, screen_size)
            for player_id in self._held:
                self._held[player_id] = p

        elif event.type == pygame.WINDOWFOCUSLOST:
            # button-up is never delivered once focus is gone
            self._held.clear()

    def emit_points(self) -> Dict[str, Point]:
        """{player_id: Point} for this tick; empty unless a button is held."""
        if not self.enabled:
            return {}
        return dict(self._held)
