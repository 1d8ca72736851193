from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

import pygame

from .frame_data import FrameData

if TYPE_CHECKING:
    from redlight.app.context import Context


class Game:
    """
    Plugin interface for a game under games/<id>/main.py.

    The engine owns the camera, the tracking pipeline and the round state
    machine. A game is the presentation layer: it reads ctx.state, asks
    ctx.machine for changes (start, reset, roster edits) and draws.
    """

    def on_load(self, ctx: Context, manifest: Mapping[str, Any]) -> None:
        """Once, after the roster from the manifest has been registered."""

    def on_update(self, dt_ms: float, frame: FrameData) -> None:
        """
        Every display frame. `frame` is the latest tracking result; its
        positions are already written into ctx.state.
        """

    def on_draw(self, surface: pygame.Surface) -> None:
        ...

    def on_event(self, event: pygame.event.Event) -> None:
        ...

    def on_unload(self) -> None:
        ...
