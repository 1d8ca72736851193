from __future__ import annotations

from typing import List, Optional

import numpy as np
import pytest

from redlight.api.config import GameSettings
from redlight.api.frame_data import Frame
from redlight.game.rounds import RoundStateMachine
from redlight.game.state import GameState, Phase
from redlight.track.position_tracker import PositionTracker

FRAME_W, FRAME_H = 640, 480
BACKGROUND = (90, 90, 90)
RED = (200, 50, 50)
BLUE = (40, 70, 200)


def blank_pixels(color=BACKGROUND, size=(FRAME_W, FRAME_H)) -> np.ndarray:
    w, h = size
    px = np.zeros((h, w, 4), dtype=np.uint8)
    px[..., :3] = color
    px[..., 3] = 255
    return px


def paint_square(pixels: np.ndarray, cx: int, cy: int, half: int, color) -> np.ndarray:
    h, w = pixels.shape[:2]
    pixels[max(0, cy - half):min(h, cy + half + 1), max(0, cx - half):min(w, cx + half + 1), :3] = color
    return pixels


def frame_with_blobs(*blobs, background=BACKGROUND) -> Frame:
    """blobs: (cx, cy, half, color) tuples."""
    px = blank_pixels(background)
    for cx, cy, half, color in blobs:
        paint_square(px, cx, cy, half, color)
    return Frame(pixels=px)


class FakeSource:
    """Replays a list of frames; None entries simulate read failures."""

    def __init__(self, frames: List[Optional[Frame]], ready: bool = True):
        self.frames = list(frames)
        self.ready = ready
        self.reads = 0

    def read_frame(self) -> Optional[Frame]:
        self.reads += 1
        if not self.frames:
            return None
        return self.frames.pop(0)


def run_until_phase_changes(machine: RoundStateMachine, limit: int = 1000) -> Phase:
    start = machine.state.phase
    for _ in range(limit):
        machine.tick()
        if machine.state.phase != start:
            return machine.state.phase
    raise AssertionError(f"phase stuck in {start}")


@pytest.fixture
def settings():
    return GameSettings()


@pytest.fixture
def state():
    return GameState()


@pytest.fixture
def tracker():
    return PositionTracker()


@pytest.fixture
def machine(state, settings, tracker):
    return RoundStateMachine(state, settings, tracker=tracker)
