from __future__ import annotations
import logging
import random
from typing import Optional

from redlight.api.frame_data import Frame
from redlight.detect.color_matcher import RGB

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 10


def capture_color_at(frame: Frame, x: float, y: float, sample_size: int = DEFAULT_SAMPLE_SIZE) -> RGB:
    """
    Average RGB of the (2*sample_size)^2 square around (x, y).
    The square is kept inside the frame, so clicks on the border still work.
    """
    w, h = frame.width, frame.height
    half = max(1, int(sample_size))
    cx = int(round(min(max(x, half), w - half)))
    cy = int(round(min(max(y, half), h - half)))

    patch = frame.pixels[max(0, cy - half):cy + half, max(0, cx - half):cx + half, :3]
    if patch.size == 0:
        raise ValueError(f"nothing to sample at ({x}, {y}) in a {w}x{h} frame")
    mean = patch.reshape(-1, 3).mean(axis=0)
    color = tuple(int(round(c)) for c in mean.tolist())
    logger.info("captured color RGB%s at (%d, %d)", color, cx, cy)
    return color  # type: ignore[return-value]


def random_player_color(rng: Optional[random.Random] = None) -> RGB:
    """A bright, saturated color: one strong channel, two weak ones."""
    rng = rng or random.Random()
    channels = [rng.randint(155, 255), rng.randint(0, 99), rng.randint(0, 99)]
    rng.shuffle(channels)
    return (channels[0], channels[1], channels[2])
