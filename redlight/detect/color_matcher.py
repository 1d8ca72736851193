from __future__ import annotations
import math
from typing import Tuple

import numpy as np

RGB = Tuple[int, int, int]

# Perceptual channel weights (green counts most)
CHANNEL_WEIGHTS = (0.3, 0.4, 0.3)

DEFAULT_COLOR_THRESHOLD = 60.0

# Background rejection
DARK_PIXEL_SUM = 80         # r+g+b below this is treated as background
BRIGHT_TARGET_SUM = 350     # ...unless the target itself is this bright

# "Pure" white / green pixels (ceiling lights, green screens, foliage)
WHITE_MIN_CHANNEL = 235
GREEN_MIN = 200
GREEN_MAX_OTHER = 60


def _is_white(r: float, g: float, b: float) -> bool:
    return min(r, g, b) >= WHITE_MIN_CHANNEL


def _is_green(r: float, g: float, b: float) -> bool:
    return g >= GREEN_MIN and r <= GREEN_MAX_OTHER and b <= GREEN_MAX_OTHER


def is_bright_target(target: RGB) -> bool:
    return sum(target) > BRIGHT_TARGET_SUM


def color_distance(pixel: RGB, target: RGB) -> float:
    dr = float(pixel[0]) - target[0]
    dg = float(pixel[1]) - target[1]
    db = float(pixel[2]) - target[2]
    wr, wg, wb = CHANNEL_WEIGHTS
    return math.sqrt(wr * dr * dr + wg * dg * dg + wb * db * db)


def match_weight(pixel: RGB, target: RGB, threshold: float = DEFAULT_COLOR_THRESHOLD) -> float:
    """
    Weight in (0, 1] if `pixel` matches `target`, else 0.0.
    A perfect match weighs 1, a borderline one tends to 0.
    """
    r, g, b = (float(c) for c in pixel[:3])
    if r + g + b < DARK_PIXEL_SUM and not is_bright_target(target):
        return 0.0
    if _is_white(r, g, b) and not _is_white(*target):
        return 0.0
    if _is_green(r, g, b) and not _is_green(*target):
        return 0.0

    distance = color_distance((r, g, b), target)
    if distance >= threshold:
        return 0.0
    return 1.0 - distance / threshold


def match_weights(pixels: np.ndarray, target: RGB, threshold: float = DEFAULT_COLOR_THRESHOLD) -> np.ndarray:
    """
    Vectorised match_weight over an (..., 3|4) uint8 array.
    Returns a float32 array of the leading shape; rejected pixels are 0.
    """
    rgb = pixels[..., :3].astype(np.float32)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    tr, tg, tb = (float(c) for c in target)
    wr, wg, wb = CHANNEL_WEIGHTS

    distance = np.sqrt(wr * (r - tr) ** 2 + wg * (g - tg) ** 2 + wb * (b - tb) ** 2)
    weights = 1.0 - distance / float(threshold)

    keep = distance < threshold
    if not is_bright_target(target):
        keep &= (r + g + b) >= DARK_PIXEL_SUM
    if not _is_white(tr, tg, tb):
        keep &= ~(np.minimum(np.minimum(r, g), b) >= WHITE_MIN_CHANNEL)
    if not _is_green(tr, tg, tb):
        keep &= ~((g >= GREEN_MIN) & (r <= GREEN_MAX_OTHER) & (b <= GREEN_MAX_OTHER))

    return np.where(keep, weights, 0.0).astype(np.float32)
