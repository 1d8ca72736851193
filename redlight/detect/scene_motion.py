from __future__ import annotations
import numpy as np

from redlight.api.frame_data import Frame

DEFAULT_SENSITIVITY = 30.0
SAMPLE_STRIDE = 4   # every 4th pixel on both axes


def mean_difference(previous: Frame, current: Frame, stride: int = SAMPLE_STRIDE) -> float:
    """Mean absolute RGB difference over a sparse pixel grid."""
    if previous.pixels.shape[:2] != current.pixels.shape[:2]:
        raise ValueError("frames differ in size")
    a = previous.pixels[::stride, ::stride, :3].astype(np.int16)
    b = current.pixels[::stride, ::stride, :3].astype(np.int16)
    if a.size == 0:
        return 0.0
    return float(np.abs(a - b).mean())


def scene_changed(previous: Frame, current: Frame, sensitivity: float = DEFAULT_SENSITIVITY) -> bool:
    return mean_difference(previous, current) > sensitivity
