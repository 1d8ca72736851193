from __future__ import annotations
import logging
import math
from typing import List, Optional

import numpy as np

from redlight.api.frame_data import ColorMatch, Frame, Point
from redlight.detect.color_matcher import DEFAULT_COLOR_THRESHOLD, RGB, match_weights

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_STEP = 6
DEFAULT_WINDOW_RADIUS = 100
DEFAULT_PROXIMITY_BONUS = 1.5


class FrameScanner:
    """
    Samples a frame on a fixed stride and returns weighted color matches.

    With a previous position the scanner looks in a window around it first
    (matches there get the proximity bonus) and only falls back to the whole
    frame when the window has no match at all.
    """

    def __init__(
        self,
        color_threshold: float = DEFAULT_COLOR_THRESHOLD,
        sample_step: int = DEFAULT_SAMPLE_STEP,
        window_radius: int = DEFAULT_WINDOW_RADIUS,
        proximity_bonus: float = DEFAULT_PROXIMITY_BONUS,
    ):
        if sample_step < 1:
            raise ValueError("sample_step must be >= 1")
        self.color_threshold = float(color_threshold)
        self.sample_step = int(sample_step)
        self.window_radius = int(window_radius)
        self.proximity_bonus = float(proximity_bonus)

    def scan(self, frame: Frame, target: RGB, previous: Optional[Point] = None) -> List[ColorMatch]:
        if previous is not None:
            px, py = previous
            r = self.window_radius
            matches = self._scan_region(
                frame, target,
                x0=px - r, y0=py - r, x1=px + r + 1, y1=py + r + 1,
                bonus=self.proximity_bonus,
            )
            if matches:
                return matches
            logger.debug("no match near (%.0f, %.0f), scanning full frame", px, py)

        return self._scan_region(frame, target, 0, 0, frame.width, frame.height, bonus=1.0)

    def _grid_start(self, v: float) -> int:
        # snap onto the global sampling grid so windowed and full scans agree
        step = self.sample_step
        return max(0, int(math.ceil(v / step)) * step)

    def _scan_region(
        self, frame: Frame, target: RGB,
        x0: float, y0: float, x1: float, y1: float,
        bonus: float,
    ) -> List[ColorMatch]:
        step = self.sample_step
        gx0, gy0 = self._grid_start(x0), self._grid_start(y0)
        gx1 = min(frame.width, int(math.ceil(x1)))
        gy1 = min(frame.height, int(math.ceil(y1)))
        if gx0 >= gx1 or gy0 >= gy1:
            return []

        patch = frame.pixels[gy0:gy1:step, gx0:gx1:step]
        weights = match_weights(patch, target, self.color_threshold)
        rows, cols = np.nonzero(weights > 0.0)

        return [
            ColorMatch(float(gx0 + c * step), float(gy0 + r * step), float(weights[r, c]) * bonus)
            for r, c in zip(rows.tolist(), cols.tolist())
        ]
