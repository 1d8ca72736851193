from __future__ import annotations
import logging
import time
from typing import Dict, Mapping, Optional

import cv2
import numpy as np

from redlight.api.config import GameSettings
from redlight.api.frame_data import Frame, Point
from redlight.detect.cluster_locator import locate
from redlight.detect.color_matcher import RGB
from redlight.detect.frame_scanner import FrameScanner

logger = logging.getLogger(__name__)


class ColorTracker:
    """
    Raw (unsmoothed) blob position per player color for one frame:
    scan -> cluster -> best center. Optionally mirrors the result in an
    OpenCV preview window.
    """

    def __init__(self, settings: Optional[GameSettings] = None, show_preview: bool = False, preview_name: str = "Preview"):
        settings = settings or GameSettings()
        self.scanner = FrameScanner(
            color_threshold=settings.color_threshold,
            sample_step=settings.sample_step,
            window_radius=settings.window_radius,
            proximity_bonus=settings.proximity_bonus,
        )
        self.min_matches = settings.min_matches
        self.cluster_radius = settings.cluster_radius
        self.show_preview = show_preview
        self.preview_name = preview_name

        if self.show_preview:
            cv2.namedWindow(self.preview_name, cv2.WINDOW_NORMAL)
            cv2.resizeWindow(self.preview_name, 640, 480)

    def locate_color(self, frame: Frame, color: RGB, previous: Optional[Point] = None) -> Optional[Point]:
        matches = self.scanner.scan(frame, color, previous)
        return locate(matches, min_matches=self.min_matches, radius=self.cluster_radius)

    def detect(
        self,
        frame: Frame,
        colors: Mapping[str, RGB],
        previous: Optional[Mapping[str, Optional[Point]]] = None,
    ) -> Dict[str, Optional[Point]]:
        """
        Returns {player_id: (x, y) or None} in frame pixels.
        """
        previous = previous or {}
        out: Dict[str, Optional[Point]] = {}
        for player_id, color in colors.items():
            out[player_id] = self.locate_color(frame, color, previous.get(player_id))
        return out

    def show(self, frame: Frame, positions: Mapping[str, Optional[Point]], colors: Mapping[str, RGB]) -> None:
        if not self.show_preview:
            return
        overlay = self.render_overlay(frame, positions, colors)
        cv2.imshow(self.preview_name, overlay)
        cv2.waitKey(1)

    @staticmethod
    def render_overlay(frame: Frame, positions: Mapping[str, Optional[Point]], colors: Mapping[str, RGB]) -> np.ndarray:
        code = cv2.COLOR_RGBA2BGR if frame.pixels.shape[2] == 4 else cv2.COLOR_RGB2BGR
        overlay = cv2.cvtColor(frame.pixels, code)
        for player_id, pos in positions.items():
            if pos is None:
                continue
            r, g, b = colors.get(player_id, (255, 255, 255))
            x, y = int(pos[0]), int(pos[1])
            cv2.circle(overlay, (x, y), 12, (b, g, r), 2, cv2.LINE_AA)
            cv2.putText(
                overlay, player_id, (x + 14, y - 8),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1, cv2.LINE_AA
            )
        cv2.putText(
            overlay, time.strftime("%H:%M:%S"),
            (12, 24), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 1, cv2.LINE_AA
        )
        return overlay

    def teardown(self):
        if self.show_preview:
            try:
                cv2.destroyWindow(self.preview_name)
            except cv2.error:
                logger.debug("preview window already gone")
