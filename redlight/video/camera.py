from __future__ import annotations
import logging
import sys
import time
import cv2
from typing import Tuple, Optional

from redlight.api.frame_data import Frame

logger = logging.getLogger(__name__)

MAX_READ_FAILURES = 30


class Camera:
    """
    Frame source: fixed-size RGBA frames plus a readiness flag.
    A camera that fails to open (or stops delivering) is simply not ready.
    After `max_failures` consecutive empty reads the device counts as lost:
    `ready` stays False until the camera is opened again.
    """

    def __init__(
        self, index: int, target_size: Tuple[int, int] = (640, 480), fps: int = 30,
        max_failures: int = MAX_READ_FAILURES,
    ):
        self.index = index
        self.target_size = target_size
        self.fps = fps
        self.cap: Optional[cv2.VideoCapture] = None
        self.max_failures = max_failures
        self.ready = False
        self._failures = 0

    def open(self) -> bool:
        backend = cv2.CAP_DSHOW if sys.platform.startswith("win") else 0
        self.cap = cv2.VideoCapture(self.index, backend)
        w, h = self.target_size
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
        self.cap.set(cv2.CAP_PROP_FPS, self.fps)
        self.ready = bool(self.cap.isOpened())
        self._failures = 0
        if not self.ready:
            logger.error("could not open camera %d", self.index)
        else:
            logger.info("camera %d opened at %dx%d", self.index, w, h)
        return self.ready

    def read(self):
        if self.cap is None or not self.ready:
            return False, None
        return self.cap.read()

    def read_frame(self) -> Optional[Frame]:
        ok, frame_bgr = self.read()
        if not ok or frame_bgr is None:
            if self.ready:
                self._failures += 1
                logger.debug("camera %d returned no frame (%d in a row)", self.index, self._failures)
                if self._failures >= self.max_failures:
                    logger.error("camera %d stopped delivering frames", self.index)
                    self.ready = False
            return None
        self._failures = 0
        w, h = self.target_size
        if frame_bgr.shape[1] != w or frame_bgr.shape[0] != h:
            frame_bgr = cv2.resize(frame_bgr, (w, h), interpolation=cv2.INTER_AREA)
        return Frame(pixels=cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGBA), timestamp=time.time())

    def close(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
        self.ready = False
