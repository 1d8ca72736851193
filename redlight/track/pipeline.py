from __future__ import annotations
import logging
import time
from typing import Dict, Mapping, Optional, Protocol

from redlight.api.config import GameSettings
from redlight.api.frame_data import Frame, FrameData, Point
from redlight.detect.color_tracker import ColorTracker
from redlight.detect.scene_motion import scene_changed
from redlight.game.state import GameState
from redlight.track.position_tracker import PositionTracker

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    ready: bool

    def read_frame(self) -> Optional[Frame]:
        ...


class TrackingPipeline:
    """
    One tracking tick: read a frame, locate every in-play player's color,
    smooth it and write the result into the game state.

    This is the only writer of player positions. A tick with no frame (camera
    not ready, read failure, skipped frame) leaves positions untouched.
    """

    def __init__(
        self,
        state: GameState,
        source: FrameSource,
        color_tracker: ColorTracker,
        tracker: PositionTracker,
        settings: Optional[GameSettings] = None,
    ):
        settings = settings or GameSettings()
        self.state = state
        self.source = source
        self.color_tracker = color_tracker
        self.tracker = tracker
        self.every_n_frames = settings.track_every_n_frames
        self.motion_sensitivity = settings.scene_motion_sensitivity

        self.previous_frame: Optional[Frame] = None
        self.scene_motion = False
        self._frame_count = 0
        self._injected: Dict[str, Point] = {}

    def inject(self, raw: Mapping[str, Point]) -> None:
        """Synthetic raw detections for the next tick (debug input)."""
        self._injected = {pid: Point(float(p[0]), float(p[1])) for pid, p in raw.items()}

    def tick(self) -> FrameData:
        now = time.time()
        ready = bool(self.source.ready)
        self.state.camera_ready = ready

        process = self._frame_count % self.every_n_frames == 0
        self._frame_count += 1
        injected, self._injected = self._injected, {}
        if not process:
            return FrameData(timestamp=now, camera_ready=ready, scene_motion=self.scene_motion)

        frame = self.source.read_frame() if ready else None
        if frame is None and not injected:
            return FrameData(timestamp=now, camera_ready=ready, scene_motion=self.scene_motion)

        players = self.state.in_play()
        raw: Dict[str, Optional[Point]] = {}
        if frame is not None:
            colors = {p.id: p.color for p in players if p.id not in injected}
            previous = {pid: self.tracker.previous(pid) for pid in colors}
            raw = self.color_tracker.detect(frame, colors, previous)
        raw.update(injected)

        positions: Dict[str, Point] = {}
        for p in players:
            pos = self.tracker.update(p.id, raw.get(p.id))
            if pos is None:
                continue
            if self.state.set_position(p.id, pos):
                positions[p.id] = pos

        if frame is not None:
            if self.previous_frame is not None:
                self.scene_motion = scene_changed(self.previous_frame, frame, self.motion_sensitivity)
            self.previous_frame = frame
            self.color_tracker.show(frame, positions, {p.id: p.color for p in players})

        logger.debug("tracking tick: %d/%d players located", len(positions), len(players))
        return FrameData(
            timestamp=now,
            camera_ready=ready,
            positions=positions,
            frame=frame,
            scene_motion=self.scene_motion,
        )

    def stop(self) -> None:
        self.previous_frame = None
        self._injected = {}
