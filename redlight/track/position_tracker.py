from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from redlight.api.frame_data import Point

logger = logging.getLogger(__name__)

SMOOTHING_ALPHA = 0.25      # lower = smoother but slower to follow
MAX_JUMP_PX = 120.0         # per-frame displacement cap before a detection is an outlier
OUTLIER_NUDGE = 0.05        # fraction of the way toward a rejected detection
SNAP_PX = 0.5               # closer than this to the detection -> take it exactly


@dataclass
class TrackState:
    previous_position: Optional[Point] = None
    rejected_jumps: int = 0


class PositionTracker:
    """
    Per-player exponential smoothing with a jump guard.

    Owns one TrackState per player id: created on the first detection,
    dropped by forget()/reset().
    """

    def __init__(
        self,
        alpha: float = SMOOTHING_ALPHA,
        max_jump: float = MAX_JUMP_PX,
        nudge: float = OUTLIER_NUDGE,
        snap: float = SNAP_PX,
    ):
        if not 0.0 < alpha <= 1.0:
            raise ValueError("alpha must be in (0, 1]")
        if not 0.0 <= nudge < 1.0:
            raise ValueError("nudge must be in [0, 1)")
        self.alpha = alpha
        self.max_jump = max_jump
        self.nudge = nudge
        self.snap = snap
        self._states: Dict[str, TrackState] = {}

    def previous(self, player_id: str) -> Optional[Point]:
        st = self._states.get(player_id)
        return st.previous_position if st else None

    def state(self, player_id: str) -> Optional[TrackState]:
        return self._states.get(player_id)

    def update(self, player_id: str, raw: Optional[Point]) -> Optional[Point]:
        """
        Feed this tick's raw detection (or None) and get the tracked position.
        None means nothing is known yet for this player; do not write it.
        """
        st = self._states.get(player_id)
        prior = st.previous_position if st else None

        if prior is None:
            if raw is None:
                return None
            st = self._states.setdefault(player_id, TrackState())
            st.previous_position = Point(float(raw[0]), float(raw[1]))
            return st.previous_position

        if raw is None:
            return prior

        dx = raw[0] - prior.x
        dy = raw[1] - prior.y

        if Point(raw[0], raw[1]).distance_to(prior) > self.max_jump:
            st.rejected_jumps += 1
            logger.debug(
                "player %s: rejected jump to (%.0f, %.0f) from (%.0f, %.0f)",
                player_id, raw[0], raw[1], prior.x, prior.y,
            )
            new = Point(prior.x + dx * self.nudge, prior.y + dy * self.nudge)
        else:
            new = Point(prior.x + dx * self.alpha, prior.y + dy * self.alpha)
            if new.distance_to(Point(raw[0], raw[1])) < self.snap:
                new = Point(float(raw[0]), float(raw[1]))

        st.previous_position = new
        return new

    def forget(self, player_id: str) -> None:
        self._states.pop(player_id, None)

    def reset(self) -> None:
        self._states.clear()

    def __contains__(self, player_id: str) -> bool:
        return player_id in self._states
