from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Dict, NamedTuple, Optional

import numpy as np


class Point(NamedTuple):
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


ORIGIN = Point(0.0, 0.0)


class ColorMatch(NamedTuple):
    x: float
    y: float
    weight: float


@dataclass(frozen=True)
class Frame:
    """One camera image: (H, W, 4) RGBA or (H, W, 3) RGB uint8, read-only."""
    pixels: np.ndarray
    timestamp: float = 0.0

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] not in (3, 4):
            raise ValueError(f"expected (H, W, 3|4) pixels, got {self.pixels.shape}")
        self.pixels.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


@dataclass
class FrameData:
    timestamp: float
    camera_ready: bool
    # tracked (smoothed) positions of players updated this tick, by player id
    positions: Dict[str, Point] = field(default_factory=dict)
    frame: Optional[Frame] = None
    scene_motion: bool = False
