from __future__ import annotations
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value) -> "Difficulty":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"unknown difficulty {value!r}, expected one of {[d.value for d in cls]}") from None


class DifficultyPreset(NamedTuple):
    detection_threshold: float  # px of allowed drift during FREEZE
    move_ms: int
    freeze_ms: int


# CUSTOM has no preset: it keeps whatever threshold/durations are current
DIFFICULTY_PRESETS: Dict[Difficulty, DifficultyPreset] = {
    Difficulty.EASY: DifficultyPreset(50.0, 7000, 5000),
    Difficulty.MEDIUM: DifficultyPreset(30.0, 5000, 5000),
    Difficulty.HARD: DifficultyPreset(15.0, 3000, 5000),
}


@dataclass
class EngineConfig:
    screen_size: Tuple[int, int]
    cam_index: int
    show_preview: bool
    frame_size: Tuple[int, int] = (640, 480)
    mirror: bool = False
    debug: bool = False


@dataclass
class GameSettings:
    """
    Tunable defaults for detection, tracking and round rules.
    Filled from the `options:` block of a game's manifest.yaml.
    """
    difficulty: str = "medium"
    # None -> taken from the difficulty preset
    detection_threshold: Optional[float] = None
    move_duration_ms: Optional[int] = None
    freeze_duration_ms: Optional[int] = None

    # color matching / scanning
    color_threshold: float = 60.0
    sample_step: int = 6
    window_radius: int = 100
    proximity_bonus: float = 1.5

    # blob location
    cluster_radius: float = 50.0
    min_matches: int = 5

    # smoothing
    smoothing_alpha: float = 0.25
    max_jump_px: float = 120.0
    outlier_nudge: float = 0.05

    # rounds
    round_points: int = 5
    winner_bonus: int = 10
    max_round: int = 20
    timer_interval_ms: int = 100

    # pipeline
    track_every_n_frames: int = 2
    scene_motion_sensitivity: float = 30.0

    def __post_init__(self):
        self.difficulty = Difficulty.parse(self.difficulty).value
        if self.sample_step < 1:
            raise ValueError("sample_step must be >= 1")
        if self.min_matches < 1:
            raise ValueError("min_matches must be >= 1")
        if self.max_round < 1:
            raise ValueError("max_round must be >= 1")
        if self.timer_interval_ms <= 0:
            raise ValueError("timer_interval_ms must be > 0")
        if self.track_every_n_frames < 1:
            raise ValueError("track_every_n_frames must be >= 1")

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]]) -> "GameSettings":
        options = dict(options or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValueError(f"unknown game option(s): {', '.join(unknown)}")
        return cls(**options)

    def preset(self) -> DifficultyPreset:
        level = Difficulty.parse(self.difficulty)
        base = DIFFICULTY_PRESETS.get(level, DIFFICULTY_PRESETS[Difficulty.MEDIUM])
        return DifficultyPreset(
            detection_threshold=float(
                self.detection_threshold if self.detection_threshold is not None else base.detection_threshold),
            move_ms=int(self.move_duration_ms if self.move_duration_ms is not None else base.move_ms),
            freeze_ms=int(self.freeze_duration_ms if self.freeze_duration_ms is not None else base.freeze_ms),
        )
