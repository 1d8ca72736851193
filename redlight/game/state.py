from __future__ import annotations
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from redlight.api.config import Difficulty
from redlight.api.frame_data import ORIGIN, Point

RGB = Tuple[int, int, int]


class Phase(Enum):
    SETUP = "SETUP"
    MOVE = "MOVE"
    FREEZE = "FREEZE"
    GAME_OVER = "GAME_OVER"


def validate_color(color) -> RGB:
    try:
        r, g, b = (int(c) for c in color)
    except (TypeError, ValueError):
        raise ValueError(f"color must be three ints, got {color!r}") from None
    for c in (r, g, b):
        if not 0 <= c <= 255:
            raise ValueError(f"color channel out of range 0..255: {color!r}")
    return (r, g, b)


@dataclass
class Player:
    id: str
    color: RGB
    active: bool = True
    eliminated: bool = False
    score: int = 0
    position: Point = ORIGIN
    last_position: Point = ORIGIN

    @property
    def in_play(self) -> bool:
        return self.active and not self.eliminated

    def eliminate(self) -> None:
        self.eliminated = True
        self.active = False

    def award(self, points: int) -> None:
        if points < 0:
            raise ValueError("score never decreases")
        self.score += points

    def displacement(self) -> float:
        return self.position.distance_to(self.last_position)


@dataclass
class GameState:
    """
    The one mutable game object. Components get it injected and keep to
    their own fields: tracking writes positions, the motion evaluator writes
    eliminations and scores, the round state machine writes the rest.
    """
    phase: Phase = Phase.SETUP
    difficulty: Difficulty = Difficulty.MEDIUM
    detection_threshold: float = 30.0
    move_duration_ms: int = 5000
    freeze_duration_ms: int = 5000

    current_round: int = 0
    time_remaining_ms: int = 0
    timer_active: bool = False
    game_active: bool = False
    winner: Optional[str] = None
    camera_ready: bool = False

    # insertion ordered: registration order breaks leader ties
    players: Dict[str, Player] = field(default_factory=dict)
    _positions_lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False)

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self.players.values()))

    def get(self, player_id: str) -> Optional[Player]:
        return self.players.get(player_id)

    def in_play(self) -> List[Player]:
        return [p for p in self.players.values() if p.in_play]

    @property
    def active_players(self) -> int:
        return len(self.in_play())

    @property
    def leading_player(self) -> Optional[str]:
        best: Optional[Player] = None
        for p in self.players.values():
            if best is None or p.score > best.score:
                best = p
        return best.id if best else None

    # ---- positions (guarded so a snapshot never sees a half-written tick) ----
    def set_position(self, player_id: str, pos: Point) -> bool:
        with self._positions_lock:
            p = self.players.get(player_id)
            if p is None or p.eliminated:
                return False
            p.position = Point(float(pos[0]), float(pos[1]))
            return True

    def snapshot_positions(self) -> None:
        with self._positions_lock:
            for p in self.players.values():
                if p.in_play:
                    p.last_position = p.position

    def reset_positions(self) -> None:
        with self._positions_lock:
            for p in self.players.values():
                p.position = ORIGIN
                p.last_position = ORIGIN

    def positions(self) -> Dict[str, Tuple[Point, Point]]:
        with self._positions_lock:
            return {pid: (p.position, p.last_position) for pid, p in self.players.items()}
