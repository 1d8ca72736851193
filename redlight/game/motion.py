from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from redlight.game.state import GameState

logger = logging.getLogger(__name__)

ROUND_SURVIVAL_POINTS = 5
WINNER_BONUS = 10


@dataclass
class EvaluationResult:
    displacements: Dict[str, float] = field(default_factory=dict)
    eliminated: List[str] = field(default_factory=list)
    survivors: List[str] = field(default_factory=list)

    @property
    def game_over(self) -> bool:
        return len(self.survivors) <= 1

    @property
    def winner(self) -> Optional[str]:
        return self.survivors[0] if len(self.survivors) == 1 else None


class MotionEvaluator:
    """
    Decides who moved during a FREEZE window.

    A player is out when |position - last_position| is strictly greater
    than the threshold. Each decision only looks at that player's own
    displacement, so evaluation order cannot change the outcome.
    """

    def __init__(self, survival_points: int = ROUND_SURVIVAL_POINTS, winner_bonus: int = WINNER_BONUS):
        self.survival_points = survival_points
        self.winner_bonus = winner_bonus

    def clear(self, state: GameState) -> None:
        """Everyone back in play with a zero score."""
        for p in state.players.values():
            p.score = 0
            p.eliminated = False
            p.active = True

    def evaluate(self, state: GameState, threshold: Optional[float] = None) -> EvaluationResult:
        limit = state.detection_threshold if threshold is None else float(threshold)
        positions = state.positions()
        result = EvaluationResult()

        candidates = state.in_play()
        # decide for everyone first, then apply
        for p in candidates:
            pos, last = positions[p.id]
            moved = pos.distance_to(last)
            result.displacements[p.id] = moved
            if moved > limit:
                result.eliminated.append(p.id)
            else:
                result.survivors.append(p.id)

        for pid in result.eliminated:
            state.players[pid].eliminate()
            logger.info(
                "player %s eliminated: moved %.1fpx (threshold %.1fpx)",
                pid, result.displacements[pid], limit)

        for pid in result.survivors:
            state.players[pid].award(self.survival_points)
        if result.winner is not None:
            state.players[result.winner].award(self.winner_bonus)

        logger.debug("freeze check: %d eliminated, %d survive",
                     len(result.eliminated), len(result.survivors))
        return result
