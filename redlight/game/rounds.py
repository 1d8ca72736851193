from __future__ import annotations
import logging
from typing import Callable, List, Optional

from redlight.api.config import DIFFICULTY_PRESETS, Difficulty, GameSettings
from redlight.game.motion import EvaluationResult, MotionEvaluator
from redlight.game.state import RGB, GameState, Phase, Player, validate_color
from redlight.track.position_tracker import PositionTracker

logger = logging.getLogger(__name__)

TransitionListener = Callable[[Phase, Phase], None]


class RoundStateMachine:
    """
    SETUP -> MOVE <-> FREEZE -> GAME_OVER, driven by a countdown.

    The countdown is advanced by tick(); when it reaches zero the timer is
    stopped first and only then the phase transition runs, so every expiry
    fires exactly once. Elimination is only evaluated when FREEZE expires.

    Registry operations (add/remove players, difficulty, thresholds) are
    only accepted in SETUP or GAME_OVER and return False otherwise.
    """

    def __init__(
        self,
        state: GameState,
        settings: Optional[GameSettings] = None,
        evaluator: Optional[MotionEvaluator] = None,
        tracker: Optional[PositionTracker] = None,
    ):
        self.state = state
        self.settings = settings or GameSettings()
        self.evaluator = evaluator or MotionEvaluator(self.settings.round_points, self.settings.winner_bonus)
        self.tracker = tracker
        self.last_result: Optional[EvaluationResult] = None
        self._listeners: List[TransitionListener] = []

        preset = self.settings.preset()
        state.difficulty = Difficulty.parse(self.settings.difficulty)
        state.detection_threshold = preset.detection_threshold
        state.move_duration_ms = preset.move_ms
        state.freeze_duration_ms = preset.freeze_ms

    # ------------- listeners -------------
    def add_listener(self, fn: TransitionListener) -> None:
        self._listeners.append(fn)

    def _set_phase(self, phase: Phase) -> None:
        old = self.state.phase
        self.state.phase = phase
        logger.info("phase %s -> %s (round %d)", old.value, phase.value, self.state.current_round)
        for fn in list(self._listeners):
            try:
                fn(old, phase)
            except Exception:
                logger.exception("phase listener failed")

    # ------------- registry -------------
    def _setup_open(self, action: str) -> bool:
        if self.state.phase in (Phase.SETUP, Phase.GAME_OVER):
            return True
        logger.warning("%s rejected during %s", action, self.state.phase.value)
        return False

    def add_player(self, player_id: str, color: RGB) -> bool:
        color = validate_color(color)
        if not self._setup_open("add_player"):
            return False
        if player_id in self.state.players:
            logger.warning("player %s already exists", player_id)
            return False
        self.state.players[player_id] = Player(id=player_id, color=color)
        logger.info("added player %s with color RGB%s", player_id, color)
        return True

    def remove_player(self, player_id: str) -> bool:
        if not self._setup_open("remove_player"):
            return False
        if self.state.players.pop(player_id, None) is None:
            logger.warning("no player %s to remove", player_id)
            return False
        if self.tracker is not None:
            self.tracker.forget(player_id)
        if self.state.winner == player_id:
            self.state.winner = None
        logger.info("removed player %s", player_id)
        return True

    def update_player_color(self, player_id: str, color: RGB) -> bool:
        color = validate_color(color)
        if not self._setup_open("update_player_color"):
            return False
        p = self.state.get(player_id)
        if p is None:
            return False
        p.color = color
        if self.tracker is not None:
            # old blob location means nothing for a new color
            self.tracker.forget(player_id)
        logger.info("player %s color set to RGB%s", player_id, color)
        return True

    def set_difficulty(self, level) -> bool:
        level = Difficulty.parse(level)
        if not self._setup_open("set_difficulty"):
            return False
        self.state.difficulty = level
        preset = DIFFICULTY_PRESETS.get(level)
        if preset is not None:
            self.state.detection_threshold = preset.detection_threshold
            self.state.move_duration_ms = preset.move_ms
            self.state.freeze_duration_ms = preset.freeze_ms
        logger.info(
            "difficulty %s: threshold %.0fpx, move %dms, freeze %dms",
            level.value, self.state.detection_threshold,
            self.state.move_duration_ms, self.state.freeze_duration_ms)
        return True

    def set_detection_threshold(self, px: float) -> bool:
        if px <= 0:
            raise ValueError("detection threshold must be positive")
        if not self._setup_open("set_detection_threshold"):
            return False
        self.state.detection_threshold = float(px)
        logger.info("detection threshold set to %.0fpx", px)
        return True

    def set_phase_durations(self, move_ms: int, freeze_ms: int) -> bool:
        if move_ms <= 0 or freeze_ms <= 0:
            raise ValueError("phase durations must be positive")
        if not self._setup_open("set_phase_durations"):
            return False
        self.state.difficulty = Difficulty.CUSTOM
        self.state.move_duration_ms = int(move_ms)
        self.state.freeze_duration_ms = int(freeze_ms)
        logger.info("custom durations: move %dms, freeze %dms", move_ms, freeze_ms)
        return True

    # ------------- game flow -------------
    def start_game(self) -> bool:
        st = self.state
        if st.phase != Phase.SETUP:
            logger.warning("start_game rejected during %s", st.phase.value)
            return False
        if not st.players:
            logger.warning("can't start a game without players")
            return False

        self.evaluator.clear(st)
        st.winner = None
        st.game_active = True
        st.current_round = 1
        st.snapshot_positions()
        self._start_countdown(st.move_duration_ms)
        self._set_phase(Phase.MOVE)
        logger.info("game started with %d players, threshold %.0fpx",
                    len(st.players), st.detection_threshold)
        return True

    def tick(self, elapsed_ms: Optional[int] = None) -> Optional[Phase]:
        """
        Advance the countdown. Returns the new phase if this tick caused a
        transition, else None.
        """
        st = self.state
        if not (st.timer_active and st.game_active):
            return None
        step = self.settings.timer_interval_ms if elapsed_ms is None else elapsed_ms
        if step < 0:
            raise ValueError("elapsed_ms must not be negative")

        st.time_remaining_ms = max(0, st.time_remaining_ms - int(step))
        if st.time_remaining_ms > 0:
            return None

        st.timer_active = False
        self._expire()
        return st.phase

    def toggle_timer(self) -> bool:
        if not self.state.game_active:
            return False
        self.state.timer_active = not self.state.timer_active
        logger.info("timer %s", "resumed" if self.state.timer_active else "paused")
        return True

    def reset_game(self) -> None:
        st = self.state
        self.evaluator.clear(st)
        st.reset_positions()
        if self.tracker is not None:
            self.tracker.reset()
        st.current_round = 0
        st.game_active = False
        st.timer_active = False
        st.time_remaining_ms = 0
        st.winner = None
        self.last_result = None
        self._set_phase(Phase.SETUP)

    # ------------- internals -------------
    def _start_countdown(self, duration_ms: int) -> None:
        self.state.time_remaining_ms = int(duration_ms)
        self.state.timer_active = True

    def _expire(self) -> None:
        st = self.state
        if st.phase == Phase.MOVE:
            # baseline for the freeze check
            st.snapshot_positions()
            self._start_countdown(st.freeze_duration_ms)
            self._set_phase(Phase.FREEZE)

        elif st.phase == Phase.FREEZE:
            result = self.evaluator.evaluate(st)
            self.last_result = result
            if result.game_over:
                self._finish(result.winner)
            else:
                st.current_round = (st.current_round % self.settings.max_round) + 1
                self._start_countdown(st.move_duration_ms)
                self._set_phase(Phase.MOVE)

    def _finish(self, winner: Optional[str]) -> None:
        st = self.state
        st.winner = winner
        st.game_active = False
        st.timer_active = False
        self._set_phase(Phase.GAME_OVER)
        logger.info("game over, winner: %s", winner or "none")
