from .game_base import Game
from .frame_data import ColorMatch, Frame, FrameData, Point
from .config import Difficulty, EngineConfig, GameSettings

__all__ = ["Game", "ColorMatch", "Frame", "FrameData", "Point", "Difficulty", "EngineConfig", "GameSettings"]
