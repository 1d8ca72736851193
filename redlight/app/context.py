from __future__ import annotations
from dataclasses import dataclass
import pygame
from typing import Tuple

from redlight.api.config import EngineConfig, GameSettings
from redlight.game.rounds import RoundStateMachine
from redlight.game.state import GameState


@dataclass
class Context:
    screen: pygame.Surface
    clock: pygame.time.Clock
    cfg: EngineConfig
    settings: GameSettings
    # games read state freely but change it only through the machine
    state: GameState
    machine: RoundStateMachine
    screen_size: Tuple[int, int]
