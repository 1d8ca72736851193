import pygame
from typing import Tuple

from redlight.api.frame_data import Frame


def draw_text(surface: pygame.Surface, text: str, pos: Tuple[int, int], color=(230, 230, 230), size=24):
    font = pygame.font.SysFont(None, size)
    surface.blit(font.render(text, True, color), pos)


def frame_to_surface(frame: Frame, size: Tuple[int, int]) -> pygame.Surface:
    """Camera frame (RGB/RGBA, row-major) -> pygame Surface scaled to `size`."""
    rgb = frame.pixels[..., :3]
    # surfarray wants (W, H, 3)
    surf = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))
    if surf.get_size() != tuple(size):
        surf = pygame.transform.scale(surf, size)
    return surf


def format_time(ms: int) -> str:
    seconds = ms // 1000
    tenths = (ms % 1000) // 100
    return f"{seconds}.{tenths}s"
