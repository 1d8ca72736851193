from __future__ import annotations
import logging
import time
from pathlib import Path
from typing import Optional

import pygame

from redlight.api.config import EngineConfig
from redlight.api.frame_data import FrameData
from redlight.app.context import Context
from redlight.app.loader import (
    load_game_manifest, load_game_module, roster_from_manifest, settings_from_manifest,
)
from redlight.app.scheduler import Scheduler
from redlight.detect.color_tracker import ColorTracker
from redlight.game.rounds import RoundStateMachine
from redlight.game.state import GameState
from redlight.input.debug_points import DebugPointInjector
from redlight.track.pipeline import TrackingPipeline
from redlight.track.position_tracker import PositionTracker
from redlight.video.camera import Camera

logger = logging.getLogger(__name__)

GAMES_DIR = Path(__file__).resolve().parents[2] / "games"


def run_game(
    game_id: str,
    screen_size: tuple[int, int],
    cam_index: int,
    show_preview: bool,
    mirror: bool = False,
    debug: bool = False,
    difficulty: Optional[str] = None,
):
    pygame.init()
    pygame.display.set_caption(f"Red Light, Green Light – {game_id}")
    screen = pygame.display.set_mode(screen_size)
    clock = pygame.time.Clock()

    cfg = EngineConfig(
        screen_size=screen_size,
        cam_index=cam_index,
        show_preview=show_preview,
        mirror=mirror,
        debug=debug,
    )

    # load game
    game_root = GAMES_DIR / game_id
    manifest = load_game_manifest(game_root)
    module = load_game_module(game_root)
    game = module.get_game()
    settings = settings_from_manifest(manifest)

    # game state & rules
    state = GameState()
    position_tracker = PositionTracker(
        alpha=settings.smoothing_alpha,
        max_jump=settings.max_jump_px,
        nudge=settings.outlier_nudge,
    )
    machine = RoundStateMachine(state, settings, tracker=position_tracker)
    if difficulty:
        machine.set_difficulty(difficulty)
    for player_id, color in roster_from_manifest(manifest):
        machine.add_player(player_id, color)

    # camera & detection; a missing camera leaves the game playable, just untracked
    cam = Camera(index=cam_index, target_size=cfg.frame_size)
    if not cam.open():
        logger.error("camera %d unavailable, tracking disabled", cam_index)

    tracker = ColorTracker(settings, show_preview=show_preview, preview_name="Preview")
    pipeline = TrackingPipeline(state, cam, tracker, position_tracker, settings)
    injector = DebugPointInjector(cfg, manifest.get("debug", {}) or {})

    # Render target: draw to off-screen if mirroring, otherwise draw directly to screen
    render_surface = screen if not mirror else pygame.Surface(
        screen_size).convert()

    ctx = Context(
        screen=render_surface,
        clock=clock,
        cfg=cfg,
        settings=settings,
        state=state,
        machine=machine,
        screen_size=screen_size,
    )

    game.on_load(ctx, manifest)

    latest = FrameData(timestamp=time.time(), camera_ready=cam.ready)

    def tracking_tick():
        nonlocal latest
        pipeline.inject(injector.emit_points())
        latest = pipeline.tick()

    scheduler = Scheduler()
    scheduler.every(settings.timer_interval_ms, machine.tick, name="timer")
    scheduler.each_frame(tracking_tick, name="tracking")

    running = True
    try:
        while running:
            dt = clock.tick(60)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                injector.handle_pygame_event(event, screen_size)
                game.on_event(event)

            if not running:
                break
            scheduler.advance(dt)

            # ---- draw to render_surface ----
            render_surface.fill((12, 14, 18))
            game.on_update(dt, latest)
            game.on_draw(render_surface)

            # ---- present to window ----
            if mirror:
                flipped = pygame.transform.flip(render_surface, True, False)
                screen.blit(flipped, (0, 0))

            pygame.display.flip()

    finally:
        # no tracking tick may run past this point
        scheduler.cancel_all()
        pipeline.stop()
        cam.close()
        tracker.teardown()
        game.on_unload()
        pygame.quit()
