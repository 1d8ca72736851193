from __future__ import annotations

import pytest

from redlight.api.config import GameSettings
from redlight.api.frame_data import ORIGIN, Point
from redlight.detect.color_tracker import ColorTracker
from redlight.track.pipeline import TrackingPipeline

from conftest import BLUE, RED, FakeSource, frame_with_blobs


def _pipeline(state, tracker, frames, ready=True, every_n=1):
    settings = GameSettings(track_every_n_frames=every_n)
    source = FakeSource(frames, ready=ready)
    pipe = TrackingPipeline(state, source, ColorTracker(settings), tracker, settings)
    return pipe, source


def test_camera_not_ready_writes_nothing(machine, state, tracker) -> None:
    machine.add_player("a", RED)
    pipe, source = _pipeline(state, tracker, [frame_with_blobs((320, 240, 20, RED))], ready=False)

    data = pipe.tick()

    assert source.reads == 0
    assert not data.camera_ready and not state.camera_ready
    assert data.positions == {}
    assert state.players["a"].position == ORIGIN


def test_blob_is_written_as_player_position(machine, state, tracker) -> None:
    machine.add_player("a", RED)
    machine.add_player("b", BLUE)
    frame = frame_with_blobs((320, 240, 20, RED), (100, 380, 20, BLUE))
    pipe, _ = _pipeline(state, tracker, [frame])

    data = pipe.tick()

    a, b = state.players["a"].position, state.players["b"].position
    assert a == (pytest.approx(320, abs=6), pytest.approx(240, abs=6))
    assert b == (pytest.approx(100, abs=6), pytest.approx(380, abs=6))
    assert data.positions == {"a": a, "b": b}
    assert data.frame is frame
    assert state.camera_ready


def test_intermittent_detection_never_drops_the_position(machine, state, tracker) -> None:
    machine.add_player("a", RED)
    present = frame_with_blobs((320, 240, 20, RED))
    frames = [present if i % 2 == 0 else frame_with_blobs() for i in range(10)]
    pipe, _ = _pipeline(state, tracker, frames)

    seen = []
    for _ in range(10):
        pipe.tick()
        seen.append(state.players["a"].position)

    assert all(pos is not None and pos != ORIGIN for pos in seen)
    assert len(set(seen)) == 1
    assert tracker.state("a").rejected_jumps == 0


def test_read_failure_leaves_positions_alone(machine, state, tracker) -> None:
    machine.add_player("a", RED)
    pipe, _ = _pipeline(state, tracker, [frame_with_blobs((320, 240, 20, RED)), None])
    pipe.tick()
    before = state.players["a"].position

    data = pipe.tick()

    assert data.frame is None
    assert state.players["a"].position == before


def test_eliminated_players_are_not_tracked(machine, state, tracker) -> None:
    machine.add_player("a", RED)
    state.set_position("a", Point(10, 10))
    state.players["a"].eliminate()
    pipe, _ = _pipeline(state, tracker, [frame_with_blobs((320, 240, 20, RED))])

    data = pipe.tick()

    assert "a" not in data.positions
    assert state.players["a"].position == Point(10, 10)
    assert "a" not in tracker


def test_injected_points_stand_in_for_the_camera(machine, state, tracker) -> None:
    machine.add_player("a", RED)
    pipe, _ = _pipeline(state, tracker, [], ready=False)

    pipe.inject({"a": (50, 60)})
    pipe.tick()
    assert state.players["a"].position == Point(50, 60)

    # injection only lasts one tick
    pipe.tick()
    assert state.players["a"].position == Point(50, 60)
    assert tracker.previous("a") == Point(50, 60)


def test_only_every_nth_frame_is_processed(machine, state, tracker) -> None:
    machine.add_player("a", RED)
    frames = [frame_with_blobs((320, 240, 20, RED)) for _ in range(6)]
    pipe, source = _pipeline(state, tracker, frames, every_n=2)

    for _ in range(6):
        pipe.tick()

    assert source.reads == 3


def test_scene_motion_flag(machine, state, tracker) -> None:
    machine.add_player("a", RED)
    calm = frame_with_blobs((320, 240, 20, RED))
    also_calm = frame_with_blobs((322, 240, 20, RED))
    flash = frame_with_blobs(background=(250, 250, 250))
    pipe, _ = _pipeline(state, tracker, [calm, also_calm, flash])

    assert pipe.tick().scene_motion is False
    assert pipe.tick().scene_motion is False
    assert pipe.tick().scene_motion is True

    pipe.stop()
    assert pipe.previous_frame is None
