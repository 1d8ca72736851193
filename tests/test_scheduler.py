from __future__ import annotations

import logging

import pytest

from redlight.app.scheduler import MAX_CATCH_UP, Scheduler
from redlight.game.state import Phase

from conftest import RED


def test_periodic_task_keeps_its_cadence() -> None:
    sched = Scheduler()
    calls = []
    sched.every(100, lambda: calls.append(1))

    for _ in range(10):
        sched.advance(33)     # ~30 fps
    assert len(calls) == 3    # 330ms

    sched.advance(70)
    assert len(calls) == 4


def test_frame_task_runs_every_advance() -> None:
    sched = Scheduler()
    calls = []
    sched.each_frame(lambda: calls.append(1))
    for _ in range(5):
        sched.advance(1)
    assert len(calls) == 5


def test_failing_task_is_logged_and_stays_scheduled(caplog) -> None:
    sched = Scheduler()
    healthy = []

    def boom():
        raise RuntimeError("camera hiccup")

    task = sched.each_frame(boom, name="tracking")
    sched.each_frame(lambda: healthy.append(1))

    with caplog.at_level(logging.ERROR):
        sched.advance(16)
        sched.advance(16)

    assert task.runs == 2 and task.failures == 2
    assert len(healthy) == 2
    assert "tracking tick failed" in caplog.text


def test_cancel_from_inside_a_callback_stops_further_runs() -> None:
    sched = Scheduler()
    calls = []
    holder = {}

    def once():
        calls.append(1)
        sched.cancel(holder["task"])

    holder["task"] = sched.every(10, once)
    sched.advance(50)         # would be five runs without the cancel
    sched.advance(50)

    assert calls == [1]
    assert holder["task"].cancelled
    assert sched.tasks == []


def test_cancel_all() -> None:
    sched = Scheduler()
    calls = []
    sched.every(10, lambda: calls.append("p"))
    sched.each_frame(lambda: calls.append("f"))
    sched.cancel_all()
    sched.advance(100)
    assert calls == []


def test_catch_up_is_capped(caplog) -> None:
    sched = Scheduler()
    task = sched.every(10, lambda: None)
    with caplog.at_level(logging.WARNING):
        sched.advance(10_000)
    assert task.runs == MAX_CATCH_UP
    assert "fell behind" in caplog.text


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Scheduler().every(0, lambda: None)


def test_drives_the_countdown(machine, state) -> None:
    machine.add_player("a", RED)
    machine.add_player("b", RED)
    machine.start_game()

    sched = Scheduler()
    sched.every(100, machine.tick)
    for _ in range(290):
        sched.advance(17)
    assert state.phase == Phase.MOVE      # 4930ms

    for _ in range(5):
        sched.advance(17)
    assert state.phase == Phase.FREEZE
