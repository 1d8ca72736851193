from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

# a stalled loop does not replay more than this many missed periods
MAX_CATCH_UP = 10


@dataclass(eq=False)
class ScheduledTask:
    name: str
    callback: Callable[[], object]
    interval_ms: Optional[float] = None  # None: once per frame
    cancelled: bool = False
    runs: int = 0
    failures: int = 0
    _accum_ms: float = 0.0


class Scheduler:
    """
    Cooperative scheduler driven by the main loop's frame delta.

    Periodic tasks run at a fixed cadence, frame tasks once per advance().
    Every run is isolated: an exception is logged and the task stays
    scheduled. A cancelled task never runs again, even later in the same
    advance() call.
    """

    def __init__(self):
        self._tasks: List[ScheduledTask] = []

    @property
    def tasks(self) -> List[ScheduledTask]:
        return list(self._tasks)

    def every(self, interval_ms: float, callback: Callable[[], object], name: Optional[str] = None) -> ScheduledTask:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        task = ScheduledTask(name=name or getattr(callback, "__name__", "task"),
                             callback=callback, interval_ms=float(interval_ms))
        self._tasks.append(task)
        return task

    def each_frame(self, callback: Callable[[], object], name: Optional[str] = None) -> ScheduledTask:
        task = ScheduledTask(name=name or getattr(callback, "__name__", "task"), callback=callback)
        self._tasks.append(task)
        return task

    def cancel(self, task: ScheduledTask) -> None:
        task.cancelled = True
        if task in self._tasks:
            self._tasks.remove(task)

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            self.cancel(task)

    def advance(self, dt_ms: float) -> None:
        for task in list(self._tasks):
            if task.cancelled:
                continue
            if task.interval_ms is None:
                self._run(task)
                continue

            task._accum_ms += dt_ms
            caught_up = 0
            while task._accum_ms >= task.interval_ms and not task.cancelled:
                task._accum_ms -= task.interval_ms
                self._run(task)
                caught_up += 1
                if caught_up >= MAX_CATCH_UP:
                    logger.warning("%s fell behind, dropping %.0fms", task.name, task._accum_ms)
                    task._accum_ms = 0.0
                    break

    def _run(self, task: ScheduledTask) -> None:
        task.runs += 1
        try:
            task.callback()
        except Exception:
            task.failures += 1
            logger.exception("%s tick failed; continuing", task.name)
