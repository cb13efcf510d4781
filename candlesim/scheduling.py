"""Timed callbacks on a single clock.

The simulator never calls ``time.sleep`` or ``loop.call_later`` directly.
Everything that must happen "later" (staggered reveals, transition
clean-up) is queued on a ``Scheduler`` as ``(fire_time, action)`` pairs.

Tests drive the scheduler by advancing its virtual clock; production code
drives the same scheduler in wall-clock time with ``run_realtime``.
"""

import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

log = logging.getLogger(__name__)

__all__ = [
    "ScheduledTask",
    "Scheduler",
    "run_realtime",
]


@dataclass(order=True)
class ScheduledTask:
    fire_time: float
    seq: int
    action: Callable[[], None] = field(compare=False)
    label: str = field(default="", compare=False)


class Scheduler:
    """
    Priority queue of actions keyed by fire time, in milliseconds.

    Actions due at the same time fire in the order they were scheduled.
    Actions scheduled while the clock is advancing fire within the same
    ``advance`` call if they fall due before its end.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)
        self._queue: list[ScheduledTask] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        """Current clock time in ms."""
        return self._now

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def next_fire_time(self) -> Optional[float]:
        return self._queue[0].fire_time if self._queue else None

    def call_at(self, fire_time: float, action: Callable[[], None], *, label: str = "") -> ScheduledTask:
        """Schedule ``action`` at an absolute clock time (never earlier than now)."""
        task = ScheduledTask(max(float(fire_time), self._now), next(self._seq), action, label)
        heapq.heappush(self._queue, task)
        return task

    def call_later(self, delay_ms: float, action: Callable[[], None], *, label: str = "") -> ScheduledTask:
        """
        Schedule ``action`` to run ``delay_ms`` after the current time.

        Raises:
            ValueError: if delay_ms is negative
        """
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        return self.call_at(self._now + delay_ms, action, label=label)

    def advance_to(self, time_ms: float) -> int:
        """
        Move the clock forward to ``time_ms``, firing every task due on the way.

        The clock reads each task's fire time while that task runs.
        Exceptions raised by a task propagate to the caller; tasks not yet
        fired stay queued.

        Returns:
            Number of tasks fired
        """
        if time_ms < self._now:
            raise ValueError(f"cannot move clock backwards from {self._now} to {time_ms}")
        fired = 0
        while self._queue and self._queue[0].fire_time <= time_ms:
            task = heapq.heappop(self._queue)
            self._now = task.fire_time
            if task.label:
                log.debug("t=%.0fms firing %s", self._now, task.label)
            task.action()
            fired += 1
        self._now = float(time_ms)
        return fired

    def advance(self, delta_ms: float) -> int:
        """Advance the clock by ``delta_ms``; see ``advance_to``."""
        if delta_ms < 0:
            raise ValueError(f"delta_ms must be >= 0, got {delta_ms}")
        return self.advance_to(self._now + delta_ms)

    def run_until_idle(self, limit: int = 10_000) -> int:
        """
        Fire tasks in order until the queue is empty.

        ``limit`` guards against actions that reschedule themselves forever.
        """
        fired = 0
        while self._queue:
            if fired >= limit:
                raise RuntimeError(f"scheduler still busy after {limit} tasks")
            fired += self.advance_to(self._queue[0].fire_time)
        return fired


async def run_realtime(
    scheduler: Scheduler,
    *,
    until: Optional[Callable[[], bool]] = None,
    speed: float = 1.0,
) -> None:
    """
    Drive ``scheduler`` in wall-clock time on the running event loop.

    Sleeps until each next fire time, then advances the scheduler to it.
    Returns once the queue is empty (and ``until`` returns True, if given).

    Args:
        scheduler: Scheduler to drive
        until: Optional stop predicate checked whenever the queue drains
        speed: Clock multiplier; 2.0 plays the scheduler twice as fast
    """
    if speed <= 0:
        raise ValueError(f"speed must be > 0, got {speed}")
    loop = asyncio.get_running_loop()
    origin_wall = loop.time()
    origin_clock = scheduler.now

    while True:
        next_time = scheduler.next_fire_time
        if next_time is None:
            if until is None or until():
                return
            await asyncio.sleep(0.01)
            continue

        target_wall = origin_wall + (next_time - origin_clock) / 1000.0 / speed
        delay = target_wall - loop.time()
        if delay > 0:
            await asyncio.sleep(delay)
        scheduler.advance_to(max(next_time, scheduler.now))
