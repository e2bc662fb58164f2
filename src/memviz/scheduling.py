"""Cancellable delayed tasks.

Every suspension point in the visualizer (hover intent, search debounce,
layout release, camera travel) is a delayed callback of some *kind*. Only
one task per kind is ever outstanding: scheduling a kind cancels the
previous task of that kind first, so the most recent event always wins.
"""

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay in milliseconds."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...

    def now(self) -> float: ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        return self.loop.call_later(delay_ms / 1000.0, callback)

    def now(self) -> float:
        return self.loop.time() * 1000.0


class _ManualHandle:
    def __init__(self, due: float) -> None:
        self.due = due
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler; time only moves when `advance` is called.

    Used by headless hosts and tests to drive timers deterministically.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._counter = itertools.count()
        self._queue: list[tuple[float, int, _ManualHandle, Callable[[], None]]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle(self._now + max(delay_ms, 0.0))
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h, _ in self._queue if not h.cancelled)

    def advance(self, delta_ms: float) -> None:
        """Move virtual time forward, firing due callbacks in order.

        Callbacks scheduled while advancing fire too if they fall due
        inside the window.
        """
        target = self._now + delta_ms
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            callback()
        self._now = target


class DelayedTasks:
    """At most one pending delayed task per kind."""

    def __init__(self, scheduler: Scheduler) -> None:
        self.scheduler = scheduler
        self._handles: dict[str, TimerHandle] = {}
        self._deadlines: dict[str, float] = {}

    def schedule(self, kind: str, delay_ms: float, callback: Callable[[], None]) -> float:
        """Cancel any pending `kind` task and schedule a new one.

        Returns the deadline in scheduler time.
        """
        self.cancel(kind)

        def run() -> None:
            # Drop bookkeeping before running so the callback may reschedule
            self._handles.pop(kind, None)
            self._deadlines.pop(kind, None)
            callback()

        deadline = self.scheduler.now() + delay_ms
        self._handles[kind] = self.scheduler.call_later(delay_ms, run)
        self._deadlines[kind] = deadline
        return deadline

    def cancel(self, kind: str) -> bool:
        handle = self._handles.pop(kind, None)
        self._deadlines.pop(kind, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        kinds = list(self._handles)
        for kind in kinds:
            self.cancel(kind)
        if kinds:
            logger.debug(f"Cancelled pending tasks: {', '.join(sorted(kinds))}")

    def is_pending(self, kind: str) -> bool:
        return kind in self._handles

    def deadline(self, kind: str) -> float | None:
        return self._deadlines.get(kind)
