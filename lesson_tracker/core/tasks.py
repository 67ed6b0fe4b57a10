"""Background tasks and timers on the asyncio event loop.

Key features:
- Fire-and-forget coroutines with held references (no garbage-collected tasks)
- Repeating and one-shot timers that can be cancelled and restarted
- Callback failures are logged, never propagated into the loop
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

import structlog


logger = structlog.get_logger(__name__)

TimerCallback = Callable[[], Awaitable[Any] | Any]


async def _invoke(callback: TimerCallback) -> None:
    result = callback()
    if inspect.isawaitable(result):
        await result


class BackgroundTasks:
    """Owns the asyncio tasks spawned by one playback session."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
        """Schedule ``coro`` and keep a reference until it finishes."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "background_task_failed",
                task=task.get_name(),
                error=str(error),
                exc_info=error,
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def join(self) -> None:
        """Wait until every task, including ones spawned meanwhile, is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class RepeatingTimer:
    """Calls ``callback`` every ``interval`` seconds until cancelled.

    The first call happens one interval after ``start()``. Repeating timers
    never finish on their own, so they are not part of ``BackgroundTasks``.
    """

    def __init__(
        self,
        interval: float,
        callback: TimerCallback,
        name: str,
    ) -> None:
        self.interval = interval
        self.callback = callback
        self.name = name
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the timer (restarts it if already running)."""
        self.cancel()
        self._task = asyncio.create_task(self._loop(), name=self.name)

    def cancel(self) -> None:
        task, self._task = self._task, None
        # A callback stopping its own timer ends the loop after it returns
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _loop(self) -> None:
        me = asyncio.current_task()
        while self._task is me:
            await asyncio.sleep(self.interval)
            if self._task is not me:
                break
            try:
                await _invoke(self.callback)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("timer_callback_error", timer=self.name)


class OneShotTimer:
    """Calls ``callback`` once after ``delay`` seconds unless cancelled."""

    def __init__(
        self,
        delay: float,
        callback: TimerCallback,
        name: str,
        tasks: BackgroundTasks | None = None,
    ) -> None:
        self.delay = delay
        self.callback = callback
        self.name = name
        self._tasks = tasks
        self._task: asyncio.Task | None = None

    @property
    def is_pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Arm the timer, replacing a pending shot."""
        self.cancel()
        coro = self._fire()
        if self._tasks is not None:
            self._task = self._tasks.spawn(coro, name=self.name)
        else:
            self._task = asyncio.create_task(coro, name=self.name)

    def cancel(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _fire(self) -> None:
        await asyncio.sleep(self.delay)
        # Fired: cancel() from inside the callback must not interrupt it
        self._task = None
        try:
            await _invoke(self.callback)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("timer_callback_error", timer=self.name)
