"""Cancellable-timer debounce for rapid-fire calls (e.g. search-as-you-type).

Every call cancels the pending timer and schedules a new one. Only the latest
arguments, after ``delay`` seconds of quiet, reach the wrapped coroutine, and
every caller coalesced into that firing receives its result.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")


class Debouncer(Generic[R]):
    def __init__(self, func: Callable[..., Awaitable[R]], delay: float):
        self._func = func
        self._delay = delay
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task | None = None
        self._waiters: list[asyncio.Future] = []
        self.invocations = 0

    async def __call__(self, *args, **kwargs) -> R:
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
            logger.debug("Debounce: superseded pending call")
        if self._task is not None and not self._task.done():
            # Already fired for stale input; its result will be dropped and its
            # waiters stay with us for the newer call.
            self._task = None

        waiter = loop.create_future()
        self._waiters.append(waiter)
        self._timer = loop.call_later(self._delay, self._fire, args, kwargs)
        try:
            return await waiter
        except asyncio.CancelledError:
            self._discard(waiter)
            raise

    def _discard(self, waiter: asyncio.Future) -> None:
        """Forget a cancelled caller; with nobody left, drop the pending call too."""
        if waiter in self._waiters:
            self._waiters.remove(waiter)
        if not self._waiters:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._task = None

    def _fire(self, args, kwargs) -> None:
        self._timer = None
        self.invocations += 1
        task = asyncio.ensure_future(self._func(*args, **kwargs))
        self._task = task
        task.add_done_callback(self._settle)

    def _settle(self, task: asyncio.Task) -> None:
        if task is not self._task:
            if not task.cancelled():
                task.exception()  # mark retrieved; stale result is dropped
            return
        self._task = None
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if waiter.done():
                continue
            if task.cancelled():
                waiter.cancel()
            elif task.exception() is not None:
                waiter.set_exception(task.exception())
            else:
                waiter.set_result(task.result())

    def cancel(self) -> None:
        """Drop any pending call and cancel everyone waiting on it."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._task = None
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            waiter.cancel()

    @property
    def idle(self) -> bool:
        return self._timer is None and self._task is None and not self._waiters
