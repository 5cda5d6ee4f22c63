"""Poll scheduler background task."""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional, Set

from ..api.queries.constants import MIN_POLL_INTERVAL, POLL_SPAN_DIVISOR

logger = logging.getLogger("promchart.poller")


def get_poll_delay(span: float, poll_interval: Optional[float] = None) -> float:
    """
    Milliseconds between polls.

    An explicit positive poll_interval wins; otherwise longer spans poll
    less often, never faster than MIN_POLL_INTERVAL.
    """
    if poll_interval and poll_interval > 0:
        return poll_interval
    return max(span / POLL_SPAN_DIVISOR, MIN_POLL_INTERVAL)


class Poller:
    """
    Runs a callback immediately and then every ``delay`` milliseconds.

    ``callback`` may be reassigned at any time; the running interval always
    calls the current one. configure() restarts the interval only when the
    delay or one of the dependencies changed. Callbacks may be plain
    functions or return awaitables, which run as tasks on the event loop.
    Failures are logged and never stop later ticks.
    """

    def __init__(self, callback: Callable[[], Any], name: str = "poller"):
        self.callback = callback
        self.name = name
        self._timer: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()
        self._key = None
        self._active = False

    @property
    def running(self) -> bool:
        return self._active

    @property
    def delay(self) -> Optional[float]:
        return self._key[0] if self._key else None

    def configure(self, delay: Optional[float], *dependencies: Any) -> bool:
        """
        (Re)establish the interval.

        Args:
            delay: Milliseconds between ticks; falsy or non-positive runs a
                single tick and schedules nothing
            *dependencies: Values whose change forces a restart

        Returns:
            True if the poller restarted (and ticked), False if unchanged
        """
        key = (delay, dependencies)
        if self._active and key == self._key:
            return False

        self._cancel_timer()
        self._key = key
        self._active = True

        self.tick()

        if delay and delay > 0:
            self._timer = asyncio.get_running_loop().create_task(self._run_interval(delay))
            logger.info(f"{self.name}: polling every {delay / 1000:g}s")
        else:
            logger.debug(f"{self.name}: one-shot mode, no interval")
        return True

    def tick(self) -> None:
        """Invoke the current callback once, logging any failure."""
        try:
            result = self.callback()
        except Exception as e:
            logger.error(f"{self.name}: tick failed: {e}", exc_info=True)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._pending.add(task)
            task.add_done_callback(self._tick_done)

    def _tick_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"{self.name}: tick failed: {exc}", exc_info=exc)

    async def _run_interval(self, delay: float) -> None:
        loop = asyncio.get_running_loop()
        interval = delay / 1000
        next_run = loop.time() + interval
        while True:
            await asyncio.sleep(max(0.0, next_run - loop.time()))
            self.tick()
            next_run += interval
            # Missed slots after a stall are skipped, not replayed
            if next_run < loop.time():
                next_run = loop.time() + interval

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def stop(self) -> None:
        """Stop the interval and cancel in-flight ticks. No invocations follow."""
        self._cancel_timer()
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
        if self._active:
            logger.info(f"{self.name}: stopped")
        self._active = False
        self._key = None
