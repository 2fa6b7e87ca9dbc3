"""
Debouncing on the asyncio event loop.

A Debouncer owns one cancellable timer handle and a monotonic sequence
counter. Every schedule() cancels the previous timer and issues a new
sequence number; callers compare the number they were given against
``latest`` to discard results of superseded work.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Delay a callback until a quiet period has elapsed.

    Coroutine functions are started as tasks on the loop when the timer
    fires. Must be used from code running on an event loop unless a loop
    is passed explicitly.
    """

    def __init__(
        self,
        delay: float,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        name: str = "debouncer",
    ):
        """
        Args:
            delay: Quiet period in seconds.
            loop: Event loop to schedule on. Defaults to the running loop.
            name: Label used in log messages.
        """
        self.delay = delay
        self.name = name
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._sequence = 0
        self._pending: Optional[tuple[Callable[..., Any], tuple]] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def latest(self) -> int:
        """Most recently issued sequence number."""
        return self._sequence

    @property
    def pending(self) -> bool:
        """True while a timer is armed and has not fired."""
        return self._handle is not None

    def is_current(self, sequence: int) -> bool:
        """Check if work tagged with ``sequence`` is still the newest."""
        return sequence == self._sequence

    def next_sequence(self) -> int:
        """Issue a new sequence number without arming a timer.

        Any work tagged with an earlier number becomes stale.
        """
        self._sequence += 1
        return self._sequence

    def schedule(self, fn: Callable[..., Any], *args: Any) -> int:
        """
        Arm the timer to call ``fn(*args)`` after the quiet period.

        Cancels any previously armed timer.

        Returns:
            Sequence number assigned to this call.
        """
        self._cancel_timer()
        sequence = self.next_sequence()
        loop = self._loop or asyncio.get_running_loop()
        self._pending = (fn, args)
        self._handle = loop.call_later(self.delay, self._fire, sequence)
        return sequence

    def cancel(self) -> None:
        """Clear the armed timer and mark in-flight work as stale."""
        if self._handle is not None:
            logger.debug(f"{self.name}: pending call cancelled")
        self._cancel_timer()
        self.next_sequence()

    def flush(self) -> bool:
        """
        Run the pending call now instead of waiting for the timer.

        Returns:
            True if a pending call was run.
        """
        if self._handle is None or self._pending is None:
            return False
        fn, args = self._pending
        self._cancel_timer()
        self._invoke(fn, args)
        return True

    async def wait_idle(self) -> None:
        """Wait for tasks started by fired coroutine callbacks to finish."""
        while True:
            running = [t for t in self._tasks if not t.done()]
            if not running:
                return
            await asyncio.gather(*running, return_exceptions=True)

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None

    def _fire(self, sequence: int) -> None:
        if sequence != self._sequence or self._pending is None:
            return
        fn, args = self._pending
        self._handle = None
        self._pending = None
        self._invoke(fn, args)

    def _invoke(self, fn: Callable[..., Any], args: tuple) -> None:
        result = fn(*args)
        if inspect.isawaitable(result):
            loop = self._loop or asyncio.get_running_loop()
            task = loop.create_task(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
