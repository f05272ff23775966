"""Single-threaded event dispatcher with cancellable timers."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)

_Callback = Tuple[Callable[..., Any], Tuple[Any, ...]]


class TimerHandle:
    """
    Handle for a call scheduled with :meth:`EventLoop.call_later`.

    Cancelling is safe from the loop thread at any time; a timer that already
    posted its callback is still suppressed if the callback has not run yet.
    """

    def __init__(self, loop: "EventLoop", delay: float, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._cancelled = False
        self._timer = threading.Timer(delay, loop.post, args=(self._run,))
        self._timer.daemon = True

    def start(self) -> "TimerHandle":
        self._timer.start()
        return self

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _run(self) -> None:
        if not self._cancelled:
            self._callback()


class EventLoop:
    """
    Runs every posted callable to completion on one thread.

    Console lines, socket messages and timer expirations are produced on
    helper threads; they only ``post`` work here, so all client state is
    mutated from the thread calling :meth:`run`.

    Usage:
        loop = EventLoop()
        loop.call_later(1.0, loop.stop)
        loop.run()
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[Optional[_Callback]]" = queue.Queue()
        self._running = False

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        """Queue ``callback(*args)``. Safe to call from any thread."""
        self._queue.put((callback, args))

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return TimerHandle(self, delay, callback).start()

    def stop(self) -> None:
        """Ask :meth:`run` to return once the current callback finishes."""
        self._running = False
        self._queue.put(None)

    @property
    def running(self) -> bool:
        return self._running

    def run(self) -> None:
        self._running = True
        while self._running:
            item = self._queue.get()
            if item is None:
                continue
            callback, args = item
            try:
                callback(*args)
            except Exception as exc:
                logger.exception("Unhandled error in event callback: %s", exc)

    def run_pending(self) -> int:
        """Run callbacks already queued without blocking; returns how many ran."""
        ran = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return ran
            if item is None:
                continue
            callback, args = item
            try:
                callback(*args)
            except Exception as exc:
                logger.exception("Unhandled error in event callback: %s", exc)
            ran += 1
