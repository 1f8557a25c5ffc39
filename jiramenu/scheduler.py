"""Single-threaded event loop for delayed follow-up actions."""

import sched
import time
from typing import Any, Callable


class EventLoop:
    """Cooperative scheduler for callbacks that must run later.

    Everything runs on the caller's thread. The interactive session calls
    run_pending() between prompts; one-shot commands call run() to wait
    for outstanding callbacks before exiting.
    """

    def __init__(
        self,
        timefunc: Callable[[], float] = time.monotonic,
        delayfunc: Callable[[float], Any] = time.sleep,
    ):
        self._scheduler = sched.scheduler(timefunc, delayfunc)

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> sched.Event:
        """Queue a callback to run at the next opportunity."""
        return self._scheduler.enter(0, 0, callback, args)

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> sched.Event:
        """Queue a callback to run after delay seconds."""
        return self._scheduler.enter(delay, 0, callback, args)

    def cancel(self, event: sched.Event) -> None:
        """Cancel a queued callback if it has not run yet."""
        try:
            self._scheduler.cancel(event)
        except ValueError:
            pass

    def pending(self) -> int:
        """Number of callbacks still queued."""
        return len(self._scheduler.queue)

    def run_pending(self) -> None:
        """Run callbacks that are due without blocking."""
        self._scheduler.run(blocking=False)

    def run(self) -> None:
        """Block until every queued callback has run."""
        self._scheduler.run()


_loop: EventLoop | None = None


def get_loop() -> EventLoop:
    """Get the process-wide event loop, creating it on first use."""
    global _loop
    if _loop is None:
        _loop = EventLoop()
    return _loop


def set_loop(loop: EventLoop | None) -> None:
    """Replace the process-wide event loop (None recreates it lazily)."""
    global _loop
    _loop = loop
