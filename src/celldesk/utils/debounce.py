"""
Trailing-edge debouncer built on ``threading.Timer``.
"""

from __future__ import annotations

import threading
from typing import Any, Callable


class Debouncer:
    """Delay a call until ``delay`` seconds pass without another request.

    Each ``call`` replaces the pending arguments and restarts the timer, so
    only the last request runs. ``flush`` runs a pending call immediately on
    the caller's thread; ``cancel`` drops it.

    Usage::

        save_title = Debouncer(0.5, repository_update)
        save_title("Bud")
        save_title("Budget")   # only this one runs, 0.5 s later
    """

    def __init__(self, delay: float, func: Callable[..., Any]) -> None:
        self.delay = delay
        self.func = func
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending: tuple[tuple, dict] | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def call(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    __call__ = call

    def flush(self) -> bool:
        """Run the pending call now. Returns False when nothing was pending."""
        call = self._take()
        if call is None:
            return False
        args, kwargs = call
        self.func(*args, **kwargs)
        return True

    def cancel(self) -> None:
        self._take()

    def _take(self) -> tuple[tuple, dict] | None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            call, self._pending = self._pending, None
            return call

    def _fire(self) -> None:
        call = self._take()
        if call is not None:
            args, kwargs = call
            self.func(*args, **kwargs)
