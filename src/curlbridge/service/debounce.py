"""Cancel-and-supersede debouncing for editor analysis."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any


class Debouncer:
    """Runs the most recently scheduled call after a quiet period.

    Scheduling again before the delay elapses cancels the pending call;
    calls are never queued.
    """

    def __init__(self, delay_seconds: float) -> None:
        self._delay = delay_seconds
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None and self._timer.is_alive()

    def call(self, fn: Callable[..., Any], *args: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self._delay, fn, args)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
