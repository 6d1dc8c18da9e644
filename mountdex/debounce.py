# -*- coding: utf-8 -*-
"""Caller-side debounce for search-as-you-type.

One pending-call slot plus a timer: every `call()` cancels the pending timer
and reschedules, so at most one invocation fires per quiescence window. The
query engine itself never rate-limits.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional, Tuple


class Debouncer:
    def __init__(self, fn: Callable[..., Any], delay: float = 0.15):
        self._fn = fn
        self.delay = max(0.0, float(delay))
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]] = None
        self._generation = 0

    def call(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._generation += 1
            timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    __call__ = call

    def _take(self) -> Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]]:
        with self._lock:
            pending = self._pending
            self._pending = None
            self._timer = None
            return pending

    def _fire(self, generation: int) -> None:
        with self._lock:
            # a newer call rescheduled while this timer was already firing
            if generation != self._generation:
                return
            pending = self._pending
            self._pending = None
            self._timer = None
        if pending is not None:
            args, kwargs = pending
            self._fn(*args, **kwargs)

    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def flush(self) -> bool:
        """Run the pending call now. Returns False if nothing was pending."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
        pending = self._take()
        if pending is None:
            return False
        args, kwargs = pending
        self._fn(*args, **kwargs)
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None
