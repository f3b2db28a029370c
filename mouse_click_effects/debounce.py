"""
Rate limiting for animation requests.

Policy: the first call while idle fires immediately and opens a window.
Calls made inside the window replace a single pending slot; when the window
closes the latest pending call fires and opens a new window. A burst inside
one window therefore produces at most two invocations.
"""

import logging
from typing import Any, Callable, Optional, Tuple

log = logging.getLogger(__name__)


class Debouncer:
    """Owns one scheduler timer and at most one pending invocation."""

    def __init__(self, callback: Callable[..., None], window_ms: int, scheduler):
        self._callback = callback
        self._window_ms = max(0, int(window_ms))
        self._scheduler = scheduler
        self._timer = None
        self._pending: Optional[Tuple[Any, ...]] = None

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @window_ms.setter
    def window_ms(self, value: int):
        """Applies from the next window on."""
        self._window_ms = max(0, int(value))

    @property
    def pending(self) -> bool:
        """True if a call is waiting for the window to close."""
        return self._pending is not None

    def trigger(self, *args):
        if self._timer is None:
            self._fire(args)
        else:
            self._pending = args

    __call__ = trigger

    def cancel(self):
        """Drop the pending call and close the window."""
        if self._timer is not None:
            self._scheduler.cancel(self._timer)
            self._timer = None
        self._pending = None

    def _fire(self, args: Tuple[Any, ...]):
        self._timer = self._scheduler.call_later(self._window_ms, self._on_window_closed)
        try:
            self._callback(*args)
        except Exception as e:
            log.error(f"Error in debounced callback: {e}")

    def _on_window_closed(self):
        self._timer = None
        if self._pending is not None:
            args, self._pending = self._pending, None
            self._fire(args)
