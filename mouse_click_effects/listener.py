"""
Global mouse button listener.

Uses pynput for cross-platform mouse hooks. The hook thread only queues
events; they are delivered to the callback from the scheduler (main) thread.
"""

import logging
import queue
from typing import Callable, Optional

from pynput import mouse
from pynput.mouse import Button

from .dispatcher import ClickEvent

log = logging.getLogger(__name__)

# pynput buttons -> X11 style button numbers
BUTTON_NUMBERS = {
    Button.left: 1,
    Button.middle: 2,
    Button.right: 3,
}


class MouseButtonListener:
    """
    Delivers ClickEvents to a callback while registered.

    IMPORTANT: pynput invokes its callbacks on the hook thread, which must
    return quickly. Events are handed over through a queue and drained on
    the scheduler thread every poll_ms.
    """

    def __init__(self, callback: Callable[[ClickEvent], None], scheduler, poll_ms: int = 10):
        self._callback = callback
        self._scheduler = scheduler
        self._poll_ms = poll_ms
        self._events: queue.Queue = queue.Queue()
        self._listener: Optional[mouse.Listener] = None
        self._poll_timer = None

    @property
    def registered(self) -> bool:
        return self._listener is not None

    def register(self):
        """Start listening. No-op if already registered."""
        if self._listener is not None:
            return

        self._listener = mouse.Listener(on_click=self._on_mouse_click)
        self._listener.start()
        self._poll_timer = self._scheduler.call_later(self._poll_ms, self._drain)
        log.info("Mouse listener registered")

    def deregister(self):
        """Stop listening and drop events not yet delivered."""
        if self._poll_timer is not None:
            self._scheduler.cancel(self._poll_timer)
            self._poll_timer = None

        if self._listener is not None:
            self._listener.stop()
            self._listener = None
            log.info("Mouse listener deregistered")

        while True:
            try:
                self._events.get_nowait()
            except queue.Empty:
                break

    def _on_mouse_click(self, x, y, button, pressed):
        """Runs on the hook thread."""
        # 0 for side/extra buttons
        number = BUTTON_NUMBERS.get(button, 0)
        self._events.put(ClickEvent(button=number, pressed=pressed, x=int(x), y=int(y)))

    def _drain(self):
        self._poll_timer = None
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                break
            try:
                self._callback(event)
            except Exception as e:
                log.error(f"Error handling {event.type}: {e}")

        if self._listener is not None:
            self._poll_timer = self._scheduler.call_later(self._poll_ms, self._drain)
