"""
Host runtime running everything on a Tk root's event loop.
"""

import tkinter as tk
from typing import Callable

from .animations import ClickAnimationFactory
from .fullscreen import FullscreenWatcher, is_fullscreen
from .listener import MouseButtonListener


class TkScheduler:
    """Scheduler backed by Tk's after()."""

    def __init__(self, root: tk.Misc):
        self.root = root

    def call_later(self, delay_ms: int, callback: Callable[[], None]):
        return self.root.after(max(0, int(delay_ms)), callback)

    def cancel(self, handle):
        try:
            self.root.after_cancel(handle)
        except tk.TclError:
            pass  # Already fired


class TkRuntime:
    """Listener, fullscreen watcher and animations sharing one Tk root."""

    def __init__(self, root: tk.Tk):
        self.root = root
        self.scheduler = TkScheduler(root)
        self.animation_factory = ClickAnimationFactory(root)

    def create_listener(self, callback):
        return MouseButtonListener(callback, self.scheduler)

    def create_fullscreen_watcher(self, on_changed):
        return FullscreenWatcher(on_changed, self.scheduler, query=self.query_fullscreen)

    def query_fullscreen(self) -> bool:
        return is_fullscreen()
