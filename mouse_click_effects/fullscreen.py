"""
Fullscreen detection for the focused window.

Windows: compares the foreground window rect with its monitor rect.
X11: checks _NET_WM_STATE of the active window with xprop.
Other platforms always report False.
"""

import sys
import shutil
import logging
import subprocess
from typing import Callable, Optional

log = logging.getLogger(__name__)

MONITOR_DEFAULTTONEAREST = 2

# The query blocks the Tk thread, keep it short and infrequent
XPROP_TIMEOUT_S = 0.5
POLL_MS = 2000


def _is_fullscreen_win32() -> bool:
    import ctypes
    from ctypes import wintypes

    class MONITORINFO(ctypes.Structure):
        _fields_ = [
            ("cbSize", wintypes.DWORD),
            ("rcMonitor", wintypes.RECT),
            ("rcWork", wintypes.RECT),
            ("dwFlags", wintypes.DWORD),
        ]

    user32 = ctypes.windll.user32
    hwnd = user32.GetForegroundWindow()
    if not hwnd or hwnd in (user32.GetDesktopWindow(), user32.GetShellWindow()):
        return False

    rect = wintypes.RECT()
    if not user32.GetWindowRect(hwnd, ctypes.byref(rect)):
        return False

    info = MONITORINFO()
    info.cbSize = ctypes.sizeof(MONITORINFO)
    monitor = user32.MonitorFromWindow(hwnd, MONITOR_DEFAULTTONEAREST)
    if not user32.GetMonitorInfoW(monitor, ctypes.byref(info)):
        return False

    mon = info.rcMonitor
    return (rect.left <= mon.left and rect.top <= mon.top and
            rect.right >= mon.right and rect.bottom >= mon.bottom)


def _xprop(*args) -> str:
    result = subprocess.run(['xprop', *args], capture_output=True, text=True,
                            timeout=XPROP_TIMEOUT_S)
    return result.stdout if result.returncode == 0 else ''


def _is_fullscreen_x11() -> bool:
    if shutil.which('xprop') is None:
        return False

    # _NET_ACTIVE_WINDOW(WINDOW): window id # 0x3a00007
    active = _xprop('-root', '_NET_ACTIVE_WINDOW')
    window_id = active.strip().split()[-1] if '#' in active else ''
    if not window_id or window_id == '0x0':
        return False

    return '_NET_WM_STATE_FULLSCREEN' in _xprop('-id', window_id, '_NET_WM_STATE')


def is_fullscreen() -> bool:
    """True if the currently focused window covers its whole monitor."""
    try:
        if sys.platform == 'win32':
            return _is_fullscreen_win32()
        if sys.platform.startswith('linux'):
            return _is_fullscreen_x11()
    except (OSError, subprocess.SubprocessError) as e:
        log.warning(f"Fullscreen query failed: {e}")
    return False


class FullscreenWatcher:
    """Polls a fullscreen query and calls on_changed when the result flips."""

    def __init__(
        self,
        on_changed: Callable[[], None],
        scheduler,
        query: Callable[[], bool] = is_fullscreen,
        poll_ms: int = POLL_MS,
    ):
        self._on_changed = on_changed
        self._scheduler = scheduler
        self._query = query
        self._poll_ms = poll_ms
        self._timer = None
        self._running = False
        self._last: Optional[bool] = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        if self._running:
            return
        self._running = True
        self._last = self._query()
        self._timer = self._scheduler.call_later(self._poll_ms, self._poll)

    def stop(self):
        self._running = False
        if self._timer is not None:
            self._scheduler.cancel(self._timer)
            self._timer = None

    def _poll(self):
        self._timer = None
        current = self._query()
        if current != self._last:
            self._last = current
            log.info(f"Fullscreen changed: {current}")
            try:
                self._on_changed()
            except Exception as e:
                log.error(f"Error in fullscreen handler: {e}")
        if self._running:
            self._timer = self._scheduler.call_later(self._poll_ms, self._poll)
