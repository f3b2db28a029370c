"""
Click animations drawn in small borderless tkinter windows.

Each animation opens a topmost overlay centered on the pointer, steps through
frames with root.after() and destroys the window once `timeout` ms elapsed.
"""

import io
import sys
import logging
import tkinter as tk
from typing import Dict, Optional, Tuple, Type

from PIL import Image, ImageTk
from pynput import mouse

from .icon_cache import ColoredIcon
from .runtime import AnimationOptions

log = logging.getLogger(__name__)

FRAME_MS = 16
TRANSPARENT_KEY = '#010203'

GWL_EXSTYLE = -20
WS_EX_LAYERED = 0x00080000
WS_EX_TRANSPARENT = 0x00000020


def render_icon(icon: ColoredIcon, size: int) -> Image.Image:
    """Rasterize the cached SVG to an RGBA image of size x size."""
    import cairosvg

    png_bytes = cairosvg.svg2png(
        url=str(icon.path),
        output_width=size,
        output_height=size,
    )
    return Image.open(io.BytesIO(png_bytes)).convert('RGBA')


def _make_click_through(win: tk.Toplevel):
    """Let clicks pass through the overlay (Windows only)."""
    if sys.platform != 'win32':
        return
    import ctypes

    user32 = ctypes.windll.user32
    hwnd = user32.GetParent(win.winfo_id())
    style = user32.GetWindowLongW(hwnd, GWL_EXSTYLE)
    user32.SetWindowLongW(hwnd, GWL_EXSTYLE, style | WS_EX_LAYERED | WS_EX_TRANSPARENT)


class ClickAnimation:
    """Base animation: subclasses map progress (0..1) to (scale, alpha)."""

    name = 'base'

    def __init__(self, root: tk.Misc):
        self.root = root
        self._pointer = mouse.Controller()

    def frame(self, progress: float) -> Tuple[float, float]:
        raise NotImplementedError

    def animate_click(self, icon: ColoredIcon, options: AnimationOptions):
        size = max(1, int(options.icon_size))
        try:
            image = render_icon(icon, size)
        except Exception as e:
            log.error(f"Could not render {icon.path.name}: {e}")
            return

        x, y = self._pointer.position
        win = self._create_overlay(int(x) - size // 2, int(y) - size // 2, size)
        canvas = tk.Canvas(win, width=size, height=size, bg=TRANSPARENT_KEY,
                           highlightthickness=0, bd=0)
        canvas.pack()

        total = max(1, int(options.timeout) // FRAME_MS)
        base_alpha = max(0, min(255, int(options.opacity))) / 255.0
        self._step(win, canvas, image, size, base_alpha, 0, total)

    def _create_overlay(self, x: int, y: int, size: int) -> tk.Toplevel:
        win = tk.Toplevel(self.root)
        win.overrideredirect(True)
        win.geometry(f'{size}x{size}+{x}+{y}')
        win.configure(bg=TRANSPARENT_KEY)
        win.attributes('-topmost', True)
        try:
            win.attributes('-transparentcolor', TRANSPARENT_KEY)
        except tk.TclError:
            pass  # Not supported outside Windows
        if sys.platform.startswith('linux'):
            try:
                win.attributes('-type', 'splash')
            except tk.TclError:
                pass
        win.update_idletasks()
        try:
            _make_click_through(win)
        except OSError as e:
            log.debug(f"Could not make overlay click-through: {e}")
        return win

    def _step(self, win, canvas, image, size, base_alpha, index, total):
        if index > total:
            win.destroy()
            return

        try:
            scale, alpha = self.frame(index / total)
            scaled = max(1, int(size * scale))
            frame_image = ImageTk.PhotoImage(image.resize((scaled, scaled), Image.LANCZOS))
            canvas.delete('all')
            canvas.create_image(size // 2, size // 2, image=frame_image)
            canvas.image = frame_image  # keep a reference
            win.attributes('-alpha', max(0.0, min(1.0, base_alpha * alpha)))
        except tk.TclError as e:
            log.debug(f"Animation window gone: {e}")
            return

        self.root.after(FRAME_MS, self._step, win, canvas, image, size,
                        base_alpha, index + 1, total)


class ExpansionAnimation(ClickAnimation):
    """Grows from a dot to full size while fading out."""

    name = 'expansion'

    def frame(self, progress):
        return 0.2 + 0.8 * progress, 1.0 - progress


class BounceAnimation(ClickAnimation):
    """Pops in, overshoots and settles back."""

    name = 'bounce'

    def frame(self, progress):
        if progress < 0.5:
            scale = 0.4 + 1.2 * progress  # up to 1.0
        else:
            scale = 1.0 - 0.4 * (progress - 0.5)
        alpha = 1.0 if progress < 0.7 else (1.0 - progress) / 0.3
        return scale, alpha


class BlinkAnimation(ClickAnimation):
    """Full size, blinking twice."""

    name = 'blink'

    def frame(self, progress):
        return 1.0, 0.0 if int(progress * 4) % 2 else 1.0


ANIMATIONS: Dict[str, Type[ClickAnimation]] = {
    cls.name: cls for cls in (ExpansionAnimation, BounceAnimation, BlinkAnimation)
}

DEFAULT_MODE = ExpansionAnimation.name


class ClickAnimationFactory:
    """Creates (and reuses) animations by mode name."""

    def __init__(self, root: tk.Misc):
        self.root = root
        self._instances: Dict[str, ClickAnimation] = {}

    def create_for_mode(self, mode: Optional[str]) -> ClickAnimation:
        if mode not in ANIMATIONS:
            log.warning(f"Unknown animation mode {mode!r}, using '{DEFAULT_MODE}'")
            mode = DEFAULT_MODE
        if mode not in self._instances:
            self._instances[mode] = ANIMATIONS[mode](self.root)
        return self._instances[mode]
