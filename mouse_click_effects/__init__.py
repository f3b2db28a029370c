"""
Mouse Click Effects - global click visualizer

Listens for mouse-button presses anywhere on the desktop and plays a short
colored icon animation at the pointer position.
"""

__version__ = "0.1.0"


class ClickEffectsError(Exception):
    """Base class for errors raised by the click effects applet."""
