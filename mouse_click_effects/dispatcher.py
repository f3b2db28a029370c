"""
Click dispatcher state machine.

States:
- inactive: listener deregistered, no events delivered
- active: listener registered for mouse button events
"""

import logging
from enum import Enum, auto
from dataclasses import dataclass
from typing import Callable

from .config import ClickEffectsConfig
from .icon_cache import ClickType

log = logging.getLogger(__name__)


@dataclass
class ClickEvent:
    """A single mouse button press or release."""
    button: int
    pressed: bool = True
    x: int = 0
    y: int = 0

    @property
    def type(self) -> str:
        """Event tag in the form 'mouse:button:<n><p|r>'."""
        return f"mouse:button:{self.button}{'p' if self.pressed else 'r'}"


class ListenerState(Enum):
    INACTIVE = auto()
    ACTIVE = auto()


class ClickDispatcher:
    """
    Routes button presses to per-button handlers.

    Button 1 is left, 2 is middle and 3 is right; anything else is ignored.
    Each handler checks its own enable flag before passing
    (click_type, color) on to display_click.
    """

    def __init__(
        self,
        config: ClickEffectsConfig,
        listener_factory: Callable,
        display_click: Callable[[ClickType, str], None],
        on_activate: Callable[[], None],
    ):
        self._config = config
        self._display_click = display_click
        self._on_activate = on_activate
        self._state = ListenerState.INACTIVE
        self._listener = listener_factory(self.handle_event)
        self._handlers = {
            1: self._on_left_click,
            2: self._on_middle_click,
            3: self._on_right_click,
        }

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == ListenerState.ACTIVE

    def set_active(self, enabled: bool):
        """Always deregister first; when enabling, refresh icons and register again."""
        self._listener.deregister()
        self._state = ListenerState.INACTIVE

        if enabled:
            self._on_activate()
            self._listener.register()
            self._state = ListenerState.ACTIVE

        log.info(f"Click effects {'active' if enabled else 'inactive'}")

    def handle_event(self, event: ClickEvent):
        if self._state != ListenerState.ACTIVE or not event.pressed:
            return

        handler = self._handlers.get(event.button)
        if handler is None:
            log.debug(f"Ignoring {event.type}")
            return
        handler()

    def _on_left_click(self):
        if self._config.left_click_effect_enabled:
            self._display_click(ClickType.LEFT, self._config.left_click_color)

    def _on_middle_click(self):
        if self._config.middle_click_effect_enabled:
            self._display_click(ClickType.MIDDLE, self._config.middle_click_color)

    def _on_right_click(self):
        if self._config.right_click_effect_enabled:
            self._display_click(ClickType.RIGHT, self._config.right_click_color)
