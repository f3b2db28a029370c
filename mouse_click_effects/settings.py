"""
Settings bridge between the YAML settings file and the running applet.

Every settings key is bound to a ClickEffectsConfig field. Keys with a change
handler call it on the owning instance when their value changes; the rest are
plain mirrors read at use time.
"""

import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

from .config import (
    ClickEffectsConfig,
    KEY_TO_FIELD,
    coerce_value,
    config_from_dict,
    load_config,
    read_settings,
    save_config,
)

log = logging.getLogger(__name__)


class SettingsOwner(Protocol):
    def update_colored_icons(self) -> None: ...

    def update_debounce_window(self) -> None: ...


def _refresh_icons(owner: SettingsOwner):
    owner.update_colored_icons()


def _refresh_debounce(owner: SettingsOwner):
    owner.update_debounce_window()


@dataclass(frozen=True)
class Binding:
    key: str
    field: str
    on_change: Optional[Callable[[SettingsOwner], None]] = None


BINDINGS: List[Binding] = [
    Binding('animation-time', 'animation_time'),
    Binding('icon-mode', 'icon_mode'),
    Binding('size', 'size'),
    Binding('left-click-effect-enabled', 'left_click_effect_enabled'),
    Binding('right-click-effect-enabled', 'right_click_effect_enabled'),
    Binding('middle-click-effect-enabled', 'middle_click_effect_enabled'),
    Binding('left-click-color', 'left_click_color', _refresh_icons),
    Binding('middle-click-color', 'middle_click_color', _refresh_icons),
    Binding('right-click-color', 'right_click_color', _refresh_icons),
    Binding('general-opacity', 'general_opacity'),
    Binding('animation-mode', 'animation_mode'),
    Binding('deactivate-on-fullscreen', 'deactivate_on_fullscreen'),
    Binding('debounce-ms', 'debounce_ms', _refresh_debounce),
]


class SettingsBridge:
    """
    Keeps `config` in sync with the settings file.

    The config object is updated in place, so components holding a
    reference to it always see current values.
    """

    def __init__(self, path: Path, scheduler=None, poll_ms: int = 1000):
        self.path = Path(path)
        self.config = ClickEffectsConfig()
        self._scheduler = scheduler
        self._poll_ms = poll_ms
        self._poll_timer = None
        self._owner: Optional[SettingsOwner] = None
        self._mtime: Optional[float] = None

    @property
    def bound(self) -> bool:
        return self._owner is not None

    def bind(self, owner: SettingsOwner) -> ClickEffectsConfig:
        """Load the settings file and start forwarding changes to owner."""
        loaded = load_config(self.path)
        for binding in BINDINGS:
            setattr(self.config, binding.field, getattr(loaded, binding.field))

        self._owner = owner
        self._mtime = self._current_mtime()
        self._schedule_poll()
        log.info(f"Settings bound to {self.path}")
        return self.config

    def reload(self) -> List[str]:
        """Re-read the settings file. Returns the keys that changed."""
        self._mtime = self._current_mtime()
        if self._mtime is None:
            return []
        return self._apply(config_from_dict(read_settings(self.path)))

    def set(self, key: str, value: Any):
        """Change a single setting and persist it."""
        field_name = KEY_TO_FIELD.get(key)
        if field_name is None:
            raise KeyError(f"Unknown setting '{key}'")

        updated = ClickEffectsConfig(**vars(self.config))
        setattr(updated, field_name, coerce_value(field_name, value))
        self._apply(updated)

        save_config(self.config, self.path)
        self._mtime = self._current_mtime()

    def finalize(self):
        """Release the binding and stop watching the file."""
        if self._poll_timer is not None and self._scheduler is not None:
            self._scheduler.cancel(self._poll_timer)
        self._poll_timer = None
        self._owner = None

    def _apply(self, updated: ClickEffectsConfig) -> List[str]:
        changed = []
        handlers = []
        for binding in BINDINGS:
            new_value = getattr(updated, binding.field)
            if getattr(self.config, binding.field) == new_value:
                continue
            setattr(self.config, binding.field, new_value)
            changed.append(binding.key)
            log.info(f"Setting '{binding.key}' changed to {new_value!r}")
            if binding.on_change is not None and binding.on_change not in handlers:
                handlers.append(binding.on_change)

        # Handlers run once all mirrors are current
        if self._owner is not None:
            for handler in handlers:
                try:
                    handler(self._owner)
                except Exception as e:
                    log.error(f"Error in settings change handler: {e}")
        return changed

    def _current_mtime(self) -> Optional[float]:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None

    def _schedule_poll(self):
        if self._scheduler is None or self._poll_ms <= 0:
            return
        self._poll_timer = self._scheduler.call_later(self._poll_ms, self._poll)

    def _poll(self):
        self._poll_timer = None
        if self._owner is None:
            return
        if self._current_mtime() != self._mtime:
            self.reload()
        self._schedule_poll()
