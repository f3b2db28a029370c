"""
Applet core and host lifecycle hooks.

The host calls init(metadata) once, then enable()/disable() any number of
times. A single MouseClickEffects instance exists between enable() and
disable(); disable() drops it so the next enable() starts from fresh state.
"""

import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Set

from .config import get_cache_root, get_config_path
from .debounce import Debouncer
from .dispatcher import ClickDispatcher
from .icon_cache import ClickType, ColoredIcon, IconCache
from .runtime import AnimationOptions, HostRuntime
from .settings import SettingsBridge

log = logging.getLogger(__name__)

UUID = 'mouse-click-effects@anaximeno'


@dataclass
class Metadata:
    """What the host knows about the installed applet."""
    uuid: str = UUID
    path: Path = field(default_factory=lambda: Path(__file__).resolve().parent)


class MouseClickEffects:
    """Wires settings, icon cache, dispatcher and animations together."""

    def __init__(
        self,
        metadata: Metadata,
        runtime: HostRuntime,
        settings_path: Optional[Path] = None,
        cache_root: Optional[Path] = None,
    ):
        self.metadata = metadata
        self.runtime = runtime
        self.app_icons_dir = Path(metadata.path) / 'icons'
        self._warned_modes: Set[str] = set()

        # Raises IconCacheError before anything else is set up
        self.icon_cache = IconCache(
            self.app_icons_dir,
            (cache_root or get_cache_root()) / metadata.uuid,
        )

        self.settings = SettingsBridge(settings_path or get_config_path(), runtime.scheduler)
        self.config = self.settings.bind(self)

        self.display_click = Debouncer(self._animate_click, self.config.debounce_ms, runtime.scheduler)
        self.dispatcher = ClickDispatcher(
            self.config,
            runtime.create_listener,
            self.display_click,
            self.update_colored_icons,
        )
        self.fullscreen_watcher = runtime.create_fullscreen_watcher(self.on_fullscreen_changed)
        self.fullscreen_watcher.start()

        self.update_colored_icons()

    @property
    def enabled(self) -> bool:
        return self.dispatcher.is_active

    def enable(self):
        self.set_active(True)

    def disable(self):
        self.destroy()

    def destroy(self):
        self.fullscreen_watcher.stop()
        self.set_active(False)
        self.settings.finalize()

    def set_active(self, enabled: bool):
        if not enabled:
            self.display_click.cancel()
        self.dispatcher.set_active(enabled)

    def on_fullscreen_changed(self):
        if self.config.deactivate_on_fullscreen:
            self.set_active(not self.runtime.query_fullscreen())

    def get_colored_icon(self, mode: str, click_type: ClickType, color: str) -> Optional[ColoredIcon]:
        return self.icon_cache.get_colored_icon(mode, click_type, color)

    def update_colored_icons(self):
        self._warned_modes.discard(self.config.icon_mode)
        self.icon_cache.regenerate_all(self.config.icon_mode, {
            ClickType.LEFT: self.config.left_click_color,
            ClickType.MIDDLE: self.config.middle_click_color,
            ClickType.RIGHT: self.config.right_click_color,
        })

    def update_debounce_window(self):
        self.display_click.window_ms = self.config.debounce_ms

    def _animate_click(self, click_type: ClickType, color: str):
        mode = self.config.icon_mode
        icon = self.get_colored_icon(mode, click_type, color)
        if icon is None:
            if mode not in self._warned_modes:
                self._warned_modes.add(mode)
                log.warning(f"No '{mode}' icons yet, clicks are skipped until the next "
                            f"activation or color change")
            log.debug(f"No icon for {click_type.value} ({color}), skipping animation")
            return

        options = AnimationOptions(
            opacity=self.config.general_opacity,
            icon_size=self.config.size,
            timeout=self.config.animation_time,
        )
        try:
            animation = self.runtime.animation_factory.create_for_mode(self.config.animation_mode)
            animation.animate_click(icon, options)
        except Exception as e:
            log.error(f"Animation '{self.config.animation_mode}' failed: {e}")


# Process-wide applet handle, managed only by init/enable/disable
_extension: Optional[MouseClickEffects] = None
_metadata: Optional[Metadata] = None
_runtime: Optional[HostRuntime] = None
_settings_path: Optional[Path] = None
_cache_root: Optional[Path] = None


def _default_runtime() -> HostRuntime:
    """A Tk runtime on a new hidden root window."""
    import tkinter as tk
    from .tk_runtime import TkRuntime

    root = tk.Tk()
    root.withdraw()
    return TkRuntime(root)


def get_extension() -> Optional[MouseClickEffects]:
    return _extension


def init(metadata: Metadata, runtime: Optional[HostRuntime] = None,
         settings_path: Optional[Path] = None, cache_root: Optional[Path] = None):
    """Remember the host context and build the applet instance."""
    global _extension, _metadata, _runtime, _settings_path, _cache_root

    _metadata = metadata
    _settings_path = settings_path
    _cache_root = cache_root
    if runtime is not None:
        _runtime = runtime

    if _extension is None:
        if _runtime is None:
            _runtime = _default_runtime()
        _extension = MouseClickEffects(metadata, _runtime, settings_path, cache_root)


def enable():
    global _extension

    if _metadata is None:
        raise RuntimeError("init() must be called before enable()")
    if _extension is None:
        _extension = MouseClickEffects(_metadata, _runtime, _settings_path, _cache_root)
    _extension.enable()


def disable():
    global _extension

    if _extension is not None:
        _extension.disable()
        _extension = None
