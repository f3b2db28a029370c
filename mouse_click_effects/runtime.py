"""
Host runtime interfaces: the services the applet gets from its host.

The applet only talks to these interfaces, so it can be driven by the
tkinter main loop in production (see tk_runtime) and by fakes in tests.
"""

from dataclasses import dataclass
from typing import Any, Callable, Protocol


@dataclass
class AnimationOptions:
    opacity: int  # 0-255
    icon_size: int  # px
    timeout: int  # ms


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class Listener(Protocol):
    def register(self) -> None: ...

    def deregister(self) -> None: ...


class FullscreenWatcher(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...


class ClickAnimation(Protocol):
    def animate_click(self, icon: Any, options: AnimationOptions) -> None: ...


class AnimationFactory(Protocol):
    def create_for_mode(self, mode: str) -> ClickAnimation: ...


class HostRuntime(Protocol):
    scheduler: Scheduler
    animation_factory: AnimationFactory

    def create_listener(self, callback: Callable) -> Listener: ...

    def create_fullscreen_watcher(self, on_changed: Callable[[], None]) -> FullscreenWatcher: ...

    def query_fullscreen(self) -> bool: ...
