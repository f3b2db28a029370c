import shutil
from pathlib import Path

import pytest

from mouse_click_effects import extension
from mouse_click_effects.extension import Metadata, MouseClickEffects

PACKAGE_DIR = Path(extension.__file__).resolve().parent


class FakeScheduler:
    """Manual clock: timers only fire from advance()."""

    def __init__(self):
        self.now = 0
        self._timers = {}
        self._next_handle = 0

    def call_later(self, delay_ms, callback):
        self._next_handle += 1
        self._timers[self._next_handle] = (self.now + delay_ms, callback)
        return self._next_handle

    def cancel(self, handle):
        self._timers.pop(handle, None)

    @property
    def pending(self):
        return len(self._timers)

    def advance(self, ms):
        target = self.now + ms
        while True:
            due = [(when, handle) for handle, (when, _) in self._timers.items() if when <= target]
            if not due:
                break
            when, handle = min(due)
            _, callback = self._timers.pop(handle)
            self.now = when
            callback()
        self.now = target


class FakeListener:
    def __init__(self, callback):
        self.callback = callback
        self.registered = False
        self.register_calls = 0
        self.deregister_calls = 0

    def register(self):
        self.registered = True
        self.register_calls += 1

    def deregister(self):
        self.registered = False
        self.deregister_calls += 1

    def emit(self, event):
        # Deregistered listeners deliver nothing
        if self.registered:
            self.callback(event)


class FakeWatcher:
    def __init__(self, on_changed):
        self.on_changed = on_changed
        self.running = False

    def start(self):
        self.running = True

    def stop(self):
        self.running = False


class FakeAnimation:
    def __init__(self, mode, calls):
        self.mode = mode
        self.calls = calls

    def animate_click(self, icon, options):
        self.calls.append((self.mode, icon, options))


class FakeAnimationFactory:
    def __init__(self):
        self.calls = []

    def create_for_mode(self, mode):
        return FakeAnimation(mode, self.calls)


class FakeRuntime:
    def __init__(self):
        self.scheduler = FakeScheduler()
        self.animation_factory = FakeAnimationFactory()
        self.fullscreen = False
        self.listeners = []
        self.watchers = []

    @property
    def listener(self):
        return self.listeners[-1]

    @property
    def watcher(self):
        return self.watchers[-1]

    @property
    def animations(self):
        return self.animation_factory.calls

    def create_listener(self, callback):
        listener = FakeListener(callback)
        self.listeners.append(listener)
        return listener

    def create_fullscreen_watcher(self, on_changed):
        watcher = FakeWatcher(on_changed)
        self.watchers.append(watcher)
        return watcher

    def query_fullscreen(self):
        return self.fullscreen

    def set_fullscreen(self, value):
        self.fullscreen = value
        for watcher in self.watchers:
            if watcher.running:
                watcher.on_changed()


@pytest.fixture
def runtime():
    return FakeRuntime()


@pytest.fixture
def applet_dir(tmp_path):
    """A copy of the installed applet with its base icons."""
    path = tmp_path / 'applet'
    shutil.copytree(PACKAGE_DIR / 'icons', path / 'icons')
    return path


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / 'config' / 'config.yaml'


@pytest.fixture
def cache_root(tmp_path):
    return tmp_path / 'cache'


@pytest.fixture
def metadata(applet_dir):
    return Metadata(uuid='mouse-click-effects@test', path=applet_dir)


@pytest.fixture
def make_applet(metadata, runtime, settings_path, cache_root):
    def factory():
        return MouseClickEffects(metadata, runtime, settings_path=settings_path, cache_root=cache_root)
    return factory


@pytest.fixture(autouse=True)
def reset_extension(monkeypatch):
    monkeypatch.setattr(extension, '_extension', None)
    monkeypatch.setattr(extension, '_metadata', None)
    monkeypatch.setattr(extension, '_runtime', None)
    monkeypatch.setattr(extension, '_settings_path', None)
    monkeypatch.setattr(extension, '_cache_root', None)
