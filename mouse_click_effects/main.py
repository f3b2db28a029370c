"""
Mouse Click Effects - main entry point and system tray daemon.

Acts as the applet host: owns the Tk main loop, calls the init/enable/disable
hooks and exposes them from a tray menu.
"""

import os
import sys
import queue
import signal
import logging
import argparse
import subprocess
import tkinter as tk
from pathlib import Path
from typing import Callable, Optional

# Handle imports for when pystray/PIL aren't available
try:
    import pystray
    from PIL import Image, ImageDraw
    TRAY_AVAILABLE = True
except ImportError:
    TRAY_AVAILABLE = False

from . import __version__, ClickEffectsError
from . import extension
from .config import get_config_path
from .extension import Metadata
from .tk_runtime import TkRuntime

log = logging.getLogger(__name__)

COMMAND_POLL_MS = 50
DEFAULT_QUIT_HOTKEY = 'ctrl+shift+q'


def setup_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


class ClickEffectsApp:
    """Host daemon: Tk main loop, tray icon and applet lifecycle."""

    def __init__(self, config_path: Optional[Path] = None, use_tray: bool = True):
        self.config_path = config_path or get_config_path()
        self.use_tray = use_tray and TRAY_AVAILABLE
        self.root: Optional[tk.Tk] = None
        self.tray: Optional['pystray.Icon'] = None
        self._commands: queue.Queue = queue.Queue()
        self._running = False

    @property
    def effects_enabled(self) -> bool:
        ext = extension.get_extension()
        return ext is not None and ext.enabled

    def post(self, command: Callable[[], None]):
        """Run command on the Tk thread (safe to call from any thread)."""
        self._commands.put(command)

    def _drain_commands(self):
        while True:
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                break
            try:
                command()
            except Exception as e:
                log.error(f"Error in command: {e}")

        if self._running:
            self.root.after(COMMAND_POLL_MS, self._drain_commands)

    def enable_effects(self):
        extension.enable()
        log.info("Click effects enabled")
        self._update_tray()

    def disable_effects(self):
        extension.disable()
        log.info("Click effects disabled")
        self._update_tray()

    def toggle_effects(self):
        if extension.get_extension() is not None:
            self.disable_effects()
        else:
            self.enable_effects()

    def reload_config(self):
        ext = extension.get_extension()
        if ext is None:
            log.info("Effects disabled, configuration will load on enable")
            return
        changed = ext.settings.reload()
        log.info(f"Configuration reloaded ({len(changed)} changed)")

    def _create_icon(self, active: bool = False) -> 'Image.Image':
        """Create tray icon image: a pointer with a click ripple."""
        size = 64
        img = Image.new('RGBA', (size, size), (0, 0, 0, 0))
        draw = ImageDraw.Draw(img)

        ripple = (53, 132, 228, 255) if active else (158, 158, 158, 255)
        draw.ellipse([4, 4, 44, 44], outline=ripple, width=5)
        draw.ellipse([16, 16, 32, 32], fill=ripple)

        # Pointer arrow
        draw.polygon([(24, 24), (24, 60), (34, 50), (42, 62), (48, 58), (40, 46), (54, 46)],
                     fill=(255, 255, 255, 255), outline=(0, 0, 0, 255))

        return img

    def _update_tray(self):
        if not self.tray:
            return
        try:
            self.tray.icon = self._create_icon(active=self.effects_enabled)
            self.tray.update_menu()
        except Exception as e:
            log.error(f"Error updating tray icon: {e}")

    def _create_menu(self):
        """Create the system tray menu. Actions are posted to the Tk thread."""

        def get_status(item):
            return f"Status: {'Active' if self.effects_enabled else 'Inactive'}"

        def is_enabled(item):
            return extension.get_extension() is not None

        def open_config(icon, item):
            log.info(f"Opening config: {self.config_path}")
            try:
                open_path(self.config_path)
            except OSError as e:
                log.error(f"Could not open {self.config_path}: {e}")

        def quit_app(icon, item):
            log.info("Quit requested from tray menu")
            self.post(self.stop)

        return pystray.Menu(
            pystray.MenuItem(get_status, None, enabled=False),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Enabled", lambda icon, item: self.post(self.toggle_effects),
                             checked=is_enabled),
            pystray.MenuItem("Open Config", open_config),
            pystray.MenuItem("Reload Config", lambda icon, item: self.post(self.reload_config)),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Quit", quit_app)
        )

    def start(self):
        """Start the host and block in the Tk main loop."""
        self._running = True

        log.info("=" * 60)
        log.info(f"Mouse Click Effects {__version__} starting...")
        log.info("=" * 60)

        self.root = tk.Tk()
        self.root.withdraw()

        extension.init(Metadata(), TkRuntime(self.root), settings_path=self.config_path)
        self.enable_effects()

        log.info(f"Config file: {self.config_path}")
        print(f"\nMouse Click Effects started!")
        print(f"Config: {self.config_path}\n")

        if self.use_tray:
            log.info("Starting system tray...")
            self.tray = pystray.Icon(
                'mouse-click-effects',
                self._create_icon(active=self.effects_enabled),
                'Mouse Click Effects',
                menu=self._create_menu()
            )
            self.tray.run_detached()
        else:
            log.warning("System tray not available, running in console mode")
            print("Press Ctrl+C to quit")

        self.root.after(COMMAND_POLL_MS, self._drain_commands)
        self.root.mainloop()

    def stop(self):
        """Stop the daemon. Must run on the Tk thread."""
        if not self._running:
            return
        log.info("Stopping Mouse Click Effects...")
        self._running = False

        extension.disable()

        if self.tray:
            self.tray.stop()
            self.tray = None

        if self.root:
            self.root.quit()

        log.info("Mouse Click Effects stopped")


def open_path(path: Path):
    """Open a file with the desktop's default handler."""
    if sys.platform == 'win32':
        os.startfile(path)
        return
    opener = 'open' if sys.platform == 'darwin' else 'xdg-open'
    subprocess.Popen([opener, str(path)], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)


def install_signal_handlers(app: ClickEffectsApp):
    def on_signal(signum, frame):
        log.info(f"Received {signal.Signals(signum).name}, shutting down...")
        app.post(app.stop)

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, on_signal)


def register_quit_hotkey(app: ClickEffectsApp, hotkey: str) -> bool:
    """Bind a global hotkey that stops the app. Returns False if unavailable."""
    if not hotkey:
        return False
    try:
        import keyboard as kb
        kb.add_hotkey(hotkey, lambda: app.post(app.stop), suppress=False)
    except (ImportError, OSError, ValueError) as e:
        # keyboard needs root on Linux and rejects unknown key names
        log.warning(f"Could not register quit hotkey '{hotkey}': {e}")
        return False
    log.info(f"Registered quit hotkey: {hotkey}")
    return True


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='mouse-click-effects',
        description='Show an animated icon wherever the mouse is clicked.',
    )
    parser.add_argument('--config', type=Path, default=None,
                        help=f'settings file (default: {get_config_path()})')
    parser.add_argument('--no-tray', action='store_true', help='run without the tray icon')
    parser.add_argument('--quit-hotkey', default=DEFAULT_QUIT_HOTKEY,
                        help='global hotkey that quits, empty to disable (default: %(default)s)')
    parser.add_argument('--debug', action='store_true', help='verbose logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.debug)

    app = ClickEffectsApp(config_path=args.config, use_tray=not args.no_tray)
    install_signal_handlers(app)
    register_quit_hotkey(app, args.quit_hotkey)

    try:
        app.start()
    except ClickEffectsError as e:
        log.error(f"Could not start: {e}")
        return 1
    except KeyboardInterrupt:
        app.stop()
    return 0


if __name__ == '__main__':
    sys.exit(main())
