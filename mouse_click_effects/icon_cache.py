"""
Colored icon cache.

Base icons are monochrome SVGs drawn with fill="#000000". For every
(icon mode, click type, color) a recolored copy is written to the cache
directory and a handle to it is memoized in memory. Lookups never generate;
generation only happens through regenerate_all().
"""

import os
import logging
from enum import Enum
from pathlib import Path
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from . import ClickEffectsError

log = logging.getLogger(__name__)

SOURCE_FILL = b'fill="#000000"'


class ClickType(Enum):
    LEFT = 'left_click'
    MIDDLE = 'middle_click'
    RIGHT = 'right_click'


class IconCacheError(ClickEffectsError):
    """The cache directory could not be created."""


@dataclass(frozen=True)
class ColoredIcon:
    """Handle to a recolored icon file in the cache."""
    path: Path
    mode: str
    click_type: ClickType
    color: str


def icon_name(mode: str, click_type: ClickType, color: str) -> str:
    return f"{mode}_{click_type.value}_{color}"


def recolor_svg(contents: bytes, color: str) -> bytes:
    """Swap every black fill attribute for the given color."""
    return contents.replace(SOURCE_FILL, f'fill="{color}"'.encode('utf-8'))


class IconCache:
    """
    Two-tier cache of colored icons: in-memory handles backed by files.

    If a file exists on disk but no handle is in memory, the handle is
    rebuilt from the file instead of regenerating the icon.
    """

    def __init__(self, source_dir: Path, data_dir: Path):
        self.source_dir = Path(source_dir)
        self.data_dir = Path(data_dir)
        self.icons_dir = self.data_dir / 'icons'
        self._store: Dict[str, ColoredIcon] = {}

        try:
            self.icons_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IconCacheError(f"Failed to create cache dir at {self.data_dir}: {e}") from e

        log.debug(f"Icon cache at {self.icons_dir}, sources in {self.source_dir}")

    def cache_path(self, mode: str, click_type: ClickType, color: str) -> Path:
        return self.icons_dir / f"{icon_name(mode, click_type, color)}.svg"

    def get_colored_icon(self, mode: str, click_type: ClickType, color: str) -> Optional[ColoredIcon]:
        """Return the cached icon handle, or None if it was never generated."""
        name = icon_name(mode, click_type, color)

        icon = self._store.get(name)
        if icon is not None:
            return icon

        path = self.cache_path(mode, click_type, color)
        if path.is_file():
            icon = ColoredIcon(path=path, mode=mode, click_type=click_type, color=color)
            self._store[name] = icon
            return icon

        return None

    def create_colored_icon(self, mode: str, click_type: ClickType, color: str) -> Optional[ColoredIcon]:
        """
        Make sure the colored icon exists, generating it if needed.

        I/O errors are logged and leave the entry absent so that the next
        regeneration tries again.
        """
        icon = self.get_colored_icon(mode, click_type, color)
        if icon is not None:
            return icon

        source = self.source_dir / f"{mode}.svg"
        dest = self.cache_path(mode, click_type, color)

        # A partial file would be picked up by get_colored_icon as valid
        tmp = dest.with_name(dest.name + '.part')
        try:
            contents = source.read_bytes()
            tmp.write_bytes(recolor_svg(contents, color))
            os.replace(tmp, dest)
        except OSError as e:
            log.error(f"Failed to generate {click_type.value} icon '{mode}' ({color}): {e}")
            tmp.unlink(missing_ok=True)
            return None

        log.info(f"Generated colored icon {dest.name}")
        return self.get_colored_icon(mode, click_type, color)

    def regenerate_all(self, mode: str, colors: Mapping[ClickType, str]):
        """Ensure an icon exists for each click type with its current color."""
        for click_type in ClickType:
            color = colors.get(click_type)
            if color is None:
                continue
            self.create_colored_icon(mode, click_type, color)
