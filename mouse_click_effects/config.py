"""
Configuration loading and management.
"""

import os
import logging
import yaml
from pathlib import Path
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

APP_NAME = 'mouse-click-effects'


@dataclass
class ClickEffectsConfig:
    """Flat set of options mirrored from the settings file."""
    animation_time: int = 400  # ms the animation stays on screen
    icon_mode: str = 'default'
    size: int = 40  # icon size in px
    left_click_effect_enabled: bool = True
    right_click_effect_enabled: bool = True
    middle_click_effect_enabled: bool = True
    left_click_color: str = '#3584e4'
    middle_click_color: str = '#33d17a'
    right_click_color: str = '#e01b24'
    general_opacity: int = 200  # 0-255
    animation_mode: str = 'expansion'
    deactivate_on_fullscreen: bool = True
    debounce_ms: int = 50


# Settings file key -> ClickEffectsConfig field
KEY_TO_FIELD: Dict[str, str] = {
    f.name.replace('_', '-'): f.name for f in fields(ClickEffectsConfig)
}


def _base_dir(env_var: str, posix_default: Path, mac_default: Path) -> Path:
    if os.name == 'nt':  # Windows
        return Path(os.environ.get(env_var, Path.home()))
    elif os.name == 'posix':
        if 'darwin' in os.uname().sysname.lower():  # macOS
            return mac_default
        return posix_default
    return Path.home()


def get_config_path() -> Path:
    """Get the configuration file path."""
    base = _base_dir(
        'APPDATA',
        Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config')),
        Path.home() / 'Library' / 'Application Support',
    )
    return base / APP_NAME / 'config.yaml'


def get_cache_root() -> Path:
    """Get the per-user cache root (not app specific)."""
    return _base_dir(
        'LOCALAPPDATA',
        Path(os.environ.get('XDG_CACHE_HOME', Path.home() / '.cache')),
        Path.home() / 'Library' / 'Caches',
    )


def coerce_value(field_name: str, value: Any) -> Any:
    """Convert a raw YAML value to the type of the matching config field."""
    # An unquoted '#ff0000' is a YAML comment, so the key reads as null
    if value is None:
        raise TypeError(f"'{field_name}' has no value")

    default = getattr(ClickEffectsConfig, field_name)
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in ('1', 'true', 'yes', 'on')
        return bool(value)
    if isinstance(default, int):
        return int(value)

    value = str(value).strip()
    if not value:
        raise ValueError(f"'{field_name}' is empty")
    return value


def config_from_dict(data: Dict[str, Any]) -> ClickEffectsConfig:
    """Build a config from a dict of settings keys, skipping bad entries."""
    config = ClickEffectsConfig()
    for key, value in data.items():
        field_name = KEY_TO_FIELD.get(key)
        if field_name is None:
            log.warning(f"Unknown setting '{key}' ignored")
            continue
        try:
            setattr(config, field_name, coerce_value(field_name, value))
        except (TypeError, ValueError):
            log.warning(f"Invalid value for '{key}': {value!r}, using default")
    return config


def config_to_dict(config: ClickEffectsConfig) -> Dict[str, Any]:
    """Serialize a config using the dashed settings keys."""
    return {key: getattr(config, name) for key, name in KEY_TO_FIELD.items()}


def read_settings(path: Path) -> Dict[str, Any]:
    """Read the raw settings mapping, or {} if the file is unusable."""
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        log.warning(f"Could not read settings from {path}: {e}")
        return {}

    if not isinstance(data, dict):
        log.warning(f"Settings file {path} is not a mapping, using defaults")
        return {}
    return data


def load_config(path: Optional[Path] = None) -> ClickEffectsConfig:
    """Load configuration from YAML file."""
    if path is None:
        path = get_config_path()

    if not path.exists():
        return create_default_config(path)

    return config_from_dict(read_settings(path))


def create_default_config(path: Path) -> ClickEffectsConfig:
    """Create and save a default configuration."""
    default_yaml = """# Mouse Click Effects configuration
# Changes are picked up while the applet is running.

# Animation: expansion, bounce or blink
animation-mode: expansion
animation-time: 400      # ms

# Icon: default, circle, square or target
icon-mode: default
size: 40                 # px
general-opacity: 200     # 0-255

left-click-effect-enabled: true
middle-click-effect-enabled: true
right-click-effect-enabled: true

left-click-color: '#3584e4'
middle-click-color: '#33d17a'
right-click-color: '#e01b24'

# Hide effects while a fullscreen window is focused
deactivate-on-fullscreen: true

# Minimum spacing between two animations
debounce-ms: 50
"""

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        f.write(default_yaml)

    return load_config(path)


def save_config(config: ClickEffectsConfig, path: Optional[Path] = None):
    """Save configuration to YAML file."""
    if path is None:
        path = get_config_path()

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.dump(config_to_dict(config), f, default_flow_style=False)
