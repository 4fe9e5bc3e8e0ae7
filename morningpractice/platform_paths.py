"""Platform-specific per-user paths.

Config and log files live in a per-user directory, never next to the
installed package. Only standard environment variables are consulted.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from . import __app_name__

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


def is_windows() -> bool:
    return os.name == "nt"


def get_user_data_dir(app_name: str = __app_name__) -> Path:
    """Return a persistent per-user data directory.

    Windows: %APPDATA%\\MorningPractice
    Elsewhere: $XDG_CONFIG_HOME/morningpractice, else ~/.morningpractice
    """
    if is_windows():
        base = os.getenv("APPDATA")
        if base:
            return Path(base) / app_name
        return Path.home() / "AppData" / "Roaming" / app_name

    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / app_name.lower()
    return Path.home() / f".{app_name.lower()}"


def get_default_config_path(app_name: str = __app_name__) -> Path:
    return get_user_data_dir(app_name) / CONFIG_FILENAME


def ensure_dir(path: Path) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
