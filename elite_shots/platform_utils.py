"""
Cross-platform utilities for Elite Screenshots.

Centralises all OS-detection logic so every other module can import
a single canonical set of helpers rather than scattering ``sys.platform``
checks throughout the codebase.

Supported platforms:
  - Windows 10/11 (where the game runs natively)
  - macOS and Linux (best-effort; Proton / Wine prefixes mirror the
    Windows "Pictures" layout under the home directory)
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# ---- platform flags ----------------------------------------------------

IS_WINDOWS: bool = sys.platform == "win32"
IS_MACOS: bool = sys.platform == "darwin"
IS_LINUX: bool = sys.platform.startswith("linux")

_APP_DIR_NAME = "EliteScreenshots"

# Characters .NET reports as invalid in Windows file names
_WINDOWS_INVALID_CHARS = '"<>|:*?\\/' + "".join(chr(c) for c in range(32))
_POSIX_INVALID_CHARS = "/\0"

# ---- directories -------------------------------------------------------


def get_config_dir() -> Path:
    """
    Return the application config directory, created if needed.

    - Windows : ``%APPDATA%\\EliteScreenshots``
    - macOS   : ``~/Library/Application Support/EliteScreenshots``
    - Linux   : ``$XDG_CONFIG_HOME/EliteScreenshots`` (default ``~/.config``)
    """
    if IS_WINDOWS:
        base = os.environ.get("APPDATA", str(Path.home()))
    elif IS_MACOS:
        base = str(Path.home() / "Library" / "Application Support")
    else:
        base = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))

    config_dir = Path(base) / _APP_DIR_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_log_path() -> Path:
    """Return the path to the log file (inside the config directory)."""
    return get_config_dir() / "elite_screenshots.log"


def get_state_path() -> Path:
    """Return the default path of the host's live-value state file."""
    return get_config_dir() / "state.json"


def _user_home() -> Path:
    if IS_WINDOWS:
        return Path(os.environ.get("USERPROFILE", str(Path.home())))
    return Path.home()


def get_pictures_dir() -> Path:
    """Return the user's "Pictures" folder."""
    if IS_LINUX and os.environ.get("XDG_PICTURES_DIR"):
        return Path(os.environ["XDG_PICTURES_DIR"])
    return _user_home() / "Pictures"


def get_screenshots_dir() -> Path:
    """Return the folder the game writes its screenshots to."""
    return get_pictures_dir() / "Frontier Developments" / "Elite Dangerous"


def get_desktop_dir() -> Path:
    """Return the user's desktop folder (the default output folder)."""
    if IS_LINUX and os.environ.get("XDG_DESKTOP_DIR"):
        return Path(os.environ["XDG_DESKTOP_DIR"])
    return _user_home() / "Desktop"


# ---- file metadata -----------------------------------------------------


def get_creation_time(path: str | Path) -> datetime:
    """
    Return the creation time of *path* as a local naive datetime.

    Uses ``st_birthtime`` where the platform records it (Windows, macOS)
    and falls back to ``st_ctime`` elsewhere.
    """
    st = os.stat(path)
    created = getattr(st, "st_birthtime", None)
    if created is None:
        created = st.st_ctime
    return datetime.fromtimestamp(created)


def invalid_filename_chars() -> str:
    """Return the characters that may not appear in a file name here."""
    return _WINDOWS_INVALID_CHARS if IS_WINDOWS else _POSIX_INVALID_CHARS
