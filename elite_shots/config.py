"""Configuration management for Elite Screenshots.

Stores and retrieves user settings from a JSON config file
in the platform-appropriate application data directory.
"""

import json
import logging
from pathlib import Path
from typing import Any

from elite_shots.platform_utils import (
    get_config_dir as _platform_config_dir,
)
from elite_shots.platform_utils import (
    get_desktop_dir,
    get_state_path,
)
from elite_shots.platform_utils import (
    get_log_path as _platform_log_path,
)
from elite_shots.templating import KNOWN_TOKENS, find_tokens

logger = logging.getLogger(__name__)

# Available tokens for the output file name template
# %body%     — current body (planet, station, …)
# %cmdr%     — commander name
# %date%     — capture date YYYY-MM-DD
# %datetime% — capture date and time YYYY-MM-DD HH-MM-SS
# %shipname% — current ship name
# %system%   — current star system
# %time%     — capture time HH-MM-SS
# %vehicle%  — current vehicle (ship, SRV, fighter, …)
DEFAULT_TEMPLATE = "%datetime%-%cmdr%-%system%-%body%"

# High-res captures are written progressively by the game
DEFAULT_SETTLE_SECONDS = 5.0

DEFAULT_CONFIG: dict[str, Any] = {
    "template": DEFAULT_TEMPLATE,
    "output_directory": "",  # Empty = desktop
    "state_file": "",  # Empty = state.json next to the config file
    "highres_settle_seconds": DEFAULT_SETTLE_SECONDS,
    "log_level": "INFO",
    # ---- log rotation ----
    "max_log_size_mb": 10,  # rotate log when it exceeds this size
    "log_backup_count": 3,  # number of rotated log files to keep
}


def _warn_unknown_tokens(template: str) -> None:
    unknown = [t for t in find_tokens(template) if t not in KNOWN_TOKENS]
    if unknown:
        logger.warning(
            "Output format contains unknown token(s) %s; they will be kept as-is.",
            ", ".join(f"%{t}%" for t in unknown),
        )


def get_config_dir() -> Path:
    """Return the platform-appropriate application config directory."""
    return _platform_config_dir()


def get_config_path() -> Path:
    """Return the path to the configuration file."""
    return get_config_dir() / "config.json"


def get_log_path() -> Path:
    """Return the path to the log file."""
    return _platform_log_path()


class Config:
    """Configuration manager backed by a JSON file."""

    def __init__(self, path: Path | None = None):
        """Load config from *path*, falling back to the platform default."""
        self._path = path or get_config_path()
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        self._mtime: float | None = None
        self.load()

    @property
    def path(self) -> Path:
        return self._path

    # ---- persistence ----

    def load(self) -> None:
        """Load configuration from disk, applying defaults for missing keys."""
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as fh:
                    stored = json.load(fh)
                if not isinstance(stored, dict):
                    raise ValueError("top level is not a JSON object")
                # Merge stored values over defaults so new keys get defaults
                self._data = {**DEFAULT_CONFIG, **stored}
                self._mtime = self._path.stat().st_mtime
                logger.info("Configuration loaded from %s", self._path)
            except (ValueError, OSError) as exc:
                logger.warning("Could not read config (%s); using defaults.", exc)
                self._data = dict(DEFAULT_CONFIG)
        else:
            self._data = dict(DEFAULT_CONFIG)
            self.save()
            logger.info("Created default configuration at %s", self._path)

    def save(self) -> None:
        """Persist the current configuration to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2)
            self._mtime = self._path.stat().st_mtime
            logger.info("Configuration saved.")
        except OSError as exc:
            logger.error("Failed to save configuration: %s", exc)

    def refresh(self) -> bool:
        """Reload the file if it changed on disk.  Returns True on reload."""
        try:
            mtime = self._path.stat().st_mtime
        except OSError:
            return False
        if mtime == self._mtime:
            return False
        old_template = self.template
        old_output = self._data.get("output_directory", "")
        self.load()
        # A broken file is reported once, not on every refresh
        self._mtime = mtime
        if self.template != old_template:
            _warn_unknown_tokens(self.template)
            logger.info("Output format changed to '%s'.", self.template)
        if self._data.get("output_directory", "") != old_output:
            logger.info("Output directory changed to '%s'.", self.output_directory)
        return True

    # ---- accessors ----

    @property
    def template(self) -> str:
        """Return the output file name template."""
        return self._data.get("template") or DEFAULT_TEMPLATE

    @template.setter
    def template(self, value: str) -> None:
        """Set the output file name template, warning about unknown tokens."""
        value = value.strip() or DEFAULT_TEMPLATE
        _warn_unknown_tokens(value)
        self._data["template"] = value
        logger.info("Output format changed to '%s'.", value)

    @property
    def output_directory(self) -> Path:
        """Return the folder converted screenshots are written to."""
        value = self._data.get("output_directory", "")
        return Path(value) if value else get_desktop_dir()

    @output_directory.setter
    def output_directory(self, value: str | Path) -> None:
        """Set the output folder (blank = desktop)."""
        value = str(value).strip()
        self._data["output_directory"] = value
        if value and not Path(value).is_dir():
            logger.warning("Output directory '%s' does not exist yet.", value)
        logger.info("Output directory changed to '%s'.", value or get_desktop_dir())

    @property
    def state_file(self) -> Path:
        """Return the JSON file the host writes live game values to."""
        value = self._data.get("state_file", "")
        return Path(value) if value else get_state_path()

    @property
    def highres_settle_seconds(self) -> float:
        """Return the wait before reading a high-res capture."""
        return float(self._data.get("highres_settle_seconds", DEFAULT_SETTLE_SECONDS))

    @highres_settle_seconds.setter
    def highres_settle_seconds(self, value: float) -> None:
        """Set the high-res settle delay (minimum 0 s)."""
        self._data["highres_settle_seconds"] = max(0.0, float(value))

    @property
    def log_level(self) -> str:
        """Return the current logging level name."""
        return self._data.get("log_level", "INFO")

    @log_level.setter
    def log_level(self, value: str) -> None:
        """Set the logging level name."""
        self._data["log_level"] = value

    # ---- log rotation ----

    @property
    def max_log_size_mb(self) -> int:
        """Return the maximum log file size in MB before rotation."""
        return int(self._data.get("max_log_size_mb", 10))

    @max_log_size_mb.setter
    def max_log_size_mb(self, value: int) -> None:
        """Set the maximum log file size in MB (minimum 1)."""
        self._data["max_log_size_mb"] = max(1, int(value))

    @property
    def log_backup_count(self) -> int:
        """Return the number of rotated log backups to keep."""
        return int(self._data.get("log_backup_count", 3))

    @log_backup_count.setter
    def log_backup_count(self, value: int) -> None:
        """Set the number of rotated log backups to keep."""
        self._data["log_backup_count"] = max(0, int(value))
