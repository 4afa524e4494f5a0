"""Live game values supplied by the host application.

The converter never talks to the game itself.  Whatever tracks the game
state (a journal reader, a voice-control host, …) exposes it as a flat
string key-value store, read through :class:`ValueSource`.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# Host keys for the contextual template tokens
KEY_BODY = "Status body name"
KEY_CMDR = "Name"
KEY_SHIPNAME = "Ship name"
KEY_SYSTEM = "System name"
KEY_VEHICLE = "Status vehicle"


class ValueSource(Protocol):
    """Typed read access to the host's key-value state."""

    def get_string(self, key: str) -> str | None:
        """Return the value stored under *key*, or None when absent."""
        ...

    def get_strings(self, keys: Iterable[str]) -> dict[str, str | None]:
        """Return the values of *keys* read together, as one consistent snapshot."""
        ...


class StaticValues:
    """A fixed mapping of host values."""

    def __init__(self, values: Mapping[str, str] | None = None):
        self._values = dict(values or {})

    def get_string(self, key: str) -> str | None:
        value = self._values.get(key)
        return None if value is None else str(value)

    def get_strings(self, keys: Iterable[str]) -> dict[str, str | None]:
        return {key: self.get_string(key) for key in keys}


class StateFileValues:
    """
    Host values read from a JSON object file.

    The file is re-read whenever its modification time changes, so the
    host can rewrite it at any moment.  A missing or unreadable file
    behaves like an empty store.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._values: dict[str, str] = {}
        self._mtime: float | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get_string(self, key: str) -> str | None:
        with self._lock:
            self._reload_if_changed()
            value = self._values.get(key)
        return None if value is None else str(value)

    def get_strings(self, keys: Iterable[str]) -> dict[str, str | None]:
        with self._lock:
            self._reload_if_changed()
            found = {key: self._values.get(key) for key in keys}
        return {k: None if v is None else str(v) for k, v in found.items()}

    def _reload_if_changed(self) -> None:
        try:
            mtime = self._path.stat().st_mtime
        except OSError:
            if self._mtime is not None:
                logger.debug("State file %s disappeared.", self._path)
            self._values = {}
            self._mtime = None
            return
        if mtime == self._mtime:
            return
        self._mtime = mtime
        try:
            with open(self._path, encoding="utf-8") as fh:
                stored = json.load(fh)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Could not read state file %s (%s).", self._path, exc)
            self._values = {}
            return
        if not isinstance(stored, dict):
            logger.warning("State file %s does not hold a JSON object.", self._path)
            self._values = {}
            return
        self._values = {k: v for k, v in stored.items() if v is not None}
        logger.debug("Loaded %d value(s) from %s", len(self._values), self._path)
