"""
Output file name templating.

A template is a plain string with ``%token%`` placeholders, e.g. the
default ``%datetime%-%cmdr%-%system%-%body%``.  Tokens are resolved
through a :class:`TokenContext`:

- :class:`LiveContext` reads the host's live game values and the
  current time, for captures handled as they are taken;
- :class:`FileMetadataContext` knows nothing about the game and uses the
  file's creation time, for old captures converted in a batch.

Unknown tokens are left in place, ``%`` delimiters included.  After
substitution every character that cannot appear in a file name is
replaced with an underscore.
"""

from __future__ import annotations

import re
from datetime import datetime

from elite_shots import values as hostkeys
from elite_shots.platform_utils import invalid_filename_chars

UNKNOWN = "unknown"

TOKEN_RE = re.compile(r"%(?P<token>[\w: \-\.]*)%")

# Tokens formatted from the context's timestamp
TIME_FORMATS = {
    "date": "%Y-%m-%d",
    "datetime": "%Y-%m-%d %H-%M-%S",
    "time": "%H-%M-%S",
}

# Tokens looked up in the host's live values
LIVE_KEYS = {
    "body": hostkeys.KEY_BODY,
    "cmdr": hostkeys.KEY_CMDR,
    "shipname": hostkeys.KEY_SHIPNAME,
    "system": hostkeys.KEY_SYSTEM,
    "vehicle": hostkeys.KEY_VEHICLE,
}

KNOWN_TOKENS = frozenset(TIME_FORMATS) | frozenset(LIVE_KEYS)


class TokenContext:
    """Supplies values for the template tokens."""

    def timestamp(self) -> datetime:
        """Return the moment the date and time tokens describe."""
        raise NotImplementedError

    def lookup(self, token: str) -> str | None:
        """Return the value of a contextual token, or None if unavailable."""
        raise NotImplementedError


class LiveContext(TokenContext):
    """Values from the running game, read once and frozen at construction."""

    def __init__(self, values: hostkeys.ValueSource, now: datetime | None = None):
        self._values = values.get_strings(LIVE_KEYS.values())
        self._now = now or datetime.now()

    def timestamp(self) -> datetime:
        return self._now

    def lookup(self, token: str) -> str | None:
        key = LIVE_KEYS.get(token)
        if key is None:
            return None
        return self._values.get(key)


class FileMetadataContext(TokenContext):
    """Values derivable from the file alone: only its creation time."""

    def __init__(self, created: datetime):
        self._created = created

    def timestamp(self) -> datetime:
        return self._created

    def lookup(self, token: str) -> str | None:
        return None


def find_tokens(template: str) -> list[str]:
    """Return the distinct tokens of *template* in order of appearance."""
    seen: dict[str, None] = {}
    for match in TOKEN_RE.finditer(template):
        seen.setdefault(match.group("token"), None)
    return list(seen)


def resolve_token(token: str, context: TokenContext) -> str:
    """Return the replacement text for a single token."""
    fmt = TIME_FORMATS.get(token)
    if fmt is not None:
        return context.timestamp().strftime(fmt)
    if token in LIVE_KEYS:
        value = context.lookup(token)
        return UNKNOWN if value is None else value
    return f"%{token}%"


def sanitize_filename(name: str) -> str:
    """Replace characters that are illegal in a file name with ``_``."""
    for char in invalid_filename_chars():
        name = name.replace(char, "_")
    return name


def expand(template: str, context: TokenContext) -> str:
    """Expand every ``%token%`` of *template* and sanitise the result."""
    resolved = {token: resolve_token(token, context) for token in find_tokens(template)}
    expanded = TOKEN_RE.sub(lambda m: resolved[m.group("token")], template)
    return sanitize_filename(expanded)
