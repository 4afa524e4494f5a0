"""Screenshot file classification.

The game writes two kinds of captures into its screenshot folder:

- ``Screenshot_0001.bmp`` for ordinary captures, written in one go;
- ``HighResScreenShot_2024-01-01_12-00-00.bmp`` for high-resolution
  captures, which are written progressively over several seconds.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from pathlib import Path

from elite_shots.exceptions import ClassificationError


class ScreenshotKind(enum.Enum):
    STANDARD = "standard"
    HIGHRES = "highres"


@dataclass(frozen=True)
class NamingPattern:
    """A compiled file name pattern for one kind of capture."""
    kind: ScreenshotKind
    regex: re.Pattern

    def matches(self, filename: str) -> bool:
        return self.regex.match(filename) is not None


# The literal prefixes differ, so no name can match both
STANDARD_PATTERN = NamingPattern(
    ScreenshotKind.STANDARD,
    re.compile(r"^Screenshot_\d{4}\.bmp$"),
)
HIGHRES_PATTERN = NamingPattern(
    ScreenshotKind.HIGHRES,
    re.compile(r"^HighResScreenShot_\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.bmp$"),
)
PATTERNS = (STANDARD_PATTERN, HIGHRES_PATTERN)


@dataclass(frozen=True)
class ScreenshotFile:
    """A screenshot found in the source folder."""
    path: Path
    kind: ScreenshotKind


def match_kind(filename: str) -> ScreenshotKind | None:
    """Return the kind of *filename*, or None if it is not a screenshot."""
    for pattern in PATTERNS:
        if pattern.matches(filename):
            return pattern.kind
    return None


def classify(filename: str) -> ScreenshotKind:
    """Return the kind of *filename*, raising ClassificationError otherwise."""
    kind = match_kind(filename)
    if kind is None:
        raise ClassificationError(
            f"Found new file '{filename}', but it does not appear to be a screenshot."
        )
    return kind
