"""
Batch conversion of screenshots already sitting in the game folder.

Old captures have no live game state attached to them, so they are
named from a :class:`FileMetadataContext`: the date and time tokens come
from each file's own creation time and everything else is "unknown".
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable

from elite_shots.classifier import ScreenshotFile, ScreenshotKind, match_kind
from elite_shots.converter import ConversionRecord, ScreenshotConverter
from elite_shots.platform_utils import get_creation_time
from elite_shots.templating import FileMetadataContext

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one batch run."""
    converted: list[ConversionRecord] = field(default_factory=list)
    failed: list[ConversionRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.converted) + len(self.failed)


class BatchConverter:
    """Converts every screenshot found in *source_folder* in one pass."""

    def __init__(
        self,
        converter: ScreenshotConverter,
        source_folder: str | Path,
        creation_time: Callable[[Path], datetime] = get_creation_time,
    ):
        self._converter = converter
        self.source_folder = Path(source_folder)
        self._creation_time = creation_time

    def scan(self) -> dict[ScreenshotKind, list[ScreenshotFile]]:
        """List the source folder once, grouping screenshots by kind."""
        found: dict[ScreenshotKind, list[ScreenshotFile]] = {
            kind: [] for kind in ScreenshotKind
        }
        if not self.source_folder.is_dir():
            logger.warning("Screenshot folder does not exist: %s", self.source_folder)
            return found
        try:
            items = sorted(self.source_folder.iterdir())
        except OSError as exc:
            logger.error("Could not list %s: %s", self.source_folder, exc)
            return found
        for item in items:
            kind = match_kind(item.name)
            if kind is not None and item.is_file():
                found[kind].append(ScreenshotFile(item, kind))
        return found

    def count(self) -> dict[ScreenshotKind, int]:
        """Return how many screenshots of each kind await conversion."""
        return {kind: len(files) for kind, files in self.scan().items()}

    def run(self) -> BatchResult:
        """Convert every screenshot currently in the source folder."""
        result = BatchResult()
        found = self.scan()
        for kind in (ScreenshotKind.STANDARD, ScreenshotKind.HIGHRES):
            for shot in found[kind]:
                rec = self._convert_one(shot)
                (result.converted if rec.success else result.failed).append(rec)
        logger.info(
            "Converted %d old screenshot(s), %d failed.",
            len(result.converted),
            len(result.failed),
        )
        return result

    def _convert_one(self, shot: ScreenshotFile) -> ConversionRecord:
        try:
            created = self._creation_time(shot.path)
        except Exception as exc:
            logger.error("Could not read creation time of %s: %s", shot.path, exc)
            rec = ConversionRecord(source=str(shot.path), kind=shot.kind, error=str(exc))
            self._converter.stats.record(rec)
            return rec
        return self._converter.convert(shot.path, shot.kind, FileMetadataContext(created))


def describe_counts(counts: dict[ScreenshotKind, int]) -> str | None:
    """Return the startup notice about old screenshots, or None if there are none."""
    standard = counts.get(ScreenshotKind.STANDARD, 0)
    highres = counts.get(ScreenshotKind.HIGHRES, 0)
    if standard and highres:
        return (
            f"There are {standard} old screenshots and "
            f"{highres} old high res screenshots."
        )
    if standard:
        return f"There are {standard} old screenshots."
    if highres:
        return f"There are {highres} old high res screenshots."
    return None
