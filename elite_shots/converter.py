"""
Screenshot conversion engine for Elite Screenshots.

Converts a BMP capture to PNG, writes it under a name built from the
configured template, and removes the original only once the PNG is
safely on disk.  :class:`ScreenshotConverter` is the per-file boundary:
whatever goes wrong with one file is logged and recorded there and
never propagates to the watcher or the batch loop.
"""

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from PIL import Image

from elite_shots.classifier import ScreenshotKind
from elite_shots.config import Config
from elite_shots.exceptions import ConversionError, EliteScreenshotsError
from elite_shots.paths import HIGHRES_SUFFIX, resolve_output_path
from elite_shots.templating import LiveContext, TokenContext, expand
from elite_shots.values import ValueSource

logger = logging.getLogger(__name__)


def convert_image(source: str | Path, target: str | Path) -> Path:
    """
    Save *source* as a PNG at *target*, then delete *source*.

    *target* must not exist yet; it is created exclusively so a name
    taken by a concurrent conversion is never overwritten.  On any read
    or write failure the partial PNG is removed, *source* is left alone
    and ConversionError is raised.
    """
    source = Path(source)
    target = Path(target)
    created = False
    try:
        with Image.open(source) as img:
            img.load()
            with open(target, "xb") as fh:
                created = True
                img.save(fh, format="PNG")
                fh.flush()
                os.fsync(fh.fileno())
    except Exception as exc:
        if created:
            try:
                target.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove partial file %s", target)
        raise ConversionError(
            f"Could not convert '{source}' to '{target}': {exc}"
        ) from exc

    try:
        source.unlink()
    except OSError as exc:
        # The PNG is complete; the original will be retried by a batch run
        logger.warning("Converted %s but could not delete it: %s", source, exc)
    return target


@dataclass
class ConversionRecord:
    """Record of a single conversion attempt."""
    source: str
    kind: ScreenshotKind
    destination: str = ""
    started: float = 0.0
    finished: float = 0.0
    success: bool = False
    error: str = ""

    @property
    def duration(self) -> float:
        if self.finished and self.started:
            return self.finished - self.started
        return 0.0


@dataclass
class ConversionStats:
    """Aggregated conversion statistics."""
    total_converted: int = 0
    total_failed: int = 0
    last_converted_file: str = ""
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, rec: ConversionRecord) -> None:
        with self._lock:
            if rec.success:
                self.total_converted += 1
                self.last_converted_file = rec.destination
            else:
                self.total_failed += 1


class ScreenshotConverter:
    """
    Names, converts and moves screenshots.

    Parameters
    ----------
    config : Config
        Supplies the template and output folder.  Both are read again
        for every file, so edits to the config file apply to the next
        screenshot.
    values : ValueSource
        Host values used by live conversions.
    on_complete : callable, optional
        Callback invoked after each attempt with the ConversionRecord.
    """

    def __init__(
        self,
        config: Config,
        values: ValueSource,
        on_complete: Callable[[ConversionRecord], None] | None = None,
    ):
        self._config = config
        self._values = values
        self._on_complete = on_complete
        self.stats = ConversionStats()

    def target_path(self, kind: ScreenshotKind, context: TokenContext) -> Path:
        """Expand the template and resolve a free path in the output folder."""
        self._config.refresh()
        base_name = expand(self._config.template, context)
        directory = self._config.output_directory
        directory.mkdir(parents=True, exist_ok=True)
        suffix = HIGHRES_SUFFIX if kind is ScreenshotKind.HIGHRES else ""
        return resolve_output_path(base_name, directory, suffix)

    def convert_live(self, source: Path, kind: ScreenshotKind) -> ConversionRecord:
        """Convert a capture that was just taken, naming it from live values."""
        return self.convert(source, kind, LiveContext(self._values))

    def convert(
        self, source: Path, kind: ScreenshotKind, context: TokenContext
    ) -> ConversionRecord:
        """Convert *source*, naming it through *context*.  Never raises."""
        rec = ConversionRecord(source=str(source), kind=kind, started=time.time())
        try:
            target = self.target_path(kind, context)
            rec.destination = str(target)
            convert_image(source, target)
            rec.finished = time.time()
            rec.success = True
            logger.info(
                "Saved%s screenshot to '%s' (%.2fs).",
                " high resolution" if kind is ScreenshotKind.HIGHRES else "",
                target,
                rec.duration,
            )
        except EliteScreenshotsError as exc:
            rec.error = str(exc)
            logger.error("%s", exc)
        except Exception as exc:
            rec.error = str(exc)
            logger.exception("Unexpected error converting %s", source)
        finally:
            if not rec.finished:
                rec.finished = time.time()
            self.stats.record(rec)
            if self._on_complete:
                try:
                    self._on_complete(rec)
                except Exception:
                    logger.exception("Error in on_complete callback")
        return rec
