"""
Main application controller for Elite Screenshots.

Ties together configuration, the live value source, the converter,
the folder watcher and the batch converter, and owns logging setup.
"""

import logging
import logging.handlers
import signal
import sys
import threading
from pathlib import Path

from elite_shots import __app_name__, __version__
from elite_shots.batch import BatchConverter, BatchResult, describe_counts
from elite_shots.config import Config, get_log_path
from elite_shots.converter import ScreenshotConverter
from elite_shots.platform_utils import get_screenshots_dir
from elite_shots.values import StateFileValues, ValueSource
from elite_shots.watcher import ScreenshotEventHandler, ScreenshotWatcher

logger = logging.getLogger(__name__)


def setup_logging(config: Config, log_path: Path | None = None) -> None:
    """Configure rotating file log and stderr handler."""
    log_path = log_path or get_log_path()
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    # Rotating file handler
    max_bytes = config.max_log_size_mb * 1024 * 1024
    fh = logging.handlers.RotatingFileHandler(
        str(log_path),
        maxBytes=max_bytes,
        backupCount=config.log_backup_count,
        encoding="utf-8",
    )
    fh.setLevel(level)
    fh.setFormatter(fmt)
    root_logger.addHandler(fh)

    # Stderr handler
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(fmt)
    root_logger.addHandler(sh)


class App:
    """Central orchestrator for the watch loop and batch conversion."""

    def __init__(
        self,
        config: Config | None = None,
        values: ValueSource | None = None,
        source_folder: Path | None = None,
    ) -> None:
        self.config = config or Config()
        self.values = values or StateFileValues(self.config.state_file)
        self.source_folder = source_folder or get_screenshots_dir()
        self.converter = ScreenshotConverter(self.config, self.values)
        self.batch = BatchConverter(self.converter, self.source_folder)
        self._stop = threading.Event()

    def announce_old_screenshots(self) -> None:
        """Log how many unconverted screenshots are waiting, if any."""
        try:
            notice = describe_counts(self.batch.count())
        except OSError as exc:
            logger.error("Could not scan %s: %s", self.source_folder, exc)
            return
        if notice:
            logger.info(notice)
            logger.info("Run the 'convertold' command to convert them.")

    def convert_old(self) -> BatchResult:
        """Convert every screenshot already in the source folder."""
        return self.batch.run()

    def watch(self) -> None:
        """Convert new screenshots until stop() is called or a signal arrives."""
        logger.info("%s %s starting.", __app_name__, __version__)
        self.announce_old_screenshots()

        handler = ScreenshotEventHandler(
            self.converter, settle_seconds=self.config.highres_settle_seconds
        )
        self._install_signal_handlers()
        with ScreenshotWatcher(self.source_folder, handler):
            self._stop.wait()
        stats = self.converter.stats
        logger.info(
            "Shutting down: %d converted, %d failed.",
            stats.total_converted,
            stats.total_failed,
        )

    def stop(self) -> None:
        self._stop.set()

    def _install_signal_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            return

        def _handler(sig, frame):
            self.stop()

        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
