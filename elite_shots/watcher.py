"""File system watcher for Elite Screenshots.

Uses the watchdog library to monitor the game's screenshot folder for
new captures and hands each one to the converter on its own thread.
High-resolution captures are still being written when they first
appear, so they wait out a settle delay on a timer before conversion.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any

from watchdog.events import FileCreatedEvent, FileSystemEventHandler
from watchdog.observers import Observer

from elite_shots.classifier import ScreenshotKind, classify
from elite_shots.config import DEFAULT_SETTLE_SECONDS
from elite_shots.converter import ScreenshotConverter
from elite_shots.exceptions import ClassificationError

logger = logging.getLogger(__name__)


class ScreenshotEventHandler(FileSystemEventHandler):
    """
    Watchdog handler that turns creation events into conversions.

    Every event is its own unit of work: standard captures run on a
    worker thread straight away, high-res captures on a
    ``threading.Timer`` that fires after the settle delay.  Neither
    blocks the observer thread or any other capture.
    """

    def __init__(
        self,
        converter: ScreenshotConverter,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
    ):
        """Initialise the handler for *converter*."""
        super().__init__()
        self._converter = converter
        self._settle_seconds = settle_seconds
        self._timers: set[threading.Timer] = set()
        self._workers: set[threading.Thread] = set()
        self._lock = threading.Lock()

    @property
    def settle_seconds(self) -> float:
        return self._settle_seconds

    @settle_seconds.setter
    def settle_seconds(self, value: float) -> None:
        self._settle_seconds = max(0.0, value)

    def on_created(self, event: FileCreatedEvent) -> None:  # type: ignore[override]
        """Handle a new file creation event."""
        if event.is_directory:
            return
        self.handle_created(Path(os.fsdecode(event.src_path)))

    def handle_created(self, path: Path) -> None:
        """Classify a new file and schedule its conversion."""
        try:
            kind = classify(path.name)
        except ClassificationError as exc:
            logger.error("%s", exc)
            return

        if kind is ScreenshotKind.HIGHRES:
            timer = threading.Timer(
                self._settle_seconds, self._on_settled, args=(path, kind)
            )
            timer.daemon = True
            timer.name = f"Settle-{path.name}"
            logger.debug(
                "Waiting %.1fs for %s to be written", self._settle_seconds, path.name
            )
            with self._lock:
                self._timers.add(timer)
                timer.start()
        else:
            worker = threading.Thread(
                target=self._run,
                args=(path, kind),
                daemon=True,
                name=f"Convert-{path.name}",
            )
            with self._lock:
                self._workers.add(worker)
                worker.start()

    def _on_settled(self, path: Path, kind: ScreenshotKind) -> None:
        me = threading.current_thread()
        with self._lock:
            if me not in self._timers:
                # Cancelled while firing
                return
            self._timers.discard(me)  # type: ignore[arg-type]
            self._workers.add(me)
        self._run(path, kind)

    def _run(self, path: Path, kind: ScreenshotKind) -> None:
        try:
            self._convert(path, kind)
        finally:
            with self._lock:
                self._workers.discard(threading.current_thread())

    def _convert(self, path: Path, kind: ScreenshotKind) -> None:
        try:
            self._converter.convert_live(path, kind)
        except Exception:
            logger.exception("Error converting %s", path)

    # ---- lifecycle ----

    def cancel_pending(self) -> int:
        """Cancel settle timers that have not fired.  Returns how many."""
        with self._lock:
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        return len(timers)

    def join(self, timeout: float | None = None) -> None:
        """Wait for every scheduled conversion to finish."""
        with self._lock:
            threads: list[threading.Thread] = [*self._timers, *self._workers]
        for thread in threads:
            thread.join(timeout)

    @property
    def pending_count(self) -> int:
        """Return the number of captures settling or being converted."""
        with self._lock:
            return len(self._timers) + len(self._workers)


class ScreenshotWatcher:
    """High-level watcher that owns the watchdog observer.

    Usage:
        with ScreenshotWatcher(folder, handler) as watcher:
            ...
    """

    def __init__(self, source_folder: str | Path, handler: ScreenshotEventHandler):
        """Create a watcher for *source_folder* (not started)."""
        self.source_folder = Path(source_folder)
        self._handler = handler
        self._observer: Any | None = None

    # ---- lifecycle ----

    def start(self) -> None:
        """Start watching the source folder."""
        if not self.source_folder.is_dir():
            logger.error("Screenshot folder does not exist: %s", self.source_folder)
            raise FileNotFoundError(
                f"Screenshot folder does not exist: {self.source_folder}"
            )

        observer = Observer()
        self._observer = observer
        observer.schedule(self._handler, str(self.source_folder), recursive=False)
        observer.start()
        logger.info(
            "Watching '%s' (high-res settle=%.1fs)",
            self.source_folder,
            self._handler.settle_seconds,
        )

    def stop(self) -> None:
        """Stop watching and release resources."""
        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        cancelled = self._handler.cancel_pending()
        if cancelled:
            logger.info(
                "%d high resolution screenshot(s) left unconverted; "
                "run 'convertold' to convert them.",
                cancelled,
            )
        # Conversions already under way run to completion
        self._handler.join()
        logger.info("Watcher stopped.")

    @property
    def is_running(self) -> bool:
        """Return whether the watcher is currently active."""
        return self._observer is not None and self._observer.is_alive()

    def __enter__(self) -> ScreenshotWatcher:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
