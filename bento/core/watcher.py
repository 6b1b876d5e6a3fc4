"""Watch controller — incremental rebuilds driven by filesystem events.

One watchdog observer schedule per existing entry directory feeds a
bounded queue. A single worker thread consumes it: events arriving
within the debounce window are collected into a burst, de-duplicated by
path (the last event kind wins), and dispatched one file at a time to
the orchestrator. A failing rebuild is logged and the loop carries on.

Stopping closes the channel: the observer is stopped first, then a stop
marker is queued behind any pending events so they are drained before
the worker exits.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from bento.core.classifier import is_processable
from bento.core.orchestrator import Orchestrator
from bento.models.artifacts import Entry
from bento.models.build import BuildReport

logger = logging.getLogger(__name__)

_STOP = object()


class ChangeKind(str, Enum):
    MODIFIED = "modified"
    CREATED = "created"
    DELETED = "deleted"


class ChangeEvent(BaseModel):
    """A changed path inside a watched entry."""

    model_config = ConfigDict(frozen=True)

    path: Path
    entry_name: str
    kind: ChangeKind = ChangeKind.MODIFIED


class _EntryEventHandler(FileSystemEventHandler):
    """Forwards watchdog file events for one entry to the controller."""

    def __init__(self, controller: WatchController, entry_name: str) -> None:
        super().__init__()
        self._controller = controller
        self._entry_name = entry_name

    def _forward(self, path: str | bytes, kind: ChangeKind) -> None:
        self._controller.notify(Path(os.fsdecode(path)), self._entry_name, kind)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path, ChangeKind.MODIFIED)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path, ChangeKind.CREATED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path, ChangeKind.DELETED)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path, ChangeKind.DELETED)
            self._forward(event.dest_path, ChangeKind.CREATED)


class WatchController:
    """Subscribes to entry directories and rebuilds changed files.

    Parameters
    ----------
    orchestrator:
        The orchestrator whose manifest and configuration are used for
        rebuilds. Normally it has just completed a full build.
    debounce_seconds:
        Burst collection window. Defaults to ``settings.watch_debounce_seconds``.
    queue_size:
        Bound of the event channel. Defaults to ``settings.watch_queue_size``.
    observer_factory:
        Zero-argument callable returning a watchdog-compatible observer
        (``schedule``, ``start``, ``stop``, ``join``).
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        *,
        debounce_seconds: float | None = None,
        queue_size: int | None = None,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        settings = orchestrator.settings
        self._orchestrator = orchestrator
        self._debounce = (
            settings.watch_debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self._queue: queue.Queue[Any] = queue.Queue(
            maxsize=settings.watch_queue_size if queue_size is None else queue_size
        )
        self._observer_factory = observer_factory
        self._observer: Any | None = None
        self._worker: threading.Thread | None = None
        self._closed = threading.Event()
        self._watched: list[Entry] = []

        self.rebuild_count = 0
        self.error_count = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def watched_entries(self) -> list[Entry]:
        return list(self._watched)

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> list[Entry]:
        """Subscribe to every existing entry directory and start the worker."""
        if self._observer is not None:
            raise RuntimeError("WatchController is already started")

        observer = self._observer_factory()
        for entry in self._orchestrator.config.entries():
            if not Path(entry.source_dir).is_dir():
                logger.warning(
                    "Not watching %s: entry path %s does not exist",
                    entry.name, entry.source_dir,
                )
                continue
            observer.schedule(
                _EntryEventHandler(self, entry.name), str(entry.source_dir), recursive=True
            )
            self._watched.append(entry)

        observer.start()
        self._observer = observer
        self._worker = threading.Thread(
            target=self._run_worker, name="bento-watch", daemon=True
        )
        self._worker.start()
        logger.info(
            "Watching for changes in %s", ", ".join(e.name for e in self._watched) or "nothing"
        )
        return self.watched_entries

    def stop(self, timeout: float = 5.0) -> None:
        """Release subscriptions, drain pending events, and stop the worker."""
        if self._closed.is_set():
            return
        self._closed.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout)
        if self._worker is not None:
            self._queue.put(_STOP)
            self._worker.join(timeout)
        logger.info("Stopped watching")

    def run_forever(self) -> None:
        """Block until interrupted (Ctrl+C), then stop."""
        if self._observer is None:
            self.start()
        try:
            while self._worker is not None and self._worker.is_alive():
                self._worker.join(0.5)
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self.stop()

    def __enter__(self) -> WatchController:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Event channel
    # ------------------------------------------------------------------

    def notify(
        self,
        path: str | os.PathLike[str],
        entry_name: str,
        kind: ChangeKind = ChangeKind.MODIFIED,
    ) -> None:
        """Queue a change notification. Blocks while the channel is full."""
        if self._closed.is_set():
            logger.debug("Ignoring %s after stop: %s", kind.value, path)
            return
        self._queue.put(ChangeEvent(path=Path(path), entry_name=entry_name, kind=kind))

    def process_pending(self) -> list[BuildReport]:
        """Synchronously drain and handle every queued event.

        For callers that drive the controller without starting the worker.
        """
        events: list[ChangeEvent] = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is not _STOP:
                events.append(item)
        return self._dispatch(events)

    def _run_worker(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            batch = [item]
            stopping = self._collect_burst(batch)
            self._dispatch(batch)
            if stopping:
                return

    def _collect_burst(self, batch: list[ChangeEvent]) -> bool:
        """Add events arriving within the debounce window; True if stop was seen."""
        deadline = time.monotonic() + self._debounce
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            try:
                item = self._queue.get(timeout=remaining)
            except queue.Empty:
                return False
            if item is _STOP:
                return True
            batch.append(item)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    @staticmethod
    def coalesce(events: Iterable[ChangeEvent]) -> list[ChangeEvent]:
        """De-duplicate by (entry, path); the latest event wins, ordered by last arrival."""
        latest: dict[tuple[str, Path], ChangeEvent] = {}
        for event in events:
            key = (event.entry_name, event.path)
            latest.pop(key, None)
            latest[key] = event
        return list(latest.values())

    def _dispatch(self, events: Iterable[ChangeEvent]) -> list[BuildReport]:
        reports: list[BuildReport] = []
        for event in self.coalesce(events):
            report = self.handle(event)
            if report is not None:
                reports.append(report)
        return reports

    def handle(self, event: ChangeEvent) -> BuildReport | None:
        """Run the incremental path for one event. Errors are logged, not raised."""
        if not is_processable(event.path):
            logger.debug("Skipping non-processable file: %s", event.path)
            return None

        logger.info("File %s: %s", event.kind.value, event.path)
        try:
            if event.kind == ChangeKind.DELETED:
                report = self._orchestrator.remove_file(event.path, event.entry_name)
            else:
                report = self._orchestrator.rebuild_file(event.path, event.entry_name)
        except Exception as exc:
            # The subscription stays active whatever a single rebuild does.
            self.error_count += 1
            logger.error("Error rebuilding file %s: %s", event.path, exc)
            return None

        self.rebuild_count += 1
        return report
