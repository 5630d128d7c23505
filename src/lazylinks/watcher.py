"""File watcher that rebuilds the link index when notes change."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .config import DEFAULT_DEBOUNCE_SECONDS
from .vault import load_documents

if TYPE_CHECKING:
    from .engine import LinkEngine

logger = logging.getLogger(__name__)


def _is_markdown(path: str | bytes | None) -> bool:
    if not path:
        return False
    return Path(os.fsdecode(path)).suffix.lower() == ".md"


class DebouncedHandler(FileSystemEventHandler):
    """File system event handler with debouncing."""

    def __init__(
        self,
        callback: Callable[[set[Path]], None],
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        """Initialize the debounced handler.

        Args:
            callback: Function to call with changed files after debounce.
            debounce_seconds: Debounce window in seconds.
        """
        super().__init__()
        self._callback = callback
        self._debounce_seconds = debounce_seconds
        self._pending_files: set[Path] = set()
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def _fire(self) -> None:
        with self._lock:
            files = self._pending_files.copy()
            self._pending_files.clear()
            self._timer = None
        if files:
            self._callback(files)

    def _schedule_callback(self) -> None:
        """Restart the debounce timer. Caller holds the lock."""
        if self._timer is not None:
            self._timer.cancel()
        self._timer = threading.Timer(self._debounce_seconds, self._fire)
        self._timer.daemon = True
        self._timer.start()

    def _add_paths(self, *paths: str | bytes | None) -> None:
        changed = [Path(os.fsdecode(p)) for p in paths if _is_markdown(p)]
        if not changed:
            return
        with self._lock:
            self._pending_files.update(changed)
            self._schedule_callback()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._add_paths(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._add_paths(event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._add_paths(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._add_paths(event.src_path, getattr(event, "dest_path", None))

    def flush(self) -> None:
        """Fire the pending callback now instead of waiting for the timer."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self._fire()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending_files.clear()


class VaultWatcher:
    """Watch a vault and rebuild the engine's index after changes settle."""

    def __init__(
        self,
        engine: "LinkEngine",
        vault_root: Path,
        exclude: Sequence[str] = (),
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self._engine = engine
        self._vault_root = Path(vault_root)
        self._exclude = tuple(exclude)
        self._debounce_seconds = debounce_seconds
        self._observer: Observer | None = None
        self._handler: DebouncedHandler | None = None
        self._running = False

    def rebuild(self) -> None:
        """Rebuild the index from the current state of the vault."""
        index = self._engine.rebuild(load_documents(self._vault_root, self._exclude))
        logger.info("Index rebuilt: %d names from %d notes", len(index), index.stats.documents)

    def _on_files_changed(self, files: set[Path]) -> None:
        logger.debug("%d notes changed", len(files))
        try:
            self.rebuild()
        except Exception:
            # Keep the previous index; the next change retries
            logger.exception("Index rebuild failed")

    def start(self) -> None:
        """Build the initial index and start watching."""
        if self._running:
            return

        if not self._vault_root.exists():
            logger.warning("Vault does not exist: %s", self._vault_root)
            return

        self.rebuild()

        self._handler = DebouncedHandler(
            callback=self._on_files_changed,
            debounce_seconds=self._debounce_seconds,
        )
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self._vault_root), recursive=True)
        self._observer.start()
        self._running = True
        logger.info("Started watching: %s", self._vault_root)

    def stop(self) -> None:
        """Stop watching for file changes."""
        if not self._running or self._observer is None:
            return

        if self._handler is not None:
            self._handler.cancel()
        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._observer = None
        self._handler = None
        self._running = False
        logger.info("Stopped file watcher")

    @property
    def is_running(self) -> bool:
        return self._running

    def __enter__(self) -> "VaultWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
