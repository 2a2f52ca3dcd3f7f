"""File store holding the current FileFrames for every loaded file.

The store is the read side of the file list: it loads frames through the
data source, keeps them in load order, and notifies observers (such as
Selection) whenever the set of files or their frames change. The engine
never edits these snapshots; committed writes are picked up by refreshing.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from ..debug_trace import get_logger, perf_timer
from ..errors import ReadFailure
from .file_monitor import FILE_MONITOR_INTERVAL_MS, FileMonitor

if TYPE_CHECKING:
    import tkinter as tk

    from ..models.frame_value import FileFrames
    from .data_source import TagDataSource

logger = get_logger(__name__)

StoreObserver = Callable[["FileStore", "set[str] | None"], None]


class FileStore:
    """Read-only cache of FileFrames keyed by path.

    Usage:
        store = FileStore(MutagenDataSource())
        failure = store.load(["a.mp3", "b.mp3"])
        if failure:
            show_banner(failure.message)
    """

    def __init__(self, data_source: TagDataSource, monitor_interval_ms: int = FILE_MONITOR_INTERVAL_MS):
        """Initialize an empty store.

        Args:
            data_source: Boundary used for reading frames
            monitor_interval_ms: Polling interval for external change detection
        """
        self._data_source = data_source
        self.files: dict[str, FileFrames] = {}
        self.last_error: ReadFailure | None = None

        self._observers: list[StoreObserver] = []
        self._file_monitor = FileMonitor([], self.handle_external_changes, monitor_interval_ms)

    @property
    def data_source(self) -> TagDataSource:
        return self._data_source

    @property
    def paths(self) -> list[str]:
        """Known paths in load order."""
        return list(self.files)

    def get(self, path: str) -> FileFrames | None:
        """Get frames for a path, or None if it isn't loaded."""
        return self.files.get(path)

    def get_many(self, paths: Iterable[str]) -> list[FileFrames]:
        """Frames for each loaded path, skipping paths that aren't loaded."""
        return [self.files[p] for p in paths if p in self.files]

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def __len__(self) -> int:
        return len(self.files)

    # --- Loading ---

    def _read(self, paths: list[str]) -> list[FileFrames] | ReadFailure:
        try:
            with perf_timer("read_frames", row_count=len(paths)):
                return self._data_source.read_frames(paths)
        except ReadFailure as exc:
            return exc
        except Exception as exc:
            return ReadFailure(paths, f"Could not read tags: {exc}")

    def load(self, paths: Iterable[str]) -> ReadFailure | None:
        """Load (or reload) frames for the given paths.

        A failed read leaves the store unchanged for those paths.

        Returns:
            None on success, or the ReadFailure to surface as a banner.
        """
        paths = list(dict.fromkeys(paths))
        if not paths:
            return None

        result = self._read(paths)
        if isinstance(result, ReadFailure):
            logger.warning("Read failed for %d file(s): %s", len(paths), result.message)
            self.last_error = result
            return result

        self.last_error = None
        affected: set[str] = set()
        for file_frames in result:
            if self.files.get(file_frames.path) != file_frames:
                affected.add(file_frames.path)
            self.files[file_frames.path] = file_frames

        self._file_monitor.watch(affected)
        logger.debug("Loaded %d file(s), %d changed", len(result), len(affected))
        if affected:
            self._notify_observers(affected)
        return None

    def refresh(self, paths: Iterable[str]) -> ReadFailure | None:
        """Re-read frames for paths that are already loaded."""
        known = [p for p in paths if p in self.files]
        failure = self.load(known)
        if failure is None:
            self._file_monitor.update_mtime(known)
        return failure

    def remove(self, paths: Iterable[str]) -> set[str]:
        """Drop paths from the store.

        Returns:
            Set of paths that were actually removed
        """
        removed = {p for p in paths if p in self.files}
        for path in removed:
            del self.files[path]
        self._file_monitor.unwatch(removed)
        if removed:
            logger.debug("Removed %d file(s)", len(removed))
            self._notify_observers(removed)
        return removed

    def clear(self) -> None:
        """Drop every file."""
        self.remove(list(self.files))

    def handle_external_changes(self, modified: set[str], missing: set[str]) -> None:
        """Apply changes detected on disk: drop vanished files, re-read modified ones."""
        if missing:
            self.remove(missing)
        if modified:
            self.refresh(modified)

    # --- File Monitoring ---

    def start_file_monitoring(self, tk_root: tk.Tk) -> None:
        """Start watching loaded files for external changes."""
        self._file_monitor.start(tk_root)

    def stop_file_monitoring(self) -> None:
        """Stop file monitoring."""
        self._file_monitor.stop()

    # --- Observers ---

    def _notify_observers(self, affected_paths: set[str] | None = None) -> None:
        """Notify all observers of data changes."""
        for callback in self._observers:
            try:
                callback(self, affected_paths)
            except Exception:
                # Don't let one observer's error break others
                logger.exception("File store observer failed")

    def add_observer(self, callback: StoreObserver) -> None:
        """Add observer callback."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: StoreObserver) -> None:
        """Remove observer callback."""
        if callback in self._observers:
            self._observers.remove(callback)
