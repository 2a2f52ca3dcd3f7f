"""File monitoring for detecting external changes to loaded audio files."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tkinter as tk

# File monitoring interval in milliseconds
FILE_MONITOR_INTERVAL_MS = 2000


class FileMonitor:
    """Monitors a set of files and reports modified or vanished ones.

    Uses tkinter's after() for scheduling to stay on the main thread.
    This is important because the callback typically prunes the selection
    and refreshes cached frames.

    Usage:
        monitor = FileMonitor(
            file_paths=store.paths,
            on_modified=store.handle_external_changes,
        )
        monitor.start(tk_root)
        # ... later ...
        monitor.stop()
    """

    def __init__(
        self,
        file_paths: Iterable[str],
        on_modified: Callable[[set[str], set[str]], None],
        interval_ms: int = FILE_MONITOR_INTERVAL_MS,
    ) -> None:
        """Initialize the file monitor.

        Args:
            file_paths: Paths to watch
            on_modified: Callback invoked with (modified_paths, missing_paths)
            interval_ms: Polling interval
        """
        self._on_modified = on_modified
        self._interval_ms = interval_ms
        self._last_mtimes: dict[str, float] = {}
        self._after_id: str | None = None
        self._active = False
        self._tk_root: tk.Tk | None = None

        self.watch(file_paths)

    @property
    def file_paths(self) -> list[str]:
        """The file paths being monitored."""
        return list(self._last_mtimes)

    @property
    def is_active(self) -> bool:
        """Whether monitoring is currently active."""
        return self._active

    @staticmethod
    def _mtime(path: str) -> float:
        if os.path.exists(path):
            return os.path.getmtime(path)
        return 0.0

    def watch(self, file_paths: Iterable[str]) -> None:
        """Start tracking additional paths, capturing their current mtime."""
        for path in file_paths:
            self._last_mtimes[path] = self._mtime(path)

    def unwatch(self, file_paths: Iterable[str]) -> None:
        """Stop tracking the given paths."""
        for path in file_paths:
            self._last_mtimes.pop(path, None)

    def update_mtime(self, file_paths: Iterable[str] | None = None) -> None:
        """Update stored mtimes to the current file mtimes.

        Call this after saving changes to prevent false modification detection.
        """
        paths = self.file_paths if file_paths is None else file_paths
        for path in paths:
            if path in self._last_mtimes:
                self._last_mtimes[path] = self._mtime(path)

    def _schedule_check(self) -> None:
        """Schedule the next file modification check."""
        if not self._active or not self._tk_root:
            return
        self._after_id = self._tk_root.after(self._interval_ms, self._check_modified)

    def start(self, tk_root: tk.Tk) -> None:
        """Start monitoring the files for changes.

        Args:
            tk_root: Tkinter root window (needed for after() scheduling)
        """
        if self._active:
            return

        self._tk_root = tk_root
        self._active = True
        self._schedule_check()

    def stop(self) -> None:
        """Stop file monitoring."""
        self._active = False
        if self._after_id and self._tk_root:
            try:
                self._tk_root.after_cancel(self._after_id)
            except Exception:
                pass  # Widget may be destroyed
        self._after_id = None

    def check_now(self) -> tuple[set[str], set[str]]:
        """Compare stored mtimes against disk.

        Returns:
            Tuple of (modified_paths, missing_paths). Missing paths stop being watched.
        """
        modified: set[str] = set()
        missing: set[str] = set()

        for path, last_mtime in list(self._last_mtimes.items()):
            try:
                if not os.path.exists(path):
                    missing.add(path)
                    continue
                current_mtime = os.path.getmtime(path)
            except OSError:
                # File might be locked during write, skip this check
                continue
            if current_mtime > last_mtime:
                self._last_mtimes[path] = current_mtime
                modified.add(path)

        self.unwatch(missing)
        return modified, missing

    def _check_modified(self) -> None:
        """Check the files and invoke the callback if anything changed."""
        if not self._active:
            return

        modified, missing = self.check_now()
        if modified or missing:
            self._on_modified(modified, missing)

        # Schedule next check
        self._schedule_check()
