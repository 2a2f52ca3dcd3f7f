"""Selection of target files for batch editing.

The selection is an ordered, de-duplicated set of paths that is always a
subset of the files currently in the store. Shrinking the file list
prunes it, with one notification per change rather than per removed path.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING

from ..debug_trace import get_logger

if TYPE_CHECKING:
    from .file_store import FileStore

logger = get_logger(__name__)

SelectionObserver = Callable[["Selection"], None]


class Selection:
    """Ordered set of selected file paths.

    Usage:
        selection = Selection(store)
        selection.set(["a.mp3", "b.mp3", "a.mp3"])
        selection.get()  # ("a.mp3", "b.mp3")
    """

    def __init__(self, store: FileStore | None = None):
        """Initialize an empty selection.

        Args:
            store: File store to validate against and follow for pruning.
                   Without a store, every path is accepted.
        """
        self._store = store
        self._paths: tuple[str, ...] = ()
        self._observers: list[SelectionObserver] = []

        if store is not None:
            store.add_observer(self._on_store_changed)

    def _is_known(self, path: str) -> bool:
        return self._store is None or path in self._store

    def set(self, paths: Iterable[str]) -> bool:
        """Replace the selection.

        Duplicates are dropped (first occurrence wins) and unknown paths
        are ignored.

        Returns:
            True if the selection changed.
        """
        new_paths = tuple(p for p in dict.fromkeys(paths) if self._is_known(p))
        return self._update(new_paths)

    def get(self) -> tuple[str, ...]:
        """Current selection, in order."""
        return self._paths

    def clear(self) -> bool:
        return self._update(())

    def prune(self, valid_paths: Iterable[str]) -> bool:
        """Intersect the selection with a set of valid paths.

        Returns:
            True if any path was removed.
        """
        valid = set(valid_paths)
        kept = tuple(p for p in self._paths if p in valid)
        if len(kept) != len(self._paths):
            logger.debug("Pruned %d stale path(s) from selection", len(self._paths) - len(kept))
        return self._update(kept)

    def _update(self, new_paths: tuple[str, ...]) -> bool:
        if new_paths == self._paths:
            return False
        self._paths = new_paths
        self._notify_observers()
        return True

    def _on_store_changed(self, store: FileStore, affected_paths: set[str] | None) -> None:
        self.prune(store.paths)

    def is_empty(self) -> bool:
        return not self._paths

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f"Selection({list(self._paths)!r})"

    # --- Observers ---

    def _notify_observers(self) -> None:
        for callback in self._observers:
            try:
                callback(self)
            except Exception:
                # Don't let one observer's error break others
                logger.exception("Selection observer failed")

    def add_observer(self, callback: SelectionObserver) -> None:
        """Add observer callback."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: SelectionObserver) -> None:
        """Remove observer callback."""
        if callback in self._observers:
            self._observers.remove(callback)
