"""Change overlay holding uncommitted field edits.

The overlay maps field key -> pending value. A present key means "replace
every selected file's frame list for this key on commit"; an absent key
means "no pending edit". Edits are last-write-wins per field, and every
edit goes through the debounced HistoryStack first.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import TYPE_CHECKING

from ..debug_trace import get_logger
from ..models.frame_value import normalize_pending
from .history import HistoryStack

if TYPE_CHECKING:
    from ..models.frame_value import FrameValue, PendingValue

logger = get_logger(__name__)

OverlayObserver = Callable[["ChangeOverlay", "set[str] | None"], None]


class ChangeOverlay:
    """Pending field edits plus their undo/redo history.

    Usage:
        overlay = ChangeOverlay()
        overlay.set_field("title", Text("New"))
        overlay.set_fields({"album": Text("LP"), "year": Text("1999")})
        overlay.undo()
        overlay.clear()
    """

    def __init__(self, history: HistoryStack | None = None):
        """Initialize an empty overlay.

        Args:
            history: History to checkpoint into (a default one is created if omitted).
        """
        self.history = history if history is not None else HistoryStack()
        self._fields: dict[str, PendingValue] = {}
        self._observers: list[OverlayObserver] = []

    # --- Edits ---

    def set_field(
        self,
        key: str,
        value: FrameValue | Iterable[FrameValue] | None,
        description: str = "",
    ) -> None:
        """Stage a value for one field, replacing any earlier pending edit.

        Args:
            key: Field key (e.g. "title").
            value: A FrameValue, an ordered list of them, or None to drop the pending edit.
            description: Human-readable description for the undo menu.
        """
        self.set_fields({key: value}, description or f"Edit {key}")

    def set_fields(
        self,
        patch: Mapping[str, FrameValue | Iterable[FrameValue] | None],
        description: str = "",
    ) -> None:
        """Stage several fields as one edit.

        Raises:
            TypeError: If a value is not a FrameValue (or list of them).
        """
        if not patch:
            return

        # Normalize first so a bad value leaves overlay and history untouched
        normalized: dict[str, PendingValue | None] = {
            key: None if value is None else normalize_pending(value) for key, value in patch.items()
        }

        self.history.checkpoint(self._fields, description)

        for key, value in normalized.items():
            if value is None:
                self._fields.pop(key, None)
            else:
                self._fields[key] = value

        logger.debug("Staged %s", ", ".join(normalized))
        self._notify_observers(set(normalized))

    def clear(self) -> None:
        """Wipe all pending edits and reset history."""
        affected = set(self._fields)
        self._fields.clear()
        self.history.reset()
        self._notify_observers(affected)

    # --- Undo/Redo ---

    def undo(self) -> bool:
        """Restore the previous checkpoint.

        Returns:
            True if undo was performed
        """
        restored = self.history.undo(self._fields)
        if restored is None:
            return False
        self._replace(restored)
        return True

    def redo(self) -> bool:
        """Re-apply the next undone checkpoint.

        Returns:
            True if redo was performed
        """
        restored = self.history.redo(self._fields)
        if restored is None:
            return False
        self._replace(restored)
        return True

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return self.history.can_undo()

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return self.history.can_redo()

    def _replace(self, fields: dict[str, PendingValue]) -> None:
        old = self._fields
        self._fields = fields
        affected = set(old) | set(fields)
        self._notify_observers(affected)

    # --- Access ---

    def get(self, key: str) -> PendingValue | None:
        """Pending value for a field, or None if it has no pending edit."""
        return self._fields.get(key)

    def snapshot(self) -> dict[str, PendingValue]:
        """Copy of the current pending edits."""
        return dict(self._fields)

    def keys(self) -> list[str]:
        """Field keys with pending edits, in staging order."""
        return list(self._fields)

    def items(self) -> list[tuple[str, PendingValue]]:
        return list(self._fields.items())

    def is_empty(self) -> bool:
        return not self._fields

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"ChangeOverlay({sorted(self._fields)})"

    # --- Observers ---

    def _notify_observers(self, affected_keys: set[str] | None = None) -> None:
        """Notify all observers of overlay changes."""
        for callback in self._observers:
            try:
                callback(self, affected_keys)
            except Exception:
                # Don't let one observer's error break others
                logger.exception("Overlay observer failed")

    def add_observer(self, callback: OverlayObserver) -> None:
        """Add observer callback."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: OverlayObserver) -> None:
        """Remove observer callback."""
        if callback in self._observers:
            self._observers.remove(callback)
