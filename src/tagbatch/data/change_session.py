"""Change session tying selection, overlay, history, diff and commit together.

A ChangeSession is owned by whatever component manages the current editing
scope and is passed explicitly to anything that needs it. It is the only
surface the UI talks to:

- field displays (pending value, shared value, or mixed sentinel)
- has_unsaved_changes / can_undo / can_redo / can_commit flags
- preview_diff() for the confirmation dialog
- set_field / set_fields and commit / discard / undo / redo
- undo_commit / redo_commit for reverting a save after the fact

None of the mutating entry points raise: each returns a definite outcome.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING

from ..debug_trace import get_logger
from ..errors import CommitFailure, CommitInProgress
from ..models.constants import PICTURE_KEYS, is_multi_valued
from ..models.frame_value import Picture
from ..services.commit_service import CommitResult, CommitService
from ..services.diff_service import DiffService
from ..services.find_replace_service import FindOptions, FindReplaceService
from ..services.merge_resolver import EMPTY, DisplayKind, FieldDisplay, MergeResolver
from ..settings import EngineSettings
from .change_overlay import ChangeOverlay
from .commit_history import CommitHistory
from .history import HistoryStack
from .selection import Selection

if TYPE_CHECKING:
    from ..models.frame_value import FileFrames, FrameValue
    from ..services.diff_service import FileDiff
    from .file_store import FileStore

logger = get_logger(__name__)

SessionObserver = Callable[["ChangeSession"], None]


class ChangeSession:
    """Editing scope for one multi-file selection.

    Usage:
        session = ChangeSession(store)
        session.select(["a.mp3", "b.mp3"])
        session.field_text("title")          # "..." when the files disagree
        session.set_field("title", Text("New"))
        diffs = session.preview_diff()
        result = session.commit()
        if not result.ok:
            show_error(result.message)
    """

    def __init__(
        self,
        store: FileStore,
        settings: EngineSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize a session over a file store.

        Args:
            store: File store providing frames and the data source
            settings: Engine settings (defaults used if omitted)
            clock: Time source in seconds for undo debouncing
        """
        self.settings = settings if settings is not None else EngineSettings()
        self.store = store
        self.selection = Selection(store)
        self.overlay = ChangeOverlay(
            HistoryStack(
                debounce_seconds=self.settings.debounce_seconds,
                max_depth=self.settings.max_undo_depth,
                clock=clock,
            )
        )
        self.commit_history = CommitHistory(store.data_source, self.settings.max_undo_depth)
        self._commit_service = CommitService(store.data_source, self.commit_history)
        self.last_result: CommitResult | None = None

        # Selection emptied during a write; clear once the write finishes
        self._clear_when_idle = False

        self._observers: list[SessionObserver] = []
        self.selection.add_observer(self._on_selection_changed)
        self.overlay.add_observer(self._on_overlay_changed)
        self.commit_history.add_observer(self._on_commit_history_changed)

    # --- State Flags ---

    @property
    def is_committing(self) -> bool:
        """True while a write request is in flight."""
        return self._commit_service.in_flight

    def has_unsaved_changes(self) -> bool:
        """Pending edits exist and there is a selection to apply them to."""
        return not self.overlay.is_empty() and not self.selection.is_empty()

    def can_undo(self) -> bool:
        return not self.is_committing and self.overlay.can_undo()

    def can_redo(self) -> bool:
        return not self.is_committing and self.overlay.can_redo()

    def can_commit(self) -> bool:
        return not self.is_committing and self.has_unsaved_changes()

    def can_undo_commit(self) -> bool:
        """A saved commit can be reverted on disk (separate from overlay undo)."""
        return not self.is_committing and self.commit_history.can_undo_commit()

    def can_redo_commit(self) -> bool:
        return not self.is_committing and self.commit_history.can_redo_commit()

    def get_undo_description(self) -> str | None:
        """Description of the edit step undo would revert (for the Edit menu)."""
        return self.overlay.history.get_undo_description()

    # --- Selection ---

    def select(self, paths: Iterable[str]) -> bool:
        """Replace the selection. Returns True if it changed."""
        return self.selection.set(paths)

    def selected_files(self) -> list[FileFrames]:
        """Frames for the selected files that are loaded, in selection order."""
        return self.store.get_many(self.selection)

    def find_files(self, field: str, query: str, options: FindOptions | None = None) -> list[str]:
        """Paths of loaded files whose field (or any field, for "all") matches the query."""
        files = self.store.get_many(self.store.paths)
        return FindReplaceService.find_matches(files, field, query, options or FindOptions())

    # --- Edits ---

    def _can_edit(self) -> bool:
        if self.selection.is_empty():
            return False
        if self.is_committing:
            logger.debug("Edit ignored while a save is in progress")
            return False
        return True

    def set_field(
        self,
        key: str,
        value: FrameValue | Iterable[FrameValue] | None,
        description: str = "",
    ) -> bool:
        """Stage a value for a field (None drops the pending edit).

        Returns:
            True if the edit was staged; False for an empty selection,
            an in-flight commit, or an invalid value.
        """
        return self.set_fields({key: value}, description or f"Edit {key}")

    def set_fields(
        self,
        patch: Mapping[str, FrameValue | Iterable[FrameValue] | None],
        description: str = "",
    ) -> bool:
        """Stage several fields as a single edit."""
        if not patch or not self._can_edit():
            return False
        try:
            self.overlay.set_fields(patch, description)
        except TypeError as exc:
            logger.warning("Rejected edit to %s: %s", ", ".join(patch), exc)
            return False
        return True

    def clear_field(self, key: str) -> bool:
        """Drop the pending edit for a field."""
        if key not in self.overlay:
            return False
        return self.set_field(key, None, f"Reset {key}")

    def set_value_list(self, key: str, values: Iterable[FrameValue]) -> bool:
        """Stage a whole ordered list for a multi-valued field."""
        return self.set_field(key, tuple(values), f"Edit {key} list")

    def set_pictures(self, pictures: Iterable[Picture]) -> bool:
        """Stage the full ordered artwork list."""
        return self.set_field(PICTURE_KEYS[0], tuple(pictures), "Edit artwork")

    def replace_in_fields(
        self,
        fields: Iterable[str],
        query: str,
        replacement: str,
        options: FindOptions | None = None,
    ) -> int:
        """Find/replace across the displayed values of several fields.

        Mixed and empty fields are skipped. All replacements are staged as
        one edit.

        Returns:
            Number of fields changed
        """
        displays = self.field_displays(fields)
        patch = FindReplaceService.build_replace_patch(
            displays, query, replacement, options or FindOptions()
        )
        if not patch or not self.set_fields(patch, f"Replace {query!r}"):
            return 0
        return len(patch)

    # --- Display ---

    def _pending_display(self, key: str) -> FieldDisplay | None:
        pending = self.overlay.get(key)
        if pending is None:
            return None
        if pending == ():
            # The whole list is staged for removal
            return FieldDisplay(DisplayKind.EMPTY, pending, pending=True)
        count = len(pending) if isinstance(pending, tuple) else 1
        return FieldDisplay(DisplayKind.UNIFORM, pending, value_count=count, pending=True)

    def field_display(self, key: str) -> FieldDisplay:
        """What the shared control for a field should show.

        A pending edit wins; otherwise the merged value across the selection.
        """
        if self.selection.is_empty():
            return EMPTY
        pending = self._pending_display(key)
        if pending is not None:
            return pending
        return MergeResolver.resolve(self.selected_files(), key)

    def field_text(self, key: str) -> str:
        """Text for a text control, with the mixed sentinel when files disagree."""
        return self.field_display(key).text(self.settings.mixed_sentinel)

    def field_displays(self, keys: Iterable[str]) -> dict[str, FieldDisplay]:
        return {key: self.field_display(key) for key in keys}

    def value_count(self, key: str) -> int:
        """Count badge for a multi-valued field; 0 for single-valued fields."""
        if not is_multi_valued(key):
            return 0
        return self.field_display(key).value_count

    def value_list(self, key: str) -> tuple[FrameValue, ...]:
        """Full value list for the list editor; only for a single selected file."""
        files = self.selected_files()
        if len(files) != 1:
            return ()
        pending = self.overlay.get(key)
        if isinstance(pending, tuple):
            return pending
        if pending is not None:
            return (pending,)
        return files[0].values(key)

    def picture_display(self) -> FieldDisplay:
        """Artwork to show: the pending first picture, or the merged one."""
        if self.selection.is_empty():
            return EMPTY
        pending = self._pending_display(PICTURE_KEYS[0])
        if pending is not None:
            return pending
        return MergeResolver.resolve_picture(self.selected_files())

    def picture_list(self) -> tuple[Picture, ...]:
        """Ordered picture list for the artwork manager (single selection only)."""
        files = self.selected_files()
        if len(files) != 1:
            return ()
        pending = self.overlay.get(PICTURE_KEYS[0])
        if pending is not None:
            items = pending if isinstance(pending, tuple) else (pending,)
            return tuple(v for v in items if isinstance(v, Picture))
        return MergeResolver.picture_list(files)

    # --- Diff ---

    def preview_diff(self) -> list[FileDiff]:
        """Per-file before/after pairs for the confirmation dialog."""
        if self.selection.is_empty():
            return []
        return DiffService.compute(self.overlay.snapshot(), self.selected_files())

    # --- Undo/Redo ---

    def undo(self) -> bool:
        """Undo the last edit step. Ignored while a save is in progress."""
        if self.is_committing:
            return False
        return self.overlay.undo()

    def redo(self) -> bool:
        """Redo the last undone step. Ignored while a save is in progress."""
        if self.is_committing:
            return False
        return self.overlay.redo()

    # --- Commit/Discard ---

    def commit(self) -> CommitResult:
        """Write all pending edits to every selected file.

        The path list is captured when the request is built, so the write
        goes to those files even if the selection changes meanwhile.

        Returns:
            CommitResult; on failure the overlay is left exactly as it was.
        """
        paths = self.selection.get()
        result = self._commit_service.commit(self.overlay, paths, self.store.get_many(paths))
        if self.is_committing:
            # Re-entrant call from inside the running write
            return result

        self.last_result = result
        if result.ok and result.request is not None:
            logger.debug(result.message)
            self.store.refresh(result.request.paths)
        elif not result.ok:
            logger.debug("Commit not applied: %s", result.message)

        self._apply_deferred_clear()
        self._notify_observers()
        return result

    def discard(self) -> bool:
        """Throw away all pending edits and their history."""
        if self.is_committing:
            return False
        self.overlay.clear()
        return True

    def undo_commit(self) -> CommitResult:
        """Revert the last saved commit on disk.

        Pending edits are left alone; the reverted files are re-read.
        """
        return self._step_commit_history(undo=True)

    def redo_commit(self) -> CommitResult:
        """Write the last reverted commit again."""
        return self._step_commit_history(undo=False)

    def _step_commit_history(self, undo: bool) -> CommitResult:
        if self.is_committing:
            return CommitResult.failure(CommitInProgress("A save is already in progress"))
        try:
            if undo:
                record = self.commit_history.undo_commit()
            else:
                record = self.commit_history.redo_commit()
        except CommitFailure as exc:
            logger.warning("Commit %s failed: %s", "undo" if undo else "redo", exc.message)
            result = CommitResult.failure(exc)
        else:
            if record is None:
                return CommitResult.skipped("Nothing to undo" if undo else "Nothing to redo")
            verb = "Reverted changes to" if undo else "Reapplied changes to"
            result = CommitResult.success(record.request, verb)
            self.store.refresh(record.paths)

        self.last_result = result
        self._notify_observers()
        return result

    def _apply_deferred_clear(self) -> None:
        if self._clear_when_idle and not self.is_committing:
            self._clear_when_idle = False
            if self.selection.is_empty():
                self.overlay.clear()

    # --- Observers ---

    def _on_selection_changed(self, selection: Selection) -> None:
        if selection.is_empty():
            if self.is_committing:
                self._clear_when_idle = True
            elif not self.overlay.is_empty() or self.overlay.can_undo() or self.overlay.can_redo():
                logger.debug("Selection emptied; dropping pending edits")
                self.overlay.clear()
        self._notify_observers()

    def _on_overlay_changed(self, overlay: ChangeOverlay, affected_keys: set[str] | None) -> None:
        self._notify_observers()

    def _on_commit_history_changed(self, history: CommitHistory) -> None:
        self._notify_observers()

    def _notify_observers(self) -> None:
        for callback in self._observers:
            try:
                callback(self)
            except Exception:
                # Don't let one observer's error break others
                logger.exception("Session observer failed")

    def add_observer(self, callback: SessionObserver) -> None:
        """Add observer callback, called after any selection, overlay or commit change."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: SessionObserver) -> None:
        """Remove observer callback."""
        if callback in self._observers:
            self._observers.remove(callback)
