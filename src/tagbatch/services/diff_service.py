"""Diff service for previewing pending edits before commit.

Compares the change overlay against each selected file and lists only
the fields whose canonical rendering would actually change. The output
is advisory: computing it never touches the overlay, selection or store.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..debug_trace import perf_timer
from ..models.constants import field_label
from ..models.frame_value import render_list, render_value

if TYPE_CHECKING:
    from ..models.frame_value import FileFrames, PendingValue


@dataclass(frozen=True)
class DiffEntry:
    """One field change on one file."""

    path: str
    field_key: str
    label: str
    before: str
    after: str


@dataclass(frozen=True)
class FileDiff:
    """All real changes for one file."""

    path: str
    file_name: str
    changes: tuple[DiffEntry, ...]


class DiffService:
    """Computes per-file, per-field before/after pairs.

    All methods are static as the service is stateless.
    """

    @staticmethod
    def render_pending(pending: PendingValue) -> str:
        """Canonical rendering of a pending overlay value."""
        if isinstance(pending, tuple):
            return render_list(pending)
        return render_value(pending)

    @staticmethod
    def render_current(file_frames: FileFrames, key: str, pending: PendingValue) -> str:
        """Canonical rendering of a file's current value for comparison.

        A scalar pending edit is compared against the file's first value;
        a list-valued one against the file's whole list.
        """
        if isinstance(pending, tuple):
            return render_list(file_frames.values(key))
        return render_value(file_frames.first_value(key))

    @staticmethod
    def diff_file(file_frames: FileFrames, overlay: Mapping[str, PendingValue]) -> FileDiff | None:
        """Diff one file against the overlay.

        Returns:
            FileDiff with only the differing fields, or None if nothing changes.
        """
        changes: list[DiffEntry] = []

        for key, pending in overlay.items():
            before = DiffService.render_current(file_frames, key, pending)
            after = DiffService.render_pending(pending)
            if before != after:
                changes.append(
                    DiffEntry(
                        path=file_frames.path,
                        field_key=key,
                        label=field_label(key),
                        before=before,
                        after=after,
                    )
                )

        if not changes:
            return None
        return FileDiff(path=file_frames.path, file_name=file_frames.file_name, changes=tuple(changes))

    @staticmethod
    def compute(
        overlay: Mapping[str, PendingValue], files: Sequence[FileFrames]
    ) -> list[FileDiff]:
        """Diff every selected file, omitting files with no real change.

        Args:
            overlay: Snapshot of pending edits (field key -> pending value)
            files: Frames of the selected files, in selection order

        Returns:
            List of FileDiff in the same order as files
        """
        if not overlay:
            return []

        result: list[FileDiff] = []
        with perf_timer("compute_diff", row_count=len(files)):
            for file_frames in files:
                file_diff = DiffService.diff_file(file_frames, overlay)
                if file_diff is not None:
                    result.append(file_diff)
        return result

    @staticmethod
    def count_changes(diffs: Sequence[FileDiff]) -> int:
        """Total number of field changes across all files."""
        return sum(len(d.changes) for d in diffs)
