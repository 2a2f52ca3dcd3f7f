"""History of committed writes, for undoing a save after the fact.

Separate from HistoryStack: that one covers uncommitted overlay edits and is
reset by every successful commit. Each CommitRecord here holds the request
that was written plus, per file, the frame lists it replaced, so undo can
write the old lists back and redo can replay the request.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..debug_trace import get_logger
from ..errors import CommitFailure
from ..models.constants import field_key_from_wire
from ..models.frame_changes import FrameChange, FrameChangesRequest
from .undo_frame import MAX_UNDO_DEPTH

if TYPE_CHECKING:
    from ..models.frame_value import FileFrames
    from .data_source import TagDataSource

logger = get_logger(__name__)

HistoryObserver = Callable[["CommitHistory"], None]


@dataclass(frozen=True)
class CommitRecord:
    """One committed write.

    Attributes:
        request: The request that was written
        before: Path -> frame lists the request replaced on that file.
                Files that weren't loaded at commit time have no entry.
    """

    request: FrameChangesRequest
    before: dict[str, tuple[FrameChange, ...]]

    @property
    def paths(self) -> tuple[str, ...]:
        return self.request.paths

    def undo_requests(self) -> list[FrameChangesRequest]:
        """One single-file request per file, restoring its previous frames."""
        return [
            FrameChangesRequest(paths=(path,), frames=frames)
            for path, frames in self.before.items()
        ]

    def __repr__(self) -> str:
        return f"CommitRecord({', '.join(self.request.keys())} on {len(self.paths)} files)"


def capture_before(
    request: FrameChangesRequest, files: Sequence[FileFrames]
) -> dict[str, tuple[FrameChange, ...]]:
    """Snapshot what the request is about to overwrite on each loaded file."""
    by_path = {f.path: f for f in files}
    before: dict[str, tuple[FrameChange, ...]] = {}
    for path in request.paths:
        file_frames = by_path.get(path)
        if file_frames is None:
            continue
        before[path] = tuple(
            FrameChange(key=change.key, values=file_frames.values(field_key_from_wire(change.key)))
            for change in request.frames
        )
    return before


class CommitHistory:
    """Linear undo/redo over committed writes.

    ``records`` holds every kept commit; ``cursor`` points at the last one
    currently applied (-1 when everything has been undone).

    Usage:
        history = CommitHistory(data_source)
        history.record(request, capture_before(request, files))
        history.undo_commit()   # writes the old frames back
        history.redo_commit()   # writes the request again
    """

    def __init__(self, data_source: TagDataSource, max_depth: int = MAX_UNDO_DEPTH):
        self._data_source = data_source
        self.max_depth = max_depth
        self.records: list[CommitRecord] = []
        self.cursor = -1
        self._in_flight = False
        self._observers: list[HistoryObserver] = []

    @property
    def in_flight(self) -> bool:
        """True while an undo/redo write is being submitted."""
        return self._in_flight

    def can_undo_commit(self) -> bool:
        return not self._in_flight and self.cursor >= 0

    def can_redo_commit(self) -> bool:
        return not self._in_flight and self.cursor + 1 < len(self.records)

    def record(self, request: FrameChangesRequest, before: dict[str, tuple[FrameChange, ...]]) -> None:
        """Add a successful commit, dropping anything that was undone."""
        del self.records[self.cursor + 1 :]
        self.records.append(CommitRecord(request, before))
        if len(self.records) > self.max_depth:
            del self.records[: len(self.records) - self.max_depth]
        self.cursor = len(self.records) - 1
        self._notify_observers()

    def clear(self) -> None:
        self.records.clear()
        self.cursor = -1
        self._notify_observers()

    def _write(self, requests: Sequence[FrameChangesRequest]) -> None:
        self._in_flight = True
        try:
            for request in requests:
                self._data_source.write_frame_changes(request)
        except CommitFailure:
            raise
        except Exception as exc:
            paths = requests[0].paths if requests else ()
            raise CommitFailure(paths, str(exc) or type(exc).__name__, cause=exc) from exc
        finally:
            self._in_flight = False

    def undo_commit(self) -> CommitRecord | None:
        """Write back the frames the last applied commit replaced.

        Returns:
            The undone record, or None if there is nothing to undo.

        Raises:
            CommitFailure: If a write fails; the cursor is left unchanged
                           so the undo can be retried.
        """
        if not self.can_undo_commit():
            return None
        record = self.records[self.cursor]
        self._write(record.undo_requests())
        self.cursor -= 1
        logger.debug("Undid commit %r", record)
        self._notify_observers()
        return record

    def redo_commit(self) -> CommitRecord | None:
        """Replay the next undone commit.

        Raises:
            CommitFailure: If the write fails; the cursor is left unchanged.
        """
        if not self.can_redo_commit():
            return None
        record = self.records[self.cursor + 1]
        self._write([record.request])
        self.cursor += 1
        logger.debug("Redid commit %r", record)
        self._notify_observers()
        return record

    # --- Observers ---

    def _notify_observers(self) -> None:
        for callback in self._observers:
            try:
                callback(self)
            except Exception:
                # Don't let one observer's error break others
                logger.exception("Commit history observer failed")

    def add_observer(self, callback: HistoryObserver) -> None:
        """Add observer callback, called whenever the undo/redo flags may change."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: HistoryObserver) -> None:
        """Remove observer callback."""
        if callback in self._observers:
            self._observers.remove(callback)
