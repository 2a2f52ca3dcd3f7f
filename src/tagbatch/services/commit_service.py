"""Commit service that turns staged edits into one write request.

Every pending overlay field becomes a frame-write instruction (wire key +
replacement value list). The instructions and the full selection path list
go to the data source as a single request; partial application is the
codec's concern, not the engine's.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..data.commit_history import capture_before
from ..debug_trace import get_logger
from ..errors import CommitFailure, CommitInProgress, TagBatchError
from ..models.constants import wire_key
from ..models.frame_changes import FrameChange, FrameChangesRequest
from ..models.frame_value import pending_as_list

if TYPE_CHECKING:
    from ..data.change_overlay import ChangeOverlay
    from ..data.commit_history import CommitHistory
    from ..data.data_source import TagDataSource
    from ..models.frame_value import FileFrames, PendingValue

logger = get_logger(__name__)


class CommitStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CommitResult:
    """Outcome of a commit attempt.

    Attributes:
        status: SUCCESS, FAILED, or SKIPPED (nothing to commit / no selection)
        message: User-facing acknowledgement or error text
        request: The request that was submitted, if any
        error: Typed error for failures
    """

    status: CommitStatus
    message: str
    request: FrameChangesRequest | None = None
    error: TagBatchError | None = None

    @property
    def ok(self) -> bool:
        return self.status is CommitStatus.SUCCESS

    @classmethod
    def success(cls, request: FrameChangesRequest, verb: str = "Saved changes to") -> CommitResult:
        count = len(request.paths)
        return cls(
            CommitStatus.SUCCESS,
            f"{verb} {count} file{'' if count == 1 else 's'}",
            request=request,
        )

    @classmethod
    def failure(
        cls, error: TagBatchError, request: FrameChangesRequest | None = None
    ) -> CommitResult:
        message = getattr(error, "message", None) or str(error) or type(error).__name__
        return cls(CommitStatus.FAILED, f"Failed to save changes: {message}", request, error)

    @classmethod
    def skipped(cls, reason: str) -> CommitResult:
        return cls(CommitStatus.SKIPPED, reason)


class CommitService:
    """Serializes the overlay and submits it through the data source.

    Only one commit may be in flight at a time; a second attempt while the
    first is still writing is rejected rather than interleaved.
    """

    def __init__(self, data_source: TagDataSource, history: CommitHistory | None = None):
        """Initialize the commit service.

        Args:
            data_source: Boundary used for writing frame changes
            history: Commit history to record successful writes in, if any
        """
        self._data_source = data_source
        self.history = history
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        """True while a write request (or a commit undo/redo) is being submitted."""
        history_busy = self.history is not None and self.history.in_flight
        return self._in_flight or history_busy

    @staticmethod
    def build_request(
        overlay: Mapping[str, PendingValue], paths: Sequence[str]
    ) -> FrameChangesRequest:
        """Translate pending fields into a write request.

        Each field key is mapped to its wire key and its pending value is
        wrapped as the replacement frame list (one element for a scalar
        edit, the explicit list for list-valued fields).
        """
        frames = tuple(
            FrameChange(key=wire_key(key), values=pending_as_list(pending))
            for key, pending in overlay.items()
        )
        return FrameChangesRequest(paths=tuple(paths), frames=frames)

    def submit(self, request: FrameChangesRequest) -> CommitResult:
        """Send a prepared request to the data source.

        Never raises; boundary errors come back as a failed CommitResult.
        """
        if self._in_flight:
            return CommitResult.failure(CommitInProgress("A save is already in progress"), request)

        if self._data_source.is_read_only:
            return CommitResult.failure(
                CommitFailure(request.paths, "Data source is read-only"), request
            )

        self._in_flight = True
        try:
            self._data_source.write_frame_changes(request)
        except CommitFailure as exc:
            logger.warning("Commit failed: %s", exc.message)
            return CommitResult.failure(exc, request)
        except Exception as exc:
            logger.warning("Commit failed: %s", exc)
            error = CommitFailure(request.paths, str(exc) or type(exc).__name__, cause=exc)
            return CommitResult.failure(error, request)
        finally:
            self._in_flight = False

        logger.debug(
            "Committed %s to %d file(s)", ", ".join(request.keys()), len(request.paths)
        )
        return CommitResult.success(request)

    def commit(
        self,
        overlay: ChangeOverlay,
        paths: Sequence[str],
        files: Sequence[FileFrames] = (),
    ) -> CommitResult:
        """Commit the overlay to the given paths.

        On success the overlay is cleared (which also resets its history)
        and, with a commit history attached, the write is recorded along
        with what it replaced on each of ``files``. On failure the overlay
        and its history are left untouched.

        Args:
            overlay: Pending edits
            paths: Target files
            files: Current frames of the target files, for commit undo
        """
        if self.in_flight:
            return CommitResult.failure(CommitInProgress("A save is already in progress"))
        if overlay.is_empty():
            return CommitResult.skipped("No changes to save")
        if not paths:
            return CommitResult.skipped("No files selected")

        request = self.build_request(overlay.snapshot(), paths)
        before = capture_before(request, files) if self.history is not None else {}
        result = self.submit(request)
        if result.ok:
            overlay.clear()
            if self.history is not None:
                self.history.record(request, before)
        return result
