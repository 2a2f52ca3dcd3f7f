"""Exception types raised at the tag codec boundary.

Data sources raise these from read_frames/write_frame_changes. The engine
catches them where the boundary is crossed (FileStore.load, CommitService, CommitHistory)
and turns them into outcome values, so nothing here escapes ChangeSession.
"""

from __future__ import annotations

from collections.abc import Sequence


class TagBatchError(Exception):
    """Base class for tag batch editing errors."""


class ReadFailure(TagBatchError):
    """The data source could not return frames for the requested paths."""

    def __init__(self, paths: Sequence[str], message: str):
        super().__init__(message)
        self.paths = tuple(paths)
        self.message = message

    def __repr__(self) -> str:
        return f"ReadFailure({self.message!r}, {len(self.paths)} paths)"


class CommitFailure(TagBatchError):
    """A write request failed wholesale.

    Attributes:
        paths: Paths in the failed request
        message: User-facing description of the failure
        cause: The underlying exception, if any
        failed_path: The specific file that failed, when the codec knows it
    """

    def __init__(
        self,
        paths: Sequence[str],
        message: str,
        cause: BaseException | None = None,
        failed_path: str | None = None,
    ):
        super().__init__(message)
        self.paths = tuple(paths)
        self.message = message
        self.cause = cause
        self.failed_path = failed_path

    def __repr__(self) -> str:
        return f"CommitFailure({self.message!r}, failed_path={self.failed_path!r})"


class CommitInProgress(TagBatchError):
    """A commit was requested while another one is still being written."""
