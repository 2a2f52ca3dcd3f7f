"""Service layer for business logic.

This package contains stateless services that operate on FileFrames
snapshots and the change overlay. Services separate the merge/diff/commit
rules from the session state and the UI.

Services:
- MergeResolver: Shared display value (empty / uniform / mixed) per field
- DiffService: Per-file before/after preview of pending edits
- CommitService: Builds and submits the single multi-file write request
- FindReplaceService: Find matches and build replace patches
"""

from .commit_service import CommitResult, CommitService, CommitStatus
from .diff_service import DiffEntry, DiffService, FileDiff
from .find_replace_service import FindOptions, FindReplaceService
from .merge_resolver import DisplayKind, FieldDisplay, MergeResolver

__all__ = [
    "CommitResult",
    "CommitService",
    "CommitStatus",
    "DiffEntry",
    "DiffService",
    "DisplayKind",
    "FieldDisplay",
    "FileDiff",
    "FindOptions",
    "FindReplaceService",
    "MergeResolver",
]
