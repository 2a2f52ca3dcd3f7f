"""Undo frame for storing snapshots of the change overlay.

A single UndoFrame captures the pending edits before a change, allowing
undo/redo operations to restore previous states.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.frame_value import PendingValue

# Maximum number of undo frames to retain
MAX_UNDO_DEPTH = 100


@dataclass
class UndoFrame:
    """Snapshot of pending edits before a change.

    Attributes:
        fields: Dict mapping field key to the pending value at that point.
                Values are immutable, so a shallow copy is a full snapshot.
        description: Human-readable description of the change (for menu display).
    """

    fields: dict[str, PendingValue] = field(default_factory=dict)
    description: str = ""

    def __repr__(self) -> str:
        return f"UndoFrame({self.description!r}, {len(self.fields)} fields)"
