"""Undo/redo history over change overlay snapshots.

Checkpoints are debounced by wall-clock time: an edit pushes the overlay
state from before it only when the threshold has passed since the last
*push*. A typing burst with short gaps therefore undoes as one step, no
matter how long the burst runs.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from ..debug_trace import get_logger
from .undo_frame import MAX_UNDO_DEPTH, UndoFrame

if TYPE_CHECKING:
    from ..models.frame_value import PendingValue

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.25


class HistoryStack:
    """Linear undo/redo storage with time-debounced checkpoints.

    ``past`` holds older states, newest last. ``future`` holds undone
    states, the next one to redo first.

    Usage:
        history = HistoryStack()
        history.checkpoint(overlay_before_edit)
        ...
        previous = history.undo(current_overlay)
    """

    def __init__(
        self,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        max_depth: int = MAX_UNDO_DEPTH,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize an empty history.

        Args:
            debounce_seconds: Minimum time between checkpoint pushes.
            max_depth: Maximum number of undo frames to keep.
            clock: Time source in seconds (injectable for tests).
        """
        self.debounce_seconds = debounce_seconds
        self.max_depth = max_depth
        self._clock = clock

        self.past: list[UndoFrame] = []
        self.future: list[UndoFrame] = []

        # None means the next edit always pushes
        self._last_push: float | None = None

    def _trim(self) -> None:
        while len(self.past) > self.max_depth:
            self.past.pop(0)

    def checkpoint(self, before: Mapping[str, PendingValue], description: str = "") -> bool:
        """Record the state before an edit.

        Pushes ``before`` onto past only if the debounce threshold has
        elapsed since the last push; otherwise the edit joins the current
        undo step. Either way the redo stack is cleared.

        Returns:
            True if a new checkpoint was pushed.
        """
        now = self._clock()
        pushed = False

        if self._last_push is None or now - self._last_push >= self.debounce_seconds:
            self.past.append(UndoFrame(fields=dict(before), description=description))
            self._trim()
            self._last_push = now
            pushed = True
            logger.debug("Checkpoint pushed (%d in past)", len(self.past))

        # A fresh edit always invalidates redo
        self.future.clear()
        return pushed

    def seal(self) -> None:
        """Close the current undo step so the next edit starts a new one."""
        self._last_push = None

    def undo(self, current: Mapping[str, PendingValue]) -> dict[str, PendingValue] | None:
        """Step back one checkpoint.

        Args:
            current: The overlay state being replaced.

        Returns:
            The restored state, or None if there is nothing to undo.
        """
        if not self.past:
            return None

        self.future.insert(0, UndoFrame(fields=dict(current)))
        frame = self.past.pop()
        self.seal()
        return dict(frame.fields)

    def redo(self, current: Mapping[str, PendingValue]) -> dict[str, PendingValue] | None:
        """Step forward one checkpoint.

        Returns:
            The restored state, or None if there is nothing to redo.
        """
        if not self.future:
            return None

        self.past.append(UndoFrame(fields=dict(current)))
        self._trim()
        frame = self.future.pop(0)
        self.seal()
        return dict(frame.fields)

    def reset(self) -> None:
        """Drop all history."""
        self.past.clear()
        self.future.clear()
        self.seal()

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self.past) > 0

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self.future) > 0

    def get_undo_description(self) -> str | None:
        """Get description of next undo action."""
        if self.past:
            return self.past[-1].description
        return None
