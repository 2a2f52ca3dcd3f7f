"""Merge resolver for shared editing controls.

Given the selected files, decides what a shared control should show for a
field: nothing, the one value every file agrees on, or a "mixed" sentinel
that can never be committed by accident.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..models.constants import PICTURE_KEYS
from ..models.frame_value import display_text

if TYPE_CHECKING:
    from ..models.frame_value import FileFrames, FrameValue, Picture, PendingValue

DEFAULT_MIXED_SENTINEL = "..."


class DisplayKind(Enum):
    """Resolution outcome for a shared field."""

    EMPTY = "empty"
    UNIFORM = "uniform"
    MIXED = "mixed"


@dataclass(frozen=True)
class FieldDisplay:
    """What a shared editing control should display.

    Attributes:
        kind: EMPTY, UNIFORM or MIXED
        value: The shared (or pending) value when kind is UNIFORM
        value_count: Number of values the file holds for the key, when a
                     single file is selected (drives the count badge)
        pending: True when the value comes from the change overlay
    """

    kind: DisplayKind
    value: PendingValue | None = None
    value_count: int = 0
    pending: bool = False

    @property
    def is_empty(self) -> bool:
        return self.kind is DisplayKind.EMPTY

    @property
    def is_uniform(self) -> bool:
        return self.kind is DisplayKind.UNIFORM

    @property
    def is_mixed(self) -> bool:
        return self.kind is DisplayKind.MIXED

    @property
    def first_value(self) -> FrameValue | None:
        """The single value to put in a scalar control (first item of a list)."""
        if isinstance(self.value, tuple):
            return self.value[0] if self.value else None
        return self.value

    def text(self, mixed_sentinel: str = DEFAULT_MIXED_SENTINEL) -> str:
        """Text for a text control: the sentinel when mixed, "" when empty."""
        if self.kind is DisplayKind.MIXED:
            return mixed_sentinel
        return display_text(self.first_value)


EMPTY = FieldDisplay(DisplayKind.EMPTY)
MIXED = FieldDisplay(DisplayKind.MIXED)


class MergeResolver:
    """Resolves shared display values across selected files.

    Files missing from the store are simply not passed in, so they
    contribute no value rather than forcing MIXED.

    All methods are static as the resolver is stateless.
    """

    @staticmethod
    def _merge(firsts: Sequence[FrameValue | None]) -> FieldDisplay:
        if all(v is None for v in firsts):
            return EMPTY
        first = firsts[0]
        if all(v == first for v in firsts):
            return FieldDisplay(DisplayKind.UNIFORM, first)
        return MIXED

    @staticmethod
    def resolve(files: Sequence[FileFrames], key: str) -> FieldDisplay:
        """Resolve one field across the selected files.

        Only the first value of each file's list is compared; extra values
        of multi-valued frames are reported through value_count instead.

        Args:
            files: Frames of the selected files that could be read
            key: Field key

        Returns:
            FieldDisplay for the field
        """
        if not files:
            return EMPTY

        # A single file is shown as-is, never compared
        if len(files) == 1:
            only = files[0]
            value = only.first_value(key)
            if value is None:
                return EMPTY
            return FieldDisplay(DisplayKind.UNIFORM, value, value_count=len(only.values(key)))

        return MergeResolver._merge([f.first_value(key) for f in files])

    @staticmethod
    def resolve_all(files: Sequence[FileFrames], keys: Iterable[str]) -> dict[str, FieldDisplay]:
        """Resolve several fields at once."""
        return {key: MergeResolver.resolve(files, key) for key in keys}

    @staticmethod
    def resolve_picture(
        files: Sequence[FileFrames], keys: Sequence[str] = PICTURE_KEYS
    ) -> FieldDisplay:
        """Resolve the display artwork: each file's first Picture across the picture keys."""
        if not files:
            return EMPTY

        if len(files) == 1:
            only = files[0]
            picture = only.first_picture(keys)
            if picture is None:
                return EMPTY
            return FieldDisplay(
                DisplayKind.UNIFORM, picture, value_count=len(only.pictures(keys))
            )

        return MergeResolver._merge([f.first_picture(keys) for f in files])

    @staticmethod
    def picture_list(
        files: Sequence[FileFrames], keys: Sequence[str] = PICTURE_KEYS
    ) -> tuple[Picture, ...]:
        """Full ordered picture list for the artwork manager.

        Only available for a single selected file; empty otherwise.
        """
        if len(files) != 1:
            return ()
        return files[0].pictures(keys)
