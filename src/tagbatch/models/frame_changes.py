"""Request/response shapes exchanged with the tag codec boundary.

FrameChangesRequest is the single multi-file write request; its dict form
matches the boundary's wire format verbatim:

    {"paths": ["a.mp3", "b.mp3"],
     "frames": [{"key": "Title", "values": [{"type": "Text", "value": "New"}]}]}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .constants import field_key_from_wire
from .frame_value import FileFrames, FrameValue, frame_value_from_dict, frame_value_to_dict


@dataclass(frozen=True)
class FrameChange:
    """Replacement frame list for one wire key."""

    key: str
    values: tuple[FrameValue, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "values": [frame_value_to_dict(v) for v in self.values]}


@dataclass(frozen=True)
class FrameChangesRequest:
    """One write request covering every path and every changed frame.

    Tuples make the request a value snapshot: later selection or overlay
    changes can't alter a request that is already being written.
    """

    paths: tuple[str, ...]
    frames: tuple[FrameChange, ...]

    def to_dict(self) -> dict[str, Any]:
        """Wire form of the request."""
        return {"paths": list(self.paths), "frames": [f.to_dict() for f in self.frames]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FrameChangesRequest:
        frames = tuple(
            FrameChange(
                key=frame["key"],
                values=tuple(frame_value_from_dict(v) for v in frame.get("values", [])),
            )
            for frame in data.get("frames", [])
        )
        return cls(paths=tuple(data.get("paths", [])), frames=frames)

    def keys(self) -> list[str]:
        return [f.key for f in self.frames]


def file_frames_from_dict(data: Mapping[str, Any]) -> FileFrames:
    """Parse a readFrames entry ({path, frames: [{key, values}]}) into FileFrames.

    Wire keys are converted back to field keys ("Title" -> "title").
    """
    frames: dict[str, list[FrameValue]] = {}
    for frame in data.get("frames", []):
        key = field_key_from_wire(frame["key"])
        frames.setdefault(key, []).extend(
            frame_value_from_dict(v) for v in frame.get("values", [])
        )
    return FileFrames(path=data["path"], frames=frames)
