"""Frame value model for tag editing.

Contains the FrameValue variants (Text, Picture, UserText, UserUrl and
Comment), the FileFrames snapshot of a single file's tags, canonical string rendering,
and conversion to and from the codec boundary's wire dicts.
"""

from __future__ import annotations

import base64
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

# Canonical rendering placeholders
EMPTY_PLACEHOLDER = "(empty)"
PICTURE_PLACEHOLDER = "[Image]"
LIST_SEPARATOR = "; "


# ==============================================================================
# Value Variants
# ==============================================================================


@dataclass(frozen=True)
class Text:
    """Plain text frame value."""

    value: str = ""


@dataclass(frozen=True)
class Picture:
    """Embedded artwork.

    Attributes:
        mime: MIME type of the image data (e.g. "image/jpeg")
        data: Raw image bytes
        picture_type: ID3 picture type code (3 = front cover), if known
        description: Free-form description, if any
    """

    mime: str
    data: bytes = field(repr=False)
    picture_type: int | None = None
    description: str | None = None


@dataclass(frozen=True)
class UserText:
    """User-defined text frame (TXXX)."""

    description: str
    value: str


@dataclass(frozen=True)
class UserUrl:
    """User-defined URL frame (WXXX)."""

    description: str
    url: str


@dataclass(frozen=True)
class Comment:
    """Comment frame (COMM) with its language and description.

    Attributes:
        text: Comment body
        description: Content descriptor; "" for the user-visible comment
        language: ISO-639-2 language code
        encoding: Text encoding name reported by the codec
    """

    text: str
    description: str = ""
    language: str = "eng"
    encoding: str = "UTF-8"


FrameValue = Union[Text, Picture, UserText, UserUrl, Comment]

# A pending overlay entry: one value, or a whole ordered list for the key
PendingValue = Union[FrameValue, tuple[FrameValue, ...]]

FRAME_VALUE_TYPES = (Text, Picture, UserText, UserUrl, Comment)


def _unsupported(value: object) -> TypeError:
    return TypeError(f"Unsupported frame value: {value!r}")


# ==============================================================================
# File Frames
# ==============================================================================


@dataclass(frozen=True)
class FileFrames:
    """Immutable snapshot of one file's frames.

    Attributes:
        path: Unique file identifier
        frames: Mapping of field key to ordered tuple of values
    """

    path: str
    frames: Mapping[str, tuple[FrameValue, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the mapping and the per-key lists so callers can't mutate a snapshot
        frozen = {key: tuple(values) for key, values in self.frames.items()}
        object.__setattr__(self, "frames", MappingProxyType(frozen))

    @property
    def file_name(self) -> str:
        """Last path component, for display."""
        return self.path.replace("\\", "/").rstrip("/").split("/")[-1] or self.path

    def values(self, key: str) -> tuple[FrameValue, ...]:
        """All values for a key (empty tuple if the file has none)."""
        return self.frames.get(key, ())

    def first_value(self, key: str) -> FrameValue | None:
        """First value for a key, or None if the file has none."""
        values = self.frames.get(key)
        if not values:
            return None
        return values[0]

    def first_picture(self, keys: Iterable[str]) -> Picture | None:
        """First Picture-typed value across the given picture-bearing keys."""
        for key in keys:
            for value in self.values(key):
                if isinstance(value, Picture):
                    return value
        return None

    def pictures(self, keys: Iterable[str]) -> tuple[Picture, ...]:
        """Every Picture-typed value across the given keys, in order."""
        return tuple(
            value for key in keys for value in self.values(key) if isinstance(value, Picture)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileFrames):
            return NotImplemented
        return self.path == other.path and dict(self.frames) == dict(other.frames)

    def __hash__(self) -> int:
        return hash(self.path)


def normalize_pending(value: FrameValue | Iterable[FrameValue]) -> PendingValue:
    """Normalize a pending edit to a single value or an immutable tuple.

    Raises:
        TypeError: If value (or any list item) is not a FrameValue.
    """
    if isinstance(value, FRAME_VALUE_TYPES):
        return value
    if isinstance(value, (str, bytes)):
        raise _unsupported(value)
    items = tuple(value)
    for item in items:
        if not isinstance(item, FRAME_VALUE_TYPES):
            raise _unsupported(item)
    return items


def pending_as_list(value: PendingValue) -> tuple[FrameValue, ...]:
    """Wrap a pending edit as the frame list it replaces on commit."""
    if isinstance(value, tuple):
        return value
    return (value,)


# ==============================================================================
# Canonical Rendering
# ==============================================================================


def render_value(value: FrameValue | None) -> str:
    """Render a single value for diff display.

    Text and Comment render as their string, Picture as a fixed
    placeholder, and a missing value (or empty text) as "(empty)".
    """
    if value is None:
        return EMPTY_PLACEHOLDER
    if isinstance(value, Text):
        return value.value or EMPTY_PLACEHOLDER
    if isinstance(value, Picture):
        return PICTURE_PLACEHOLDER
    if isinstance(value, UserText):
        return f"{value.description}: {value.value}"
    if isinstance(value, UserUrl):
        return f"{value.description}: {value.url}"
    if isinstance(value, Comment):
        body = value.text or EMPTY_PLACEHOLDER
        return f"{value.description}: {body}" if value.description else body
    raise _unsupported(value)


def render_list(values: Iterable[FrameValue]) -> str:
    """Render an ordered list of values, joined with "; "."""
    rendered = [render_value(v) for v in values]
    if not rendered:
        return EMPTY_PLACEHOLDER
    return LIST_SEPARATOR.join(rendered)


def display_text(value: FrameValue | None) -> str:
    """Text for an editable control; empty string when there's no value."""
    if value is None:
        return ""
    if isinstance(value, Text):
        return value.value
    if isinstance(value, Comment):
        return value.text
    return render_value(value)


# ==============================================================================
# Wire Conversion
# ==============================================================================


def frame_value_to_dict(value: FrameValue) -> dict[str, Any]:
    """Convert a value to the adjacently-tagged dict the codec boundary expects.

    Example:
        >>> frame_value_to_dict(Text("New"))
        {'type': 'Text', 'value': 'New'}
    """
    if isinstance(value, Text):
        return {"type": "Text", "value": value.value}
    if isinstance(value, Picture):
        return {
            "type": "Picture",
            "value": {
                "mime": value.mime,
                "data_base64": base64.b64encode(value.data).decode("ascii"),
                "picture_type": value.picture_type,
                "description": value.description,
            },
        }
    if isinstance(value, UserText):
        return {"type": "UserText", "value": {"description": value.description, "value": value.value}}
    if isinstance(value, UserUrl):
        return {"type": "UserUrl", "value": {"description": value.description, "url": value.url}}
    if isinstance(value, Comment):
        return {
            "type": "Comment",
            "value": {
                "encoding": value.encoding,
                "language": value.language,
                "description": value.description,
                "text": value.text,
            },
        }
    raise _unsupported(value)


def frame_value_from_dict(data: Mapping[str, Any]) -> FrameValue:
    """Parse a wire dict back into a FrameValue.

    Raises:
        ValueError: If the "type" tag is missing or unknown.
    """
    kind = data.get("type")
    payload = data.get("value")

    if kind == "Text":
        return Text(str(payload or ""))
    if kind == "Picture":
        payload = payload or {}
        return Picture(
            mime=payload.get("mime", ""),
            data=base64.b64decode(payload.get("data_base64", "")),
            picture_type=payload.get("picture_type"),
            description=payload.get("description"),
        )
    if kind == "UserText":
        payload = payload or {}
        return UserText(payload.get("description", ""), payload.get("value", ""))
    if kind == "UserUrl":
        payload = payload or {}
        return UserUrl(payload.get("description", ""), payload.get("url", ""))
    if kind == "Comment":
        payload = payload or {}
        return Comment(
            text=payload.get("text", ""),
            description=payload.get("description", ""),
            language=payload.get("language", "eng"),
            encoding=payload.get("encoding", "UTF-8"),
        )

    raise ValueError(f"Unknown frame value type: {kind!r}")
