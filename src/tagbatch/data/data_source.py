"""Data source abstraction for the tag codec boundary.

Provides the abstract base class and implementations for reading frames
from and writing frame changes to audio files:

- MutagenDataSource: reads/writes ID3v2 tags directly with mutagen
- WireDataSource: forwards wire-format dicts to an external codec
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from mutagen.id3 import APIC, COMM, ID3, TXXX, USLT, WXXX, Frames, ID3NoHeaderError

from ..debug_trace import get_logger, log_perf
from ..errors import CommitFailure, ReadFailure
from ..models.constants import ID3_FRAME_IDS, field_key_from_wire
from ..models.frame_changes import file_frames_from_dict
from ..models.frame_value import Comment, FileFrames, Picture, Text, UserText, UserUrl

if TYPE_CHECKING:
    from ..models.frame_changes import FrameChangesRequest
    from ..models.frame_value import FrameValue

logger = get_logger(__name__)

# ID3 text encoding: UTF-8
UTF8 = 3

# Front cover
DEFAULT_PICTURE_TYPE = 3

DEFAULT_LANGUAGE = "eng"

# Frames keyed by description; only the blank-description ones are user-facing
DESCRIBED_FRAME_IDS = frozenset({"COMM", "USLT"})

# ID3 encoding byte -> name reported on Comment values
ENCODING_NAMES = {0: "ISO-8859-1", 1: "UTF-16", 2: "UTF-16BE", 3: "UTF-8"}


class TagDataSource(ABC):
    """Abstract base class for the tag codec boundary.

    Both methods fail per call, not per file: an exception means the whole
    read or write is treated as failed.
    """

    @abstractmethod
    def read_frames(self, paths: Sequence[str]) -> list[FileFrames]:
        """Read frames for the given files.

        Raises:
            ReadFailure: If the frames could not be read.
        """

    @abstractmethod
    def write_frame_changes(self, request: FrameChangesRequest) -> None:
        """Replace the requested frame lists on every requested file.

        Raises:
            CommitFailure: If the write failed.
        """

    @property
    def is_read_only(self) -> bool:
        """Return True if this data source can't write."""
        return False


class MutagenDataSource(TagDataSource):
    """Data source backed by ID3v2 tags, read and written with mutagen.

    Files without an ID3 header read as having no frames; writing to them
    creates a new tag.
    """

    def __init__(self, v2_version: int = 4):
        """Initialize the mutagen data source.

        Args:
            v2_version: ID3v2 minor version to save with (3 or 4)
        """
        self.v2_version = v2_version

    # --- Reading ---

    @log_perf
    def read_frames(self, paths: Sequence[str]) -> list[FileFrames]:
        result: list[FileFrames] = []
        for path in paths:
            try:
                tags = self._load(path)
            except Exception as exc:
                raise ReadFailure(paths, f"Could not read tags from {path}: {exc}") from exc
            result.append(self._to_file_frames(path, tags))
        return result

    @staticmethod
    def _load(path: str) -> ID3:
        try:
            return ID3(path)
        except ID3NoHeaderError:
            return ID3()

    def _to_file_frames(self, path: str, tags: ID3) -> FileFrames:
        frames: dict[str, list[FrameValue]] = {}

        for key, frame_id in ID3_FRAME_IDS.items():
            values = self._read_key(tags, frame_id)
            if values:
                frames[key] = values

        return FileFrames(path=path, frames=frames)

    @staticmethod
    def _read_key(tags: ID3, frame_id: str) -> list[FrameValue]:
        found = tags.getall(frame_id)

        if frame_id == "APIC":
            return [
                Picture(
                    mime=f.mime,
                    data=f.data,
                    picture_type=int(f.type),
                    description=f.desc or None,
                )
                for f in found
            ]
        if frame_id == "TXXX":
            return [UserText(f.desc, f.text[0] if f.text else "") for f in found]
        if frame_id == "WXXX":
            return [UserUrl(f.desc, f.url) for f in found]
        if frame_id == "COMM":
            return [
                Comment(str(item), f.desc, f.lang, ENCODING_NAMES.get(int(f.encoding), "UTF-8"))
                for f in found
                if not f.desc
                for item in f.text
            ]
        if frame_id == "USLT":
            return [Text(f.text) for f in found if not f.desc]

        # Text frames carry a list of strings per frame
        return [Text(str(item)) for f in found for item in f.text]

    # --- Writing ---

    @log_perf
    def write_frame_changes(self, request: FrameChangesRequest) -> None:
        for path in request.paths:
            try:
                tags = self._load(path)
                for change in request.frames:
                    self._write_key(tags, field_key_from_wire(change.key), change.values)
                tags.save(path, v2_version=self.v2_version)
            except Exception as exc:
                raise CommitFailure(
                    request.paths,
                    f"Failed to save {path}: {exc}",
                    cause=exc,
                    failed_path=path,
                ) from exc
            logger.debug("Wrote %d frame(s) to %s", len(request.frames), path)

    @staticmethod
    def _texts(field_key: str, values: Sequence[FrameValue]) -> list[str]:
        texts = []
        for value in values:
            if not isinstance(value, Text):
                raise TypeError(f"{field_key} only accepts text values, got {value!r}")
            if value.value:
                texts.append(value.value)
        return texts

    @staticmethod
    def _comment_groups(
        field_key: str, values: Sequence[FrameValue]
    ) -> dict[tuple[str, str], list[str]]:
        """Group comment texts by (language, description), one COMM frame per group."""
        groups: dict[tuple[str, str], list[str]] = {}
        for value in values:
            if isinstance(value, Text):
                lang, desc, text = DEFAULT_LANGUAGE, "", value.value
            elif isinstance(value, Comment):
                lang, desc, text = value.language or DEFAULT_LANGUAGE, value.description, value.text
            else:
                raise TypeError(f"{field_key} only accepts text or comments, got {value!r}")
            if text:
                groups.setdefault((lang, desc), []).append(text)
        return groups

    def _write_key(self, tags: ID3, field_key: str, values: Sequence[FrameValue]) -> None:
        frame_id = ID3_FRAME_IDS.get(field_key)
        if frame_id is None:
            raise KeyError(f"No ID3 frame for field {field_key!r}")

        if frame_id in DESCRIBED_FRAME_IDS:
            # Described frames (e.g. iTunNORM) are not part of the field
            for frame in tags.getall(frame_id):
                if not frame.desc:
                    del tags[frame.HashKey]
        else:
            tags.delall(frame_id)

        if frame_id == "APIC":
            seen: set[str] = set()
            for index, value in enumerate(values):
                if not isinstance(value, Picture):
                    raise TypeError(f"{field_key} only accepts pictures, got {value!r}")
                # APIC frames are keyed by description, so keep descriptions unique
                desc = value.description or ""
                if desc in seen:
                    desc = f"{desc} ({index})"
                seen.add(desc)
                tags.add(
                    APIC(
                        encoding=UTF8,
                        mime=value.mime,
                        type=DEFAULT_PICTURE_TYPE if value.picture_type is None else value.picture_type,
                        desc=desc,
                        data=value.data,
                    )
                )
        elif frame_id == "TXXX":
            for value in values:
                if not isinstance(value, UserText):
                    raise TypeError(f"{field_key} only accepts user text, got {value!r}")
                tags.add(TXXX(encoding=UTF8, desc=value.description, text=[value.value]))
        elif frame_id == "WXXX":
            for value in values:
                if not isinstance(value, UserUrl):
                    raise TypeError(f"{field_key} only accepts user URLs, got {value!r}")
                tags.add(WXXX(encoding=UTF8, desc=value.description, url=value.url))
        elif frame_id == "COMM":
            for (lang, desc), texts in self._comment_groups(field_key, values).items():
                tags.add(COMM(encoding=UTF8, lang=lang, desc=desc, text=texts))
        elif frame_id == "USLT":
            texts = self._texts(field_key, values)
            if texts:
                tags.add(USLT(encoding=UTF8, lang=DEFAULT_LANGUAGE, desc="", text="\n".join(texts)))
        else:
            texts = self._texts(field_key, values)
            if texts:
                tags.add(Frames[frame_id](encoding=UTF8, text=texts))


class WireDataSource(TagDataSource):
    """Data source that talks to an external codec in wire format.

    The callables receive and return plain dicts exactly as the codec
    boundary defines them, so this can front an IPC bridge or subprocess.

    Usage:
        source = WireDataSource(
            read=lambda paths: bridge.call("read_frames", paths),
            write=lambda request: bridge.call("save_frame_changes", request),
        )
    """

    def __init__(
        self,
        read: Callable[[list[str]], Sequence[Mapping[str, Any]]],
        write: Callable[[dict[str, Any]], object],
    ):
        self._read = read
        self._write = write

    def read_frames(self, paths: Sequence[str]) -> list[FileFrames]:
        try:
            entries = self._read(list(paths))
            return [file_frames_from_dict(entry) for entry in entries]
        except ReadFailure:
            raise
        except Exception as exc:
            raise ReadFailure(paths, f"Could not read tags: {exc}") from exc

    def write_frame_changes(self, request: FrameChangesRequest) -> None:
        try:
            self._write(request.to_dict())
        except CommitFailure:
            raise
        except Exception as exc:
            raise CommitFailure(request.paths, str(exc) or type(exc).__name__, cause=exc) from exc
