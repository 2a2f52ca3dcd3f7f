"""Batch tag editing: stage, preview and commit shared edits across many audio files."""

from .data.change_session import ChangeSession
from .data.data_source import MutagenDataSource, TagDataSource, WireDataSource
from .data.file_store import FileStore
from .models.frame_value import FileFrames, Picture, Text, UserText, UserUrl
from .settings import EngineSettings

__version__ = "0.1.0"

__all__ = [
    "ChangeSession",
    "EngineSettings",
    "FileFrames",
    "FileStore",
    "MutagenDataSource",
    "Picture",
    "TagDataSource",
    "Text",
    "UserText",
    "UserUrl",
    "WireDataSource",
]
