"""Find/replace over text fields.

Matching follows the find bar's options: plain substring (optionally case
sensitive), whole word, or regular expression. An invalid regex matches
nothing and replaces nothing. Replacements are produced as a field patch
for ChangeOverlay.set_fields, so a replace-all is one undo step.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..models.frame_value import Comment, Text

if TYPE_CHECKING:
    from ..models.frame_value import FileFrames
    from .merge_resolver import FieldDisplay

ALL_FIELDS = "all"


@dataclass(frozen=True)
class FindOptions:
    case_sensitive: bool = False
    regex: bool = False
    whole_word: bool = False


def _compile(query: str, options: FindOptions) -> re.Pattern[str] | None:
    flags = 0 if options.case_sensitive else re.IGNORECASE
    if options.regex:
        pattern = query
    elif options.whole_word:
        pattern = rf"\b{re.escape(query)}\b"
    else:
        pattern = re.escape(query)
    try:
        return re.compile(pattern, flags)
    except re.error:
        return None


def build_matcher(query: str, options: FindOptions) -> Callable[[str], bool] | None:
    """Build a predicate for the query, or None if the query is empty or invalid."""
    if not query:
        return None
    pattern = _compile(query, options)
    if pattern is None:
        return None
    return lambda s: pattern.search(s or "") is not None


def apply_replace(original: str, query: str, replacement: str, options: FindOptions) -> str:
    """Replace every match of query in original.

    Plain (non-regex) replacements are literal; regex replacements accept
    group references in the replacement string.
    """
    if not query:
        return original
    pattern = _compile(query, options)
    if pattern is None:
        return original
    if options.regex:
        try:
            return pattern.sub(replacement, original or "")
        except re.error:
            return original
    return pattern.sub(lambda _m: replacement, original or "")


class FindReplaceService:
    """Finds matching files and builds replace patches.

    All methods are static as the service is stateless.
    """

    @staticmethod
    def _text_values(file_frames: FileFrames, field: str) -> list[str]:
        keys: Iterable[str] = file_frames.frames.keys() if field == ALL_FIELDS else (field,)
        texts = []
        for key in keys:
            value = file_frames.first_value(key)
            if isinstance(value, Text):
                texts.append(value.value)
            elif isinstance(value, Comment):
                texts.append(value.text)
        return texts

    @staticmethod
    def find_matches(
        files: Sequence[FileFrames], field: str, query: str, options: FindOptions
    ) -> list[str]:
        """Paths of files whose field (or any field, for "all") matches.

        Only the first Text (or Comment) value of each field is searched.
        """
        matcher = build_matcher(query, options)
        if matcher is None:
            return []
        return [
            f.path
            for f in files
            if any(matcher(text) for text in FindReplaceService._text_values(f, field))
        ]

    @staticmethod
    def build_replace_patch(
        displays: dict[str, FieldDisplay],
        query: str,
        replacement: str,
        options: FindOptions,
    ) -> dict[str, Text | Comment]:
        """Build a {field: value} patch from the currently displayed values.

        Fields that are mixed, empty, non-text, or unchanged by the
        replacement are left out.

        Args:
            displays: Field key -> what the shared control currently shows
        """
        patch: dict[str, Text | Comment] = {}
        for key, display in displays.items():
            if not display.is_uniform or isinstance(display.value, tuple):
                continue
            value = display.first_value
            if isinstance(value, Text):
                replaced = apply_replace(value.value, query, replacement, options)
                if replaced != value.value:
                    patch[key] = Text(replaced)
            elif isinstance(value, Comment):
                replaced = apply_replace(value.text, query, replacement, options)
                if replaced != value.text:
                    patch[key] = dataclasses.replace(value, text=replaced)
        return patch
