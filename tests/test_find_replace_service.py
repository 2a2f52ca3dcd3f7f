"""Tests for find/replace matching and patch building."""

from tagbatch.models.frame_value import Comment, FileFrames, Text
from tagbatch.services.find_replace_service import (
    ALL_FIELDS,
    FindOptions,
    FindReplaceService,
    apply_replace,
    build_matcher,
)
from tagbatch.services.merge_resolver import EMPTY, MIXED, DisplayKind, FieldDisplay


class TestMatcher:
    """Tests for build_matcher."""

    def test_substring_case_insensitive_by_default(self):
        matcher = build_matcher("love", FindOptions())

        assert matcher("All You Need Is Love")
        assert not matcher("Yesterday")

    def test_case_sensitive(self):
        matcher = build_matcher("love", FindOptions(case_sensitive=True))

        assert not matcher("Love Me Do")
        assert matcher("lovely")

    def test_whole_word(self):
        matcher = build_matcher("love", FindOptions(whole_word=True))

        assert matcher("Love Me Do")
        assert not matcher("Lovely Rita")

    def test_regex(self):
        matcher = build_matcher(r"^\d{4}$", FindOptions(regex=True))

        assert matcher("1969")
        assert not matcher("69")

    def test_special_characters_are_literal_without_regex(self):
        matcher = build_matcher("(live)", FindOptions())

        assert matcher("Song (Live)")
        assert not matcher("live")

    def test_empty_or_invalid_query(self):
        assert build_matcher("", FindOptions()) is None
        assert build_matcher("([", FindOptions(regex=True)) is None


class TestApplyReplace:
    """Tests for apply_replace."""

    def test_literal_replacement(self):
        assert apply_replace("Hits Hits", "hits", "Songs", FindOptions()) == "Songs Songs"

    def test_literal_replacement_ignores_backslashes(self):
        assert apply_replace("a-b", "-", r"\1", FindOptions()) == r"a\1b"

    def test_regex_group_reference(self):
        result = apply_replace("01 Intro", r"(\d+) (\w+)", r"\2 \1", FindOptions(regex=True))
        assert result == "Intro 01"

    def test_invalid_regex_leaves_text(self):
        assert apply_replace("abc", "([", "x", FindOptions(regex=True)) == "abc"


class TestFindMatches:
    """Tests for finding matching files."""

    def test_single_field(self):
        files = [
            FileFrames("a", {"title": [Text("Love Song")], "album": [Text("X")]}),
            FileFrames("b", {"title": [Text("Other")], "album": [Text("Love")]}),
        ]

        assert FindReplaceService.find_matches(files, "title", "love", FindOptions()) == ["a"]

    def test_all_fields(self):
        files = [
            FileFrames("a", {"title": [Text("Love Song")]}),
            FileFrames("b", {"album": [Text("Love")]}),
            FileFrames("c", {"album": [Text("Hate")]}),
        ]

        result = FindReplaceService.find_matches(files, ALL_FIELDS, "love", FindOptions())

        assert result == ["a", "b"]

    def test_empty_query_matches_nothing(self):
        files = [FileFrames("a", {"title": [Text("x")]})]

        assert FindReplaceService.find_matches(files, "title", "", FindOptions()) == []

    def test_comments_searched(self):
        files = [FileFrames("a", {"comments": [Comment("live take")]}), FileFrames("b")]

        assert FindReplaceService.find_matches(files, "comments", "live", FindOptions()) == ["a"]


class TestReplacePatch:
    """Tests for build_replace_patch."""

    def test_only_uniform_text_fields_changed(self):
        displays = {
            "title": MIXED,
            "album": FieldDisplay(DisplayKind.UNIFORM, Text("Greatest Hits")),
            "year": EMPTY,
            "genre": FieldDisplay(DisplayKind.UNIFORM, Text("Rock")),
        }

        patch = FindReplaceService.build_replace_patch(displays, "hits", "Songs", FindOptions())

        assert patch == {"album": Text("Greatest Songs")}

    def test_list_values_skipped(self):
        displays = {"artist": FieldDisplay(DisplayKind.UNIFORM, (Text("Hits"), Text("B")))}

        assert FindReplaceService.build_replace_patch(displays, "Hits", "x", FindOptions()) == {}

    def test_comment_keeps_language_and_description(self):
        displays = {
            "comments": FieldDisplay(DisplayKind.UNIFORM, Comment("great hits", language="deu"))
        }

        patch = FindReplaceService.build_replace_patch(displays, "hits", "songs", FindOptions())

        assert patch == {"comments": Comment("great songs", language="deu")}
