"""Tests for the frame value model and wire conversion."""

import pytest

from tagbatch.models.constants import field_key_from_wire, field_label, is_multi_valued, wire_key
from tagbatch.models.frame_changes import FrameChange, FrameChangesRequest, file_frames_from_dict
from tagbatch.models.frame_value import (
    EMPTY_PLACEHOLDER,
    PICTURE_PLACEHOLDER,
    Comment,
    FileFrames,
    Picture,
    Text,
    UserText,
    UserUrl,
    display_text,
    frame_value_from_dict,
    frame_value_to_dict,
    normalize_pending,
    pending_as_list,
    render_list,
    render_value,
)

COVER = Picture(mime="image/png", data=b"\x89PNG", picture_type=3, description="cover")


class TestFrameValues:
    """Tests for value variants."""

    def test_values_are_immutable(self):
        """Frame values can't be mutated in place."""
        value = Text("a")
        with pytest.raises(AttributeError):
            value.value = "b"

    def test_structural_equality(self):
        """Equal payloads compare equal, including picture bytes."""
        assert Text("a") == Text("a")
        assert Picture("image/png", b"xy") == Picture("image/png", b"xy")
        assert Picture("image/png", b"xy") != Picture("image/png", b"xz")
        assert UserText("mood", "calm") != UserUrl("mood", "calm")


class TestRendering:
    """Tests for canonical rendering."""

    def test_text_renders_as_string(self):
        assert render_value(Text("Song A")) == "Song A"

    def test_empty_text_and_absent_render_as_empty(self):
        assert render_value(Text("")) == EMPTY_PLACEHOLDER
        assert render_value(None) == EMPTY_PLACEHOLDER

    def test_picture_renders_as_placeholder(self):
        assert render_value(COVER) == PICTURE_PLACEHOLDER

    def test_user_frames_render_with_description(self):
        assert render_value(UserText("mood", "calm")) == "mood: calm"
        assert render_value(UserUrl("shop", "https://x.test")) == "shop: https://x.test"

    def test_comment_renders_body_with_optional_description(self):
        assert render_value(Comment("hi")) == "hi"
        assert render_value(Comment("hi", description="note")) == "note: hi"
        assert render_value(Comment("")) == EMPTY_PLACEHOLDER

    def test_render_list(self):
        assert render_list([Text("A"), Text("B")]) == "A; B"
        assert render_list([]) == EMPTY_PLACEHOLDER

    def test_unsupported_value_raises(self):
        with pytest.raises(TypeError):
            render_value("plain string")

    def test_display_text(self):
        """Controls show raw text, and nothing for a missing value."""
        assert display_text(Text("")) == ""
        assert display_text(None) == ""
        assert display_text(COVER) == PICTURE_PLACEHOLDER
        assert display_text(Comment("hi", description="note")) == "hi"


class TestNormalizePending:
    """Tests for pending value normalization."""

    def test_single_value_kept(self):
        assert normalize_pending(Text("a")) == Text("a")

    def test_list_becomes_tuple(self):
        assert normalize_pending([Text("a"), Text("b")]) == (Text("a"), Text("b"))

    def test_comments_accepted(self):
        assert normalize_pending([Comment("a"), Text("b")]) == (Comment("a"), Text("b"))

    def test_rejects_strings(self):
        with pytest.raises(TypeError):
            normalize_pending("a")

    def test_rejects_bad_list_items(self):
        with pytest.raises(TypeError):
            normalize_pending([Text("a"), 5])

    def test_pending_as_list(self):
        assert pending_as_list(Text("a")) == (Text("a"),)
        assert pending_as_list((Text("a"), Text("b"))) == (Text("a"), Text("b"))


class TestFileFrames:
    """Tests for FileFrames snapshots."""

    def test_first_value_and_values(self):
        frames = FileFrames("/music/a.mp3", {"artist": [Text("X"), Text("Y")]})

        assert frames.first_value("artist") == Text("X")
        assert frames.values("artist") == (Text("X"), Text("Y"))
        assert frames.first_value("title") is None
        assert frames.values("title") == ()

    def test_frames_are_read_only(self):
        frames = FileFrames("a.mp3", {"title": [Text("A")]})
        with pytest.raises(TypeError):
            frames.frames["title"] = (Text("B"),)

    def test_file_name(self):
        assert FileFrames("/music/album/01 song.mp3").file_name == "01 song.mp3"
        assert FileFrames("C:\\music\\02.mp3").file_name == "02.mp3"

    def test_pictures(self):
        frames = FileFrames("a.mp3", {"attachedPicture": [COVER, Text("junk"), COVER]})

        assert frames.first_picture(["attachedPicture"]) == COVER
        assert frames.pictures(["attachedPicture"]) == (COVER, COVER)

    def test_equality(self):
        assert FileFrames("a", {"title": [Text("A")]}) == FileFrames("a", {"title": (Text("A"),)})
        assert FileFrames("a", {"title": [Text("A")]}) != FileFrames("a", {"title": [Text("B")]})


class TestWireConversion:
    """Tests for conversion to and from the codec boundary format."""

    def test_text_wire_shape(self):
        assert frame_value_to_dict(Text("New")) == {"type": "Text", "value": "New"}

    def test_picture_wire_shape(self):
        data = frame_value_to_dict(COVER)

        assert data["type"] == "Picture"
        assert data["value"]["mime"] == "image/png"
        assert data["value"]["data_base64"] == "iVBORw=="
        assert data["value"]["picture_type"] == 3
        assert data["value"]["description"] == "cover"

    @pytest.mark.parametrize(
        "value",
        [
            Text("x"),
            COVER,
            UserText("mood", "calm"),
            UserUrl("shop", "https://x.test"),
            Comment("hi", description="note", language="deu", encoding="UTF-16"),
        ],
    )
    def test_decode_restores_value(self, value):
        assert frame_value_from_dict(frame_value_to_dict(value)) == value

    def test_comment_wire_shape(self):
        assert frame_value_to_dict(Comment("hi")) == {
            "type": "Comment",
            "value": {"encoding": "UTF-8", "language": "eng", "description": "", "text": "hi"},
        }

    def test_comment_decode_fills_defaults(self):
        assert frame_value_from_dict({"type": "Comment", "value": {"text": "hi"}}) == Comment("hi")

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            frame_value_from_dict({"type": "Chapter", "value": {}})

    def test_request_wire_shape(self):
        request = FrameChangesRequest(
            paths=("f1", "f2"),
            frames=(FrameChange("Title", (Text("New"),)),),
        )

        assert request.to_dict() == {
            "paths": ["f1", "f2"],
            "frames": [{"key": "Title", "values": [{"type": "Text", "value": "New"}]}],
        }
        assert FrameChangesRequest.from_dict(request.to_dict()) == request

    def test_file_frames_from_dict_uses_field_keys(self):
        frames = file_frames_from_dict(
            {
                "path": "a.mp3",
                "frames": [
                    {"key": "AlbumArtist", "values": [{"type": "Text", "value": "V.A."}]},
                ],
            }
        )

        assert frames.first_value("albumArtist") == Text("V.A.")


class TestFrameKeys:
    """Tests for frame key helpers."""

    def test_wire_key(self):
        assert wire_key("title") == "Title"
        assert wire_key("attachedPicture") == "AttachedPicture"
        assert field_key_from_wire("UserDefinedURL") == "userDefinedURL"

    def test_labels(self):
        assert field_label("trackNumber") == "Track Number"
        assert field_label("mood") == "mood"

    def test_multi_valued(self):
        assert is_multi_valued("artist")
        assert not is_multi_valued("title")
