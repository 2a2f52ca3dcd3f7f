"""Tests for the codec boundary data sources."""

from unittest.mock import MagicMock

import pytest
from mutagen.id3 import COMM, ID3, USLT

from tagbatch.data.data_source import MutagenDataSource, WireDataSource
from tagbatch.data.file_store import FileStore
from tagbatch.errors import CommitFailure, ReadFailure
from tagbatch.models.frame_changes import FrameChange, FrameChangesRequest
from tagbatch.models.frame_value import Comment, Picture, Text, UserText, UserUrl

COVER = Picture("image/png", b"\x89PNG\r\n\x1a\n", picture_type=3, description="front")


@pytest.fixture
def audio_files(tmp_path):
    """Two files without an ID3 header."""
    paths = []
    for name in ("a.mp3", "b.mp3"):
        path = tmp_path / name
        path.write_bytes(b"\x00" * 128)
        paths.append(str(path))
    return paths


def request_for(paths, **frames):
    return FrameChangesRequest(
        paths=tuple(paths),
        frames=tuple(FrameChange(key, tuple(values)) for key, values in frames.items()),
    )


class TestMutagenDataSource:
    """Round-trips through real ID3 tags written by mutagen."""

    def test_untagged_file_has_no_frames(self, audio_files):
        frames = MutagenDataSource().read_frames(audio_files[:1])

        assert frames[0].path == audio_files[0]
        assert dict(frames[0].frames) == {}

    def test_write_text_to_every_file(self, audio_files):
        source = MutagenDataSource()

        source.write_frame_changes(request_for(audio_files, Title=[Text("New")]))

        for file_frames in source.read_frames(audio_files):
            assert file_frames.first_value("title") == Text("New")

    def test_multi_valued_text(self, audio_files):
        source = MutagenDataSource()

        source.write_frame_changes(request_for(audio_files[:1], Artist=[Text("X"), Text("Y")]))

        assert source.read_frames(audio_files[:1])[0].values("artist") == (Text("X"), Text("Y"))

    def test_replace_drops_old_values(self, audio_files):
        source = MutagenDataSource()
        source.write_frame_changes(request_for(audio_files[:1], Genre=[Text("Rock"), Text("Pop")]))

        source.write_frame_changes(request_for(audio_files[:1], Genre=[Text("Jazz")]))

        assert source.read_frames(audio_files[:1])[0].values("genre") == (Text("Jazz"),)

    def test_empty_list_removes_frame(self, audio_files):
        source = MutagenDataSource()
        source.write_frame_changes(request_for(audio_files[:1], Album=[Text("LP")]))

        source.write_frame_changes(request_for(audio_files[:1], Album=[]))

        assert source.read_frames(audio_files[:1])[0].first_value("album") is None

    def test_pictures(self, audio_files):
        source = MutagenDataSource()
        back = Picture("image/jpeg", b"\xff\xd8", picture_type=4, description="back")

        source.write_frame_changes(request_for(audio_files[:1], AttachedPicture=[COVER, back]))

        pictures = source.read_frames(audio_files[:1])[0].values("attachedPicture")
        assert len(pictures) == 2
        assert {p.data for p in pictures} == {COVER.data, back.data}
        assert {p.picture_type for p in pictures} == {3, 4}

    def test_user_frames(self, audio_files):
        source = MutagenDataSource()

        source.write_frame_changes(
            request_for(
                audio_files[:1],
                UserDefinedText=[UserText("mood", "calm")],
                UserDefinedURL=[UserUrl("shop", "https://example.com/album")],
            )
        )

        file_frames = source.read_frames(audio_files[:1])[0]
        assert file_frames.first_value("userDefinedText") == UserText("mood", "calm")
        assert file_frames.first_value("userDefinedURL") == UserUrl(
            "shop", "https://example.com/album"
        )

    def test_comments(self, audio_files):
        """Plain text written to the comment field reads back as a Comment."""
        source = MutagenDataSource()

        source.write_frame_changes(request_for(audio_files[:1], Comments=[Text("nice")]))

        assert source.read_frames(audio_files[:1])[0].first_value("comments") == Comment("nice")

    def test_comment_language_kept(self, audio_files):
        source = MutagenDataSource()

        source.write_frame_changes(
            request_for(audio_files[:1], Comments=[Comment("schoen", language="deu")])
        )

        assert source.read_frames(audio_files[:1])[0].values("comments") == (
            Comment("schoen", language="deu"),
        )

    def test_described_comments_are_not_the_comment_field(self, audio_files):
        """Player-written COMM frames (iTunNORM) are neither read nor deleted."""
        path = audio_files[0]
        tags = ID3()
        tags.add(COMM(encoding=3, lang="eng", desc="iTunNORM", text=[" 000001 000002"]))
        tags.add(COMM(encoding=3, lang="eng", desc="", text=["old"]))
        tags.save(path)
        source = MutagenDataSource()

        assert source.read_frames([path])[0].values("comments") == (Comment("old"),)

        source.write_frame_changes(request_for([path], Comments=[Text("mine")]))

        assert source.read_frames([path])[0].values("comments") == (Comment("mine"),)
        remaining = {f.desc: list(f.text) for f in ID3(path).getall("COMM")}
        assert remaining == {"iTunNORM": [" 000001 000002"], "": ["mine"]}

    def test_clearing_comments_keeps_described_frames(self, audio_files):
        path = audio_files[0]
        tags = ID3()
        tags.add(COMM(encoding=3, lang="eng", desc="iTunNORM", text=[" 000001"]))
        tags.add(COMM(encoding=3, lang="eng", desc="", text=["old"]))
        tags.save(path)

        MutagenDataSource().write_frame_changes(request_for([path], Comments=[]))

        assert [f.desc for f in ID3(path).getall("COMM")] == ["iTunNORM"]

    def test_described_lyrics_untouched(self, audio_files):
        path = audio_files[0]
        tags = ID3()
        tags.add(USLT(encoding=3, lang="eng", desc="karaoke", text="la la"))
        tags.save(path)
        source = MutagenDataSource()

        assert source.read_frames([path])[0].values("unsyncedLyrics") == ()

        source.write_frame_changes(request_for([path], UnsyncedLyrics=[Text("words")]))

        assert source.read_frames([path])[0].values("unsyncedLyrics") == (Text("words"),)
        assert {f.desc for f in ID3(path).getall("USLT")} == {"karaoke", ""}

    def test_wrong_value_type_fails_commit(self, audio_files):
        source = MutagenDataSource()

        with pytest.raises(CommitFailure) as exc_info:
            source.write_frame_changes(request_for(audio_files, Title=[COVER]))

        assert exc_info.value.failed_path == audio_files[0]
        assert isinstance(exc_info.value.cause, TypeError)

    def test_unknown_key_fails_commit(self, audio_files):
        with pytest.raises(CommitFailure):
            MutagenDataSource().write_frame_changes(request_for(audio_files, Chapter=[Text("x")]))

    def test_missing_file_fails_read(self, tmp_path):
        with pytest.raises(ReadFailure) as exc_info:
            MutagenDataSource().read_frames([str(tmp_path / "missing.mp3")])

        assert "missing.mp3" in exc_info.value.message


class TestWireDataSource:
    """Tests for the dict-based external codec adapter."""

    def test_read_parses_wire_entries(self):
        read = MagicMock(
            return_value=[
                {"path": "a.mp3", "frames": [{"key": "Title", "values": [{"type": "Text", "value": "A"}]}]}
            ]
        )
        source = WireDataSource(read=read, write=MagicMock())

        frames = source.read_frames(("a.mp3",))

        read.assert_called_once_with(["a.mp3"])
        assert frames[0].first_value("title") == Text("A")

    def test_write_sends_wire_dict(self):
        write = MagicMock()
        source = WireDataSource(read=MagicMock(), write=write)

        source.write_frame_changes(request_for(["a.mp3"], Title=[Text("New")]))

        write.assert_called_once_with(
            {
                "paths": ["a.mp3"],
                "frames": [{"key": "Title", "values": [{"type": "Text", "value": "New"}]}],
            }
        )

    def test_read_comment_entry_loads_into_store(self):
        read = MagicMock(
            return_value=[
                {
                    "path": "a.mp3",
                    "frames": [
                        {
                            "key": "Comments",
                            "values": [
                                {
                                    "type": "Comment",
                                    "value": {
                                        "encoding": "UTF-16",
                                        "language": "eng",
                                        "description": "",
                                        "text": "great take",
                                    },
                                }
                            ],
                        }
                    ],
                }
            ]
        )
        store = FileStore(WireDataSource(read=read, write=MagicMock()))

        assert store.load(["a.mp3"]) is None
        assert store.get("a.mp3").first_value("comments") == Comment(
            "great take", encoding="UTF-16"
        )

    def test_write_sends_comment_wire_dict(self):
        write = MagicMock()
        source = WireDataSource(read=MagicMock(), write=write)

        source.write_frame_changes(request_for(["a.mp3"], Comments=[Comment("hi", language="deu")]))

        sent = write.call_args[0][0]
        assert sent["frames"][0]["values"] == [
            {
                "type": "Comment",
                "value": {"encoding": "UTF-8", "language": "deu", "description": "", "text": "hi"},
            }
        ]

    def test_read_error_wrapped(self):
        source = WireDataSource(read=MagicMock(side_effect=OSError("no bridge")), write=MagicMock())

        with pytest.raises(ReadFailure):
            source.read_frames(["a.mp3"])

    def test_write_error_wrapped(self):
        source = WireDataSource(read=MagicMock(), write=MagicMock(side_effect=RuntimeError("boom")))

        with pytest.raises(CommitFailure) as exc_info:
            source.write_frame_changes(request_for(["a.mp3"], Title=[Text("x")]))

        assert exc_info.value.message == "boom"
