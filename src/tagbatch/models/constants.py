# ==============================================================================
# Frame Key Configuration
# ==============================================================================

# Field keys are camelCase; wire keys are the same name with a leading capital
# (title -> Title). Only keys with a known ID3 mapping are listed here; unknown
# keys still stage and commit, they just have no codec mapping.

FIELD_LABELS: dict[str, str] = {
    "title": "Title",
    "artist": "Artist",
    "album": "Album",
    "year": "Year",
    "trackNumber": "Track Number",
    "genre": "Genre",
    "albumArtist": "Album Artist",
    "composer": "Composer",
    "encodedBy": "Encoded By",
    "conductor": "Conductor",
    "attachedPicture": "Artwork",
    "copyright": "Copyright",
    "comments": "Comments",
}

# Keys that may legitimately carry several values per file
MULTI_VALUED_KEYS: frozenset[str] = frozenset(
    {
        "attachedPicture",
        "userDefinedText",
        "userDefinedURL",
        "genre",
        "artist",
        "albumArtist",
        "composer",
        "lyricist",
        "comments",
    }
)

# Keys whose values are Picture frames (artwork manager)
PICTURE_KEYS: tuple[str, ...] = ("attachedPicture",)

# Field key -> ID3v2.4 frame id used by the mutagen data source
ID3_FRAME_IDS: dict[str, str] = {
    "title": "TIT2",
    "artist": "TPE1",
    "album": "TALB",
    "year": "TDRC",
    "trackNumber": "TRCK",
    "genre": "TCON",
    "albumArtist": "TPE2",
    "contentGroup": "TIT1",
    "composer": "TCOM",
    "encodedBy": "TENC",
    "conductor": "TPE3",
    "copyright": "TCOP",
    "lyricist": "TEXT",
    "discNumber": "TPOS",
    "beatsPerMinute": "TBPM",
    "subtitle": "TIT3",
    "mood": "TMOO",
    "isrc": "TSRC",
    "label": "TPUB",
    "comments": "COMM",
    "unsyncedLyrics": "USLT",
    "attachedPicture": "APIC",
    "userDefinedText": "TXXX",
    "userDefinedURL": "WXXX",
}


def wire_key(field_key: str) -> str:
    """Convert a field key to the key name the codec boundary expects.

    Args:
        field_key: camelCase field key (e.g. "albumArtist")

    Returns:
        Wire key with a leading capital (e.g. "AlbumArtist")
    """
    if not field_key:
        return field_key
    return field_key[0].upper() + field_key[1:]


def field_key_from_wire(key: str) -> str:
    """Convert a wire key back to its camelCase field key."""
    if not key:
        return key
    return key[0].lower() + key[1:]


def field_label(field_key: str) -> str:
    """Human-readable label for a field, falling back to the key itself."""
    return FIELD_LABELS.get(field_key, field_key)


def is_multi_valued(field_key: str) -> bool:
    """Check if a field may hold several values per file."""
    return field_key in MULTI_VALUED_KEYS
