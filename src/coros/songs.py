"""
Song normalization and the per-run song catalog.

A raw song post is a loosely typed JSON object. ``normalize_song`` turns it
into an immutable ``NormalizedSong`` or returns None when the record has no
usable slug or title. ``load_catalog`` reads a source directory once and
returns a ``SongCatalog`` snapshot that every artifact builder works from.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote

from .config import Settings
from .errors import warn
from .records import ReadResult, read_records
from .text import collation_key

DEFAULT_AUTHOR = 'Desconocido'
STANZA_SEPARATOR = '\n\n\n\n'
DEFAULT_STANZA_GAP = 4
ELLIPSIS = '...'

# Keys probed, in order, when a stanza is an object instead of a string
STANZA_TEXT_FIELDS = ('text', 'lyric', 'lyrics', 'stanza', 'verse')

THUMBNAIL_URL = 'https://i.ytimg.com/vi/{video_id}/{quality}.jpg'


# Lyrics arrive either as one text blob or as a list of stanzas.

@dataclass(frozen=True)
class TextLyrics:
    text: str


@dataclass(frozen=True)
class StanzaListLyrics:
    items: tuple


@dataclass(frozen=True)
class NoLyrics:
    pass


Lyrics = Union[TextLyrics, StanzaListLyrics, NoLyrics]


class UnsupportedLyrics(ValueError):
    """Lyrics value that is neither text nor a list of stanzas."""


def clean_string(value) -> str:
    """Trimmed string, or '' for anything that is not a string."""
    if not isinstance(value, str):
        return ''
    return value.strip()


def nullable_string(value) -> Optional[str]:
    cleaned = clean_string(value)
    return cleaned or None


def split_authors(author) -> list[str]:
    """Split a comma-separated author field into display names."""
    tokens = [a.strip() for a in clean_string(author).split(',')]
    tokens = [a for a in tokens if a]
    return tokens if tokens else [DEFAULT_AUTHOR]


def classify_lyrics(value) -> Lyrics:
    if value is None:
        return NoLyrics()
    if isinstance(value, str):
        return TextLyrics(value)
    if isinstance(value, list):
        return StanzaListLyrics(tuple(value))
    raise UnsupportedLyrics(f"unsupported lyrics value of type {type(value).__name__}")


def stanza_from_item(item) -> Optional[str]:
    """Text of one list item: a string, or an object with a text-like field."""
    if isinstance(item, str):
        return item.strip() or None

    if isinstance(item, dict):
        for key in STANZA_TEXT_FIELDS:
            candidate = item.get(key)
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()

    return None


def split_text_stanzas(text: str, gap: int = DEFAULT_STANZA_GAP) -> list[str]:
    """Split text on runs of ``gap`` or more newlines.

    If the text has no such gap, the whole trimmed text is one stanza.
    """
    text = text.strip()
    if not text:
        return []

    parts = [p.strip() for p in re.split(r'\n{%d,}' % gap, text)]
    parts = [p for p in parts if p]
    return parts if len(parts) > 1 else [text]


def extract_lyrics_stanzas(value, gap: int = DEFAULT_STANZA_GAP) -> list[str]:
    """Ordered, non-empty stanzas for any supported lyrics shape.

    Raises UnsupportedLyrics for numbers, booleans and bare objects.
    """
    lyrics = classify_lyrics(value)

    if isinstance(lyrics, StanzaListLyrics):
        # An item may itself hold several stanzas
        stanzas = []
        for item in lyrics.items:
            text = stanza_from_item(item)
            if text:
                stanzas.extend(split_text_stanzas(text, gap))
        return stanzas
    if isinstance(lyrics, TextLyrics):
        return split_text_stanzas(lyrics.text, gap)
    return []


def lyrics_preview(lyrics: str, max_length: int) -> str:
    """Collapse whitespace and cut to ``max_length`` with a trailing ellipsis."""
    collapsed = ' '.join(lyrics.split())
    if len(collapsed) <= max_length:
        return collapsed
    return collapsed[:max(0, max_length - 1)].rstrip() + ELLIPSIS


def thumbnail_url(youtube_id: Optional[str], quality: str = 'hqdefault') -> Optional[str]:
    """YouTube still image URL for a video id, or None."""
    if not youtube_id or not youtube_id.strip():
        return None
    # Same escaping as encodeURIComponent
    video_id = quote(youtube_id.strip(), safe="!*'()")
    return THUMBNAIL_URL.format(video_id=video_id, quality=quality)


@dataclass(frozen=True)
class NormalizedSong:
    slug: str
    title: str
    author: str
    authors: tuple[str, ...]
    album: Optional[str]
    meta_description: str
    lyrics: str
    lyrics_stanzas: tuple[str, ...]
    youtube_id: Optional[str]
    thumbnail_url: Optional[str]
    generated_at: Optional[str]
    post_title: str = ''
    content: str = ''
    source_file: str = ''
    # Set when the lyrics field had a shape we refuse to guess at
    lyrics_issue: Optional[str] = None

    def preview(self, max_length: int) -> str:
        return lyrics_preview(self.lyrics, max_length)


def normalize_song(raw: dict, source_file: str = '',
                   stanza_gap: int = DEFAULT_STANZA_GAP,
                   thumbnail_quality: str = 'hqdefault') -> Optional[NormalizedSong]:
    """Normalize one raw song post. Returns None if slug or title is empty."""
    slug = clean_string(raw.get('slug'))
    title = clean_string(raw.get('title'))
    if not slug or not title:
        return None

    lyrics_issue = None
    try:
        stanzas = extract_lyrics_stanzas(raw.get('lyrics'), stanza_gap)
    except UnsupportedLyrics as e:
        stanzas = []
        lyrics_issue = str(e)

    author = clean_string(raw.get('author')) or DEFAULT_AUTHOR
    youtube_id = nullable_string(raw.get('youtube_id'))

    return NormalizedSong(
        slug=slug,
        title=title,
        author=author,
        authors=tuple(split_authors(author)),
        album=nullable_string(raw.get('album')),
        meta_description=clean_string(raw.get('meta_description')),
        lyrics=STANZA_SEPARATOR.join(stanzas),
        lyrics_stanzas=tuple(stanzas),
        youtube_id=youtube_id,
        thumbnail_url=thumbnail_url(youtube_id, thumbnail_quality),
        generated_at=nullable_string(raw.get('generated_at')),
        post_title=clean_string(raw.get('post_title')),
        content=clean_string(raw.get('content')),
        source_file=source_file,
        lyrics_issue=lyrics_issue,
    )


def sort_by_title(songs) -> list[NormalizedSong]:
    return sorted(songs, key=lambda s: collation_key(s.title))


@dataclass(frozen=True)
class SongCatalog:
    """All valid songs from one read of the source directory.

    ``skipped`` counts files that could not be parsed plus records without
    a slug or title; ``warnings`` counts problems that did not drop a song.
    """
    source_dir: Path
    songs: tuple[NormalizedSong, ...]
    total_files: int
    skipped: int
    warnings: int = 0

    def __len__(self):
        return len(self.songs)

    def by_title(self) -> list[NormalizedSong]:
        return sort_by_title(self.songs)


def build_catalog(result: ReadResult, source_dir: Path,
                  stanza_gap: int = DEFAULT_STANZA_GAP,
                  thumbnail_quality: str = 'hqdefault') -> SongCatalog:
    """Normalize every record from a read and count what was dropped."""
    songs = []
    skipped = result.failed
    warnings = 0
    seen_slugs = set()

    for record in result.records:
        song = normalize_song(record.data, record.file_name, stanza_gap, thumbnail_quality)
        if song is None:
            warn(f"Skipping {record.file_name}: missing slug or title")
            skipped += 1
            continue

        if song.lyrics_issue:
            warn(f"{record.file_name}: {song.lyrics_issue}; lyrics ignored")
            warnings += 1
        if song.slug in seen_slugs:
            warn(f"{record.file_name}: duplicate slug '{song.slug}'")
            warnings += 1
        seen_slugs.add(song.slug)

        songs.append(song)

    return SongCatalog(
        source_dir=source_dir,
        songs=tuple(songs),
        total_files=result.total_files,
        skipped=skipped,
        warnings=warnings,
    )


def load_catalog(settings: Settings) -> SongCatalog:
    """Read and normalize the song-post directory named in ``settings``."""
    source_dir = settings.song_posts_dir
    result = read_records(source_dir, settings.read_batch_size)
    return build_catalog(result, source_dir, settings.stanza_gap, settings.thumbnail_quality)
