"""
Build the paginated home listing from the song posts.

Writes home_0.json, home_1.json, ... with only the fields the home page
renders, an index.json describing the pagination, and recent.json with
the most recently generated songs.

Usage:
    coros home
    coros home --per-page 30
"""

import argparse
import math
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .config import Settings, add_common_arguments, settings_from_args
from .console import print_file_tree, print_header
from .errors import CorosError
from .songs import NormalizedSong, SongCatalog, load_catalog
from .text import collation_key
from .writer import WriteReport, prepare_output_dir, utc_timestamp, write_document

INDEX_FILE = 'index.json'
RECENT_FILE = 'recent.json'
PAGE_PATTERN = 'home_*.json'


def page_file_name(page: int) -> str:
    return f"home_{page}.json"


@dataclass(frozen=True)
class HomePage:
    page: int
    total_pages: int
    total_songs: int
    per_page: int
    songs: tuple[NormalizedSong, ...]

    @property
    def first(self) -> int:
        return self.page * self.per_page

    @property
    def last(self) -> int:
        # -1 on the single empty page of an empty catalog
        return self.first + len(self.songs) - 1


def count_pages(total_songs: int, per_page: int) -> int:
    return max(1, math.ceil(total_songs / per_page))


def paginate(songs: list[NormalizedSong], per_page: int) -> list[HomePage]:
    """Split an already sorted song list into consecutive pages.

    There is always at least one page, even for an empty list.
    """
    per_page = max(1, per_page)
    total_pages = count_pages(len(songs), per_page)
    return [
        HomePage(
            page=page,
            total_pages=total_pages,
            total_songs=len(songs),
            per_page=per_page,
            songs=tuple(songs[page * per_page:(page + 1) * per_page]),
        )
        for page in range(total_pages)
    ]


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def recent_songs(songs, limit: int) -> list[NormalizedSong]:
    """Songs with a valid generated_at, newest first; ties by title."""
    dated = []
    for song in songs:
        timestamp = parse_timestamp(song.generated_at)
        if timestamp is not None:
            dated.append((timestamp.timestamp(), song))
    dated.sort(key=lambda item: (-item[0], collation_key(item[1].title)))
    return [song for _, song in dated[:limit]]


def home_song_entry(song: NormalizedSong, preview_length: int) -> dict:
    return {
        'slug': song.slug,
        'title': song.title,
        'author': song.author,
        'authors': list(song.authors),
        'album': song.album,
        'metaDescription': song.meta_description,
        'lyricsPreview': song.preview(preview_length),
        'youtubeId': song.youtube_id,
        'thumbnailUrl': song.thumbnail_url,
        'generatedAt': song.generated_at,
    }


def page_document(page: HomePage, preview_length: int) -> dict:
    return {
        'page': page.page,
        'totalPages': page.total_pages,
        'totalSongs': page.total_songs,
        'perPage': page.per_page,
        'from': page.first,
        'to': page.last,
        'songs': [home_song_entry(s, preview_length) for s in page.songs],
    }


def home_index(pages: list[HomePage], per_page: int, total_songs: int, generated_at: str) -> dict:
    return {
        'totalSongs': total_songs,
        'totalPages': len(pages),
        'perPage': per_page,
        'generatedAt': generated_at,
        'pages': [page_file_name(p.page) for p in pages],
    }


def write_home_pages(catalog: SongCatalog, settings: Settings,
                     generated_at: Optional[str] = None) -> tuple[WriteReport, list[HomePage]]:
    """Write every page, the pagination index and the recent-songs list."""
    generated_at = generated_at or utc_timestamp()
    songs = catalog.by_title()
    pages = paginate(songs, settings.per_page)
    output_dir = settings.home_pages_dir

    report = WriteReport(target=output_dir)
    report.removed = prepare_output_dir(output_dir, (PAGE_PATTERN, RECENT_FILE))

    for page in pages:
        write_document(report, output_dir / page_file_name(page.page),
                       page_document(page, settings.home_preview_length))

    write_document(report, output_dir / INDEX_FILE,
                   home_index(pages, pages[0].per_page, len(songs), generated_at))

    recent = recent_songs(catalog.songs, settings.recent_limit)
    write_document(report, output_dir / RECENT_FILE, {
        'totalSongs': len(recent),
        'generatedAt': generated_at,
        'songs': [home_song_entry(s, settings.home_preview_length) for s in recent],
    })

    return report, pages


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)
    parser.add_argument('--per-page', type=int, default=None,
                        help='Songs per page (default: 20)')


def generate(catalog: SongCatalog, settings: Settings, generated_at: Optional[str] = None) -> WriteReport:
    """Write the home-page artifacts for ``catalog`` and print a summary."""
    report, pages = write_home_pages(catalog, settings, generated_at)

    print(f"   Songs per page: {pages[0].per_page}")
    print(f"   Valid songs: {len(catalog)} ({catalog.skipped} skipped)")
    print()
    print(f"Wrote {len(pages)} page files + {INDEX_FILE} + {RECENT_FILE}")
    print_file_tree(
        report.target,
        [f"{page_file_name(p.page)}  ({len(p.songs)} songs)" for p in pages],
        [INDEX_FILE, RECENT_FILE],
    )
    return report


def run(args: argparse.Namespace) -> int:
    # Values below 1 are clamped rather than rejected
    per_page = max(1, args.per_page) if getattr(args, 'per_page', None) is not None else None
    try:
        settings = settings_from_args(args, per_page=per_page)
        print_header("Generating home pages...", settings.song_posts_dir, settings.home_pages_dir)
        catalog = load_catalog(settings)
        generate(catalog, settings)
    except CorosError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Generate paginated home listing from song posts')
    add_arguments(parser)
    args = parser.parse_args(argv)
    return run(args)


if __name__ == '__main__':
    sys.exit(main())
