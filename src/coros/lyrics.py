"""
Write one lightweight lyrics file per song.

public/lyrics/{slug}.json holds only what the video modal needs to show
the lyrics next to a video: title, slug, author, album, the joined lyrics
and the stanza list. Files are compact since they are fetched on demand.

Usage:
    coros lyrics
"""

import argparse
import sys
from typing import Optional

from .config import Settings, add_common_arguments, settings_from_args
from .console import format_size, print_header
from .errors import CorosError, warn
from .songs import NormalizedSong, SongCatalog, load_catalog
from .writer import WriteReport, is_safe_file_stem, prepare_output_dir, write_document


def lyrics_document(song: NormalizedSong) -> dict:
    return {
        'title': song.title,
        'slug': song.slug,
        'author': song.author,
        'album': song.album,
        'lyrics': song.lyrics,
        'lyricsStanzas': list(song.lyrics_stanzas),
    }


def write_lyrics_files(catalog: SongCatalog, settings: Settings) -> WriteReport:
    output_dir = settings.lyrics_dir
    report = WriteReport(target=output_dir)
    report.removed = prepare_output_dir(output_dir)

    for song in catalog.songs:
        if not is_safe_file_stem(song.slug):
            warn(f"{song.source_file}: slug '{song.slug}' is not a valid file name; lyrics not written")
            continue
        write_document(report, output_dir / f"{song.slug}.json", lyrics_document(song), compact=True)

    return report


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)


def generate(catalog: SongCatalog, settings: Settings, generated_at: Optional[str] = None) -> WriteReport:
    """Write the lyrics files for ``catalog`` and print a summary."""
    report = write_lyrics_files(catalog, settings)
    print(f"Generated {report.count} lyrics files in {report.target} ({format_size(report.bytes_written)})")
    if report.removed:
        print(f"   Removed {report.removed} previous files")
    return report


def run(args: argparse.Namespace) -> int:
    try:
        settings = settings_from_args(args)
        print_header("Generating lyrics files...", settings.song_posts_dir, settings.lyrics_dir)
        catalog = load_catalog(settings)
        print(f"   Read {catalog.total_files} song-post files ({catalog.skipped} skipped)")
        generate(catalog, settings)
    except CorosError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Generate per-song lyrics JSON files')
    add_arguments(parser)
    args = parser.parse_args(argv)
    return run(args)


if __name__ == '__main__':
    sys.exit(main())
