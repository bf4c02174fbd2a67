"""
Build the flat search index for the client-side fuzzy search.

Writes one compact JSON array of ``{t, a, s, al}`` entries (title, author,
slug, album) sorted by title. Keys are abbreviated to keep the payload
small; the browser loads the whole file at once.

Usage:
    coros search-index
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, Optional

from .config import Settings, add_common_arguments, settings_from_args
from .console import format_size, print_header
from .errors import CorosError, SourceError
from .songs import NormalizedSong, SongCatalog, load_catalog
from .text import collation_key
from .writer import WriteReport, write_document


def search_entry(song: NormalizedSong) -> dict:
    return {
        't': song.title,
        'a': song.author,
        's': song.slug,
        'al': song.album or '',
    }


def build_search_entries(songs: Iterable[NormalizedSong]) -> list[dict]:
    entries = [search_entry(s) for s in songs if s.slug]
    return sorted(entries, key=lambda e: collation_key(e['t']))


def write_search_index(catalog: SongCatalog, settings: Settings) -> tuple[WriteReport, list[dict]]:
    entries = build_search_entries(catalog.songs)
    output_path = settings.search_index_path

    report = WriteReport(target=output_path.parent)
    write_document(report, output_path, entries, compact=True)
    return report, entries


def load_search_index(index_path: Path) -> list[dict]:
    """Load a search index written by ``write_search_index``."""
    try:
        with open(index_path, encoding='utf-8') as f:
            entries = json.load(f)
    except FileNotFoundError:
        raise SourceError(f"Search index not found at {index_path}") from None
    except (OSError, ValueError) as e:
        raise SourceError(f"Could not read search index {index_path}: {e}") from e

    if not isinstance(entries, list):
        raise SourceError(f"Search index {index_path} must hold a JSON array")
    return [e for e in entries if isinstance(e, dict) and e.get('s')]


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)


def generate(catalog: SongCatalog, settings: Settings, generated_at: Optional[str] = None) -> WriteReport:
    """Write the search index for ``catalog`` and print a summary.

    The index carries no timestamp; ``generated_at`` is accepted so every
    step can be driven the same way.
    """
    report, entries = write_search_index(catalog, settings)
    print(f"Index generated: {len(entries)} songs ({format_size(report.bytes_written)})")
    print(f"   -> {settings.search_index_path}")
    return report


def run(args: argparse.Namespace) -> int:
    try:
        settings = settings_from_args(args)
        print_header("Building search index...", settings.song_posts_dir, settings.search_index_path)
        catalog = load_catalog(settings)
        print(f"   Read {catalog.total_files} songs ({catalog.skipped} skipped)")
        generate(catalog, settings)
    except CorosError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Build the client-side search index')
    add_arguments(parser)
    args = parser.parse_args(argv)
    return run(args)


if __name__ == '__main__':
    sys.exit(main())
