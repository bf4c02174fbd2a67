"""
Command-line entry point for the data pipeline.

Usage:
    coros sync                     copy song posts from the upstream folder
    coros artists                  artist pages, index and ranking
    coros home [--per-page N]      paginated home listing
    coros search-index             flat index for the browser search
    coros videos                   curated video gallery
    coros lyrics                   per-song lyrics files
    coros build [--per-page N]     every artifact above except sync
    coros search QUERY             fuzzy-search the built index
"""

import argparse
import sys

from . import artists, home_pages, lyrics, search, search_index, sync, videos
from .config import add_common_arguments, settings_from_args
from .console import print_header
from .errors import CorosError
from .songs import load_catalog
from .writer import utc_timestamp

# Step name -> module; every module exposes add_arguments() and run()
COMMANDS = {
    'sync': sync,
    'artists': artists,
    'home': home_pages,
    'search-index': search_index,
    'videos': videos,
    'lyrics': lyrics,
    'search': search,
}

# Order matters only for the printed output
BUILD_STEPS = (artists, home_pages, search_index, videos, lyrics)


def run_build(args: argparse.Namespace) -> int:
    """Read the song posts once and write every derived artifact from that snapshot."""
    per_page = max(1, args.per_page) if args.per_page is not None else None
    try:
        settings = settings_from_args(args, per_page=per_page)
        print_header("Building all site data...", settings.song_posts_dir, settings.song_posts_dir.parent)
        catalog = load_catalog(settings)
        generated_at = utc_timestamp()
        written = 0
        for step in BUILD_STEPS:
            print()
            report = step.generate(catalog, settings, generated_at)
            written += report.count
    except CorosError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print()
    print(f"Done: {written} files written from {len(catalog)} songs "
          f"({catalog.skipped} skipped, {catalog.warnings} warnings)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='coros',
        description='Build-time data pipeline for the Coros Cristianos site',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    for name, module in COMMANDS.items():
        summary = (module.__doc__ or '').strip().splitlines()[0]
        sub = subparsers.add_parser(name, help=summary, description=summary)
        module.add_arguments(sub)
        sub.set_defaults(func=module.run)

    build = subparsers.add_parser('build', help='Generate every artifact from one read of the song posts')
    add_common_arguments(build)
    build.add_argument('--per-page', type=int, default=None, help='Songs per home page (default: 20)')
    build.set_defaults(func=run_build)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
