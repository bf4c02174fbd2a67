"""
Sync song posts from the upstream directory into content/song-posts.

Each upstream ``*.json`` file is parsed and rewritten pretty-printed.
Files that are not a JSON object are skipped with a warning. Files in the
target directory without a valid upstream counterpart are removed, so the
target mirrors the upstream set exactly.

The upstream directory is $SONG_POSTS_SOURCE_DIR when that names an
existing directory, otherwise ../song-posts next to the project.

Usage:
    coros sync
    coros sync --from /path/to/song-posts
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from .config import Settings, add_common_arguments, settings_from_args
from .errors import ArtifactWriteError, CorosError, SourceError
from .records import read_records
from .writer import WriteReport, write_json

DEFAULT_UPSTREAM = Path('..') / 'song-posts'


def find_upstream_dir(candidates: list[Path]) -> Path:
    """First candidate that is an existing directory."""
    for candidate in candidates:
        if candidate.is_dir():
            return candidate
    raise SourceError(
        f"Source folder not found. Set SONG_POSTS_SOURCE_DIR or create {candidates[-1]}"
    )


def sync_song_posts(upstream_dir: Path, target_dir: Path,
                    batch_size: int = 200) -> tuple[WriteReport, int]:
    """Copy valid upstream posts into ``target_dir`` and delete stale files.

    Returns the write report and the number of upstream files skipped.
    """
    result = read_records(upstream_dir, batch_size)

    report = WriteReport(target=target_dir)
    for record in result.records:
        size = write_json(target_dir / record.file_name, record.data, trailing_newline=True)
        report.add(target_dir / record.file_name, size)

    keep = set(report.written)
    try:
        stale = sorted(p for p in target_dir.glob('*.json') if p.is_file() and p.name not in keep)
        for path in stale:
            path.unlink()
    except OSError as e:
        raise ArtifactWriteError(f"Could not remove stale files in {target_dir}: {e}") from e
    report.removed = len(stale)

    return report, result.failed


def upstream_candidates(settings: Settings, explicit: Optional[Path]) -> list[Path]:
    if explicit is not None:
        return [explicit]
    return [settings.upstream_dir, Path.cwd() / DEFAULT_UPSTREAM]


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)
    parser.add_argument('--from', dest='upstream', type=Path, default=None,
                        help='Upstream song-post directory (default: $SONG_POSTS_SOURCE_DIR or ../song-posts)')


def run(args: argparse.Namespace) -> int:
    try:
        settings = settings_from_args(args)
        upstream_dir = find_upstream_dir(upstream_candidates(settings, getattr(args, 'upstream', None)))
        report, skipped = sync_song_posts(upstream_dir, settings.song_posts_dir, settings.read_batch_size)
    except CorosError as e:
        print(f"Failed to sync song posts: {e}", file=sys.stderr)
        return 1

    message = f"Synced {report.count} song posts to {report.target}"
    if report.removed:
        message += f" and removed {report.removed} stale files"
    print(message + '.')
    if skipped:
        print(f"   {skipped} invalid upstream files skipped")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Sync song posts from the upstream directory')
    add_arguments(parser)
    args = parser.parse_args(argv)
    return run(args)


if __name__ == '__main__':
    sys.exit(main())
