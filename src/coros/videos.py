"""
Build the curated video gallery.

Picks up to 5 videos per artist, only for artists with at least 3 songs
that carry a YouTube id, and writes a single content/videos.json. Videos
are taken at a fixed stride through the artist's title-sorted songs so
the selection spreads across the catalog instead of clustering at the
start. The selection is deterministic; the page shuffles client-side.

Usage:
    coros videos
"""

import argparse
import sys
from dataclasses import dataclass
from typing import Iterable, Optional

from .artists import ArtistBundle, build_artist_bundles
from .config import Settings, add_common_arguments, settings_from_args
from .console import print_header
from .errors import CorosError
from .songs import NormalizedSong, SongCatalog, load_catalog, thumbnail_url
from .text import collation_key
from .writer import WriteReport, utc_timestamp, write_document

MAX_VIDEOS_PER_ARTIST = 5
MIN_VIDEOS_TO_QUALIFY = 3
MIN_YOUTUBE_ID_LENGTH = 6

# Not a real artist page
EXCLUDED_ARTIST_SLUGS = {'desconocido'}


@dataclass(frozen=True)
class VideoBucket:
    artist: str
    artist_slug: str
    video_count: int
    videos: tuple[dict, ...]


def has_usable_video(song: NormalizedSong) -> bool:
    return bool(song.youtube_id) and len(song.youtube_id) >= MIN_YOUTUBE_ID_LENGTH


def stride_sample(items: list, count: int) -> list:
    """Take one item every ``len(items) // count`` positions, at most ``count`` items."""
    step = max(1, len(items) // count)
    return items[::step][:count]


def video_entry(song: NormalizedSong, bundle: ArtistBundle) -> dict:
    return {
        'youtubeId': song.youtube_id,
        'title': song.title,
        'slug': song.slug,
        'artist': bundle.name,
        'artistSlug': bundle.slug,
        'album': song.album,
        'thumbnailUrl': song.thumbnail_url or thumbnail_url(song.youtube_id),
    }


def curate_videos(bundles: Iterable[ArtistBundle],
                  max_per_artist: int = MAX_VIDEOS_PER_ARTIST,
                  min_to_qualify: int = MIN_VIDEOS_TO_QUALIFY) -> list[VideoBucket]:
    """Select videos per qualifying artist; buckets with the most videos first."""
    buckets = []
    for bundle in bundles:
        if bundle.slug in EXCLUDED_ARTIST_SLUGS:
            continue

        with_video = [s for s in bundle.songs if has_usable_video(s)]
        if len(with_video) < min_to_qualify:
            continue

        picked = stride_sample(with_video, max_per_artist)
        buckets.append(VideoBucket(
            artist=bundle.name,
            artist_slug=bundle.slug,
            video_count=len(with_video),
            videos=tuple(video_entry(s, bundle) for s in picked),
        ))

    return sorted(buckets, key=lambda b: (-b.video_count, collation_key(b.artist)))


def videos_document(buckets: list[VideoBucket], generated_at: str) -> dict:
    videos = [v for b in buckets for v in b.videos]
    return {
        'totalVideos': len(videos),
        'totalArtists': len(buckets),
        'generatedAt': generated_at,
        'videos': videos,
    }


def write_videos(catalog: SongCatalog, settings: Settings,
                 generated_at: Optional[str] = None) -> tuple[WriteReport, list[VideoBucket]]:
    generated_at = generated_at or utc_timestamp()
    # Dropped authorships were already reported by the artist step
    bundles = build_artist_bundles(catalog, report_dropped=False)
    buckets = curate_videos(bundles, settings.max_videos_per_artist, settings.min_videos_to_qualify)

    report = WriteReport(target=settings.videos_path.parent)
    write_document(report, settings.videos_path, videos_document(buckets, generated_at))
    return report, buckets


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)


def generate(catalog: SongCatalog, settings: Settings, generated_at: Optional[str] = None) -> WriteReport:
    """Write videos.json for ``catalog`` and print a summary."""
    report, buckets = write_videos(catalog, settings, generated_at)
    total = sum(len(b.videos) for b in buckets)

    print(f"Generated {settings.videos_path}")
    print(f"    {total} videos from {len(buckets)} artists")
    if buckets:
        print("    Top contributors:")
        for i, bucket in enumerate(buckets[:10], 1):
            print(f"    {i}. {bucket.artist} - {len(bucket.videos)} selected (of {bucket.video_count})")
    return report


def run(args: argparse.Namespace) -> int:
    try:
        settings = settings_from_args(args)
        print_header("Curating video gallery...", settings.song_posts_dir, settings.videos_path)
        catalog = load_catalog(settings)
        generate(catalog, settings)
    except CorosError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Generate the curated video gallery')
    add_arguments(parser)
    args = parser.parse_args(argv)
    return run(args)


if __name__ == '__main__':
    sys.exit(main())
