"""
Build artist pages from the song posts.

Groups songs by artist and writes:
  - content/artists/{slug}.json   songs of one artist
  - content/artists/index.json    all artists sorted by name
  - content/artists/ranking.json  all artists by song count

A song credited to several comma-separated authors appears under each of
them: songs and artists are a many-to-many relation.

Usage:
    coros artists
    coros artists --source path/to/song-posts
"""

import argparse
import sys
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import Settings, add_common_arguments, settings_from_args
from .console import print_file_tree, print_header
from .errors import CorosError, warn
from .songs import NormalizedSong, SongCatalog, load_catalog, sort_by_title
from .text import collation_key, slugify
from .writer import WriteReport, prepare_output_dir, utc_timestamp, write_document

INDEX_FILE = 'index.json'
RANKING_FILE = 'ranking.json'
RESERVED_SLUGS = {'index', 'ranking'}


@dataclass(frozen=True)
class Authorship:
    """One edge of the song ↔ artist relation."""
    song: NormalizedSong
    artist_name: str
    artist_slug: str


@dataclass(frozen=True)
class ArtistBundle:
    name: str
    slug: str
    songs: tuple[NormalizedSong, ...]

    @property
    def song_count(self) -> int:
        return len(self.songs)

    @property
    def thumbnail_url(self) -> Optional[str]:
        """First thumbnail in title order, else the first song's (possibly None)."""
        for song in self.songs:
            if song.thumbnail_url:
                return song.thumbnail_url
        return self.songs[0].thumbnail_url if self.songs else None


def build_authorships(songs: Iterable[NormalizedSong]) -> tuple[list[Authorship], list[tuple[NormalizedSong, str]]]:
    """Expand songs into (song, artist) edges.

    Returns the edges plus the (song, author name) pairs that were dropped
    because the name has no slug-able characters.
    """
    edges = []
    dropped = []
    for song in songs:
        for name in song.authors:
            artist_slug = slugify(name)
            if not artist_slug:
                dropped.append((song, name))
                continue
            edges.append(Authorship(song=song, artist_name=name, artist_slug=artist_slug))
    return edges, dropped


def group_artists(edges: Iterable[Authorship]) -> list[ArtistBundle]:
    """Group edges by artist slug; first-seen name wins. Sorted by name."""
    names = {}
    songs_by_slug = {}
    for edge in edges:
        if edge.artist_slug not in names:
            names[edge.artist_slug] = edge.artist_name
            songs_by_slug[edge.artist_slug] = []
        songs_by_slug[edge.artist_slug].append(edge.song)

    bundles = [
        ArtistBundle(name=names[slug], slug=slug, songs=tuple(sort_by_title(songs)))
        for slug, songs in songs_by_slug.items()
    ]
    return sorted(bundles, key=lambda b: collation_key(b.name))


def rank_artists(bundles: Iterable[ArtistBundle]) -> list[ArtistBundle]:
    """Artists with the most songs first; ties by name."""
    return sorted(bundles, key=lambda b: (-b.song_count, collation_key(b.name)))


def build_artist_bundles(catalog: SongCatalog, report_dropped: bool = True) -> list[ArtistBundle]:
    edges, dropped = build_authorships(catalog.songs)
    if report_dropped:
        for song, name in dropped:
            warn(f"{song.source_file or song.slug}: author '{name}' has no usable slug; attribution dropped")
    return group_artists(edges)


def artist_song_entry(song: NormalizedSong, preview_length: int) -> dict:
    return {
        'slug': song.slug,
        'title': song.title,
        'author': song.author,
        'album': song.album,
        'metaDescription': song.meta_description,
        'lyricsPreview': song.preview(preview_length),
        'youtubeId': song.youtube_id,
        'thumbnailUrl': song.thumbnail_url,
        'generatedAt': song.generated_at,
    }


def artist_summary(bundle: ArtistBundle) -> dict:
    return {
        'name': bundle.name,
        'slug': bundle.slug,
        'songCount': bundle.song_count,
        'thumbnailUrl': bundle.thumbnail_url,
    }


def artist_document(bundle: ArtistBundle, preview_length: int) -> dict:
    doc = artist_summary(bundle)
    doc['songs'] = [artist_song_entry(s, preview_length) for s in bundle.songs]
    return doc


def artists_index(bundles: list[ArtistBundle], generated_at: str) -> dict:
    return {
        'totalArtists': len(bundles),
        'generatedAt': generated_at,
        'artists': [artist_summary(b) for b in bundles],
    }


def write_artist_pages(catalog: SongCatalog, settings: Settings,
                       generated_at: Optional[str] = None) -> tuple[WriteReport, list[ArtistBundle]]:
    """Write one file per artist plus the index and ranking documents."""
    generated_at = generated_at or utc_timestamp()
    bundles = build_artist_bundles(catalog)
    output_dir = settings.artists_dir

    report = WriteReport(target=output_dir)
    report.removed = prepare_output_dir(output_dir)

    for bundle in bundles:
        if bundle.slug in RESERVED_SLUGS:
            warn(f"Artist '{bundle.name}' uses reserved slug '{bundle.slug}'; page not written")
            continue
        write_document(report, output_dir / f"{bundle.slug}.json",
                       artist_document(bundle, settings.artist_preview_length))

    write_document(report, output_dir / INDEX_FILE, artists_index(bundles, generated_at))
    write_document(report, output_dir / RANKING_FILE, artists_index(rank_artists(bundles), generated_at))

    return report, bundles


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)


def generate(catalog: SongCatalog, settings: Settings, generated_at: Optional[str] = None) -> WriteReport:
    """Write the artist artifacts for ``catalog`` and print a summary."""
    report, bundles = write_artist_pages(catalog, settings, generated_at)

    print(f"   Files found: {catalog.total_files}")
    print(f"   Valid songs: {len(catalog)} ({catalog.skipped} skipped)")
    print(f"   Unique artists: {len(bundles)}")
    print()
    print(f"Wrote {report.count - 2} artist files + {INDEX_FILE} + {RANKING_FILE}")
    print_file_tree(
        report.target,
        [f"{b.slug}.json  ({b.song_count} songs)" for b in bundles],
        [INDEX_FILE, RANKING_FILE],
    )
    return report


def run(args: argparse.Namespace) -> int:
    try:
        settings = settings_from_args(args)
        print_header("Generating artist pages...", settings.song_posts_dir, settings.artists_dir)
        catalog = load_catalog(settings)
        generate(catalog, settings)
    except CorosError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Generate artist pages from song posts')
    add_arguments(parser)
    args = parser.parse_args(argv)
    return run(args)


if __name__ == '__main__':
    sys.exit(main())
