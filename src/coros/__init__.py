"""
Coros - build-time data pipeline for the Coros Cristianos lyrics site

Modules:
- records: batched reading of song-post JSON files
- songs: field normalization and the per-run song catalog
- artists, home_pages, search_index, videos, lyrics: derived artifacts
- sync: copy song posts from the upstream folder
- search: fuzzy search over the generated index
"""

from .config import Settings, load_settings
from .errors import ArtifactWriteError, ConfigError, CorosError, SourceError
from .songs import NormalizedSong, SongCatalog, load_catalog, normalize_song
from .text import collation_key, slugify

__version__ = "0.1.0"

__all__ = [
    # Settings
    'Settings',
    'load_settings',
    # Errors
    'CorosError',
    'ConfigError',
    'SourceError',
    'ArtifactWriteError',
    # Songs
    'NormalizedSong',
    'SongCatalog',
    'load_catalog',
    'normalize_song',
    # Text
    'collation_key',
    'slugify',
]
