"""
Settings for the build-time data pipeline.

Values are resolved in this order, later sources winning:

1. Defaults defined on ``Settings``
2. An optional YAML settings file (``coros.yaml`` in the project root,
   or the file named by ``COROS_CONFIG`` / ``--config``)
3. Environment variables (directory locations only)
4. Command-line flags

Relative paths are resolved against the project root, which is the
current working directory unless a caller passes another one.
"""

import argparse
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

import yaml

from .errors import ConfigError

DEFAULT_CONFIG_FILE = 'coros.yaml'
CONFIG_ENV_VAR = 'COROS_CONFIG'

# Environment variables that override output and input locations
PATH_ENV_VARS = {
    'song_posts_dir': 'SONG_POSTS_DIR',
    'upstream_dir': 'SONG_POSTS_SOURCE_DIR',
    'artists_dir': 'ARTISTS_DIR',
    'home_pages_dir': 'HOME_PAGES_DIR',
    'videos_path': 'VIDEOS_PATH',
    'lyrics_dir': 'LYRICS_DIR',
    'search_index_path': 'SEARCH_INDEX_PATH',
}

THUMBNAIL_QUALITIES = ('hqdefault', 'mqdefault')


@dataclass(frozen=True)
class Settings:
    """Paths and tunables for one generation run."""
    song_posts_dir: Path = Path('content/song-posts')
    upstream_dir: Path = Path('../song-posts')
    artists_dir: Path = Path('content/artists')
    home_pages_dir: Path = Path('content/home-pages')
    videos_path: Path = Path('content/videos.json')
    lyrics_dir: Path = Path('public/lyrics')
    search_index_path: Path = Path('public/search-index.json')

    per_page: int = 20
    artist_preview_length: int = 180
    home_preview_length: int = 220
    stanza_gap: int = 4
    read_batch_size: int = 200
    thumbnail_quality: str = 'hqdefault'
    max_videos_per_artist: int = 5
    min_videos_to_qualify: int = 3
    recent_limit: int = 180

    def resolve_paths(self, root: Path) -> 'Settings':
        """Return a copy with every relative path anchored at ``root``."""
        changes = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Path) and not value.is_absolute():
                changes[f.name] = root / value
        return replace(self, **changes)


def _coerce(name: str, value, default):
    """Convert a raw settings value to the type of the matching default."""
    if isinstance(default, Path):
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"'{name}' must be a non-empty path string")
        return Path(value.strip())

    if isinstance(default, int):
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool):
            raise ConfigError(f"'{name}' must be an integer, got {value!r}")
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"'{name}' must be an integer, got {value!r}") from None
        if number < 1:
            raise ConfigError(f"'{name}' must be at least 1, got {number}")
        return number

    if name == 'thumbnail_quality' and value not in THUMBNAIL_QUALITIES:
        raise ConfigError(
            f"'thumbnail_quality' must be one of {', '.join(THUMBNAIL_QUALITIES)}, got {value!r}"
        )
    return value


def load_settings_file(config_path: Path) -> dict:
    """Parse a YAML settings file into a dict of known setting names."""
    try:
        with open(config_path, encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read settings file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {config_path} must contain a mapping")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(str(k) for k in data if k not in known)
    if unknown:
        raise ConfigError(f"Unknown settings in {config_path}: {', '.join(unknown)}")
    return data


def load_settings(config_path: Optional[Path] = None,
                  environ: Optional[Mapping[str, str]] = None,
                  root: Optional[Path] = None,
                  **overrides) -> Settings:
    """Build the effective settings for a run.

    Args:
        config_path: Explicit settings file. Must exist when given.
        environ: Environment mapping (defaults to ``os.environ``).
        root: Project root for relative paths (defaults to the cwd).
        **overrides: Values from command-line flags; ``None`` is ignored.
    """
    environ = os.environ if environ is None else environ
    root = Path.cwd() if root is None else root
    defaults = Settings()
    values = {}

    # 1. Settings file
    if config_path is None:
        env_config = environ.get(CONFIG_ENV_VAR, '').strip()
        if env_config:
            config_path = Path(env_config)
        elif (root / DEFAULT_CONFIG_FILE).exists():
            config_path = root / DEFAULT_CONFIG_FILE
    if config_path is not None:
        if not config_path.is_absolute():
            config_path = root / config_path
        if not config_path.exists():
            raise ConfigError(f"Settings file not found: {config_path}")
        values.update(load_settings_file(config_path))

    # 2. Environment variables (empty values fall back to the defaults)
    for name, env_var in PATH_ENV_VARS.items():
        env_value = environ.get(env_var, '').strip()
        if env_value:
            values[name] = env_value

    # 3. Flags
    for name, value in overrides.items():
        if name not in {f.name for f in fields(Settings)}:
            raise ConfigError(f"Unknown setting: {name}")
        if value is not None:
            values[name] = str(value) if isinstance(value, Path) else value

    coerced = {
        name: _coerce(name, value, getattr(defaults, name))
        for name, value in values.items()
    }
    return replace(defaults, **coerced).resolve_paths(root)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Flags shared by every pipeline command."""
    parser.add_argument('--source', type=Path, default=None,
                        help='Song-post directory (default: $SONG_POSTS_DIR or content/song-posts)')
    parser.add_argument('--config', type=Path, default=None,
                        help=f'YAML settings file (default: ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_FILE})')


def settings_from_args(args: argparse.Namespace, **overrides) -> Settings:
    """Load settings, applying ``--source`` and any step-specific flags."""
    return load_settings(
        config_path=getattr(args, 'config', None),
        song_posts_dir=getattr(args, 'source', None),
        **overrides,
    )
