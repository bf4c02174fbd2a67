"""Tests for config.py — settings defaults, file, environment and flags."""

import argparse
from pathlib import Path

import pytest

from coros.config import (
    PATH_ENV_VARS,
    Settings,
    add_common_arguments,
    load_settings,
    settings_from_args,
)
from coros.errors import ConfigError


class TestDefaults:

    def test_paths_resolve_against_root(self, tmp_path):
        settings = load_settings(environ={}, root=tmp_path)
        assert settings.song_posts_dir == tmp_path / 'content' / 'song-posts'
        assert settings.artists_dir == tmp_path / 'content' / 'artists'
        assert settings.home_pages_dir == tmp_path / 'content' / 'home-pages'
        assert settings.videos_path == tmp_path / 'content' / 'videos.json'
        assert settings.lyrics_dir == tmp_path / 'public' / 'lyrics'
        assert settings.search_index_path == tmp_path / 'public' / 'search-index.json'

    def test_tunables(self, tmp_path):
        settings = load_settings(environ={}, root=tmp_path)
        assert settings.per_page == 20
        assert settings.artist_preview_length == 180
        assert settings.home_preview_length == 220
        assert settings.stanza_gap == 4
        assert settings.max_videos_per_artist == 5
        assert settings.min_videos_to_qualify == 3
        assert settings.thumbnail_quality == 'hqdefault'
        assert settings.recent_limit == 180

    def test_every_path_has_an_env_var(self):
        path_fields = {name for name, value in vars(Settings()).items() if isinstance(value, Path)}
        assert path_fields == set(PATH_ENV_VARS)


class TestSettingsFile:

    def test_default_file_in_root(self, tmp_path):
        (tmp_path / 'coros.yaml').write_text('per_page: 10\nlyrics_dir: out/lyrics\n', encoding='utf-8')
        settings = load_settings(environ={}, root=tmp_path)
        assert settings.per_page == 10
        assert settings.lyrics_dir == tmp_path / 'out' / 'lyrics'

    def test_file_from_env_var(self, tmp_path):
        config = tmp_path / 'custom.yaml'
        config.write_text('stanza_gap: 2\n', encoding='utf-8')
        settings = load_settings(environ={'COROS_CONFIG': str(config)}, root=tmp_path)
        assert settings.stanza_gap == 2

    def test_empty_file(self, tmp_path):
        (tmp_path / 'coros.yaml').write_text('', encoding='utf-8')
        assert load_settings(environ={}, root=tmp_path).per_page == 20

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match='not found'):
            load_settings(config_path=tmp_path / 'nope.yaml', environ={}, root=tmp_path)

    def test_unknown_key(self, tmp_path):
        (tmp_path / 'coros.yaml').write_text('per_pgae: 10\n', encoding='utf-8')
        with pytest.raises(ConfigError, match='per_pgae'):
            load_settings(environ={}, root=tmp_path)

    def test_not_a_mapping(self, tmp_path):
        (tmp_path / 'coros.yaml').write_text('- a\n- b\n', encoding='utf-8')
        with pytest.raises(ConfigError, match='mapping'):
            load_settings(environ={}, root=tmp_path)

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / 'coros.yaml').write_text('per_page: [\n', encoding='utf-8')
        with pytest.raises(ConfigError, match='Invalid YAML'):
            load_settings(environ={}, root=tmp_path)

    @pytest.mark.parametrize('value', ['0', '-3', 'many', 'true'])
    def test_invalid_integers(self, tmp_path, value):
        (tmp_path / 'coros.yaml').write_text(f'per_page: {value}\n', encoding='utf-8')
        with pytest.raises(ConfigError, match='per_page'):
            load_settings(environ={}, root=tmp_path)

    def test_thumbnail_quality_checked(self, tmp_path):
        (tmp_path / 'coros.yaml').write_text('thumbnail_quality: maxres\n', encoding='utf-8')
        with pytest.raises(ConfigError, match='thumbnail_quality'):
            load_settings(environ={}, root=tmp_path)


class TestPrecedence:

    def test_env_overrides_file(self, tmp_path):
        (tmp_path / 'coros.yaml').write_text('song_posts_dir: from-file\n', encoding='utf-8')
        settings = load_settings(environ={'SONG_POSTS_DIR': 'from-env'}, root=tmp_path)
        assert settings.song_posts_dir == tmp_path / 'from-env'

    def test_empty_env_value_ignored(self, tmp_path):
        settings = load_settings(environ={'ARTISTS_DIR': '  '}, root=tmp_path)
        assert settings.artists_dir == tmp_path / 'content' / 'artists'

    def test_absolute_env_path_kept(self, tmp_path):
        target = tmp_path / 'elsewhere' / 'videos.json'
        settings = load_settings(environ={'VIDEOS_PATH': str(target)}, root=tmp_path / 'project')
        assert settings.videos_path == target

    def test_flags_override_env(self, tmp_path):
        settings = load_settings(
            environ={'SONG_POSTS_DIR': 'from-env'},
            root=tmp_path,
            song_posts_dir=Path('from-flag'),
            per_page=7,
        )
        assert settings.song_posts_dir == tmp_path / 'from-flag'
        assert settings.per_page == 7

    def test_none_flags_ignored(self, tmp_path):
        settings = load_settings(environ={}, root=tmp_path, per_page=None)
        assert settings.per_page == 20

    def test_unknown_flag(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(environ={}, root=tmp_path, colour='red')


class TestArguments:

    def test_source_and_config_flags(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for env_var in list(PATH_ENV_VARS.values()) + ['COROS_CONFIG']:
            monkeypatch.delenv(env_var, raising=False)

        parser = argparse.ArgumentParser()
        add_common_arguments(parser)
        args = parser.parse_args(['--source', 'posts'])

        settings = settings_from_args(args, per_page=3)
        assert settings.song_posts_dir == Path.cwd() / 'posts'
        assert settings.per_page == 3
