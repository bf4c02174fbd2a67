"""
Pytest configuration and shared fixtures
"""

import json
import sys
from pathlib import Path

import pytest

# Add the package source directory to the Python path for imports
REPO_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from coros.config import CONFIG_ENV_VAR, PATH_ENV_VARS, load_settings  # noqa: E402


@pytest.fixture
def project_root(tmp_path):
    """Empty project root; all default paths resolve inside it."""
    return tmp_path


@pytest.fixture
def settings(project_root):
    """Default settings anchored at the temporary project root, ignoring the real environment."""
    return load_settings(environ={}, root=project_root)


@pytest.fixture
def write_posts(settings):
    """Write song posts into the configured song-post directory.

    Accepts dicts (written as JSON, named after their slug or position)
    or (file_name, raw_text) tuples for malformed files.
    """
    def _write(*posts):
        posts_dir = settings.song_posts_dir
        posts_dir.mkdir(parents=True, exist_ok=True)
        for i, post in enumerate(posts):
            if isinstance(post, tuple):
                file_name, text = post
            else:
                file_name = f"{i:03d}-{post.get('slug') or 'post'}.json"
                text = json.dumps(post, ensure_ascii=False)
            (posts_dir / file_name).write_text(text, encoding='utf-8')
        return posts_dir
    return _write


@pytest.fixture
def scenario_posts():
    """Two valid songs sharing an author, plus one record without a title."""
    return [
        {'slug': 'a', 'title': 'Song A', 'author': 'Juan Pérez, Maria'},
        {'slug': 'b', 'title': 'Song B', 'author': 'Juan Pérez'},
        {'slug': 'c', 'title': '', 'author': 'X'},
    ]


@pytest.fixture
def cli_env(project_root, monkeypatch):
    """Run commands from the project root with no location overrides in the environment."""
    for env_var in list(PATH_ENV_VARS.values()) + [CONFIG_ENV_VAR]:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.chdir(project_root)
    return project_root
