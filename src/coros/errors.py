"""Error types and warning output shared by every pipeline step."""

import sys


class CorosError(Exception):
    """A fatal problem that ends the current command with a non-zero status."""


class ConfigError(CorosError):
    """Invalid settings file, environment value or flag."""


class SourceError(CorosError):
    """Source directory missing, empty or unreadable."""


class ArtifactWriteError(CorosError):
    """An output directory or file could not be written."""


def warn(message: str) -> None:
    """Print a non-fatal, record-level warning to stderr."""
    print(f"  [WARN] {message}", file=sys.stderr)
