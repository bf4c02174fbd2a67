"""
Write derived JSON artifacts.

Every generation step first removes its previous output files (matching a
glob pattern) and then writes each document independently. Nothing is
rolled back: a failed write raises ArtifactWriteError and the step is
expected to be re-run as a whole.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from .errors import ArtifactWriteError


@dataclass
class WriteReport:
    """What one step wrote to its target directory."""
    target: Path
    written: list[str] = field(default_factory=list)
    removed: int = 0
    bytes_written: int = 0

    def add(self, path: Path, size: int) -> None:
        self.written.append(path.name)
        self.bytes_written += size

    @property
    def count(self) -> int:
        return len(self.written)


def utc_timestamp(now: datetime = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T10:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def encode_json(data, compact: bool = False) -> str:
    if compact:
        return json.dumps(data, ensure_ascii=False, separators=(',', ':'))
    return json.dumps(data, ensure_ascii=False, indent=2)


def prepare_output_dir(directory: Path, patterns: tuple[str, ...] = ('*.json',)) -> int:
    """Create ``directory`` if needed and delete files matching ``patterns``.

    Returns the number of files removed.
    """
    try:
        directory.mkdir(parents=True, exist_ok=True)
        stale = sorted({p for pattern in patterns for p in directory.glob(pattern) if p.is_file()})
        for path in stale:
            path.unlink()
    except OSError as e:
        raise ArtifactWriteError(f"Could not prepare output directory {directory}: {e}") from e
    return len(stale)


def write_json(path: Path, data, compact: bool = False, trailing_newline: bool = False) -> int:
    """Write ``data`` as UTF-8 JSON. Returns the number of bytes written."""
    text = encode_json(data, compact)
    if trailing_newline:
        text += '\n'
    encoded = text.encode('utf-8')
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(encoded)
    except OSError as e:
        raise ArtifactWriteError(f"Could not write {path}: {e}") from e
    return len(encoded)


def write_document(report: WriteReport, path: Path, data, compact: bool = False) -> None:
    report.add(path, write_json(path, data, compact))


def is_safe_file_stem(name: str) -> bool:
    """True if ``name`` can be used as a file name inside an output directory."""
    if not name or name in ('.', '..'):
        return False
    return not any(c in name for c in ('/', '\\', '\x00'))
