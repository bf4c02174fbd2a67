"""
Read song-post JSON files from a source directory.

Files are listed in file-name order and read in fixed-size batches. The
reads inside one batch run concurrently; a batch finishes completely
before the next one starts, which keeps the number of open file
descriptors bounded. A file that cannot be read or does not hold a JSON
object is reported and skipped without stopping the batch.
"""

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import SourceError, warn

SOURCE_SUFFIX = '.json'
DEFAULT_BATCH_SIZE = 200


@dataclass(frozen=True)
class RawRecord:
    """One parsed song post and the file it came from."""
    file_name: str
    data: dict


@dataclass(frozen=True)
class ReadResult:
    records: tuple[RawRecord, ...]
    total_files: int
    failed: int


def list_source_files(source_dir: Path) -> list[Path]:
    """List ``*.json`` files sorted by name. Raises SourceError if there are none."""
    if not source_dir.exists():
        raise SourceError(f"Source directory not found: {source_dir}")
    if not source_dir.is_dir():
        raise SourceError(f"Source path is not a directory: {source_dir}")

    try:
        files = [
            p for p in source_dir.iterdir()
            if p.name.endswith(SOURCE_SUFFIX) and p.is_file()
        ]
    except OSError as e:
        raise SourceError(f"Could not read {source_dir}: {e}") from e

    if not files:
        raise SourceError(f"No song posts (*{SOURCE_SUFFIX}) found in {source_dir}")

    return sorted(files, key=lambda p: p.name)


def load_record(path: Path) -> RawRecord:
    """Parse one file. Raises OSError or ValueError on bad input."""
    content = path.read_text(encoding='utf-8')
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return RawRecord(file_name=path.name, data=data)


async def _read_one(path: Path) -> tuple[Optional[RawRecord], Optional[str]]:
    try:
        record = await asyncio.to_thread(load_record, path)
    except (OSError, ValueError) as e:
        return None, f"Error parsing {path.name}: {e}"
    return record, None


async def read_records_async(source_dir: Path,
                             batch_size: int = DEFAULT_BATCH_SIZE) -> ReadResult:
    files = list_source_files(source_dir)
    batch_size = max(1, batch_size)

    records = []
    failed = 0
    for start in range(0, len(files), batch_size):
        batch = files[start:start + batch_size]
        results = await asyncio.gather(*(_read_one(p) for p in batch))

        # Merge only after the whole batch has resolved
        for record, problem in results:
            if problem:
                warn(problem)
                failed += 1
            else:
                records.append(record)

    return ReadResult(records=tuple(records), total_files=len(files), failed=failed)


def read_records(source_dir: Path, batch_size: int = DEFAULT_BATCH_SIZE) -> ReadResult:
    """Read every song post in ``source_dir``.

    Args:
        source_dir: Directory holding one ``*.json`` file per song
        batch_size: Number of files read concurrently

    Returns:
        ReadResult with the parsed records in file-name order
    """
    return asyncio.run(read_records_async(source_dir, batch_size))
