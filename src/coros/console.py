"""Progress output for the command-line steps."""

from pathlib import Path


def print_header(title: str, source: Path, target: Path) -> None:
    print(title)
    print(f"   Source: {source}")
    print(f"   Target: {target}")
    print()


def print_file_tree(target: Path, entries: list[str], trailer: list[str], limit: int = 5) -> None:
    """Print a short listing of written files: the first few entries, then the index files."""
    print(f"   {target}/")
    for entry in entries[:limit]:
        print(f"   ├─ {entry}")
    if len(entries) > limit:
        print(f"   ├─ ... {len(entries) - limit} more")
    for i, name in enumerate(trailer):
        branch = '└─' if i == len(trailer) - 1 else '├─'
        print(f"   {branch} {name}")


def format_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / 1024 / 1024:.1f} MB"
    return f"{size / 1024:.1f} KB"
