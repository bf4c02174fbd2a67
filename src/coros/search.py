"""
Command-line fuzzy search over the generated search index.

Mirrors the browser search: the same index file, the same field weights
(title 0.6, author 0.3, album 0.1) and the same match threshold. Matching
is done with rapidfuzz; a field counts as matched when its distance
(1 - similarity) is within the threshold, and the entry score is the
product of ``distance ** weight`` over matched fields (lower is better).

Usage:
    coros search "cuan grande es el"
    coros search "marcos witt" -n 50
    coros search "alabanza" --json
"""

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rapidfuzz import fuzz, utils

from .config import add_common_arguments, settings_from_args
from .errors import CorosError
from .search_index import load_search_index
from .text import collation_key, strip_accents

FIELD_WEIGHTS = {
    't': 0.6,
    'a': 0.3,
    'al': 0.1,
}
MATCH_THRESHOLD = 0.35
DEFAULT_LIMIT = 200

# Stands in for a zero distance so a perfect match still orders by weight
_MIN_DISTANCE = 1e-9


@dataclass(frozen=True)
class SearchResult:
    entry: dict
    score: float
    matched: tuple[str, ...]


def prepare_text(text) -> str:
    """Lowercase, fold accents and strip punctuation for matching."""
    if not isinstance(text, str):
        return ''
    return utils.default_process(strip_accents(text))


def field_similarity(query: str, value: str) -> float:
    """Similarity in [0, 1] of a prepared query against a prepared field."""
    if not query or not value:
        return 0.0
    # A field shorter than the query must match as a whole, not as a substring
    if len(value) < len(query):
        return fuzz.ratio(query, value) / 100
    return fuzz.partial_ratio(query, value) / 100


def score_entry(query: str, entry: dict,
                weights: dict = FIELD_WEIGHTS,
                threshold: float = MATCH_THRESHOLD) -> Optional[SearchResult]:
    """Score one index entry against a prepared query; None if no field matches."""
    score = 1.0
    matched = []
    for key, weight in weights.items():
        distance = 1.0 - field_similarity(query, prepare_text(entry.get(key)))
        if distance > threshold:
            continue
        matched.append(key)
        score *= max(distance, _MIN_DISTANCE) ** weight

    if not matched:
        return None
    return SearchResult(entry=entry, score=score, matched=tuple(matched))


def search(entries: list[dict], query: str, limit: Optional[int] = DEFAULT_LIMIT,
           threshold: float = MATCH_THRESHOLD) -> list[SearchResult]:
    """Best matches for ``query``, best first; ties ordered by title.

    ``limit=None`` returns every match.
    """
    prepared = prepare_text(query)
    if not prepared:
        return []

    results = []
    for entry in entries:
        result = score_entry(prepared, entry, threshold=threshold)
        if result is not None:
            results.append(result)

    results.sort(key=lambda r: (r.score, collation_key(r.entry.get('t', ''))))
    return results if limit is None else results[:limit]


def format_result(result: SearchResult, verbose: bool = False) -> str:
    entry = result.entry
    line = f"{entry.get('t', '')} - {entry.get('a', '')}"
    if entry.get('al'):
        line += f" ({entry['al']})"
    if verbose:
        line += f"\n  /coros/{entry.get('s', '')}  score={result.score:.4f}  fields={','.join(result.matched)}"
    return line


def add_arguments(parser: argparse.ArgumentParser) -> None:
    add_common_arguments(parser)
    parser.add_argument('query', nargs='?', default='', help='Search text')
    parser.add_argument('-n', '--limit', type=int, default=20, help='Max results (default: 20)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show slug and score')
    parser.add_argument('--json', action='store_true', help='Output as JSON')
    parser.add_argument('--count', action='store_true', help='Only show count')
    parser.add_argument('--index', type=Path, default=None,
                        help='Path to search-index.json (default: $SEARCH_INDEX_PATH or public/search-index.json)')


def run(args: argparse.Namespace) -> int:
    try:
        settings = settings_from_args(args, search_index_path=args.index)
        entries = load_search_index(settings.search_index_path)
    except CorosError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not args.query.strip():
        print(f"Loaded {len(entries):,} songs from index")
        print("\nExample queries:")
        print("  coros search \"cuan grande es el\"")
        print("  coros search \"marcos witt\"")
        return 0

    # Count the full result set; -n only trims what is printed
    results = search(entries, args.query, limit=None)

    if args.count:
        print(len(results))
        return 0

    if args.json:
        output = [dict(r.entry, score=round(r.score, 6)) for r in results[:args.limit]]
        print(json.dumps(output, ensure_ascii=False, indent=2))
        return 0

    print(f"Found {len(results):,} songs\n")
    for result in results[:args.limit]:
        print(format_result(result, args.verbose))
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Fuzzy-search the generated song index',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    add_arguments(parser)
    args = parser.parse_args(argv)
    return run(args)


if __name__ == '__main__':
    sys.exit(main())
