"""Text helpers: URL slugs and Spanish-aware sort keys."""

import re
import unicodedata

MAX_SLUG_LENGTH = 80

# ñ is its own letter in Spanish and sorts after n
_ENYE = re.compile(r'([nN])\u0303')
_ENYE_MARKER = '\x7f'
_LOW_WEIGHT = '\x01'


def strip_accents(text: str) -> str:
    """Remove combining diacritical marks (é → e, ñ → n)."""
    text = unicodedata.normalize('NFD', text)
    return ''.join(c for c in text if not unicodedata.combining(c))


def slugify(text: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Convert a display name to a URL-safe slug.

    - Lowercase
    - Remove accents/diacritics
    - Replace runs of anything outside [a-z0-9] with one hyphen
    - Trim hyphens and cap the length
    """
    if not text:
        return ''

    text = strip_accents(text.lower())
    text = re.sub(r'[^a-z0-9]+', '-', text)
    text = text.strip('-')

    # Capping can expose a hyphen at the cut point
    return text[:max_length].rstrip('-')


def _primary_weight(c: str) -> str:
    # Punctuation, symbols and spaces sort before digits and letters
    if unicodedata.category(c)[0] in 'PSZ':
        return _LOW_WEIGHT + c
    return c


def collation_key(text: str) -> tuple:
    """Sort key approximating Spanish locale collation.

    Compares base letters first ignoring accents and case, then accents,
    then case (lowercase first). Punctuation such as ¡ and ¿ weighs less
    than any digit or letter. The original string is the last resort so
    the order is total and stable between runs.
    """
    text = text or ''
    decomposed = _ENYE.sub(lambda m: m.group(1) + _ENYE_MARKER, unicodedata.normalize('NFD', text))
    base = ''.join(_primary_weight(c) for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), decomposed.casefold(), base.swapcase(), text)
