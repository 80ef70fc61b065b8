"""Fuzzy lookup of OCR key-value pairs by canonical field name.

OCR labels arrive with stray colons, line breaks and extra words
(``"FECHA DE\\nENVIO:"``). Each pair's key is scored against the wanted
name and the best scoring pair's value is returned.

Scoring, after stripping whitespace and colons and lowercasing both sides:

    exact match                                 100
    key starts with name   (len(name) > 2)       80
    name starts with key   (len(key) > 2)        60
    key contains name      (len(name) > 2)       40
    name contains key      (len(key) > 2)        20

Partial matches lose ``2 * |len(key) - len(name)|``. The highest score
wins; on equal scores the pair that comes first in the input is kept.
"""

import re
from collections.abc import Iterable, Sequence

from pouchdoc.models import KeyValuePair
from pouchdoc.utils.logger import get_logger

logger = get_logger(__name__)

EXACT_SCORE = 100
LENGTH_PENALTY = 2

_LABEL_NOISE = re.compile(r"[\s:]+")
_NEWLINES = re.compile(r"\s*[\r\n]+\s*")


def normalize_label(label: str) -> str:
    """Strip whitespace, newlines and colons and lowercase ``label``."""
    return _LABEL_NOISE.sub("", label or "").lower()


def score_key(key: str, canonical_name: str) -> int:
    """Score how well an OCR key matches a canonical field name.

    Args:
        key: Key as read by OCR.
        canonical_name: Field name being looked for.

    Returns:
        Score after the length penalty; 0 or less means no match.
    """
    k = normalize_label(key)
    name = normalize_label(canonical_name)
    if not k or not name:
        return 0

    if k == name:
        return EXACT_SCORE

    if len(name) > 2 and k.startswith(name):
        score = 80
    elif len(k) > 2 and name.startswith(k):
        score = 60
    elif len(name) > 2 and name in k:
        score = 40
    elif len(k) > 2 and k in name:
        score = 20
    else:
        return 0

    return score - LENGTH_PENALTY * abs(len(k) - len(name))


def clean_value(value: str | None) -> str | None:
    """Collapse internal line breaks and trim; blank values become ``None``."""
    if value is None:
        return None
    cleaned = _NEWLINES.sub(" ", value).strip()
    return cleaned or None


def resolve(pairs: Sequence[KeyValuePair] | None, canonical_name: str) -> str | None:
    """Return the value of the pair whose key best matches ``canonical_name``.

    Args:
        pairs: OCR key-value pairs in document order.
        canonical_name: Field name to look up, e.g. ``"FECHA DE ENVIO"``.

    Returns:
        The winning pair's cleaned value, or ``None`` when no key relates
        to the name.
    """
    best: KeyValuePair | None = None
    best_score = 0

    for pair in pairs or []:
        score = score_key(pair.key, canonical_name)
        if score > best_score:
            best_score = score
            best = pair

    if best is None:
        logger.debug("No key matched '%s'", canonical_name)
        return None

    logger.debug("Key %r matched '%s' (score=%d)", best.key, canonical_name, best_score)
    return clean_value(best.value)


def resolve_first(
    pairs: Sequence[KeyValuePair] | None, names: Iterable[str]
) -> str | None:
    """Try synonym names in order and return the first resolved value."""
    for name in names:
        value = resolve(pairs, name)
        if value is not None:
            return value
    return None
