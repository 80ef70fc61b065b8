"""Scalar normalizers for noisy OCR strings.

Turns guide numbers, dates and weights as they come out of OCR into typed
values. Every function returns ``None`` (or a caller-supplied fallback)
for input it cannot read and never raises.
"""

import re
import unicodedata
from datetime import date, datetime

from pouchdoc.utils.logger import get_logger

logger = get_logger(__name__)


# Ordered (rule_name, pattern) table, most specific phrasing first.
GUIDE_NUMBER_RULES: list[tuple[str, re.Pattern[str]]] = [
    (
        "pouch_manifest",
        re.compile(
            r"GU[IÍ]A\s+DE\s+VALIJA(?:\s+DIPLOM[AÁ]TICA)?\s*N[º°o]\.?\s*(\d+)",
            re.IGNORECASE,
        ),
    ),
    (
        "air_waybill",
        re.compile(r"GU[IÍ]A\s+A[EÉ]REA\s*N[º°o]\.?\s*(\d+)", re.IGNORECASE),
    ),
    (
        "generic",
        re.compile(r"(?:N[º°]|\bNO\b|#)\s*[:.]?\s*(\d+)", re.IGNORECASE),
    ),
    ("any_digits", re.compile(r"(\d+)")),
]

POUCH_MANIFEST_PATTERN = GUIDE_NUMBER_RULES[0][1]

SPANISH_MONTHS: dict[str, int] = {
    "enero": 1,
    "febrero": 2,
    "marzo": 3,
    "abril": 4,
    "mayo": 5,
    "junio": 6,
    "julio": 7,
    "agosto": 8,
    "septiembre": 9,
    "setiembre": 9,
    "octubre": 10,
    "noviembre": 11,
    "diciembre": 12,
}

FALLBACK_DATE_FORMATS: list[str] = [
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%d.%m.%Y",
]

_OCR_BRACKETS = re.compile(r"[()\[\]{}]")
_SLASH_DATE = re.compile(r"(\d{1,2})\s*/\s*(\d{1,2})\s*/\s*(\d{4})")
_TEXT_DATE = re.compile(r"(\d{1,2})\s+de\s+([a-z]+)\s+del?\s+(\d{4})", re.IGNORECASE)
_LEADING_PLACE = re.compile(r"^[^\W\d]+,\s*")
_NUMERIC_RUN = re.compile(r"\d[\d.,]*")
_DIGITS = re.compile(r"\d+")


def normalize_text(text: str) -> str:
    """Lowercase ``text`` and strip diacritics (``"Guía"`` -> ``"guia"``)."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def match_guide_number_rule(text: str) -> tuple[str, str] | None:
    """Return ``(rule_name, digits)`` for the first rule matching ``text``."""
    if not text:
        return None
    for name, pattern in GUIDE_NUMBER_RULES:
        match = pattern.search(text)
        if match:
            return name, match.group(1)
    return None


def extract_guide_number(text: str, fallback: str = "01") -> str:
    """Extract a guide number from free text, zero-padded to two digits.

    Example: ``"GUÍA DE VALIJA DIPLOMÁTICA Nº 24 ENTRADA"`` -> ``"24"``.

    Args:
        text: Text that may mention the guide number.
        fallback: Value returned when no digits are found.

    Returns:
        The zero-padded number, or ``fallback``.
    """
    matched = match_guide_number_rule(text)
    if matched is None:
        return fallback
    rule, digits = matched
    logger.debug("Guide number rule '%s' matched %s", rule, digits)
    return digits.zfill(2)


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def strip_leading_place(text: str) -> str:
    """Drop a leading ``"<Place>, "`` prefix, as in ``"Lima, 5 de ..."``."""
    return _LEADING_PLACE.sub("", text.strip(), count=1)


def parse_date(text: str | None) -> date | None:
    """Parse ``D/M/YYYY`` or ``D de <mes> del YYYY`` into a date.

    OCR bracket noise is removed first, so ``"19(/12/2025"`` reads as
    19 December 2025. A match that is not a real calendar date
    (``"32/13/2025"``) yields ``None`` rather than a rolled-over date.

    Args:
        text: Raw date string.

    Returns:
        The parsed date, or ``None``.
    """
    if not text:
        return None

    cleaned = _OCR_BRACKETS.sub("", text).strip()
    if not cleaned:
        return None

    match = _SLASH_DATE.search(cleaned)
    if match:
        day, month, year = (int(g) for g in match.groups())
        return _safe_date(year, month, day)

    match = _TEXT_DATE.search(cleaned)
    if match:
        month = SPANISH_MONTHS.get(normalize_text(match.group(2)))
        if month is not None:
            return _safe_date(int(match.group(3)), month, int(match.group(1)))

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    logger.debug("Unparseable date: %r", text)
    return None


def parse_weight(text: str | None) -> float | None:
    """Parse a weight whose decimal separator may be ``.`` or ``,``.

    When both separators occur, the one whose last occurrence comes later
    is the decimal separator and the other is a thousands separator. With a
    single kind of separator its last occurrence is the decimal point.

    Examples: ``"0.930"`` -> 0.93, ``"1.234,5"`` -> 1234.5,
    ``"63.810 Kgrs."`` -> 63.81.

    Args:
        text: Raw weight string.

    Returns:
        The weight, or ``None`` when no number is present.
    """
    if not text:
        return None

    match = _NUMERIC_RUN.search(text)
    if not match:
        return None
    run = match.group(0).rstrip(".,")

    last_dot = run.rfind(".")
    last_comma = run.rfind(",")

    if last_dot == -1 and last_comma == -1:
        number = run
    else:
        decimal_at = max(last_dot, last_comma)
        integer_part = re.sub(r"[.,]", "", run[:decimal_at])
        fraction_part = re.sub(r"[.,]", "", run[decimal_at + 1:])
        number = f"{integer_part}.{fraction_part}" if fraction_part else integer_part

    try:
        return float(number)
    except ValueError:
        return None


def parse_additive_weight(text: str | None) -> float | None:
    """Parse ``"A+B"`` readings as their sum, else a plain weight.

    Example: ``"34.700+34.500"`` -> 69.2. Operands that cannot be read
    count as zero.
    """
    if not text:
        return None
    if "+" not in text:
        return parse_weight(text)

    total = sum(parse_weight(part) or 0.0 for part in text.split("+"))
    return round(total, 6)


def parse_int(text: str | None) -> int | None:
    """Return the first digit run of ``text`` as an integer."""
    if not text:
        return None
    match = _DIGITS.search(text)
    return int(match.group(0)) if match else None
