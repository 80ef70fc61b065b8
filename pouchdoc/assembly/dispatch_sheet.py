"""Assembly of dispatch sheets ("Hoja de Remisión") from raw OCR output."""

import re
from collections.abc import Sequence

from pouchdoc.extraction.field_resolver import resolve, resolve_first
from pouchdoc.extraction.normalizers import (
    normalize_text,
    parse_date,
    parse_int,
    parse_weight,
    strip_leading_place,
)
from pouchdoc.extraction.table_parser import DISPATCH_HEADER_SCHEMA, find_table, parse_table
from pouchdoc.models import ExtractedDispatchSheet, KeyValuePair, RawExtraction
from pouchdoc.utils.config import AssemblyConfig
from pouchdoc.utils.logger import get_logger

logger = get_logger(__name__)

DISPATCH_SHEET_MARKER = "HOJA DE REMISIÓN"
FULL_NUMBER_PREFIX = "HR N°"

DATE_KEYS = ("FECHA", "FECHA DE EMISION", "FECHA DE EMISIÓN")
TO_KEYS = ("PARA", "DESTINATARIO")
FROM_KEYS = ("DE LA", "DE", "REMITENTE")

# Presence-based confidence per field: (found in table, found in key-value pairs).
TABLE_FIELD_CONFIDENCE = (0.9, 0.6)
FIELD_CONFIDENCE: dict[str, float] = {
    "full_number": 0.9,
    "sequence_number": 0.9,
    "date": 0.7,
    "to": 0.7,
    "sender": 0.7,
    "reference": 0.6,
    "weight": 0.7,
}
UNIT_CODE_CONFIDENCE = (0.8, 0.5)

_UNIT_CODE_IN_KEY = re.compile(r"\(([^)]+)\)")
_NUMBER_IN_VALUE = re.compile(r"(\d[\d\-]*(?:[A-Za-z]?\s*/\s*[\d\-]+)?)")
_NUMBER_IN_CONTENT = re.compile(r"HR\s*N[º°]\s*(\d+[^/\n]*)", re.IGNORECASE)


def find_pair(pairs: Sequence[KeyValuePair], marker: str) -> KeyValuePair | None:
    """Return the first pair whose key contains ``marker``, ignoring accents."""
    wanted = normalize_text(marker)
    for pair in pairs:
        if wanted in normalize_text(pair.key):
            return pair
    return None


class DispatchSheetAssembler:
    """Builds :class:`ExtractedDispatchSheet` records with field confidences.

    Args:
        config: Assembly defaults (unit code, table roles).
    """

    def __init__(self, config: AssemblyConfig | None = None) -> None:
        self.config = config or AssemblyConfig()

    def assemble(self, raw: RawExtraction) -> ExtractedDispatchSheet:
        """Assemble a dispatch sheet from OCR output.

        The number and unit code come from the ``HOJA DE REMISIÓN (XXX) Nº``
        pair when present, otherwise from an ``HR Nº`` mention in the text.

        Args:
            raw: Content, key-value pairs and tables of one dispatch sheet.

        Returns:
            The assembled sheet with its ``field_confidence`` map.
        """
        pairs = raw.key_value_pairs
        marker = find_pair(pairs, DISPATCH_SHEET_MARKER)
        logger.debug("Dispatch sheet marker pair: %s", marker.key if marker else "not found")

        full_number, unit_code = self._number_from_marker(marker)
        if not full_number:
            full_number = self._number_from_content(raw.content or "")
        sequence_number = parse_int(full_number) or 0

        date_text = resolve_first(pairs, DATE_KEYS)
        sheet_date = parse_date(strip_leading_place(date_text)) if date_text else None

        table = find_table(raw.tables, DISPATCH_HEADER_SCHEMA, 0, self.config.table_roles)
        rows = parse_table(table, DISPATCH_HEADER_SCHEMA)
        table_data = rows[0] if rows else {}

        weight_text = resolve(pairs, "PESO")

        sheet = ExtractedDispatchSheet(
            full_number=full_number,
            sequence_number=sequence_number,
            unit_code=unit_code,
            date=sheet_date,
            to=resolve_first(pairs, TO_KEYS),
            sender=resolve_first(pairs, FROM_KEYS),
            reference=resolve(pairs, "REFERENCIA"),
            document=table_data.get("document") or resolve(pairs, "DOCUMENTO"),
            subject=table_data.get("subject") or resolve(pairs, "ASUNTO"),
            destination=table_data.get("destination") or resolve(pairs, "DESTINO"),
            weight=parse_weight(weight_text) if weight_text else None,
        )
        sheet.field_confidence = field_confidence(
            sheet, has_marker=marker is not None, has_table_data=bool(table_data)
        )

        logger.info(
            "Assembled dispatch sheet %s (unit %s, date %s)",
            sheet.full_number or "<undetected>",
            sheet.unit_code,
            sheet.date.isoformat() if sheet.date else "<undetected>",
        )
        return sheet

    def _number_from_marker(self, marker: KeyValuePair | None) -> tuple[str, str]:
        unit_code = self.config.default_unit_code
        if marker is None or not marker.value:
            return "", unit_code

        unit_match = _UNIT_CODE_IN_KEY.search(marker.key)
        if unit_match:
            unit_code = unit_match.group(1).strip().upper()

        number_match = _NUMBER_IN_VALUE.search(marker.value)
        if not number_match:
            return "", unit_code
        number = re.sub(r"\s+", "", number_match.group(1))
        return f"{FULL_NUMBER_PREFIX}{number}", unit_code

    @staticmethod
    def _number_from_content(content: str) -> str:
        match = _NUMBER_IN_CONTENT.search(content)
        return f"{FULL_NUMBER_PREFIX}{match.group(1).strip()}" if match else ""


def field_confidence(
    sheet: ExtractedDispatchSheet, has_marker: bool, has_table_data: bool
) -> dict[str, float]:
    """Presence-based confidence for each dispatch sheet field.

    Absent fields score 0. Document, subject and destination score higher
    when read from the sheet's header table than from key-value pairs.
    """
    in_table, in_pairs = TABLE_FIELD_CONFIDENCE
    tabular = in_table if has_table_data else in_pairs

    present = {
        "full_number": bool(sheet.full_number),
        "sequence_number": sheet.sequence_number > 0,
        "date": sheet.date is not None,
        "to": bool(sheet.to),
        "sender": bool(sheet.sender),
        "reference": bool(sheet.reference),
        "weight": sheet.weight is not None,
    }
    confidence = {
        name: FIELD_CONFIDENCE[name] if found else 0.0 for name, found in present.items()
    }
    confidence["unit_code"] = UNIT_CODE_CONFIDENCE[0] if has_marker else UNIT_CODE_CONFIDENCE[1]
    for name in ("document", "subject", "destination"):
        confidence[name] = tabular if getattr(sheet, name) else 0.0
    return confidence
