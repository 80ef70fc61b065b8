"""Data transfer objects shared by the extraction core.

Inputs mirror the JSON produced by the OCR collaborator (camelCase keys);
outputs are plain dataclasses with ``to_dict`` for JSON serialization.
"""

from dataclasses import asdict, dataclass, field
import datetime
from enum import StrEnum
from typing import Any

COLUMN_HEADER = "columnHeader"


class Language(StrEnum):
    """Languages the classifier can report."""

    SPANISH = "spanish"
    ENGLISH = "english"
    FRENCH = "french"
    PORTUGUESE = "portuguese"


class DocumentType(StrEnum):
    """Document families the classifier can report."""

    POUCH_MANIFEST = "pouchManifest"
    DISPATCH_SHEET = "dispatchSheet"
    DIPLOMATIC_NOTE = "diplomaticNote"


class Direction(StrEnum):
    """Whether a document enters or leaves the pouch unit."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"


@dataclass
class KeyValuePair:
    """A single OCR-detected label/value pair."""

    key: str
    value: str
    confidence: float = 0.0


@dataclass
class TableCell:
    """A cell of an OCR table grid."""

    row_index: int
    column_index: int
    content: str
    kind: str = "content"
    confidence: float = 0.0

    @property
    def is_header(self) -> bool:
        return self.kind == COLUMN_HEADER


@dataclass
class Table:
    """A row/column table as detected by the OCR collaborator."""

    row_count: int
    column_count: int
    cells: list[TableCell] = field(default_factory=list)

    def cell_at(self, row: int, column: int) -> TableCell | None:
        for cell in self.cells:
            if cell.row_index == row and cell.column_index == column:
                return cell
        return None

    def header_at(self, column: int) -> TableCell | None:
        for cell in self.cells:
            if cell.is_header and cell.column_index == column:
                return cell
        return None


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class RawExtraction:
    """Raw OCR output: full text, key-value pairs and tables."""

    content: str = ""
    key_value_pairs: list[KeyValuePair] = field(default_factory=list)
    tables: list[Table] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawExtraction":
        """Build a RawExtraction from the collaborator's JSON payload.

        Missing or malformed collections become empty lists.

        Args:
            data: Decoded JSON object with ``content``, ``keyValuePairs``
                and ``tables``.

        Returns:
            The parsed extraction.

        Raises:
            TypeError: If ``data`` is not a mapping.
        """
        if not isinstance(data, dict):
            raise TypeError(f"RawExtraction payload must be an object, got {type(data).__name__}")

        pairs = [
            KeyValuePair(
                key=_as_text(p.get("key")),
                value=_as_text(p.get("value")),
                confidence=_as_float(p.get("confidence")),
            )
            for p in _as_list(data.get("keyValuePairs"))
            if isinstance(p, dict)
        ]

        tables: list[Table] = []
        for t in _as_list(data.get("tables")):
            if not isinstance(t, dict):
                continue
            cells = [
                TableCell(
                    row_index=_as_int(c.get("rowIndex")),
                    column_index=_as_int(c.get("columnIndex")),
                    content=_as_text(c.get("content")),
                    kind=_as_text(c.get("kind")) or "content",
                    confidence=_as_float(c.get("confidence")),
                )
                for c in _as_list(t.get("cells"))
                if isinstance(c, dict)
            ]
            tables.append(
                Table(
                    row_count=_as_int(t.get("rowCount")),
                    column_count=_as_int(t.get("columnCount")),
                    cells=cells,
                )
            )

        return cls(content=_as_text(data.get("content")), key_value_pairs=pairs, tables=tables)


@dataclass
class ClassificationResult:
    """Best label per axis with normalized confidences."""

    language: Language
    document_type: DocumentType
    direction: Direction
    confidence: dict[str, float]
    matched_keywords: dict[str, list[str]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language.value,
            "document_type": self.document_type.value,
            "direction": self.direction.value,
            "confidence": dict(self.confidence),
            "matched_keywords": {k: list(v) for k, v in self.matched_keywords.items()},
        }


@dataclass
class ExtractedItem:
    """A line item of a pouch manifest."""

    item_number: int
    recipient: str = ""
    content: str = ""
    sender: str | None = None
    quantity: int | None = None
    weight: float | None = None
    linked_dispatch_sheet_id: str | None = None


@dataclass
class ExtractedSeal:
    """A seal row of a pouch manifest."""

    seal_id: str | None = None
    seal_or_cable_id: str | None = None
    bag_size: str | None = None
    air_waybill_number: str | None = None


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, StrEnum):
        return value.value
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


@dataclass
class ExtractedGuide:
    """An assembled pouch manifest."""

    guide_number: str
    direction: Direction = Direction.INBOUND
    extraordinary: bool = False
    sent_at: datetime.date | None = None
    received_at: datetime.date | None = None
    sender_name: str = ""
    recipient_name: str = ""
    origin_city: str | None = None
    origin_country: str | None = None
    destination_city: str | None = None
    destination_country: str | None = None
    declared_weight: float | None = None
    official_weight: float | None = None
    package_count: int | None = None
    items: list[ExtractedItem] = field(default_factory=list)
    seals: list[ExtractedSeal] = field(default_factory=list)
    prepared_by: str | None = None
    reviewed_by: str | None = None
    observations: str | None = None
    receiver_signature: str | None = None

    def renumber_items(self) -> None:
        """Number items contiguously from 1 in list order."""
        for position, item in enumerate(self.items, 1):
            item.item_number = position

    def remove_item(self, item_number: int) -> ExtractedItem:
        """Remove an item by number and renumber the remaining ones.

        Raises:
            KeyError: If no item carries ``item_number``.
        """
        for index, item in enumerate(self.items):
            if item.item_number == item_number:
                removed = self.items.pop(index)
                self.renumber_items()
                return removed
        raise KeyError(f"No item numbered {item_number}")

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass
class ExtractedDispatchSheet:
    """An assembled dispatch sheet with per-field confidence."""

    full_number: str
    sequence_number: int = 0
    unit_code: str = ""
    date: datetime.date | None = None
    to: str | None = None
    sender: str | None = None
    reference: str | None = None
    document: str | None = None
    subject: str | None = None
    destination: str | None = None
    weight: float | None = None
    field_confidence: dict[str, float] = field(default_factory=dict)
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))
