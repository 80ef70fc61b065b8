"""Header-driven mapping of OCR table grids to records.

A :class:`TableSchema` lists, in order, which header substrings feed which
output field. The same :func:`parse_table` handles manifest line items,
seals and the dispatch sheet header table.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from pouchdoc.models import Table
from pouchdoc.utils.logger import get_logger

from .normalizers import parse_int, parse_weight

logger = get_logger(__name__)

POSITIONAL = "positional"
SIGNATURE = "signature"


def _text(value: str) -> str | None:
    return value or None


@dataclass
class ColumnRule:
    """Maps columns whose header contains any of ``header_contains``."""

    field: str
    header_contains: tuple[str, ...]
    header_excludes: tuple[str, ...] = ()
    convert: Callable[[str], Any] = _text

    def matches(self, header: str) -> bool:
        header = header.lower()
        if any(excluded in header for excluded in self.header_excludes):
            return False
        return any(token in header for token in self.header_contains)


@dataclass
class TableSchema:
    """Column rules for one kind of table.

    Args:
        name: Schema name used in logs.
        columns: Rules evaluated in order; the first match claims a column.
        primary_fields: A row is kept only if one of these is populated.
            ``None`` keeps any row with at least one populated field.
        signature: Header substrings that identify this table by content.
    """

    name: str
    columns: list[ColumnRule]
    primary_fields: tuple[str, ...] | None = None
    signature: tuple[str, ...] = field(default_factory=tuple)

    def rule_for(self, header: str) -> ColumnRule | None:
        for rule in self.columns:
            if rule.matches(header):
                return rule
        return None

    def recognizes(self, headers: Sequence[str]) -> bool:
        lowered = [h.lower() for h in headers]
        return any(token in h for token in self.signature for h in lowered)


def _quantity(content: str) -> int | None:
    return parse_int(content) or None


ITEM_SCHEMA = TableSchema(
    name="items",
    columns=[
        ColumnRule("item_number", ("nº", "n°", "numero", "número"), convert=parse_int),
        ColumnRule("recipient", ("destinatario",)),
        ColumnRule("content", ("contenido",)),
        ColumnRule("sender", ("remitente",)),
        ColumnRule("quantity", ("can", "cantidad"), convert=_quantity),
        ColumnRule("weight", ("peso",), convert=parse_weight),
    ],
    primary_fields=("recipient", "content"),
    signature=("destinatario", "contenido"),
)

SEAL_SCHEMA = TableSchema(
    name="seals",
    columns=[
        ColumnRule("seal_id", ("precinto",), header_excludes=("cable",)),
        ColumnRule("seal_or_cable_id", ("precinto/cable", "cable")),
        ColumnRule("bag_size", ("bolsa",)),
        ColumnRule("air_waybill_number", ("guía", "guia", "aérea", "aerea")),
    ],
    primary_fields=None,
    signature=("precinto", "bolsa"),
)

DISPATCH_HEADER_SCHEMA = TableSchema(
    name="dispatch_header",
    columns=[
        ColumnRule("document", ("documento",)),
        ColumnRule("subject", ("asunto",)),
        ColumnRule("destination", ("destino",)),
    ],
    primary_fields=None,
    signature=("documento", "asunto"),
)


def table_headers(table: Table) -> list[str]:
    """Header text per column, ``column_<i>`` where no header cell exists."""
    headers: list[str] = []
    for column in range(max(table.column_count, 0)):
        cell = table.header_at(column)
        headers.append(cell.content if cell and cell.content else f"column_{column}")
    return headers


def parse_table(table: Table | None, schema: TableSchema) -> list[dict[str, Any]]:
    """Map the data rows of ``table`` to records using ``schema``.

    Row 0 holds the headers; rows ``1..row_count-1`` are data. Cells are
    stripped and converted by the matching column rule; rows without a
    primary field are skipped.

    Args:
        table: OCR table, or ``None``.
        schema: Column rules for this kind of table.

    Returns:
        One dict per retained row, keyed by field name.
    """
    if table is None or not table.cells:
        return []

    headers = table_headers(table)
    rules = [schema.rule_for(header) for header in headers]
    records: list[dict[str, Any]] = []
    skipped = 0

    for row in range(1, table.row_count):
        record: dict[str, Any] = {}
        for column, rule in enumerate(rules):
            if rule is None:
                continue
            cell = table.cell_at(row, column)
            if cell is None:
                continue
            value = rule.convert(cell.content.strip())
            if value is not None:
                record[rule.field] = value

        primary = schema.primary_fields or tuple(record)
        if any(record.get(name) for name in primary):
            records.append(record)
        else:
            skipped += 1

    logger.debug(
        "Table '%s': %d rows kept, %d skipped", schema.name, len(records), skipped
    )
    return records


def find_table(
    tables: Sequence[Table],
    schema: TableSchema,
    position: int,
    strategy: str = POSITIONAL,
) -> Table | None:
    """Pick the table that plays ``schema``'s role.

    ``positional`` returns ``tables[position]``. ``signature`` returns the
    first table whose headers contain one of the schema's signature
    tokens and falls back to ``tables[position]`` when none does.
    """
    if strategy == SIGNATURE:
        for table in tables:
            if schema.recognizes(table_headers(table)):
                return table
        logger.debug("No table matched the '%s' signature, using position %d", schema.name, position)
    if 0 <= position < len(tables):
        return tables[position]
    return None
