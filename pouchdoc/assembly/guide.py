"""Assembly of pouch manifests ("Guía de Valija") from raw OCR output.

Combines the field resolver, the scalar normalizers, the location lookup
and the table grid parser into an :class:`ExtractedGuide`.
"""

from datetime import date

from pouchdoc.extraction.field_resolver import resolve, resolve_first
from pouchdoc.extraction.locations import LocationLookup
from pouchdoc.extraction.normalizers import (
    POUCH_MANIFEST_PATTERN,
    extract_guide_number,
    normalize_text,
    parse_additive_weight,
    parse_date,
    parse_int,
    parse_weight,
)
from pouchdoc.extraction.table_parser import (
    ITEM_SCHEMA,
    SEAL_SCHEMA,
    find_table,
    parse_table,
)
from pouchdoc.models import (
    Direction,
    ExtractedGuide,
    ExtractedItem,
    ExtractedSeal,
    RawExtraction,
)
from pouchdoc.utils.config import AssemblyConfig
from pouchdoc.utils.logger import get_logger

logger = get_logger(__name__)

SEAL_TABLE_POSITION = 0
ITEM_TABLE_POSITION = 1

RECIPIENT_KEYS = ("PARA", "DESTINATARIO")
SENDER_KEYS = ("DE", "REMITENTE")


def guide_number_with_suffix(base: str, year: int, extraordinary: bool) -> str:
    """Build the unique guide number: ``07-2025`` or ``07EXT-2025``."""
    if extraordinary:
        return f"{base}EXT-{year}"
    return f"{base}-{year}"


class GuideAssembler:
    """Builds :class:`ExtractedGuide` records from raw extractions.

    Args:
        config: Assembly defaults (fallback names, keywords, table roles).
        locations: City and country lookup for origin and destination.
    """

    def __init__(
        self,
        config: AssemblyConfig | None = None,
        locations: LocationLookup | None = None,
    ) -> None:
        self.config = config or AssemblyConfig()
        self.locations = locations or LocationLookup()
        self._extraordinary = [normalize_text(k) for k in self.config.extraordinary_keywords]

    def assemble(self, raw: RawExtraction, today: date | None = None) -> ExtractedGuide:
        """Assemble a guide from OCR output.

        Args:
            raw: Content, key-value pairs and tables of one manifest.
            today: Date used for the year suffix when no sent date is found.

        Returns:
            The assembled guide, items numbered from 1.
        """
        pairs = raw.key_value_pairs
        content = raw.content or ""

        recipient = resolve_first(pairs, RECIPIENT_KEYS) or self.config.default_recipient
        raw_sender = resolve_first(pairs, SENDER_KEYS) or self.config.default_sender

        sent_at = parse_date(resolve(pairs, "FECHA DE ENVIO"))
        received_at = parse_date(resolve(pairs, "FECHA DE RECIBO"))

        base, sender = self._guide_base(content, raw_sender)
        extraordinary = self._is_extraordinary(raw_sender, content)
        year = sent_at.year if sent_at else (today or date.today()).year
        guide_number = guide_number_with_suffix(base, year, extraordinary)

        origin = self.locations.locate(raw_sender)
        destination = self.locations.locate(recipient)

        guide = ExtractedGuide(
            guide_number=guide_number,
            direction=Direction.INBOUND,
            extraordinary=extraordinary,
            sent_at=sent_at,
            received_at=received_at,
            sender_name=sender,
            recipient_name=recipient,
            origin_city=origin.city if origin else None,
            origin_country=origin.country if origin else None,
            destination_city=destination.city if destination else None,
            destination_country=destination.country if destination else None,
            declared_weight=parse_weight(resolve(pairs, "Peso Total")),
            official_weight=parse_additive_weight(resolve(pairs, "Peso Oficial")),
            package_count=parse_int(resolve(pairs, "Total de Items")),
            items=self._items(raw),
            seals=self._seals(raw),
            prepared_by=resolve(pairs, "Preparado Por"),
            reviewed_by=resolve(pairs, "Revisado Por"),
            observations=resolve(pairs, "OBSERVACIONES"),
            receiver_signature=resolve(pairs, "FIRMA DEL RECEPTOR"),
        )
        guide.renumber_items()

        logger.info(
            "Assembled guide %s for %s: %d items, %d seals",
            guide.guide_number,
            guide.recipient_name,
            len(guide.items),
            len(guide.seals),
        )
        return guide

    def _guide_base(self, content: str, raw_sender: str) -> tuple[str, str]:
        """Return the base guide number and the sender name to keep.

        A sender field that carries the full manifest phrase is reduced to
        the bare number and takes precedence over the content.
        """
        fallback = self.config.guide_number_fallback
        if POUCH_MANIFEST_PATTERN.search(raw_sender):
            number = extract_guide_number(raw_sender, fallback)
            return number, number

        number = extract_guide_number(content, "")
        if not number:
            number = extract_guide_number(raw_sender, fallback)
        return number, raw_sender

    def _is_extraordinary(self, raw_sender: str, content: str) -> bool:
        haystack = normalize_text(f"{raw_sender} {content}")
        return any(keyword in haystack for keyword in self._extraordinary)

    def _items(self, raw: RawExtraction) -> list[ExtractedItem]:
        table = find_table(raw.tables, ITEM_SCHEMA, ITEM_TABLE_POSITION, self.config.table_roles)
        items: list[ExtractedItem] = []
        for position, record in enumerate(parse_table(table, ITEM_SCHEMA), 1):
            items.append(
                ExtractedItem(
                    item_number=record.get("item_number") or position,
                    recipient=record.get("recipient", ""),
                    content=record.get("content", ""),
                    sender=record.get("sender"),
                    quantity=record.get("quantity"),
                    weight=record.get("weight"),
                )
            )
        return items

    def _seals(self, raw: RawExtraction) -> list[ExtractedSeal]:
        table = find_table(raw.tables, SEAL_SCHEMA, SEAL_TABLE_POSITION, self.config.table_roles)
        return [ExtractedSeal(**record) for record in parse_table(table, SEAL_SCHEMA)]
