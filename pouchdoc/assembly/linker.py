"""Links manifest line items to the dispatch sheets they reference.

An item whose content reads like ``"HR Nº5-18-A/ 3 CAJA"`` travels under a
dispatch sheet. Each such item gets a sheet upserted by full number and a
pointer to that sheet's id.
"""

import re
from dataclasses import dataclass

from pouchdoc.models import ExtractedDispatchSheet, ExtractedGuide, ExtractedItem
from pouchdoc.utils.config import AssemblyConfig
from pouchdoc.utils.logger import get_logger

from .store import DispatchSheetStore

logger = get_logger(__name__)

ITEM_REFERENCE_PATTERN = re.compile(r"^HR\s*N[º°]\s*(\d+)([^/]*)", re.IGNORECASE)
# Unit code: the first letter segment after the number's digit segments,
# e.g. "PCO" in "HR Nº3-PCO-ADJ". Only the prefix is case-insensitive.
UNIT_CODE_PATTERN = re.compile(r"(?i:HR\s*N[º°])\s*\d+(?:-\d+)*-([A-Z]{2,4})\b")


@dataclass
class DispatchReference:
    """A dispatch sheet reference found inside an item's content."""

    full_number: str
    sequence_number: int
    unit_code: str | None


def parse_item_reference(content: str | None) -> DispatchReference | None:
    """Detect a dispatch sheet reference at the start of ``content``.

    Args:
        content: Free-text content of a manifest line item.

    Returns:
        The reference, or ``None`` when the content does not start with
        ``HR Nº<digits>``.
    """
    if not content:
        return None
    match = ITEM_REFERENCE_PATTERN.match(content.strip())
    if not match:
        return None
    unit_match = UNIT_CODE_PATTERN.search(content)
    return DispatchReference(
        full_number=content.strip(),
        sequence_number=int(match.group(1)),
        unit_code=unit_match.group(1) if unit_match else None,
    )


class CrossLinker:
    """Upserts the dispatch sheets referenced by a guide's items.

    Args:
        store: Persistence collaborator keyed by full number.
        config: Assembly defaults (unit code, subject template).
    """

    def __init__(self, store: DispatchSheetStore, config: AssemblyConfig | None = None) -> None:
        self.store = store
        self.config = config or AssemblyConfig()

    def link(self, guide: ExtractedGuide) -> list[ExtractedDispatchSheet]:
        """Run one linking pass over ``guide.items``.

        New sheets are seeded from the item and the parent guide; existing
        ones only get ``to``, ``sender`` and ``weight`` refreshed. Each
        referencing item ends up pointing at its sheet's id.

        Returns:
            The created or updated sheets, in item order.
        """
        linked: list[ExtractedDispatchSheet] = []
        for item in guide.items:
            reference = parse_item_reference(item.content)
            if reference is None:
                continue

            sheet = self._upsert(guide, item, reference)
            item.linked_dispatch_sheet_id = sheet.id
            linked.append(sheet)

        if linked:
            logger.info("Guide %s: linked %d dispatch sheets", guide.guide_number, len(linked))
        return linked

    def _upsert(
        self, guide: ExtractedGuide, item: ExtractedItem, reference: DispatchReference
    ) -> ExtractedDispatchSheet:
        existing = self.store.get(reference.full_number)
        if existing is not None:
            existing.to = item.recipient or None
            existing.sender = item.sender
            existing.weight = item.weight
            logger.debug("Updated dispatch sheet %s", reference.full_number)
            return self.store.save(existing)

        description = self.config.linked_sheet_subject.format(
            guide_number=guide.guide_number, item_number=item.item_number
        )
        sheet = ExtractedDispatchSheet(
            full_number=reference.full_number,
            sequence_number=reference.sequence_number,
            unit_code=reference.unit_code or self.config.default_unit_code,
            to=item.recipient or None,
            sender=item.sender,
            document=description,
            subject=description,
            weight=item.weight,
        )
        logger.debug("Created dispatch sheet %s", reference.full_number)
        return self.store.save(sheet)
