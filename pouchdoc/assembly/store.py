"""Persistence seam for dispatch sheets discovered during cross-linking.

The extraction core only needs lookup and save by full number; real
storage, uniqueness constraints and write serialization belong to the
caller's implementation of :class:`DispatchSheetStore`.
"""

import uuid
from typing import Protocol

from pouchdoc.models import ExtractedDispatchSheet


class DispatchSheetStore(Protocol):
    """Create-or-update access to dispatch sheets keyed by full number."""

    def get(self, full_number: str) -> ExtractedDispatchSheet | None:
        """Return the stored sheet with this full number, if any."""
        ...

    def save(self, sheet: ExtractedDispatchSheet) -> ExtractedDispatchSheet:
        """Persist ``sheet`` and return it with its ``id`` set."""
        ...


class InMemoryDispatchSheetStore:
    """Dict-backed store used by the CLI, the API and the tests."""

    def __init__(self) -> None:
        self._sheets: dict[str, ExtractedDispatchSheet] = {}

    def get(self, full_number: str) -> ExtractedDispatchSheet | None:
        return self._sheets.get(full_number)

    def save(self, sheet: ExtractedDispatchSheet) -> ExtractedDispatchSheet:
        if sheet.id is None:
            existing = self._sheets.get(sheet.full_number)
            sheet.id = existing.id if existing else str(uuid.uuid4())
        self._sheets[sheet.full_number] = sheet
        return sheet

    def all(self) -> list[ExtractedDispatchSheet]:
        return list(self._sheets.values())

    def __len__(self) -> int:
        return len(self._sheets)
