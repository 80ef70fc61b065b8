"""Single entry point wiring classifier, assemblers, linker and validation."""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from pouchdoc.classification.classifier import DocumentClassifier
from pouchdoc.extraction.locations import LocationLookup
from pouchdoc.models import (
    ClassificationResult,
    ExtractedDispatchSheet,
    ExtractedGuide,
    RawExtraction,
)
from pouchdoc.utils.config import AppConfig
from pouchdoc.utils.logger import get_logger
from pouchdoc.validation.rules_engine import RulesEngine, ValidationReport

from .dispatch_sheet import DispatchSheetAssembler
from .guide import GuideAssembler
from .linker import CrossLinker
from .store import DispatchSheetStore, InMemoryDispatchSheetStore

logger = get_logger(__name__)


@dataclass
class GuideResult:
    """An assembled guide, the sheets it linked and its validation."""

    guide: ExtractedGuide
    linked_sheets: list[ExtractedDispatchSheet] = field(default_factory=list)
    validation: ValidationReport | None = None
    item_validations: list[ValidationReport] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "guide": self.guide.to_dict(),
            "linked_sheets": [sheet.to_dict() for sheet in self.linked_sheets],
            "validation": self.validation.to_dict() if self.validation else None,
            "item_validations": [report.to_dict() for report in self.item_validations],
        }


@dataclass
class DispatchSheetResult:
    """An assembled dispatch sheet and its validation."""

    sheet: ExtractedDispatchSheet
    validation: ValidationReport

    def to_dict(self) -> dict[str, Any]:
        return {"sheet": self.sheet.to_dict(), "validation": self.validation.to_dict()}


class ExtractionPipeline:
    """Runs the extraction core end to end for one raw document.

    Args:
        config: Application configuration.
        store: Dispatch sheet store used by cross-linking; an in-memory
            store is created when omitted.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        store: DispatchSheetStore | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.store = store if store is not None else InMemoryDispatchSheetStore()

        locations = LocationLookup.from_yaml(
            Path(self.config.locations.locations_path),
            unknown=self.config.locations.unknown_marker,
        )
        self.classifier = DocumentClassifier(self.config.classifier)
        self.guide_assembler = GuideAssembler(self.config.assembly, locations)
        self.sheet_assembler = DispatchSheetAssembler(self.config.assembly)
        self.linker = CrossLinker(self.store, self.config.assembly)
        self.rules = RulesEngine(Path(self.config.validation.rules_path))

    def classify(self, raw: RawExtraction) -> ClassificationResult:
        return self.classifier.classify(raw.content)

    def process_guide(self, raw: RawExtraction, today: date | None = None) -> GuideResult:
        """Assemble a guide, then link its items to dispatch sheets once.

        Args:
            raw: OCR output of a pouch manifest.
            today: Date used for the guide number year when no sent date
                is present.

        Returns:
            The guide with its linked sheets and validation reports.
        """
        guide = self.guide_assembler.assemble(raw, today=today)
        linked = self.linker.link(guide)

        fields = guide.to_dict()
        validation = self.rules.validate(fields, "guide")
        item_validations = [self.rules.validate(item, "item") for item in fields["items"]]
        if not validation.all_valid:
            logger.warning("Guide %s has validation failures", guide.guide_number)

        return GuideResult(
            guide=guide,
            linked_sheets=linked,
            validation=validation,
            item_validations=item_validations,
        )

    def process_dispatch_sheet(self, raw: RawExtraction) -> DispatchSheetResult:
        """Assemble a dispatch sheet and validate it.

        Validation adjusts a copy of the presence-based confidences; the
        sheet keeps the unadjusted map.
        """
        sheet = self.sheet_assembler.assemble(raw)
        validation = self.rules.validate(
            sheet.to_dict(), "dispatch_sheet", sheet.field_confidence
        )
        if not validation.all_valid:
            logger.warning(
                "Dispatch sheet %s has validation failures", sheet.full_number or "<undetected>"
            )
        return DispatchSheetResult(sheet=sheet, validation=validation)
