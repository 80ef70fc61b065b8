"""Keyword scoring classifier for incoming documents.

Guesses a document's language, type and direction from raw OCR text by
counting whole-word keyword hits against configurable vocabularies.
"""

import re
from dataclasses import dataclass

from pouchdoc.extraction.normalizers import normalize_text
from pouchdoc.models import ClassificationResult, Direction, DocumentType, Language
from pouchdoc.utils.config import ClassifierConfig, KeywordGroup
from pouchdoc.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class AxisScore:
    """Winning label of one axis with its raw score and evidence."""

    label: str
    score: int
    keywords: list[str]


def _normalized_keywords(keywords: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for keyword in keywords:
        normalized = normalize_text(keyword.strip())
        if normalized:
            seen.setdefault(normalized, None)
    return list(seen)


def count_keyword(text: str, keyword: str) -> int:
    """Count whole-word occurrences of ``keyword`` in ``text``."""
    return len(re.findall(rf"\b{re.escape(keyword)}\b", text))


class DocumentClassifier:
    """Scores normalized text against language, type and direction keywords.

    Candidate labels are evaluated in configuration order and a later label
    only takes the lead with a strictly higher score, so ties keep the
    earlier label.

    Args:
        config: Vocabularies and normalization constants.
    """

    def __init__(self, config: ClassifierConfig | None = None) -> None:
        self.config = config or ClassifierConfig()
        self._languages = self._prepare(self.config.language_groups)
        self._document_types = self._prepare(self.config.document_type_groups)
        self._inbound = _normalized_keywords(self.config.inbound_keywords)
        self._outbound = _normalized_keywords(self.config.outbound_keywords)

    @staticmethod
    def _prepare(groups: list[KeywordGroup]) -> list[tuple[str, list[str]]]:
        return [(group.label, _normalized_keywords(group.keywords)) for group in groups]

    def classify(self, content: str | None) -> ClassificationResult:
        """Classify a document from its OCR text.

        Args:
            content: Full OCR text; may be empty.

        Returns:
            Best label per axis with confidences in ``[0, 1]``.
        """
        text = normalize_text(content or "")

        language = self._best_label(text, self._languages, Language.SPANISH.value, weight=1)
        document_type = self._best_label(
            text,
            self._document_types,
            DocumentType.POUCH_MANIFEST.value,
            weight=self.config.document_type_weight,
        )
        direction, direction_confidence, direction_keywords = self._detect_direction(text)

        result = ClassificationResult(
            language=Language(language.label),
            document_type=DocumentType(document_type.label),
            direction=direction,
            confidence={
                "language": min(language.score / self.config.language_normalizer, 1.0),
                "document_type": min(
                    document_type.score / self.config.document_type_normalizer, 1.0
                ),
                "direction": direction_confidence,
            },
            matched_keywords={
                "language": language.keywords,
                "document_type": document_type.keywords,
                "direction": direction_keywords,
            },
        )

        logger.info(
            "Classified document as %s / %s / %s (confidence %.2f)",
            result.document_type.value,
            result.direction.value,
            result.language.value,
            summary_confidence(result),
        )
        return result

    def _best_label(
        self,
        text: str,
        candidates: list[tuple[str, list[str]]],
        default: str,
        weight: int,
    ) -> AxisScore:
        best = AxisScore(label=default, score=0, keywords=[])
        for label, keywords in candidates:
            score = 0
            found: list[str] = []
            for keyword in keywords:
                hits = count_keyword(text, keyword)
                if hits:
                    score += hits * weight
                    found.append(keyword)
            if score > best.score:
                best = AxisScore(label=label, score=score, keywords=found)
        return best

    def _detect_direction(self, text: str) -> tuple[Direction, float, list[str]]:
        inbound_score = 0
        outbound_score = 0
        found: list[str] = []

        for keyword in self._inbound:
            hits = count_keyword(text, keyword)
            if hits:
                inbound_score += hits
                found.append(keyword)

        for keyword in self._outbound:
            hits = count_keyword(text, keyword)
            if hits:
                outbound_score += hits
                found.append(keyword)

        normalizer = self.config.direction_normalizer
        if outbound_score > inbound_score:
            return Direction.OUTBOUND, min(outbound_score / normalizer, 1.0), found
        if inbound_score > 0:
            return Direction.INBOUND, min(inbound_score / normalizer, 1.0), found
        return Direction.INBOUND, self.config.direction_fallback_confidence, found


def summary_confidence(result: ClassificationResult) -> float:
    """Mean of the three axis confidences."""
    values = list(result.confidence.values())
    return sum(values) / len(values) if values else 0.0
