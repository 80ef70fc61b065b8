"""Configuration management for the pouch document extraction core.

Loads and validates YAML configuration with defaults for the classifier
vocabularies, the record assemblers, the location tables and the
validation rules.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class KeywordGroup(BaseModel):
    """One candidate label and the keywords that vote for it."""

    label: str
    keywords: list[str]


def _default_language_groups() -> list[KeywordGroup]:
    return [
        KeywordGroup(
            label="spanish",
            keywords=[
                "el", "la", "de", "en", "por", "con", "para", "una", "los", "las",
                "del", "al", "un", "que", "se", "no", "ha",
            ],
        ),
        KeywordGroup(
            label="english",
            keywords=[
                "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
                "her", "was", "one", "our", "out", "day", "get", "has", "him", "his",
            ],
        ),
        KeywordGroup(
            label="french",
            keywords=[
                "le", "de", "et", "à", "un", "il", "être", "en", "avoir", "que",
                "pour", "dans", "ce", "sur", "pas", "plus", "pouvoir", "veux", "je",
            ],
        ),
        KeywordGroup(
            label="portuguese",
            keywords=[
                "o", "a", "e", "do", "da", "em", "um", "uma", "para", "com", "não",
                "é", "que", "este", "ou", "como", "mas", "foi", "são", "eram",
            ],
        ),
    ]


def _default_document_type_groups() -> list[KeywordGroup]:
    return [
        KeywordGroup(
            label="pouchManifest",
            keywords=[
                "guía", "valija", "diplomática", "pouch", "diplomatic", "guide",
                "embajada", "consulado",
            ],
        ),
        KeywordGroup(
            label="dispatchSheet",
            keywords=[
                "hoja", "remisión", "remision", "remito", "despacho", "shipping",
                "invoice", "delivery",
            ],
        ),
        KeywordGroup(
            label="diplomaticNote",
            keywords=[
                "nota", "diplomática", "comunicado", "memorándum", "diplomatic",
                "note", "memorandum",
            ],
        ),
    ]


class ClassifierConfig(BaseModel):
    """Keyword vocabularies and scoring constants for the classifier.

    Groups are evaluated in list order; on equal scores the earlier
    group keeps the label.
    """

    language_groups: list[KeywordGroup] = Field(default_factory=_default_language_groups)
    document_type_groups: list[KeywordGroup] = Field(
        default_factory=_default_document_type_groups
    )
    inbound_keywords: list[str] = Field(
        default_factory=lambda: [
            "entrada", "import", "arribó", "llegada", "arrival", "inbound",
            "recibido", "received",
        ]
    )
    outbound_keywords: list[str] = Field(
        default_factory=lambda: [
            "salida", "export", "enviado", "despacho", "dispatch", "outbound",
            "partida", "departure",
        ]
    )
    document_type_weight: int = 2
    language_normalizer: float = 20.0
    document_type_normalizer: float = 10.0
    direction_normalizer: float = 5.0
    direction_fallback_confidence: float = 0.5


class AssemblyConfig(BaseModel):
    """Defaults and switches for the guide and dispatch sheet assemblers."""

    default_recipient: str = "DESCONOCIDO"
    default_sender: str = "UNIDAD DE VALIJA DIPLOMÁTICA"
    guide_number_fallback: str = "01"
    extraordinary_keywords: list[str] = Field(
        default_factory=lambda: ["extraordinaria", "extraordinario"]
    )
    default_unit_code: str = "HH"
    table_roles: str = "positional"
    linked_sheet_subject: str = "Referenciado en Guía de Valija {guide_number} - ítem {item_number}"


class LocationConfig(BaseModel):
    """Where the city and country tables live."""

    locations_path: str = "configs/locations.yaml"
    unknown_marker: str = "DESCONOCIDO"


class ValidationConfig(BaseModel):
    """Configuration for validation rules engine."""

    rules_path: str = "configs/validation_rules.yaml"


class AppConfig(BaseModel):
    """Top-level application configuration."""

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    assembly: AssemblyConfig = Field(default_factory=AssemblyConfig)
    locations: LocationConfig = Field(default_factory=LocationConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
