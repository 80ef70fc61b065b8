"""Configurable validation rules engine for assembled records.

Checks dispatch sheets, guides and their line items against per-record
rules (required fields, lengths, patterns, weights, dates) and adjusts the
per-field confidences accordingly. Validation annotates; it never rejects
a record.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from pouchdoc.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a single field validation check."""

    field_name: str
    is_valid: bool
    message: str
    rule_name: str
    confidence_adjustment: float = 0.0


@dataclass
class ValidationReport:
    """Aggregated validation report for a record."""

    all_valid: bool
    results: list[ValidationResult]
    warnings: list[str] = field(default_factory=list)
    field_confidences: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "all_valid": self.all_valid,
            "results": [
                {
                    "field_name": r.field_name,
                    "is_valid": r.is_valid,
                    "message": r.message,
                    "rule_name": r.rule_name,
                }
                for r in self.results
            ],
            "warnings": list(self.warnings),
            "field_confidences": dict(self.field_confidences),
        }


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", "."))
    except ValueError:
        return None


class RulesEngine:
    """Configurable validation rules engine.

    Applies field-level rules loaded from a YAML file, keyed by record type
    (``dispatch_sheet``, ``guide``, ``item``), plus cross-field checks for
    guides.

    Args:
        rules_path: Path to the validation rules YAML file.
    """

    def __init__(self, rules_path: Path = Path("configs/validation_rules.yaml")) -> None:
        self.rules = self._load_rules(rules_path)
        self._validators: dict[str, Any] = {
            "required": self._validate_required,
            "min_length": self._validate_min_length,
            "max_length": self._validate_max_length,
            "regex": self._validate_regex,
            "positive_number": self._validate_positive_number,
            "number_range": self._validate_number_range,
            "date": self._validate_date,
        }

    def _load_rules(self, path: Path) -> dict:
        """Load validation rules from YAML file.

        Args:
            path: Path to the rules file.

        Returns:
            Dictionary of record-type-specific rules.
        """
        if path.exists():
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
                if data:
                    logger.info("Loaded validation rules from %s", path)
                    return data
        logger.debug("Using default validation rules")
        return self._default_rules()

    def _default_rules(self) -> dict:
        return {
            "dispatch_sheet": {
                "full_number": [{"type": "required"}],
                "unit_code": [
                    {"type": "required"},
                    {"type": "regex", "pattern": r"^[A-Z0-9-]+$"},
                    {"type": "min_length", "value": 2},
                    {"type": "max_length", "value": 10},
                ],
                "date": [{"type": "date"}],
                "to": [{"type": "min_length", "value": 5}],
                "sender": [{"type": "min_length", "value": 5}],
                "document": [{"type": "min_length", "value": 10}],
                "subject": [{"type": "min_length", "value": 10}],
                "weight": [
                    {"type": "positive_number"},
                    {"type": "number_range", "min": 0, "max": 1000},
                ],
            },
            "guide": {
                "guide_number": [{"type": "required"}],
                "sent_at": [{"type": "date"}],
                "received_at": [{"type": "date"}],
                "declared_weight": [{"type": "positive_number"}],
                "official_weight": [{"type": "positive_number"}],
            },
            "item": {
                "recipient": [{"type": "required"}],
                "content": [{"type": "required"}],
                "weight": [{"type": "positive_number"}],
            },
        }

    def validate(
        self,
        fields: dict[str, Any],
        record_type: str = "dispatch_sheet",
        field_confidences: dict[str, float] | None = None,
    ) -> ValidationReport:
        """Validate a record's fields against its record-type rules.

        Args:
            fields: Field name-value pairs, e.g. from ``to_dict()``.
            record_type: Rule set to apply.
            field_confidences: Initial confidence scores per field.

        Returns:
            Validation report with results and adjusted confidences.
        """
        results: list[ValidationResult] = []
        warnings: list[str] = []
        adjusted = dict(field_confidences or {})

        for field_name, rules in self.rules.get(record_type, {}).items():
            value = fields.get(field_name)

            for rule in rules:
                rule_type = rule.get("type")
                validator = self._validators.get(rule_type)

                if not validator:
                    warnings.append(f"Unknown rule type: {rule_type}")
                    continue

                result = validator(field_name, value, rule)
                results.append(result)

                if field_name in adjusted:
                    adjusted[field_name] += result.confidence_adjustment
                    adjusted[field_name] = max(0.0, min(1.0, adjusted[field_name]))

        if record_type == "guide":
            results.extend(self._cross_validate(fields))

        all_valid = all(r.is_valid for r in results)
        logger.info(
            "Validation for %s: %s (%d checks)",
            record_type,
            "PASSED" if all_valid else "FAILED",
            len(results),
        )

        return ValidationReport(
            all_valid=all_valid,
            results=results,
            warnings=warnings,
            field_confidences=adjusted,
        )

    def _validate_required(self, field_name: str, value: Any, rule: dict) -> ValidationResult:
        """Check that a required field is present and non-empty."""
        if value is not None and str(value).strip():
            return ValidationResult(field_name, True, "Required field present", "required", 0.0)
        return ValidationResult(
            field_name, False, f"Required field missing: {field_name}", "required", -0.5
        )

    def _validate_min_length(self, field_name: str, value: Any, rule: dict) -> ValidationResult:
        if value is None:
            return ValidationResult(field_name, True, "No value to validate", "min_length")

        minimum = int(rule.get("value", 1))
        if len(str(value).strip()) >= minimum:
            return ValidationResult(field_name, True, "Length OK", "min_length", 0.05)
        return ValidationResult(
            field_name,
            False,
            f"Shorter than {minimum} characters: {value}",
            "min_length",
            -0.1,
        )

    def _validate_max_length(self, field_name: str, value: Any, rule: dict) -> ValidationResult:
        if value is None:
            return ValidationResult(field_name, True, "No value to validate", "max_length")

        maximum = int(rule.get("value", 255))
        if len(str(value).strip()) <= maximum:
            return ValidationResult(field_name, True, "Length OK", "max_length", 0.0)
        return ValidationResult(
            field_name,
            False,
            f"Longer than {maximum} characters: {value}",
            "max_length",
            -0.1,
        )

    def _validate_regex(self, field_name: str, value: Any, rule: dict) -> ValidationResult:
        """Validate a field value against a custom regex pattern."""
        if value is None:
            return ValidationResult(field_name, True, "No value to validate", "regex")

        pattern = rule.get("pattern", "")
        if re.match(pattern, str(value)):
            return ValidationResult(field_name, True, "Matches pattern", "regex", 0.05)
        return ValidationResult(
            field_name, False, f"Does not match pattern: {pattern}", "regex", -0.1
        )

    def _validate_positive_number(
        self, field_name: str, value: Any, rule: dict
    ) -> ValidationResult:
        """Check that a weight or count is strictly positive."""
        if value is None:
            return ValidationResult(field_name, True, "No value to validate", "positive_number")

        number = _as_number(value)
        if number is None:
            return ValidationResult(
                field_name, False, f"Not a number: {value}", "positive_number", -0.3
            )
        if number > 0:
            return ValidationResult(
                field_name, True, f"Positive number: {number}", "positive_number", 0.1
            )
        return ValidationResult(
            field_name, False, f"Must be positive: {number}", "positive_number", -0.2
        )

    def _validate_number_range(
        self, field_name: str, value: Any, rule: dict
    ) -> ValidationResult:
        """Check that a number falls within ``[min, max]``."""
        if value is None:
            return ValidationResult(field_name, True, "No value to validate", "number_range")

        number = _as_number(value)
        if number is None:
            return ValidationResult(
                field_name, False, f"Not a number: {value}", "number_range", -0.2
            )

        low = float(rule.get("min", 0))
        high = float(rule.get("max", 1000))
        if low <= number <= high:
            return ValidationResult(field_name, True, "Number in valid range", "number_range", 0.05)
        return ValidationResult(
            field_name,
            False,
            f"Number {number} outside range [{low}, {high}]",
            "number_range",
            -0.15,
        )

    def _validate_date(self, field_name: str, value: Any, rule: dict) -> ValidationResult:
        """Accept ``date`` objects and ISO ``YYYY-MM-DD`` strings."""
        if value is None:
            return ValidationResult(field_name, True, "No value to validate", "date")
        if isinstance(value, date):
            return ValidationResult(field_name, True, "Valid date", "date", 0.1)

        try:
            datetime.strptime(str(value), "%Y-%m-%d")
        except ValueError:
            return ValidationResult(field_name, False, f"Invalid date: {value}", "date", -0.2)
        return ValidationResult(field_name, True, "Valid date", "date", 0.1)

    def _cross_validate(self, fields: dict[str, Any]) -> list[ValidationResult]:
        """Check the declared package count against the parsed item rows.

        Args:
            fields: All guide field values.

        Returns:
            List of cross-field validation results.
        """
        results: list[ValidationResult] = []

        package_count = fields.get("package_count")
        items = fields.get("items")
        if isinstance(package_count, int) and isinstance(items, list):
            if package_count == len(items):
                results.append(
                    ValidationResult(
                        "package_count",
                        True,
                        "Package count matches item rows",
                        "cross_field",
                        0.1,
                    )
                )
            else:
                results.append(
                    ValidationResult(
                        "package_count",
                        False,
                        f"Package count ({package_count}) doesn't match item rows ({len(items)})",
                        "cross_field",
                        -0.15,
                    )
                )

        return results
