"""Tests for the scalar OCR normalizers."""

from datetime import date

import pytest

from pouchdoc.extraction.normalizers import (
    extract_guide_number,
    match_guide_number_rule,
    normalize_text,
    parse_additive_weight,
    parse_date,
    parse_int,
    parse_weight,
    strip_leading_place,
)


class TestGuideNumber:
    """Tests for the ordered guide number rules."""

    def test_pouch_manifest_phrase(self) -> None:
        assert extract_guide_number("GUÍA DE VALIJA DIPLOMÁTICA Nº 24 ENTRADA") == "24"

    def test_pouch_manifest_rule_named(self) -> None:
        assert match_guide_number_rule("GUIA DE VALIJA N° 3") == ("pouch_manifest", "3")

    def test_air_waybill_rule(self) -> None:
        assert match_guide_number_rule("GUÍA AÉREA Nº 15") == ("air_waybill", "15")

    def test_generic_marker_beats_earlier_digits(self) -> None:
        # The generic rule is tried before the bare-digits rule.
        assert match_guide_number_rule("2025 ENVÍO Nº 8") == ("generic", "8")

    def test_any_digits_last_resort(self) -> None:
        assert match_guide_number_rule("VALIJA 12") == ("any_digits", "12")

    def test_zero_padding(self) -> None:
        assert extract_guide_number("Nº 7") == "07"

    def test_long_number_not_truncated(self) -> None:
        assert extract_guide_number("Nº 123") == "123"

    def test_fallback_when_no_digits(self) -> None:
        assert extract_guide_number("SIN NUMERO") == "01"
        assert extract_guide_number("", fallback="") == ""

    @pytest.mark.parametrize("text", ["7", "07", "24", "GUÍA DE VALIJA Nº.9", "# 31"])
    def test_idempotent_on_own_output(self, text: str) -> None:
        once = extract_guide_number(text)
        assert extract_guide_number(once) == once


class TestParseDate:
    """Tests for date parsing from noisy OCR strings."""

    def test_slash_date_is_day_first(self) -> None:
        assert parse_date("1/2/2025") == date(2025, 2, 1)

    def test_invalid_calendar_date_is_none(self) -> None:
        assert parse_date("32/13/2025") is None
        assert parse_date("30/2/2025") is None

    def test_bracket_noise_removed(self) -> None:
        assert parse_date("19(/12/2025") == date(2025, 12, 19)

    def test_spaces_around_slashes(self) -> None:
        assert parse_date("05 / 03 / 2024") == date(2024, 3, 5)

    def test_spanish_textual_date(self) -> None:
        assert parse_date("19 de diciembre del 2025") == date(2025, 12, 19)
        assert parse_date("3 de Setiembre de 2024") == date(2024, 9, 3)

    def test_uppercase_month_name(self) -> None:
        assert parse_date("1 de ENERO del 2026") == date(2026, 1, 1)

    def test_unknown_month_is_none(self) -> None:
        assert parse_date("5 de brumario del 2025") is None

    def test_iso_fallback(self) -> None:
        assert parse_date("2025-12-19") == date(2025, 12, 19)

    def test_empty_and_garbage(self) -> None:
        assert parse_date(None) is None
        assert parse_date("") is None
        assert parse_date("()") is None
        assert parse_date("sin fecha") is None


class TestStripLeadingPlace:
    """Tests for removing a leading place name from dates."""

    def test_removes_place(self) -> None:
        assert strip_leading_place("Lima, 19 de diciembre del 2025") == "19 de diciembre del 2025"

    def test_keeps_text_without_place(self) -> None:
        assert strip_leading_place("19/12/2025") == "19/12/2025"


class TestParseWeight:
    """Tests for weight parsing with either decimal separator."""

    def test_dot_decimal(self) -> None:
        assert parse_weight("0.930") == 0.93

    def test_comma_decimal(self) -> None:
        assert parse_weight("1,5") == 1.5

    def test_both_separators(self) -> None:
        assert parse_weight("1.234,5") == 1234.5
        assert parse_weight("1,234.5") == 1234.5

    def test_units_ignored(self) -> None:
        assert parse_weight("63.810 Kgrs.") == 63.81

    def test_integer(self) -> None:
        assert parse_weight("12 kg") == 12.0

    def test_no_number(self) -> None:
        assert parse_weight("N/A") is None
        assert parse_weight(None) is None

    def test_additive(self) -> None:
        assert parse_additive_weight("34.700+34.500") == pytest.approx(69.2)

    def test_additive_without_plus(self) -> None:
        assert parse_additive_weight("20,5") == 20.5

    def test_additive_unreadable_operand_counts_zero(self) -> None:
        assert parse_additive_weight("10.5+abc") == pytest.approx(10.5)


class TestHelpers:
    """Tests for integer parsing and text normalization."""

    def test_parse_int(self) -> None:
        assert parse_int("Total: 12 items") == 12
        assert parse_int("none") is None
        assert parse_int(None) is None

    def test_normalize_text(self) -> None:
        assert normalize_text("GUÍA DIPLOMÁTICA") == "guia diplomatica"
