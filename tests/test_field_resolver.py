"""Tests for fuzzy key-value lookup."""

from pouchdoc.extraction.field_resolver import (
    clean_value,
    normalize_label,
    resolve,
    resolve_first,
    score_key,
)
from pouchdoc.models import KeyValuePair


def _pairs(*items: tuple[str, str]) -> list[KeyValuePair]:
    return [KeyValuePair(key=k, value=v, confidence=0.9) for k, v in items]


class TestScoreKey:
    """Tests for the key scoring table."""

    def test_exact_after_normalization(self) -> None:
        assert score_key("FECHA DE\nENVIO:", "FECHA DE ENVIO") == 100

    def test_key_starts_with_name(self) -> None:
        # "fechadeenvio" vs "fecha": 80 - 2 * 7
        assert score_key("FECHA DE ENVIO", "FECHA") == 66

    def test_name_starts_with_key(self) -> None:
        assert score_key("FECHA", "FECHA DE ENVIO") == 46

    def test_key_contains_name(self) -> None:
        assert score_key("TOTAL PESO", "PESO") == 40 - 2 * 5

    def test_unrelated(self) -> None:
        assert score_key("REMITENTE", "FECHA") == 0

    def test_short_names_need_exact_match(self) -> None:
        assert score_key("DE:", "DE") == 100
        assert score_key("DESTINO", "DE") == 0

    def test_normalize_label(self) -> None:
        assert normalize_label(" Peso\nTotal: ") == "pesototal"


class TestResolve:
    """Tests for best-pair resolution."""

    def test_exact_beats_earlier_partial(self) -> None:
        pairs = _pairs(("FECHA DE ENVIO", "1/1/2025"), ("FECHA", "2/2/2025"))
        assert resolve(pairs, "FECHA") == "2/2/2025"

    def test_first_pair_wins_ties(self) -> None:
        pairs = _pairs(("PESO:", "1"), ("PESO", "2"))
        assert resolve(pairs, "PESO") == "1"

    def test_no_match_is_none(self) -> None:
        assert resolve(_pairs(("REMITENTE", "X")), "FECHA") is None
        assert resolve([], "FECHA") is None
        assert resolve(None, "FECHA") is None

    def test_value_cleaned(self) -> None:
        pairs = _pairs(("OBSERVACIONES", "SIN\nNOVEDAD  "))
        assert resolve(pairs, "OBSERVACIONES") == "SIN NOVEDAD"

    def test_blank_value_is_none(self) -> None:
        assert resolve(_pairs(("PARA", "  ")), "PARA") is None


class TestResolveFirst:
    """Tests for synonym fallback."""

    def test_falls_through_to_next_name(self) -> None:
        pairs = _pairs(("DESTINATARIO:", "CONSULADO EN LIMA"))
        assert resolve_first(pairs, ("PARA", "DESTINATARIO")) == "CONSULADO EN LIMA"

    def test_earlier_name_preferred(self) -> None:
        pairs = _pairs(("DESTINATARIO", "B"), ("PARA", "A"))
        assert resolve_first(pairs, ("PARA", "DESTINATARIO")) == "A"

    def test_blank_value_falls_through(self) -> None:
        pairs = _pairs(("PARA", ""), ("DESTINATARIO", "B"))
        assert resolve_first(pairs, ("PARA", "DESTINATARIO")) == "B"

    def test_nothing_found(self) -> None:
        assert resolve_first([], ("PARA", "DESTINATARIO")) is None


class TestCleanValue:
    def test_none_passthrough(self) -> None:
        assert clean_value(None) is None
