"""Tests for the city and country lookup."""

from pathlib import Path

from pouchdoc.extraction.locations import UNKNOWN, Location, LocationLookup


class TestLocationLookup:
    """Tests for LocationLookup."""

    def setup_method(self) -> None:
        self.lookup = LocationLookup()

    def test_find_city_accent_insensitive(self) -> None:
        assert self.lookup.find_city("Consulado General en Bogotá") == "BOGOTA"

    def test_first_city_in_list_order_wins(self) -> None:
        # LIMA precedes MADRID in the table, regardless of position in the text
        assert self.lookup.find_city("MADRID VIA LIMA") == "LIMA"

    def test_country_for(self) -> None:
        assert self.lookup.country_for("Tokio") == "JAPÓN"
        assert self.lookup.country_for("ATLANTIS") == UNKNOWN

    def test_locate_known(self) -> None:
        assert self.lookup.locate("EMBAJADA DEL PERÚ EN NEW YORK") == Location(
            city="NEW YORK", country="ESTADOS UNIDOS"
        )

    def test_locate_unknown_city(self) -> None:
        assert self.lookup.locate("UNIDAD DE VALIJA") == Location(UNKNOWN, UNKNOWN)

    def test_locate_without_text(self) -> None:
        assert self.lookup.locate(None) is None
        assert self.lookup.locate("   ") is None

    def test_custom_unknown_marker(self) -> None:
        lookup = LocationLookup(cities=[("QUITO", "ECUADOR")], unknown="N/D")
        assert lookup.locate("LIMA") == Location("N/D", "N/D")


class TestFromYaml:
    """Tests for loading the city table from YAML."""

    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "locations.yaml"
        path.write_text(
            "cities:\n  - {city: OSLO, country: NORUEGA}\n  - {bad: entry}\n",
            encoding="utf-8",
        )
        lookup = LocationLookup.from_yaml(path)
        assert lookup.cities == [("OSLO", "NORUEGA")]

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        lookup = LocationLookup.from_yaml(tmp_path / "missing.yaml", unknown="?")
        assert lookup.find_city("LIMA") == "LIMA"
        assert lookup.unknown == "?"

    def test_project_table(self, config_dir: Path) -> None:
        lookup = LocationLookup.from_yaml(config_dir / "locations.yaml")
        assert lookup.country_for("SAO PAULO") == "BRASIL"
