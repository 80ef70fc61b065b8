"""City and country lookup for manifest senders and recipients.

The known-city list and the city-to-country map are configuration, loaded
from YAML so they can grow without touching the assemblers.
"""

from dataclasses import dataclass
from pathlib import Path

import yaml

from pouchdoc.utils.logger import get_logger

from .normalizers import normalize_text

logger = get_logger(__name__)

UNKNOWN = "DESCONOCIDO"

DEFAULT_CITIES: list[tuple[str, str]] = [
    ("TOKIO", "JAPÓN"),
    ("TOKYO", "JAPÓN"),
    ("NAGOYA", "JAPÓN"),
    ("OSAKA", "JAPÓN"),
    ("KYOTO", "JAPÓN"),
    ("LIMA", "PERÚ"),
    ("AREQUIPA", "PERÚ"),
    ("CUSCO", "PERÚ"),
    ("TRUJILLO", "PERÚ"),
    ("PIURA", "PERÚ"),
    ("CHICLAYO", "PERÚ"),
    ("WASHINGTON", "ESTADOS UNIDOS"),
    ("NEW YORK", "ESTADOS UNIDOS"),
    ("MIAMI", "ESTADOS UNIDOS"),
    ("LOS ANGELES", "ESTADOS UNIDOS"),
    ("MADRID", "ESPAÑA"),
    ("BARCELONA", "ESPAÑA"),
    ("BUENOS AIRES", "ARGENTINA"),
    ("CORDOBA", "ARGENTINA"),
    ("SANTIAGO", "CHILE"),
    ("VALPARAISO", "CHILE"),
    ("BOGOTA", "COLOMBIA"),
    ("MEDELLIN", "COLOMBIA"),
    ("CARACAS", "VENEZUELA"),
    ("MARACAIBO", "VENEZUELA"),
    ("QUITO", "ECUADOR"),
    ("GUAYAQUIL", "ECUADOR"),
    ("LA PAZ", "BOLIVIA"),
    ("SUCRE", "BOLIVIA"),
    ("ASUNCION", "PARAGUAY"),
    ("MONTEVIDEO", "URUGUAY"),
    ("BRASILIA", "BRASIL"),
    ("RIO DE JANEIRO", "BRASIL"),
    ("SAO PAULO", "BRASIL"),
]


@dataclass
class Location:
    """A resolved city and country pair."""

    city: str
    country: str


class LocationLookup:
    """Finds known cities inside free text and maps them to countries.

    Args:
        cities: Ordered ``(city, country)`` pairs; earlier cities win when
            a text mentions several.
        unknown: Marker returned when a lookup was attempted and failed.
    """

    def __init__(
        self,
        cities: list[tuple[str, str]] | None = None,
        unknown: str = UNKNOWN,
    ) -> None:
        self.cities = list(cities if cities is not None else DEFAULT_CITIES)
        self.unknown = unknown
        self._countries = {normalize_text(city): country for city, country in self.cities}

    @classmethod
    def from_yaml(cls, path: Path, unknown: str = UNKNOWN) -> "LocationLookup":
        """Load the city table from YAML, or use the defaults if missing.

        Args:
            path: YAML file with a ``cities`` list of ``{city, country}``.
            unknown: Marker for failed lookups.

        Returns:
            Configured lookup.
        """
        if path.exists():
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            entries = [
                (str(entry["city"]), str(entry["country"]))
                for entry in data.get("cities", [])
                if isinstance(entry, dict) and "city" in entry and "country" in entry
            ]
            if entries:
                logger.info("Loaded %d known cities from %s", len(entries), path)
                return cls(entries, unknown)
        logger.debug("No location table at %s, using built-in cities", path)
        return cls(unknown=unknown)

    def find_city(self, text: str | None) -> str | None:
        """Return the first known city mentioned in ``text``, if any."""
        if not text:
            return None
        haystack = normalize_text(text)
        for city, _ in self.cities:
            if normalize_text(city) in haystack:
                return city
        return None

    def country_for(self, city: str) -> str:
        """Map a city to its country, or the unknown marker."""
        return self._countries.get(normalize_text(city), self.unknown)

    def locate(self, text: str | None) -> Location | None:
        """Resolve the city and country mentioned in ``text``.

        Returns:
            ``None`` when there is no text to look at; otherwise a
            Location whose fields are the unknown marker when no known
            city appears.
        """
        if not text or not text.strip():
            return None
        city = self.find_city(text)
        if city is None:
            return Location(city=self.unknown, country=self.unknown)
        return Location(city=city, country=self.country_for(city))
