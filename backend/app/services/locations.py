import re
import unicodedata
from dataclasses import dataclass


@dataclass(frozen=True)
class LocationEntry:
    name: str
    latitude: float
    longitude: float
    radius: str
    language: str | None = None
    region_code: str | None = None
    default_query: str | None = None

    @property
    def coordinates(self) -> str:
        return f"{self.latitude},{self.longitude}"


DEFAULT_LOCATION_KEY = "oaxaca"

_OAXACA = LocationEntry("Oaxaca", 17.0732, -96.7266, "50km", "es", "MX")
_CDMX = LocationEntry("Ciudad de México", 19.4326, -99.1332, "50km", "es", "MX")
_USA = LocationEntry("Estados Unidos", 37.0902, -95.7129, "1000km", "en", "US")
_JAPAN = LocationEntry("Japón", 36.2048, 138.2529, "500km", "ja", "JP")

# Keys are stored already normalized (see normalize_location_name).
LOCATIONS: dict[str, LocationEntry] = {
    # Mexico
    "oaxaca": _OAXACA,
    "ciudad de mexico": _CDMX,
    "cdmx": _CDMX,
    "mexico city": _CDMX,
    "guadalajara": LocationEntry("Guadalajara", 20.6597, -103.3496, "50km", "es", "MX"),
    "monterrey": LocationEntry("Monterrey", 25.6866, -100.3161, "50km", "es", "MX"),
    "puebla": LocationEntry("Puebla", 19.0414, -98.2063, "50km", "es", "MX"),
    # Countries
    "china": LocationEntry("China", 35.8617, 104.1954, "1000km", "zh", "CN"),
    "estados unidos": _USA,
    "usa": _USA,
    "espana": LocationEntry("España", 40.4637, -3.7492, "500km", "es", "ES"),
    "japon": _JAPAN,
    "argentina": LocationEntry("Argentina", -38.4161, -63.6167, "1000km", "es", "AR"),
    "brasil": LocationEntry("Brasil", -14.2350, -51.9253, "1000km", "pt", "BR"),
}

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_location_name(name: str | None) -> str:
    """
    Lookup key for a free-text place name: accents stripped, lower-cased,
    whitespace collapsed. "  Japón " and "JAPON" both become "japon".
    """
    decomposed = unicodedata.normalize("NFD", name or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE_RE.sub(" ", stripped).strip().lower()


def resolve_location(name: str | None) -> LocationEntry:
    return LOCATIONS.get(normalize_location_name(name), LOCATIONS[DEFAULT_LOCATION_KEY])


def known_locations() -> list[str]:
    return sorted(LOCATIONS)
