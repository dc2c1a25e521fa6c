import pytest

from backend.app.services.locations import (
    DEFAULT_LOCATION_KEY,
    LOCATIONS,
    known_locations,
    normalize_location_name,
    resolve_location,
)


def test_normalize_strips_accents_and_case():
    assert normalize_location_name("Japón") == "japon"
    assert normalize_location_name("  ESPAÑA ") == "espana"
    assert normalize_location_name("Ciudad   de  México") == "ciudad de mexico"
    assert normalize_location_name(None) == ""


@pytest.mark.parametrize("name", ["japon", "Japón", "JAPÓN", " japón "])
def test_resolve_is_accent_and_case_insensitive(name):
    entry = resolve_location(name)
    assert entry.name == "Japón"
    assert entry.radius == "500km"
    assert entry.region_code == "JP"


def test_aliases_share_an_entry():
    assert resolve_location("cdmx") is resolve_location("Mexico City")
    assert resolve_location("USA") is resolve_location("Estados Unidos")


@pytest.mark.parametrize("name", ["", None, "atlantis", "París", "12345"])
def test_unknown_names_fall_back_to_default(name):
    assert resolve_location(name) is LOCATIONS[DEFAULT_LOCATION_KEY]
    assert resolve_location(name).name == "Oaxaca"


def test_every_entry_has_coordinates_and_radius():
    for key in known_locations():
        entry = resolve_location(key)
        assert -90 <= entry.latitude <= 90
        assert -180 <= entry.longitude <= 180
        assert entry.radius.endswith("km")
        assert entry.coordinates == f"{entry.latitude},{entry.longitude}"
