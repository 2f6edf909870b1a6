"""Tests for OfficeSelectionPolicy."""

import pytest

from triage.domain.entities.manager import Manager
from triage.domain.entities.office import Office
from triage.domain.entities.ticket import Ticket
from triage.domain.policies.office_selection import (
    lookup_city,
    map_region_to_office,
    needs_fallback,
    resolve_origin_city,
    select_fallback_office,
    select_local_office,
    select_nearest_office,
)
from triage.domain.value_objects.geo_point import GeoPoint

# ─── Fixtures ────────────────────────────────────────────────────────


def _make_offices(*names: str) -> list[Office]:
    return [Office(name) for name in (names or ("Астана", "Алматы", "Караганда"))]


def _ticket(**kwargs) -> Ticket:
    data = dict(guid="t", country="Казахстан", region="Карагандинская область", city="Караганда")
    data.update(kwargs)
    return Ticket(**data)


def _mgr(office: str, load: int) -> Manager:
    return Manager(name=f"M-{office}-{load}", position="Специалист", office=office, current_load=load)


# ─── needs_fallback ─────────────────────────────────────────────────


def test_complete_domestic_address_needs_no_fallback():
    assert not needs_fallback(_ticket())


@pytest.mark.parametrize("overrides", [
    {"country": None},
    {"region": ""},
    {"city": "  "},
    {"country": "Узбекистан"},
])
def test_incomplete_or_foreign_needs_fallback(overrides):
    assert needs_fallback(_ticket(**overrides))


# ─── select_fallback_office ──────────────────────────────────────────


def test_fallback_even_counter_astana():
    result = select_fallback_office(0, _make_offices())
    assert result.office == "Астана"
    assert result.fallback_used is True
    assert result.distance_km is None


def test_fallback_odd_counter_almaty():
    assert select_fallback_office(1, _make_offices()).office == "Алматы"


def test_fallback_alternates():
    offices = _make_offices()
    results = [select_fallback_office(i, offices).office for i in range(4)]
    assert results == ["Астана", "Алматы", "Астана", "Алматы"]


def test_fallback_substitutes_missing_hubs():
    offices = _make_offices("Шымкент", "Тараз")
    assert select_fallback_office(0, offices).office == "Шымкент"
    assert select_fallback_office(1, offices).office == "Тараз"


def test_fallback_single_office_used_for_both():
    offices = _make_offices("Актау")
    assert select_fallback_office(1, offices).office == "Актау"


def test_fallback_no_offices_raises():
    with pytest.raises(ValueError, match="No offices"):
        select_fallback_office(0, [])


# ─── select_local_office ─────────────────────────────────────────────


def test_local_settlement_matches_office():
    result = select_local_office(_ticket(city="караганда"), [], _make_offices())
    assert result.office == "Караганда"
    assert not result.fallback_used


def test_local_region_maps_to_office():
    ticket = _ticket(region="Алматинская область", city="Каскелен")
    assert select_local_office(ticket, [], _make_offices()).office == "Алматы"


def test_local_least_loaded_office():
    ticket = _ticket(region="Неизвестная", city="Село")
    managers = [_mgr("Астана", 5), _mgr("Астана", 1), _mgr("Алматы", 3), _mgr("Караганда", 7)]
    result = select_local_office(ticket, managers, _make_offices())
    assert result.office == "Алматы"
    assert "total load 3" in result.reason


def test_local_nothing_applies_returns_none():
    ticket = _ticket(region="Неизвестная", city="Село")
    assert select_local_office(ticket, [], _make_offices()) is None


# ─── map_region_to_office / resolve_origin_city ─────────────────────


@pytest.mark.parametrize("region,office", [
    ("Алматинская область", "Алматы"),
    ("Акмолинская обл.", "Астана"),
    ("Восточно-Казахстанская", "Усть-Каменогорск"),
    ("Мангистауская", "Актау"),
    ("Неизвестная", None),
    (None, None),
])
def test_map_region_to_office(region, office):
    assert map_region_to_office(region) == office


def test_origin_city_prefers_settlement():
    assert resolve_origin_city(_ticket(city=" Тараз "), "Астана") == "Тараз"


def test_origin_city_falls_back_to_region_then_primary():
    assert resolve_origin_city(_ticket(city=None, region="Жамбылская"), "Астана") == "Тараз"
    assert resolve_origin_city(_ticket(city=None, region=None), "Астана") == "Астана"


def test_lookup_city_case_insensitive():
    assert lookup_city("АЛМАТЫ", {"Алматы": GeoPoint(1.0, 2.0)}) == GeoPoint(1.0, 2.0)
    assert lookup_city("Нигде", {"Алматы": GeoPoint(1.0, 2.0)}) is None


# ─── select_nearest_office ───────────────────────────────────────────

COORDS = {
    "Town": GeoPoint(0.0, 0.0),
    "Near": GeoPoint(1.7987, 0.0),
    "Far": GeoPoint(7.195, 0.0),
}


def test_nearest_office_picks_shortest_distance():
    result = select_nearest_office("Town", {"Near": 4, "Far": 0}, COORDS)
    assert result.office == "Near"
    assert result.distance_km == pytest.approx(200.0, abs=0.5)
    assert result.fallback_used is True


def test_nearest_office_equal_distance_lower_load_wins():
    coords = {"Town": GeoPoint(0.0, 0.0), "East": GeoPoint(0.0, 1.0), "West": GeoPoint(0.0, -1.0)}
    result = select_nearest_office("Town", {"East": 3, "West": 1}, coords)
    assert result.office == "West"


def test_nearest_office_skips_unknown_coordinates():
    result = select_nearest_office("Town", {"Atlantis": 0, "Far": 9}, COORDS)
    assert result.office == "Far"


def test_nearest_office_unknown_origin_raises():
    with pytest.raises(ValueError, match="origin"):
        select_nearest_office("Atlantis", {"Near": 0}, COORDS)


def test_nearest_office_no_known_candidates_raises():
    with pytest.raises(ValueError, match="known coordinates"):
        select_nearest_office("Town", {"Atlantis": 0}, COORDS)


def test_nearest_office_default_table():
    result = select_nearest_office("Каскелен", {"Алматы": 0}, {"Каскелен": GeoPoint(43.2, 76.6), "Алматы": GeoPoint(43.2389, 76.8897)})
    assert result.office == "Алматы"
    assert select_nearest_office("Тараз", {"Шымкент": 0, "Астана": 0}).office == "Шымкент"
