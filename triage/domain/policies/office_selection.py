"""OfficeSelectionPolicy — local office, 50/50 fallback, or nearest office."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

from triage.domain.entities.manager import Manager
from triage.domain.entities.office import Office
from triage.domain.entities.ticket import HOME_COUNTRY, Ticket
from triage.domain.value_objects.geo_point import CITY_COORDINATES, GeoPoint

# Designated hub offices for the 50/50 fallback, in toggle order
ASTANA_HUB = "Астана"
ALMATY_HUB = "Алматы"
DEFAULT_FALLBACK_HUBS = (ASTANA_HUB, ALMATY_HUB)

# Region-name fragment → office. First match wins.
REGION_TO_OFFICE: dict[str, str] = {
    "алмат": "Алматы",
    "акмол": "Астана",
    "кызылорд": "Кызылорда",
    "атырау": "Атырау",
    "караг": "Караганда",
    "костан": "Костанай",
    "павлодар": "Павлодар",
    "актюб": "Актобе",
    "актоб": "Актобе",
    "западно": "Уральск",
    "восточно": "Усть-Каменогорск",
    "жамбыл": "Тараз",
    "северо": "Петропавловск",
    "мангист": "Актау",
    "туркест": "Шымкент",
}


@dataclass(frozen=True)
class OfficeSelection:
    """Result of the office selection policy."""

    office: str
    distance_km: float | None  # None unless chosen by distance
    fallback_used: bool
    reason: str


def _find_office(name: str | None, offices: list[Office]) -> Office | None:
    if not name or not name.strip():
        return None
    key = name.strip().casefold()
    return next((o for o in offices if o.key == key), None)


def map_region_to_office(region: str | None) -> str | None:
    """Map a region name to an office city via the fixed fragment table."""
    if not region or not region.strip():
        return None
    region_norm = region.lower()
    for fragment, office in REGION_TO_OFFICE.items():
        if fragment in region_norm:
            return office
    return None


def needs_fallback(ticket: Ticket, home_country: str = HOME_COUNTRY) -> bool:
    """Incomplete address or a foreign country sends the ticket to the hubs."""
    return not ticket.has_complete_address() or ticket.is_foreign(home_country)


def select_fallback_office(
    counter: int,
    offices: list[Office],
    hubs: tuple[str, str] = DEFAULT_FALLBACK_HUBS,
) -> OfficeSelection:
    """Deterministic 50/50 split between the two hub offices.

    Even counter → first hub, odd counter → second hub. A hub missing
    from *offices* is substituted by the first / second listed office.

    Raises:
        ValueError: if there are no offices at all.
    """
    if not offices:
        raise ValueError("No offices available for fallback")

    first = _find_office(hubs[0], offices) or offices[0]
    second = _find_office(hubs[1], offices) or (offices[1] if len(offices) > 1 else first)

    chosen = first if counter % 2 == 0 else second
    return OfficeSelection(
        office=chosen.name,
        distance_km=None,
        fallback_used=True,
        reason=f"Fallback 50/50 → {chosen.name} (round-robin)",
    )


def select_local_office(
    ticket: Ticket,
    managers: list[Manager],
    offices: list[Office],
) -> OfficeSelection | None:
    """Pick the office for a domestic ticket with a complete address.

    1. Settlement equals an office name.
    2. Region maps to a known office.
    3. Office whose managers carry the smallest total load (tie → name).

    Returns None when nothing applies.
    """
    by_city = _find_office(ticket.city, offices)
    if by_city:
        return OfficeSelection(
            office=by_city.name, distance_km=None, fallback_used=False,
            reason=f"Settlement matches office {by_city.name}",
        )

    by_region = _find_office(map_region_to_office(ticket.region), offices)
    if by_region:
        return OfficeSelection(
            office=by_region.name, distance_km=None, fallback_used=False,
            reason=f"Region {ticket.region} maps to office {by_region.name}",
        )

    totals: dict[str, int] = defaultdict(int)
    names: dict[str, str] = {}
    for m in managers:
        key = m.office.strip().casefold()
        if not key:
            continue
        totals[key] += m.current_load
        names.setdefault(key, m.office.strip())

    if not totals:
        return None

    least = min(totals, key=lambda k: (totals[k], k))
    return OfficeSelection(
        office=names[least], distance_km=None, fallback_used=False,
        reason=f"Least loaded office {names[least]} (total load {totals[least]})",
    )


def resolve_origin_city(ticket: Ticket, primary_office: str) -> str:
    """Settlement, else the region's office city, else the primary office."""
    if ticket.city and ticket.city.strip():
        return ticket.city.strip()
    return map_region_to_office(ticket.region) or primary_office


def lookup_city(city: str, coordinates: dict[str, GeoPoint]) -> GeoPoint | None:
    key = (city or "").strip().casefold()
    return next((p for name, p in coordinates.items() if name.casefold() == key), None)


def select_nearest_office(
    origin_city: str,
    candidates: dict[str, int],
    coordinates: dict[str, GeoPoint] | None = None,
) -> OfficeSelection:
    """Select the nearest office among *candidates* (office name → min manager load).

    Ties on distance are broken by the lower load, then by office name.
    Offices without known coordinates are skipped.

    Raises:
        ValueError: if the origin or every candidate lacks coordinates.
    """
    coordinates = CITY_COORDINATES if coordinates is None else coordinates
    origin = lookup_city(origin_city, coordinates)
    if origin is None:
        raise ValueError(f"No coordinates for origin city '{origin_city}'")

    ranked = []
    for office, load in candidates.items():
        point = lookup_city(office, coordinates)
        if point is None:
            continue
        ranked.append((origin.haversine_km(point), load, office.casefold(), office))

    if not ranked:
        raise ValueError("No candidate offices with known coordinates")

    distance, _, _, best = min(ranked)
    return OfficeSelection(
        office=best,
        distance_km=round(distance, 2),
        fallback_used=True,
        reason=f"Nearest office with eligible managers: {best} ({distance:.1f} km from {origin_city})",
    )
