"""GeoPoint value object — immutable (lat, lon) pair."""

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def haversine_km(self, other: "GeoPoint") -> float:
        """Great-circle distance in km between two points (Haversine formula)."""
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        dlat = math.radians(other.latitude - self.latitude)
        dlon = math.radians(other.longitude - self.longitude)

        a = (
            math.sin(dlat / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
        )
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return EARTH_RADIUS_KM * c


# Office cities with known coordinates; keys are compared case-insensitively.
CITY_COORDINATES: dict[str, GeoPoint] = {
    "Актау": GeoPoint(latitude=43.6532, longitude=51.1975),
    "Актобе": GeoPoint(latitude=50.2839, longitude=57.1669),
    "Алматы": GeoPoint(latitude=43.2389, longitude=76.8897),
    "Астана": GeoPoint(latitude=51.1694, longitude=71.4491),
    "Атырау": GeoPoint(latitude=47.0945, longitude=51.9238),
    "Караганда": GeoPoint(latitude=49.8060, longitude=73.0850),
    "Кокшетау": GeoPoint(latitude=53.2833, longitude=69.3833),
    "Костанай": GeoPoint(latitude=53.2144, longitude=63.6246),
    "Кызылорда": GeoPoint(latitude=44.8488, longitude=65.4823),
    "Павлодар": GeoPoint(latitude=52.2871, longitude=76.9733),
    "Петропавловск": GeoPoint(latitude=54.8728, longitude=69.1430),
    "Тараз": GeoPoint(latitude=42.9004, longitude=71.3655),
    "Уральск": GeoPoint(latitude=51.2300, longitude=51.3670),
    "Усть-Каменогорск": GeoPoint(latitude=49.9483, longitude=82.6275),
    "Шымкент": GeoPoint(latitude=42.3417, longitude=69.5901),
}
