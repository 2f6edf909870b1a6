"""Ticket entity — a customer request received during off-hours."""

from dataclasses import dataclass
from datetime import date

HOME_COUNTRY = "казахстан"


@dataclass(frozen=True)
class Ticket:
    guid: str
    description: str = ""
    attachments: str = ""
    segment: str = ""
    country: str | None = None
    region: str | None = None
    city: str | None = None
    street: str | None = None
    building: str | None = None
    gender: str | None = None
    birth_date: date | None = None

    def build_address_string(self) -> str | None:
        """Human-readable address: "Казахстан, {region}, {city}, {street} {house}".

        Street and building are combined into a single part.
        """
        street_part = " ".join(
            p.strip() for p in [self.street, self.building] if p and p.strip()
        ) or None

        parts = [self.country, self.region, self.city, street_part]
        non_empty = [p.strip() for p in parts if p and p.strip()]
        return ", ".join(non_empty) if non_empty else None

    def has_complete_address(self) -> bool:
        """Country, region and settlement must all be present."""
        return all(
            value and value.strip() for value in (self.country, self.region, self.city)
        )

    def is_domestic(self, home_country: str = HOME_COUNTRY) -> bool:
        if not self.country or not self.country.strip():
            return False
        return home_country.lower() in self.country.lower()

    def is_foreign(self, home_country: str = HOME_COUNTRY) -> bool:
        """A filled-in country that is not the home country."""
        return bool(self.country and self.country.strip()) and not self.is_domestic(home_country)

    def requires_vip_handling(self) -> bool:
        segment = (self.segment or "").lower()
        return "vip" in segment or "priority" in segment
