"""Office entity — a business unit with a postal address."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Office:
    name: str
    address: str = ""

    @property
    def key(self) -> str:
        """Offices are keyed by name, case-insensitively."""
        return self.name.strip().casefold()
