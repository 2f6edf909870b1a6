"""Manager entity — an employee who handles tickets."""

from dataclasses import dataclass, field

CHIEF_SPECIALIST_MARKERS = ("главный", "chief")


@dataclass
class Manager:
    name: str
    position: str
    office: str
    skills: set[str] = field(default_factory=set)
    current_load: int = 0

    def __post_init__(self) -> None:
        self.skills = {s.strip().upper() for s in self.skills if s and s.strip()}

    def has_skill(self, skill: str) -> bool:
        return skill.strip().upper() in self.skills

    def is_chief_specialist(self) -> bool:
        position = (self.position or "").lower()
        return any(marker in position for marker in CHIEF_SPECIALIST_MARKERS)

    def works_in(self, office: str) -> bool:
        return self.office.strip().casefold() == (office or "").strip().casefold()

    def take_ticket(self) -> None:
        """The only mutation allowed during a run: +1 per assignment."""
        self.current_load += 1
