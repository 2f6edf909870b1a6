"""RequiredSkillsPolicy — determines what skills / position a manager must have."""

from dataclasses import dataclass

from triage.domain.entities.manager import Manager
from triage.domain.entities.ticket import Ticket
from triage.domain.value_objects.enums import DEFAULT_LANGUAGE, Language, RequestType

VIP_SKILL = "VIP"


@dataclass(frozen=True)
class SkillRequirement:
    """Result of the policy evaluation."""

    required_skills: frozenset[str]
    chief_only: bool = False


def determine_required_skills(
    ticket: Ticket,
    request_type: RequestType,
    language: Language,
) -> SkillRequirement:
    """Pure function: given ticket attributes, return skill/position requirements.

    Business rules:
      1. Segment mentions "vip" or "priority"  →  manager must have "VIP" skill.
      2. request_type == DataChange  →  only a chief specialist can handle.
      3. language != RU  →  manager must have the language skill ("KZ" / "ENG").

    Rules are *additive*: a VIP ticket in Kazakh requires both "VIP" and "KZ".
    """
    skills: set[str] = set()

    if ticket.requires_vip_handling():
        skills.add(VIP_SKILL)

    if language != DEFAULT_LANGUAGE:
        skills.add(language.value)

    return SkillRequirement(
        required_skills=frozenset(skills),
        chief_only=request_type == RequestType.DATA_CHANGE,
    )


def manager_satisfies(manager: Manager, requirement: SkillRequirement) -> bool:
    """Check whether a manager meets the requirement."""
    if not all(manager.has_skill(skill) for skill in requirement.required_skills):
        return False

    if requirement.chief_only and not manager.is_chief_specialist():
        return False

    return True


def eligible_managers(
    managers: list[Manager],
    office: str,
    requirement: SkillRequirement,
) -> list[Manager]:
    """Managers of *office* that pass every hard filter."""
    return [
        m for m in managers
        if m.works_in(office) and manager_satisfies(m, requirement)
    ]
