"""AssignTicketUseCase — office selection → hard skills → round robin."""

from __future__ import annotations

import logging

from triage.domain.entities.ai_metadata import AIMetadata
from triage.domain.entities.assignment import ProcessedTicket
from triage.domain.entities.attachment_insights import AttachmentInsights
from triage.domain.entities.manager import Manager
from triage.domain.entities.office import Office
from triage.domain.entities.ticket import HOME_COUNTRY, Ticket
from triage.domain.policies.office_selection import (
    DEFAULT_FALLBACK_HUBS,
    OfficeSelection,
    needs_fallback,
    resolve_origin_city,
    select_fallback_office,
    select_local_office,
    select_nearest_office,
)
from triage.domain.policies.required_skills import (
    SkillRequirement,
    determine_required_skills,
    eligible_managers,
)
from triage.domain.policies.round_robin import pick_next
from triage.domain.value_objects.geo_point import CITY_COORDINATES, GeoPoint

logger = logging.getLogger(__name__)

PRIMARY_REASON = (
    "Assigned by primary-filter (office filter + hard skills + round robin). CandidatePool={pool}."
)
NEAREST_REASON = (
    "Assigned by nearest-city-fallback (nearest office + hard skills + round robin). CandidatePool={pool}."
)
NO_MATCH_REASON = "No managers matched hard-skill filters."
FAILURE_REASON = "Assignment failed: {error}"


class AssignTicketUseCase:
    """Assigns one classified ticket to one manager.

    Owns the per-office round-robin counters and the cross-border toggle;
    both live as long as the instance. The only roster mutation is
    ``Manager.take_ticket()`` on the chosen manager.
    """

    def __init__(
        self,
        fallback_offices: tuple[str, str] | list[str] | None = None,
        home_country: str = HOME_COUNTRY,
        city_coordinates: dict[str, GeoPoint] | None = None,
    ):
        hubs = tuple(fallback_offices or DEFAULT_FALLBACK_HUBS)
        if len(hubs) == 1:
            hubs = (hubs[0], hubs[0])
        self._hubs: tuple[str, str] = (hubs[0], hubs[1])
        self._home_country = home_country
        self._coordinates = CITY_COORDINATES if city_coordinates is None else city_coordinates
        self._office_counters: dict[str, int] = {}
        self._fallback_counter = 0

    @property
    def fallback_counter(self) -> int:
        return self._fallback_counter

    def round_robin_counter(self, office: str) -> int:
        return self._office_counters.get(office.strip().casefold(), 0)

    def execute(
        self,
        ticket: Ticket,
        ai_metadata: AIMetadata,
        managers: list[Manager],
        offices: list[Office],
        attachment_insights: AttachmentInsights | None = None,
    ) -> ProcessedTicket:
        """Pick an office and a manager for *ticket*.

        Never raises: an internal failure yields an unassigned record whose
        reason starts with "Assignment failed:".
        """
        insights = attachment_insights or AttachmentInsights()
        office = ""

        try:
            selection = self._select_primary_office(ticket, managers, offices)
            office = selection.office
            logger.info("Ticket %s: office=%s (%s)", ticket.guid, office, selection.reason)

            requirement = determine_required_skills(
                ticket, ai_metadata.request_type, ai_metadata.language
            )
            pool = eligible_managers(managers, office, requirement)
            reason = PRIMARY_REASON

            if not pool:
                logger.info(
                    "Ticket %s: no eligible managers in %s, trying nearest office",
                    ticket.guid, office,
                )
                nearest = self._select_nearest_office(ticket, requirement, managers, offices, office)
                if nearest is not None:
                    office = nearest.office
                    pool = eligible_managers(managers, office, requirement)
                    reason = NEAREST_REASON
                    logger.info("Ticket %s: %s", ticket.guid, nearest.reason)

            if not pool:
                logger.warning(
                    "Ticket %s: no managers match skills %s (chief_only=%s)",
                    ticket.guid, sorted(requirement.required_skills), requirement.chief_only,
                )
                return ProcessedTicket(
                    ticket=ticket,
                    ai_metadata=ai_metadata,
                    selected_office=office,
                    selected_manager=None,
                    assignment_reason=NO_MATCH_REASON,
                    attachment_insights=insights,
                )

            chosen = self._pick(office, pool)
            chosen.take_ticket()

            logger.info(
                "Ticket %s → Manager %s (office: %s, load now %d)",
                ticket.guid, chosen.name, office, chosen.current_load,
            )
            return ProcessedTicket(
                ticket=ticket,
                ai_metadata=ai_metadata,
                selected_office=office,
                selected_manager=chosen.name,
                assignment_reason=reason.format(pool=len(pool)),
                attachment_insights=insights,
            )

        except Exception as e:
            logger.exception("Error assigning ticket %s", ticket.guid)
            return ProcessedTicket(
                ticket=ticket,
                ai_metadata=ai_metadata,
                selected_office=office,
                selected_manager=None,
                assignment_reason=FAILURE_REASON.format(error=e),
                attachment_insights=insights,
            )

    # ── Steps ───────────────────────────────────────────────────────

    def _select_primary_office(
        self, ticket: Ticket, managers: list[Manager], offices: list[Office]
    ) -> OfficeSelection:
        if not needs_fallback(ticket, self._home_country):
            local = select_local_office(ticket, managers, offices)
            if local is not None:
                return local
        return self._next_fallback_office(offices)

    def _next_fallback_office(self, offices: list[Office]) -> OfficeSelection:
        selection = select_fallback_office(self._fallback_counter, offices, self._hubs)
        self._fallback_counter += 1
        return selection

    def _select_nearest_office(
        self,
        ticket: Ticket,
        requirement: SkillRequirement,
        managers: list[Manager],
        offices: list[Office],
        primary_office: str,
    ) -> OfficeSelection | None:
        candidates: dict[str, int] = {}
        seen: set[str] = set()
        for office in offices:
            if office.key in seen:
                continue
            seen.add(office.key)
            pool = eligible_managers(managers, office.name, requirement)
            if pool:
                candidates[office.name] = min(m.current_load for m in pool)

        if not candidates:
            return None

        origin = resolve_origin_city(ticket, primary_office)
        try:
            return select_nearest_office(origin, candidates, self._coordinates)
        except ValueError as e:
            logger.warning("Ticket %s: nearest office unavailable: %s", ticket.guid, e)
            return None

    def _pick(self, office: str, pool: list[Manager]) -> Manager:
        key = office.strip().casefold()
        chosen, counter = pick_next(pool, self._office_counters.get(key, 0))
        self._office_counters[key] = counter
        return chosen
