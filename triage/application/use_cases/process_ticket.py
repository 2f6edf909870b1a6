"""ProcessTicketUseCase — full pipeline: attachments → classification → assignment."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from triage.adapters.nlp.attachment_analyzer import analyze_attachments
from triage.application.ports.classifier_port import TicketClassifierPort
from triage.application.use_cases.analyze_ticket import AnalyzeTicketUseCase
from triage.application.use_cases.assign_ticket import AssignTicketUseCase
from triage.domain.entities.assignment import ProcessedTicket
from triage.domain.entities.manager import Manager
from triage.domain.entities.office import Office
from triage.domain.entities.ticket import Ticket

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one batch run."""

    processed: list[ProcessedTicket] = field(default_factory=list)
    total_input: int = 0
    error: str | None = None

    @property
    def aborted(self) -> bool:
        return self.error is not None

    @property
    def assigned(self) -> int:
        return sum(1 for p in self.processed if p.is_assigned)

    @property
    def unassigned(self) -> int:
        return len(self.processed) - self.assigned


class ProcessTicketUseCase:
    """Orchestrates the full ticket processing pipeline over one roster."""

    def __init__(
        self,
        classifier: TicketClassifierPort,
        engine: AssignTicketUseCase,
        managers: list[Manager],
        offices: list[Office],
        project_dir: Path | None = None,
    ):
        self._classifier = classifier
        self._analyze = AnalyzeTicketUseCase(classifier)
        self._engine = engine
        self._managers = managers
        self._offices = offices
        self._project_dir = project_dir

    def start_run(self) -> None:
        self._classifier.start_run()

    async def execute(self, ticket: Ticket) -> ProcessedTicket:
        """Process a single ticket end-to-end.

        Pipeline:
        1. Attachment analysis (counts, image flag, hint text)
        2. Classification (type, tone, priority, language)
        3. Office selection, hard-skill filter, round-robin pick
        """
        insights = analyze_attachments(ticket.attachments)
        metadata = await self._analyze.execute(
            ticket.guid, ticket.description, ticket.attachments, self._project_dir
        )
        return self._engine.execute(ticket, metadata, self._managers, self._offices, insights)


class BatchProcessUseCase:
    """Process tickets sequentially, in input order."""

    def __init__(self, process_ticket: ProcessTicketUseCase):
        self._process = process_ticket

    async def execute(self, tickets: list[Ticket]) -> BatchResult:
        """Process *tickets*; an unexpected error stops the run.

        Tickets completed before the failure are kept in the result.
        """
        logger.info("Batch processing %d tickets", len(tickets))
        self._process.start_run()
        result = BatchResult(total_input=len(tickets))

        for ticket in tickets:
            try:
                result.processed.append(await self._process.execute(ticket))
            except Exception as e:
                logger.exception("Error processing ticket %s, aborting batch", ticket.guid)
                result.error = f"Ticket {ticket.guid}: {e}"
                break

        logger.info(
            "Batch complete: %d/%d processed, %d assigned, %d unassigned",
            len(result.processed), len(tickets), result.assigned, result.unassigned,
        )
        return result
