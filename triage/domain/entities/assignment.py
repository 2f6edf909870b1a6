"""ProcessedTicket — the result of routing a ticket to a manager."""

from dataclasses import dataclass, field

from triage.domain.entities.ai_metadata import AIMetadata
from triage.domain.entities.attachment_insights import AttachmentInsights
from triage.domain.entities.ticket import Ticket


@dataclass(frozen=True)
class ProcessedTicket:
    ticket: Ticket
    ai_metadata: AIMetadata
    selected_office: str
    selected_manager: str | None
    assignment_reason: str
    attachment_insights: AttachmentInsights = field(default_factory=AttachmentInsights)

    @property
    def is_assigned(self) -> bool:
        return self.selected_manager is not None
