"""Port interface for ticket classification."""

from abc import ABC, abstractmethod
from pathlib import Path

from triage.domain.entities.ai_metadata import AIMetadata


class TicketClassifierPort(ABC):
    @abstractmethod
    async def classify(
        self,
        text: str,
        attachments_raw: str = "",
        project_dir: Path | None = None,
    ) -> AIMetadata:
        """Classify ticket text and return structured metadata.

        Implementations must never raise for bad input or provider
        failures; the returned AIMetadata carries its provenance tag.
        """
        ...

    def start_run(self) -> None:
        """Reset per-run state before a new batch. No-op by default."""
