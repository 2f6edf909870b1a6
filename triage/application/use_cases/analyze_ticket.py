"""AnalyzeTicketUseCase — classify a single ticket."""

from __future__ import annotations

import logging
from pathlib import Path

from triage.adapters.nlp.attachment_analyzer import analyze_attachments
from triage.adapters.nlp.rule_classifier import RuleClassifier
from triage.application.ports.classifier_port import TicketClassifierPort
from triage.domain.entities.ai_metadata import AIMetadata

logger = logging.getLogger(__name__)


class AnalyzeTicketUseCase:
    """Orchestrates classification of a single ticket."""

    def __init__(self, classifier: TicketClassifierPort, rules: RuleClassifier | None = None):
        self._classifier = classifier
        self._rules = rules

    async def execute(
        self,
        ticket_guid: str,
        description: str,
        attachments: str = "",
        project_dir: Path | None = None,
    ) -> AIMetadata:
        """Classify a ticket and return its AIMetadata.

        Args:
            ticket_guid: client GUID, used for logging only.
            description: ticket text.
            attachments: raw attachment descriptor.
            project_dir: root for resolving local image attachments.
        """
        description = description or ""
        attachments = attachments or ""
        if not description.strip() and not attachments.strip():
            logger.warning("Ticket %s has no description and no attachments", ticket_guid)
            rules = self._rules or RuleClassifier()
            return rules.extract("", analyze_attachments(attachments).context_for_nlp)

        metadata = await self._classifier.classify(description, attachments, project_dir)
        logger.info(
            "Ticket %s: type=%s, lang=%s, priority=%d, source=%s",
            ticket_guid, metadata.request_type.value, metadata.language.value,
            metadata.priority, metadata.analysis_source,
        )
        return metadata
