"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path

from triage.adapters.csv_loader.loader import Dataset
from triage.adapters.llm.gemini_adapter import GeminiClassifier
from triage.adapters.nlp.rule_classifier import RuleClassifier
from triage.application.ports.classifier_port import TicketClassifierPort
from triage.application.use_cases.assign_ticket import AssignTicketUseCase
from triage.application.use_cases.process_ticket import BatchProcessUseCase, ProcessTicketUseCase
from triage.config import settings
from triage.domain.entities.assignment import ProcessedTicket

logger = logging.getLogger(__name__)


class ResultsStore:
    """In-memory results of the latest batch run."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[ProcessedTicket] = []
        self._generated_at: datetime | None = None

    def replace(self, items: list[ProcessedTicket]) -> None:
        with self._lock:
            self._items = list(items)
            self._generated_at = datetime.now(timezone.utc)

    def snapshot(self) -> tuple[list[ProcessedTicket], datetime | None]:
        with self._lock:
            return list(self._items), self._generated_at

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


# Singletons: one classifier per process owns the outbound request gate
_rule_classifier = RuleClassifier()
_classifier = GeminiClassifier(fallback=_rule_classifier)
_results_store = ResultsStore()


def get_classifier() -> TicketClassifierPort:
    return _classifier


def get_rule_classifier() -> RuleClassifier:
    return _rule_classifier


def get_results_store() -> ResultsStore:
    return _results_store


def build_engine() -> AssignTicketUseCase:
    """A fresh engine per run: counters and toggle restart with the roster."""
    return AssignTicketUseCase(
        fallback_offices=settings.fallback_offices,
        home_country=settings.home_country,
    )


def build_batch_uc(dataset: Dataset, classifier: TicketClassifierPort) -> BatchProcessUseCase:
    process_uc = ProcessTicketUseCase(
        classifier=classifier,
        engine=build_engine(),
        managers=dataset.managers,
        offices=dataset.offices,
        project_dir=Path(settings.project_dir),
    )
    return BatchProcessUseCase(process_ticket=process_uc)


async def shutdown() -> None:
    await _classifier.aclose()
