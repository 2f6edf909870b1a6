"""Tests for ProcessTicketUseCase and BatchProcessUseCase with in-memory fakes."""

from __future__ import annotations

import pytest

from triage.application.ports.classifier_port import TicketClassifierPort
from triage.application.use_cases.assign_ticket import AssignTicketUseCase
from triage.application.use_cases.process_ticket import (
    BatchProcessUseCase,
    BatchResult,
    ProcessTicketUseCase,
)
from triage.domain.entities.ai_metadata import AIMetadata
from triage.domain.entities.manager import Manager
from triage.domain.entities.office import Office
from triage.domain.entities.ticket import Ticket
from triage.domain.value_objects.enums import Language, RequestType, Tone

# ─── In-memory fakes ────────────────────────────────────────────────


class FakeClassifier(TicketClassifierPort):
    def __init__(self, language=Language.RU, fail_on: str | None = None):
        self._lang = language
        self._fail_on = fail_on
        self.seen: list[str] = []
        self.runs = 0

    def start_run(self):
        self.runs += 1

    async def classify(self, text, attachments_raw="", project_dir=None):
        self.seen.append(text)
        if self._fail_on and self._fail_on in text:
            raise RuntimeError("classifier exploded")
        return AIMetadata(
            request_type=RequestType.CONSULTATION, tone=Tone.NEUTRAL, priority=4,
            language=self._lang, summary="test", recommendation="test",
        )


def _ticket(guid: str, description: str = "Подскажите тарифы", **kwargs) -> Ticket:
    data = dict(country="Казахстан", region="Алматинская", city="Алматы")
    data.update(kwargs)
    return Ticket(guid=guid, description=description, **data)


def _roster() -> tuple[list[Manager], list[Office]]:
    managers = [
        Manager("A", "Специалист", "Алматы", set(), 0),
        Manager("B", "Специалист", "Алматы", set(), 0),
    ]
    return managers, [Office("Астана"), Office("Алматы")]


def _pipeline(classifier: TicketClassifierPort) -> tuple[ProcessTicketUseCase, list[Manager]]:
    managers, offices = _roster()
    return ProcessTicketUseCase(classifier, AssignTicketUseCase(), managers, offices), managers


# ─── ProcessTicketUseCase ───────────────────────────────────────────


@pytest.mark.asyncio
async def test_process_ticket_end_to_end():
    process, managers = _pipeline(FakeClassifier())

    result = await process.execute(_ticket("g1", attachments="screenshot.png; doc.pdf"))

    assert result.selected_office == "Алматы"
    assert result.selected_manager == "A"
    assert result.attachment_insights.attachment_count == 2
    assert result.attachment_insights.has_image_attachment
    assert managers[0].current_load == 1


@pytest.mark.asyncio
async def test_process_ticket_with_rule_classifier(rules):
    process, _ = _pipeline(rules)
    result = await process.execute(_ticket("g1", "Мошенничество с картой, срочно"))
    assert result.ai_metadata.request_type == RequestType.FRAUDULENT_ACTIVITY
    assert result.is_assigned


@pytest.mark.asyncio
async def test_spam_tickets_are_still_assigned():
    class SpamClassifier(FakeClassifier):
        async def classify(self, text, attachments_raw="", project_dir=None):
            meta = await super().classify(text, attachments_raw, project_dir)
            return AIMetadata(
                request_type=RequestType.SPAM, tone=meta.tone, priority=1,
                language=meta.language, summary=meta.summary, recommendation=meta.recommendation,
            )

    process, _ = _pipeline(SpamClassifier())
    result = await process.execute(_ticket("g1"))
    assert result.is_assigned


# ─── BatchProcessUseCase ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_batch_processes_in_order_with_shared_state():
    process, managers = _pipeline(FakeClassifier())
    tickets = [_ticket(f"g{i}") for i in range(4)]

    result = await BatchProcessUseCase(process).execute(tickets)

    assert not result.aborted
    assert result.total_input == 4
    assert [p.ticket.guid for p in result.processed] == ["g0", "g1", "g2", "g3"]
    assert [p.selected_manager for p in result.processed] == ["A", "B", "A", "B"]
    assert result.assigned == 4
    assert result.unassigned == 0
    assert [m.current_load for m in managers] == [2, 2]


@pytest.mark.asyncio
async def test_batch_counts_unassigned():
    process, _ = _pipeline(FakeClassifier(language=Language.ENG))
    result = await BatchProcessUseCase(process).execute([_ticket("g1"), _ticket("g2")])
    assert result.assigned == 0
    assert result.unassigned == 2


@pytest.mark.asyncio
async def test_batch_stops_at_first_error():
    classifier = FakeClassifier(fail_on="boom")
    process, _ = _pipeline(classifier)
    tickets = [_ticket("g1"), _ticket("g2", "boom"), _ticket("g3")]

    result = await BatchProcessUseCase(process).execute(tickets)

    assert result.aborted
    assert result.error == "Ticket g2: classifier exploded"
    assert [p.ticket.guid for p in result.processed] == ["g1"]
    assert classifier.seen == ["Подскажите тарифы", "boom"]


@pytest.mark.asyncio
async def test_batch_empty_input():
    process, _ = _pipeline(FakeClassifier())
    result = await BatchProcessUseCase(process).execute([])
    assert result == BatchResult(processed=[], total_input=0, error=None)


@pytest.mark.asyncio
async def test_each_batch_starts_a_classifier_run():
    classifier = FakeClassifier()
    process, _ = _pipeline(classifier)
    batch = BatchProcessUseCase(process)

    await batch.execute([_ticket("g1")])
    await batch.execute([])

    assert classifier.runs == 2
