"""Tests for domain entities."""

from datetime import date

import pytest

from triage.domain.entities.ai_metadata import (
    SOURCE_RULES,
    AIMetadata,
    clamp_priority,
    fallback_source,
)
from triage.domain.entities.assignment import ProcessedTicket
from triage.domain.entities.manager import Manager
from triage.domain.entities.office import Office
from triage.domain.entities.ticket import Ticket
from triage.domain.value_objects.enums import Language, RequestType, Tone


def _meta(**overrides) -> AIMetadata:
    data = dict(
        request_type=RequestType.CONSULTATION, tone=Tone.NEUTRAL, priority=4,
        language=Language.RU, summary="s", recommendation="r",
    )
    data.update(overrides)
    return AIMetadata(**data)


# ─── Ticket ─────────────────────────────────────────────────────────


def test_ticket_build_address_full():
    t = Ticket(
        guid="test", gender="М", birth_date=date(1990, 1, 1),
        country="Казахстан", region="Алматинская", city="Алматы",
        street="ул. Абая", building="10",
    )
    assert t.build_address_string() == "Казахстан, Алматинская, Алматы, ул. Абая 10"


def test_ticket_build_address_partial():
    t = Ticket(guid="test", country="Казахстан", city="Актау")
    assert t.build_address_string() == "Казахстан, Актау"


def test_ticket_build_address_empty():
    assert Ticket(guid="test").build_address_string() is None


def test_ticket_complete_address_requires_region():
    assert Ticket(guid="t", country="Казахстан", region="Акмолинская", city="Астана").has_complete_address()
    assert not Ticket(guid="t", country="Казахстан", region=" ", city="Астана").has_complete_address()


def test_ticket_domestic_is_substring_case_insensitive():
    t = Ticket(guid="t", country="Республика КАЗАХСТАН")
    assert t.is_domestic()
    assert not t.is_foreign()


def test_ticket_foreign_country():
    t = Ticket(guid="t", country="Россия")
    assert t.is_foreign()
    assert not Ticket(guid="t").is_foreign()


@pytest.mark.parametrize("segment,expected", [
    ("VIP", True), ("Priority", True), ("vip-gold", True), ("Mass", False), ("", False),
])
def test_ticket_vip_handling(segment, expected):
    assert Ticket(guid="t", segment=segment).requires_vip_handling() is expected


# ─── Manager ────────────────────────────────────────────────────────


def test_manager_skills_case_insensitive():
    m = Manager(name="M", position="Специалист", office="Алматы", skills={"vip", " kz "})
    assert m.skills == {"VIP", "KZ"}
    assert m.has_skill("Vip")
    assert not m.has_skill("ENG")


@pytest.mark.parametrize("position,expected", [
    ("Главный специалист", True), ("Chief specialist", True),
    ("Ведущий специалист", False), ("", False),
])
def test_manager_chief_specialist(position, expected):
    assert Manager(name="M", position=position, office="X").is_chief_specialist() is expected


def test_manager_take_ticket_increments_by_one():
    m = Manager(name="M", position="Специалист", office="Алматы", current_load=3)
    m.take_ticket()
    assert m.current_load == 4


def test_manager_works_in_case_insensitive():
    assert Manager(name="M", position="", office="Алматы").works_in("алматы ")


# ─── Office ─────────────────────────────────────────────────────────


def test_office_key_casefolded():
    assert Office("АСТАНА").key == Office("астана").key


# ─── AIMetadata ─────────────────────────────────────────────────────


@pytest.mark.parametrize("priority", [0, 11, -3])
def test_metadata_priority_out_of_range_raises(priority):
    with pytest.raises(ValueError, match="priority"):
        _meta(priority=priority)


def test_metadata_empty_source_raises():
    with pytest.raises(ValueError, match="analysis_source"):
        _meta(analysis_source="")


def test_metadata_with_source_and_rule_flag():
    meta = _meta()
    assert meta.analysis_source == SOURCE_RULES
    tagged = meta.with_source(fallback_source("Http429"))
    assert tagged.analysis_source == "RulesFallback(Http429)"
    assert tagged.is_rule_based
    assert not meta.with_source("Gemini").is_rule_based


def test_metadata_to_dict_uses_enum_values():
    d = _meta(request_type=RequestType.APP_FAILURE).to_dict()
    assert d["request_type"] == "AppFailure"
    assert d["language"] == "RU"


def test_clamp_priority():
    assert clamp_priority(15) == 10
    assert clamp_priority(-1) == 1
    assert clamp_priority(7) == 7


# ─── ProcessedTicket ────────────────────────────────────────────────


def test_processed_ticket_assignment_flag():
    t = Ticket(guid="t")
    assert ProcessedTicket(t, _meta(), "Алматы", "M", "ok").is_assigned
    assert not ProcessedTicket(t, _meta(), "Алматы", None, "none").is_assigned
