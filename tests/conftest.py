"""Pytest configuration and shared fixtures."""

import pytest

from triage.adapters.nlp.knowledge_base import default_knowledge_base
from triage.adapters.nlp.rule_classifier import RuleClassifier
from triage.domain.entities.manager import Manager
from triage.domain.entities.office import Office
from triage.domain.entities.ticket import Ticket


@pytest.fixture
def sample_ticket_description():
    return "Здравствуйте. Не могу войти в приложение. Пароль не принимает."


@pytest.fixture
def sample_ticket_description_en():
    return "Hello, I was charged twice and need a refund please."


@pytest.fixture
def sample_ticket_description_kz():
    return "Сәлеметсіз бе, деректерді өзгерту керек"


@pytest.fixture
def knowledge_base():
    return default_knowledge_base()


@pytest.fixture
def rules(knowledge_base):
    return RuleClassifier(knowledge_base)


@pytest.fixture
def domestic_ticket():
    return Ticket(
        guid="t-1",
        description="Подскажите условия",
        segment="Mass",
        country="Казахстан",
        region="Алматинская область",
        city="Алматы",
        street="ул. Абая",
        building="10",
    )


@pytest.fixture
def offices():
    return [Office("Астана", "пр. Мангилик Ел 1"), Office("Алматы", "ул. Абая 1"), Office("Шымкент")]


@pytest.fixture
def managers():
    return [
        Manager("Алиев", "Специалист", "Алматы", {"KZ"}, 0),
        Manager("Борисов", "Главный специалист", "Алматы", {"VIP", "ENG"}, 0),
        Manager("Ержанов", "Специалист", "Астана", {"KZ", "ENG"}, 2),
        Manager("Жумабаев", "Главный специалист", "Шымкент", {"VIP", "KZ"}, 1),
    ]
