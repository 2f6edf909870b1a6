"""Rule classifier — deterministic keyword classification of ticket text.

Implements TicketClassifierPort without any network access. The result is a
pure function of the text, the optional attachment hint and the knowledge base.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from triage.adapters.nlp.attachment_analyzer import analyze_attachments
from triage.adapters.nlp.knowledge_base import KnowledgeBase, default_knowledge_base
from triage.application.ports.classifier_port import TicketClassifierPort
from triage.domain.entities.ai_metadata import SOURCE_RULES, AIMetadata, clamp_priority
from triage.domain.value_objects.enums import (
    DEFAULT_LANGUAGE,
    REQUEST_TYPE_LABELS,
    TONE_LABELS,
    Language,
    RequestType,
    Tone,
)

logger = logging.getLogger(__name__)

_NON_WORD_RE = re.compile(r"[^\w\s]|_")
_SENTENCE_RE = re.compile(r"[.!?]")

MAX_SUMMARY_SENTENCE = 180
EMPTY_TEXT_PLACEHOLDER = "No text body provided; check attachments."


# ── Hard-override probes (checked in this order) ────────────────────

LINK_MARKERS = ("http", "https", "utm_", "safelinks", "protection outlook")
PROMO_MARKERS = (
    "выгодное предложение", "в наличии", "акция", "скидк", "купить", "реклама",
    "promo", "special offer", "marketing", "advertis",
)
SPAM_MARKERS = (
    "спам", "spam", "junk", "unsolicited", "реклама", "акция", "скидка", "buy now", "promo",
)
FRAUD_MARKERS = (
    "мошенн", "fraud", "scam", "unauthorized", "подозр", "взлом", "ukrali", "алаяқ", "alaiak",
)
APP_FAILURE_MARKERS = (
    "не работает", "ошибка", "вылет", "не могу войти", "cannot login", "cannot register",
    "blocked in app", "код не приходит", "sms не приходит", "ruyxatdan utolmayapman",
    "app failure", "application not working",
)
CLAIM_MARKERS = (
    "верните деньги", "refund", "не пришло на счет", "не зачис", "компенса", "претенз",
    "chargeback", "money not received",
)
DATA_CHANGE_MARKERS = (
    "смена данных", "изменить", "обновить номер", "телефонды өзгерту", "мекенжайды өзгерту",
    "derekterdi ozgertu", "update phone", "change data",
)

# Complaint sentiment, consulted only when keyword scoring is inconclusive
COMPLAINT_MARKERS = (
    "жалоб", "недовол", "возмущ", "ужасн", "суд подам", "не имеете права", "unhappy", "frustrated",
)


# ── Priority and guidance tables ────────────────────────────────────

BASE_PRIORITY: dict[RequestType, int] = {
    RequestType.FRAUDULENT_ACTIVITY: 10,
    RequestType.APP_FAILURE: 8,
    RequestType.CLAIM: 7,
    RequestType.COMPLAINT: 6,
    RequestType.DATA_CHANGE: 5,
    RequestType.CONSULTATION: 4,
    RequestType.SPAM: 1,
}
DEFAULT_BASE_PRIORITY = 4

TONE_ADJUSTMENT: dict[Tone, int] = {
    Tone.NEGATIVE: 1,
    Tone.NEUTRAL: 0,
    Tone.POSITIVE: -1,
}

RECOMMENDATIONS: dict[Language, dict[RequestType, str]] = {
    Language.RU: {
        RequestType.FRAUDULENT_ACTIVITY: "Срочно эскалируйте в антифрод и временно ограничьте рискованные операции до проверки.",
        RequestType.APP_FAILURE: "Откройте техинцидент, соберите логи/скриншоты и дайте клиенту временный обходной путь.",
        RequestType.CLAIM: "Запустите процесс претензии и зафиксируйте срок ответа по регламенту.",
        RequestType.COMPLAINT: "Назначьте ответственному менеджеру и дайте эмпатичный ответ с конкретными шагами решения.",
        RequestType.DATA_CHANGE: "Проверьте личность клиента и выполните изменение данных по процедуре комплаенса.",
        RequestType.CONSULTATION: "Передайте профильному менеджеру и отправьте понятные материалы/FAQ.",
        RequestType.SPAM: "Пометьте как спам и исключите из операционной очереди менеджеров.",
    },
    Language.KZ: {
        RequestType.FRAUDULENT_ACTIVITY: "Anti-fraud тобына дереу жіберіп, тексеріс біткенше тәуекел операцияларын шектеңіз.",
        RequestType.APP_FAILURE: "Техникалық инцидент ашып, лог/скриншот жинап, клиентке уақытша шешім беріңіз.",
        RequestType.CLAIM: "Ресми шағым процесін бастап, жауап мерзімін регламент бойынша бекітіңіз.",
        RequestType.COMPLAINT: "Жауапты менеджерге беріп, нақты шешу қадамдарымен эмпатиялық жауап дайындаңыз.",
        RequestType.DATA_CHANGE: "Клиентті верификациялап, дерек өзгерісін комплаенс талабымен орындаңыз.",
        RequestType.CONSULTATION: "Тиісті маманға бағыттап, қысқа әрі нақты FAQ/нұсқаулық беріңіз.",
        RequestType.SPAM: "Спам ретінде белгілеп, менеджер кезегінен алып тастаңыз.",
    },
    Language.ENG: {
        RequestType.FRAUDULENT_ACTIVITY: "Escalate immediately to anti-fraud and freeze risky operations pending verification.",
        RequestType.APP_FAILURE: "Open a technical incident, collect logs/screenshots, and provide a workaround to the client.",
        RequestType.CLAIM: "Create a formal claim workflow and set response deadline according to policy.",
        RequestType.COMPLAINT: "Assign to a responsible manager and provide an empathy-first response with concrete steps.",
        RequestType.DATA_CHANGE: "Verify identity, confirm requested fields, and process the data update under compliance rules.",
        RequestType.CONSULTATION: "Route to an advisor with relevant product expertise and share concise FAQ guidance.",
        RequestType.SPAM: "Mark as spam and suppress from manager workload.",
    },
}


# ── Helpers ─────────────────────────────────────────────────────────

def normalize(text: str | None) -> str:
    """Lower-case and replace anything but letters, digits and whitespace by a space."""
    return _NON_WORD_RE.sub(" ", (text or "").lower())


def _contains_any(text: str, probes: tuple[str, ...]) -> bool:
    return any(p in text for p in probes)


def _best(scores: dict) -> tuple:
    """Highest-scoring key; ties go to the earliest key in insertion order."""
    key = max(scores, key=lambda k: scores[k])
    return key, scores[key]


def first_sentence(text: str | None) -> str:
    """First non-empty sentence of *text*, truncated, or a placeholder."""
    original = text or ""
    pieces = [p.strip() for p in _SENTENCE_RE.split(original) if p.strip()]
    sentence = pieces[0] if pieces else original.strip()
    if not sentence:
        sentence = EMPTY_TEXT_PLACEHOLDER
    if len(sentence) > MAX_SUMMARY_SENTENCE:
        sentence = sentence[:MAX_SUMMARY_SENTENCE] + "..."
    return sentence


def calculate_priority(request_type: RequestType, tone: Tone) -> int:
    base = BASE_PRIORITY.get(request_type, DEFAULT_BASE_PRIORITY)
    return clamp_priority(base + TONE_ADJUSTMENT.get(tone, 0))


def build_summary(text: str | None, request_type: RequestType, tone: Tone, language: Language) -> str:
    sentence = first_sentence(text)
    if language == Language.RU:
        return (
            f"Сообщение клиента: {sentence}. "
            f"Класс: {REQUEST_TYPE_LABELS[Language.RU][request_type]}, "
            f"тон: {TONE_LABELS[Language.RU][tone]}."
        )
    if language == Language.KZ:
        return (
            f"Клиент хабары: {sentence}. "
            f"Санаты: {REQUEST_TYPE_LABELS[Language.KZ][request_type]}, "
            f"тон: {TONE_LABELS[Language.KZ][tone]}."
        )
    return f"Client message: {sentence}. Classified as {request_type.value} with {tone.value} tone."


def build_recommendation(request_type: RequestType, language: Language) -> str:
    return RECOMMENDATIONS.get(language, RECOMMENDATIONS[Language.ENG])[request_type]


def detect_hard_override(normalized: str) -> RequestType | None:
    """Language-independent category probes, first match wins."""
    if _contains_any(normalized, LINK_MARKERS) and _contains_any(normalized, PROMO_MARKERS):
        return RequestType.SPAM
    if _contains_any(normalized, SPAM_MARKERS):
        return RequestType.SPAM
    if _contains_any(normalized, FRAUD_MARKERS):
        return RequestType.FRAUDULENT_ACTIVITY
    if _contains_any(normalized, APP_FAILURE_MARKERS):
        return RequestType.APP_FAILURE
    if _contains_any(normalized, CLAIM_MARKERS):
        return RequestType.CLAIM
    if _contains_any(normalized, DATA_CHANGE_MARKERS):
        return RequestType.DATA_CHANGE
    return None


def detect_secondary_override(normalized: str) -> RequestType | None:
    if _contains_any(normalized, COMPLAINT_MARKERS):
        return RequestType.COMPLAINT
    return None


class RuleClassifier(TicketClassifierPort):
    """Keyword-based classifier backed by an immutable KnowledgeBase."""

    def __init__(self, knowledge_base: KnowledgeBase | None = None):
        self._kb = knowledge_base or default_knowledge_base()

    @property
    def knowledge_base(self) -> KnowledgeBase:
        return self._kb

    async def classify(
        self,
        text: str,
        attachments_raw: str = "",
        project_dir: Path | None = None,
    ) -> AIMetadata:
        insights = analyze_attachments(attachments_raw)
        return self.extract(text, insights.context_for_nlp)

    def extract(self, text: str | None, attachment_context: str | None = None) -> AIMetadata:
        """Classify *text*, optionally enriched by attachment hint text.

        The hint takes part in detection only; the summary quotes the
        ticket text alone.
        """
        text = text or ""
        effective = f"{text}\n{attachment_context}" if attachment_context and attachment_context.strip() else text
        normalized = normalize(effective)

        language = self.detect_language(normalized)
        request_type = self.detect_request_type(normalized, language)
        tone = self.detect_tone(normalized, language)

        return AIMetadata(
            request_type=request_type,
            tone=tone,
            priority=calculate_priority(request_type, tone),
            language=language,
            summary=build_summary(text, request_type, tone, language),
            recommendation=build_recommendation(request_type, language),
            image_analysis="",
            analysis_source=SOURCE_RULES,
        )

    # ── Detection steps ─────────────────────────────────────────────

    def detect_language(self, normalized: str) -> Language:
        scores = {lang: 0 for lang in Language}

        scores[Language.KZ] += 3 * sum(1 for c in normalized if c in self._kb.kazakh_specific_letters)
        scores[Language.ENG] += sum(1 for c in normalized if "a" <= c <= "z") // 8

        tokens = normalized.split()
        token_set = set(tokens)
        for token in tokens:
            if token in self._kb.kazakh_latin_signals:
                scores[Language.KZ] += 2
            if token in self._kb.russian_latin_signals:
                scores[Language.RU] += 2

        for lang, markers in self._kb.language_markers.items():
            for marker in markers:
                if marker in normalized:
                    scores[lang] += 1
                if marker in token_set:
                    scores[lang] += 2

        best, score = _best(scores)
        return best if score > 0 else DEFAULT_LANGUAGE

    def detect_request_type(self, normalized: str, language: Language) -> RequestType:
        override = detect_hard_override(normalized)
        if override is not None:
            return override

        keywords = self._kb.request_type_keywords[language]
        scores = {rt: sum(1 for k in keywords[rt] if k in normalized) for rt in RequestType}
        best, score = _best(scores)
        if score > 0:
            return best

        # Mixed-language text: score against every language's keywords
        for per_language in self._kb.request_type_keywords.values():
            for rt, words in per_language.items():
                scores[rt] += sum(1 for k in words if k in normalized)

        best, score = _best(scores)
        if score == 0 or best == RequestType.CONSULTATION:
            return detect_secondary_override(normalized) or RequestType.CONSULTATION
        return best

    def detect_tone(self, normalized: str, language: Language) -> Tone:
        positive = sum(1 for w in self._kb.positive_tone[language] if w in normalized)
        negative = sum(1 for w in self._kb.negative_tone[language] if w in normalized)
        if negative > positive:
            return Tone.NEGATIVE
        if positive > negative:
            return Tone.POSITIVE
        return Tone.NEUTRAL
