"""Parsing of generateContent responses into AIMetadata.

Two levels: a strict JSON parse validated with pydantic, and a loose
heuristic parse for free-form model text that backfills from a rule result.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from triage.domain.entities.ai_metadata import (
    SOURCE_MODEL,
    SOURCE_MODEL_HEURISTIC,
    AIMetadata,
    clamp_priority,
)
from triage.domain.value_objects.enums import DEFAULT_LANGUAGE, Language, RequestType, Tone

logger = logging.getLogger(__name__)

DEFAULT_MODEL_PRIORITY = 4
DEFAULT_SUMMARY = "No summary provided."
DEFAULT_RECOMMENDATION = "Manual review by manager is required."
MAX_LOOSE_TEXT = 180

_PRIORITY_FIELD_RE = re.compile(r"priority\D{0,8}(10|[1-9])", re.IGNORECASE)
_STANDALONE_PRIORITY_RE = re.compile(r"\b(10|[1-9])\b")
_WHITESPACE_RE = re.compile(r"\s+")

# Substring synonyms, checked in this order.
REQUEST_TYPE_SYNONYMS: list[tuple[tuple[str, ...], RequestType]] = [
    (("жалоб", "complaint"), RequestType.COMPLAINT),
    (("смен", "data change", "update data"), RequestType.DATA_CHANGE),
    (("консультац", "consult"), RequestType.CONSULTATION),
    (("претенз", "claim", "refund"), RequestType.CLAIM),
    (("неработоспособ", "app", "application", "login", "register"), RequestType.APP_FAILURE),
    (("мошен", "fraud", "scam", "unauthorized"), RequestType.FRAUDULENT_ACTIVITY),
    (("спам", "spam", "unsolicited"), RequestType.SPAM),
]

TONE_SYNONYMS: list[tuple[tuple[str, ...], Tone]] = [
    (("позитив", "positive"), Tone.POSITIVE),
    (("негатив", "negative"), Tone.NEGATIVE),
    (("нейтрал", "neutral"), Tone.NEUTRAL),
]


class StrictModelResponse(BaseModel):
    """The JSON object the classifier prompt asks for."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_type: str | None = Field(default=None, alias="requestType")
    tone: str | None = None
    priority: int = DEFAULT_MODEL_PRIORITY
    language: str | None = "RU"
    summary: str | None = ""
    recommendation: str | None = ""
    image_analysis: str | None = Field(default="", alias="imageAnalysis")


# ── Enum mapping ────────────────────────────────────────────────────

def map_request_type(value: str | None) -> RequestType | None:
    """Canonical name first, then RU/ENG substring synonyms."""
    exact = RequestType.from_name(value or "")
    if exact is not None:
        return exact
    v = (value or "").strip().lower()
    if not v:
        return None
    for synonyms, request_type in REQUEST_TYPE_SYNONYMS:
        if any(s in v for s in synonyms):
            return request_type
    return None


def map_tone(value: str | None) -> Tone | None:
    v = (value or "").strip().lower()
    if not v:
        return None
    for synonyms, tone in TONE_SYNONYMS:
        if any(s in v for s in synonyms):
            return tone
    return None


def map_language(value: str | None) -> Language | None:
    v = (value or "").strip().upper()
    if not v:
        return None
    if "KZ" in v or "KAZ" in v:
        return Language.KZ
    if "EN" in v:
        return Language.ENG
    if "RU" in v:
        return Language.RU
    return None


# ── Response envelope ───────────────────────────────────────────────

def extract_model_text(body: str | None) -> str | None:
    """First non-empty text part of the first candidates, else a top-level "text"."""
    if not body or not body.strip():
        return None
    try:
        root = json.loads(body)
    except ValueError:
        return None
    if not isinstance(root, dict):
        return None

    candidates = root.get("candidates")
    if isinstance(candidates, list):
        for candidate in candidates:
            content = candidate.get("content") if isinstance(candidate, dict) else None
            parts = content.get("parts") if isinstance(content, dict) else None
            if not isinstance(parts, list):
                continue
            for part in parts:
                text = part.get("text") if isinstance(part, dict) else None
                if isinstance(text, str) and text.strip():
                    return text

    direct = root.get("text")
    return direct if isinstance(direct, str) else None


def strip_code_fence(raw: str) -> str:
    """Drop a leading ```lang line and a trailing ``` line."""
    text = raw.strip()
    if not text.startswith("```"):
        return text
    lines = text.split("\n")
    if len(lines) < 2:
        return text
    lines = lines[1:]
    if lines[-1].lstrip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _json_object_slice(text: str) -> str:
    if text.startswith("{"):
        return text
    start, end = text.find("{"), text.rfind("}")
    if start >= 0 and end > start:
        return text[start:end + 1]
    return text


# ── Strict parse ────────────────────────────────────────────────────

def parse_strict(raw: str) -> AIMetadata | None:
    """Parse model text as the expected JSON object, or return None."""
    candidate = _json_object_slice(strip_code_fence(raw or ""))
    try:
        dto = StrictModelResponse.model_validate(json.loads(candidate))
    except (ValueError, ValidationError):
        return None

    return AIMetadata(
        request_type=map_request_type(dto.request_type) or RequestType.CONSULTATION,
        tone=map_tone(dto.tone) or Tone.NEUTRAL,
        priority=clamp_priority(dto.priority),
        language=map_language(dto.language) or DEFAULT_LANGUAGE,
        summary=(dto.summary or "").strip() or DEFAULT_SUMMARY,
        recommendation=(dto.recommendation or "").strip() or DEFAULT_RECOMMENDATION,
        image_analysis=dto.image_analysis or "",
        analysis_source=SOURCE_MODEL,
    )


# ── Loose parse ─────────────────────────────────────────────────────

def extract_field_value(text: str, field: str) -> str | None:
    """Value of a `field: value` / `"field": "value"` line, or None."""
    pattern = rf"(?<![\w-])[\"']?{re.escape(field)}[\"']?\s*[:=-]\s*(.+)"
    match = re.search(pattern, text or "", re.IGNORECASE)
    if not match:
        return None
    value = match.group(1).strip().rstrip(",").strip().strip("\"'").strip()
    return value or None


def extract_priority(text: str) -> int | None:
    match = _PRIORITY_FIELD_RE.search(text or "") or _STANDALONE_PRIORITY_RE.search(text or "")
    return int(match.group(1)) if match else None


def _shorten(value: str) -> str:
    if len(value) <= MAX_LOOSE_TEXT:
        return value
    return value[:MAX_LOOSE_TEXT - 3].rstrip() + "..."


def _first_field(text: str, *fields: str) -> str | None:
    for field in fields:
        value = extract_field_value(text, field)
        if value:
            return value
    return None


def parse_loose(raw: str, rule_result: AIMetadata) -> AIMetadata | None:
    """Heuristic parse of free-form model text.

    Fields that cannot be determined are taken from *rule_result*. Returns
    None when no field at all could be determined.
    """
    body = strip_code_fence(raw or "")
    if not body:
        return None

    type_field = _first_field(body, "requestType", "request_type", "type")
    request_type = map_request_type(type_field) if type_field else map_request_type(body)

    tone_field = _first_field(body, "tone", "sentiment")
    tone = map_tone(tone_field) if tone_field else map_tone(body)

    language = map_language(_first_field(body, "language"))
    priority = extract_priority(body)
    recommendation = _first_field(body, "recommendation", "action")

    if all(v is None for v in (request_type, tone, language, priority, recommendation)):
        return None

    summary = _shorten(_WHITESPACE_RE.sub(" ", body).strip())

    return AIMetadata(
        request_type=request_type or rule_result.request_type,
        tone=tone or rule_result.tone,
        priority=clamp_priority(priority if priority is not None else rule_result.priority),
        language=language or rule_result.language,
        summary=summary,
        recommendation=_shorten(recommendation or rule_result.recommendation),
        image_analysis="",
        analysis_source=SOURCE_MODEL_HEURISTIC,
    )
