"""Gemini adapter — implements TicketClassifierPort over the generateContent REST API.

Every failure path resolves to the rule classifier's result, tagged
``RulesFallback(<Reason>)``. Outbound calls are serialized by a request gate;
a per-run budget, a minimum inter-request delay and 429 backoff pace them.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from pathlib import Path
from typing import Awaitable, Callable

import httpx

from triage.adapters.llm.request_builder import DEGRADE_LADDER, build_request, supports_json_mode
from triage.adapters.llm.response_parser import extract_model_text, parse_loose, parse_strict
from triage.adapters.nlp.attachment_analyzer import analyze_attachments
from triage.adapters.nlp.rule_classifier import RuleClassifier
from triage.application.ports.classifier_port import TicketClassifierPort
from triage.config import settings
from triage.domain.entities.ai_metadata import AIMetadata, fallback_source

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemma-3-4b-it"

DEFAULT_RETRY_AFTER_SECONDS = 15
MAX_RETRY_AFTER_SECONDS = 120
MAX_MODEL_PAGES = 20
LOG_SNIPPET_LENGTH = 500

# Fallback reasons
REASON_NO_API_KEY = "NoApiKey"
REASON_MODEL_UNAVAILABLE = "ModelUnavailable"
REASON_BUDGET_EXCEEDED = "BudgetExceeded"
REASON_EMPTY_RESPONSE = "EmptyResponse"
REASON_PARSE_ERROR = "ParseError"
REASON_EXCEPTION = "Exception"


def http_reason(status: int) -> str:
    return f"Http{status}"


def _snippet(text: str | None) -> str:
    return (text or "")[:LOG_SNIPPET_LENGTH]


def parse_retry_after(response: httpx.Response) -> int:
    """Integer Retry-After seconds, 0 when absent or not an integer."""
    raw = response.headers.get("Retry-After")
    try:
        return int(raw) if raw is not None else 0
    except ValueError:
        return 0


def backoff_seconds(retry_after: int) -> int:
    if retry_after <= 0:
        return DEFAULT_RETRY_AFTER_SECONDS
    return min(retry_after, MAX_RETRY_AFTER_SECONDS)


def _preferred_models(model: str | None) -> list[str]:
    names = [m.strip() for m in (model or "").split(",") if m.strip()]
    return names or [DEFAULT_MODEL]


class GeminiClassifier(TicketClassifierPort):
    """Resilient classifier backed by a Gemini/Gemma model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        *,
        fallback: RuleClassifier | None = None,
        base_url: str | None = None,
        max_requests_per_run: int | None = None,
        min_delay_ms: int | None = None,
        timeout_seconds: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        request_gate: asyncio.Lock | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._api_key = (settings.gemini_api_key if api_key is None else api_key) or ""
        self._models = _preferred_models(settings.gemini_model if model is None else model)
        self._fallback = fallback or RuleClassifier()
        self._base_url = (base_url or settings.gemini_base_url).rstrip("/")

        budget = settings.gemini_max_requests_per_run if max_requests_per_run is None else max_requests_per_run
        self._max_requests = budget if budget > 0 else None
        delay = settings.gemini_min_delay_ms if min_delay_ms is None else min_delay_ms
        self._min_delay_ms = max(0, delay)

        timeout = settings.gemini_timeout_seconds if timeout_seconds is None else timeout_seconds
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

        self._gate = request_gate or asyncio.Lock()
        self._clock = clock
        self._sleep = sleep

        # Bookkeeping shared by concurrent callers
        self._state_lock = threading.Lock()
        self._resolved_model: str | None = None
        self._model_resolution_attempted = False
        self._requests_sent = 0
        self._next_allowed_at = 0.0
        self._warned_missing_key = False

    # ── Introspection ───────────────────────────────────────────────

    @property
    def requests_sent(self) -> int:
        with self._state_lock:
            return self._requests_sent

    @property
    def resolved_model(self) -> str | None:
        with self._state_lock:
            return self._resolved_model

    @property
    def next_allowed_at(self) -> float:
        with self._state_lock:
            return self._next_allowed_at

    def start_run(self) -> None:
        """Zero the request budget. Backoff and the resolved model persist."""
        with self._state_lock:
            self._requests_sent = 0

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ── Port ────────────────────────────────────────────────────────

    async def classify(
        self,
        text: str,
        attachments_raw: str = "",
        project_dir: Path | None = None,
    ) -> AIMetadata:
        text = text or ""
        attachments_raw = attachments_raw or ""
        hints = analyze_attachments(attachments_raw).context_for_nlp

        if not self._api_key.strip():
            with self._state_lock:
                warn = not self._warned_missing_key
                self._warned_missing_key = True
            if warn:
                logger.warning("GEMINI_API_KEY is not set. Using rule classifier for all tickets.")
            return self._fallback_result(text, hints, REASON_NO_API_KEY)

        project_dir = Path(project_dir) if project_dir is not None else Path(settings.project_dir)

        try:
            async with self._gate:
                result = await self._classify_remote(text, attachments_raw, project_dir, hints)
        except Exception:
            logger.exception("Gemini classification failed, using rule fallback")
            return self._fallback_result(text, hints, REASON_EXCEPTION)

        logger.info(
            "Classified ticket: type=%s lang=%s priority=%d source=%s",
            result.request_type.value, result.language.value, result.priority, result.analysis_source,
        )
        return result

    # ── Remote path ─────────────────────────────────────────────────

    async def _classify_remote(
        self, text: str, attachments_raw: str, project_dir: Path, hints: str
    ) -> AIMetadata:
        model = await self._resolve_model()
        if not model:
            return self._fallback_result(text, hints, REASON_MODEL_UNAVAILABLE)

        if not self._can_send():
            logger.warning("Gemini request budget of %d exhausted", self._max_requests)
            return self._fallback_result(text, hints, REASON_BUDGET_EXCEEDED)

        json_mode = supports_json_mode(model)
        response: httpx.Response | None = None

        for attempt, shape in enumerate(DEGRADE_LADDER):
            payload = build_request(
                text, attachments_raw, project_dir, hints, shape, model_supports_json=json_mode,
            )
            response = await self._send(model, payload, count_against_budget=attempt == 0)
            if response.status_code != 400:
                break
            logger.warning("Gemini 400 at %s: %s", shape.label, _snippet(response.text))

        status = response.status_code

        if status == 429:
            delay = self._apply_backoff(parse_retry_after(response))
            logger.warning("Gemini 429, backing off for %d s", delay)
            return self._fallback_result(text, hints, http_reason(status))

        if status == 404:
            logger.warning("Gemini 404 for model %s, invalidating model resolution", model)
            self._invalidate_model()
            return self._fallback_result(text, hints, http_reason(status))

        if not response.is_success:
            logger.warning("Gemini HTTP %d: %s", status, _snippet(response.text))
            return self._fallback_result(text, hints, http_reason(status))

        body = response.text
        raw_text = extract_model_text(body)
        if not raw_text or not raw_text.strip():
            logger.warning("Gemini 200 but empty text payload: %s", _snippet(body))
            return self._fallback_result(text, hints, REASON_EMPTY_RESPONSE)

        parsed = parse_strict(raw_text)
        if parsed is not None:
            return parsed

        rule_result = self._fallback.extract(text, hints)
        heuristic = parse_loose(raw_text, rule_result)
        if heuristic is not None:
            return heuristic

        logger.warning("Gemini 200 parse failure, raw model text: %s", _snippet(raw_text))
        return rule_result.with_source(fallback_source(REASON_PARSE_ERROR))

    async def _send(self, model: str, payload: dict, count_against_budget: bool) -> httpx.Response:
        await self._respect_pacing()
        response = await self._client.post(
            f"{self._base_url}/models/{model}:generateContent",
            params={"key": self._api_key},
            json=payload,
        )
        if count_against_budget:
            self._mark_sent()
        return response

    async def _resolve_model(self) -> str | None:
        """Intersect the preferred models with the provider's list, once."""
        with self._state_lock:
            if self._model_resolution_attempted:
                return self._resolved_model
            self._model_resolution_attempted = True

        chosen: str | None = None
        try:
            available = await self._list_models()
            chosen = next((m for m in self._models if m.casefold() in available), None)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Gemini model listing failed: %s", e)

        with self._state_lock:
            self._resolved_model = chosen

        if chosen:
            logger.info("Gemini model resolved: %s", chosen)
        else:
            logger.warning("None of the preferred models %s is available", self._models)
        return chosen

    async def _list_models(self) -> set[str]:
        available: set[str] = set()
        params = {"key": self._api_key}

        for _ in range(MAX_MODEL_PAGES):
            response = await self._client.get(f"{self._base_url}/models", params=params)
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError("Unexpected model list payload")

            for item in payload.get("models") or []:
                name = (item.get("name") or "").removeprefix("models/").strip()
                if name:
                    available.add(name.casefold())

            token = payload.get("nextPageToken")
            if not token:
                break
            params = {"key": self._api_key, "pageToken": token}

        return available

    # ── Bookkeeping ─────────────────────────────────────────────────

    def _invalidate_model(self) -> None:
        with self._state_lock:
            self._resolved_model = None
            self._model_resolution_attempted = False

    def _can_send(self) -> bool:
        with self._state_lock:
            return self._max_requests is None or self._requests_sent < self._max_requests

    def _mark_sent(self) -> None:
        with self._state_lock:
            self._requests_sent += 1
            if self._min_delay_ms > 0:
                self._next_allowed_at = self._clock() + self._min_delay_ms / 1000

    def _apply_backoff(self, retry_after: int) -> int:
        delay = backoff_seconds(retry_after)
        with self._state_lock:
            self._next_allowed_at = self._clock() + delay
        return delay

    async def _respect_pacing(self) -> None:
        with self._state_lock:
            until = self._next_allowed_at
        wait = until - self._clock()
        if wait > 0:
            logger.debug("Pacing Gemini request for %.2f s", wait)
            await self._sleep(wait)

    def _fallback_result(self, text: str, hints: str, reason: str) -> AIMetadata:
        return self._fallback.extract(text, hints).with_source(fallback_source(reason))
