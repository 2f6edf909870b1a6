"""generateContent request envelopes and the degrade ladder of request shapes."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from pathlib import Path

from triage.adapters.nlp.attachment_analyzer import mime_type_for, resolve_image_paths

logger = logging.getLogger(__name__)

TEMPERATURE = 0.1
JSON_MIME_TYPE = "application/json"

CLASSIFIER_PROMPT = """\
You are a strict ticket classifier for a brokerage support queue.
Return ONLY valid JSON with this schema:
{
  "requestType": "Complaint|DataChange|Consultation|Claim|AppFailure|FraudulentActivity|Spam",
  "tone": "Positive|Neutral|Negative",
  "priority": 1-10,
  "language": "RU|KZ|ENG",
  "summary": "1-2 short sentences",
  "recommendation": "clear next action for manager",
  "imageAnalysis": "short analysis of attached image(s), or empty string if no images"
}

Classification notes:
- Choose exactly one requestType from the provided list.
- Priority must be integer 1..10.
- If language is uncertain, use RU.
- summary, recommendation, and imageAnalysis must be written in the same language as the ticket (RU/KZ/ENG).
- Keep summary and recommendation concise (max about 25 words each).
- If text includes money not received/refund demand, lean to "Claim".
- If cannot login/register/app broken, lean to "AppFailure".
- If suspicious unauthorized activity, lean to "FraudulentActivity"."""


@dataclass(frozen=True)
class RequestShape:
    """One rung of the degrade ladder."""

    label: str
    include_images: bool
    include_hints: bool
    json_mode: bool


# Tried in order while the endpoint keeps answering 400.
DEGRADE_LADDER: tuple[RequestShape, ...] = (
    RequestShape("images+jsonmime", include_images=True, include_hints=True, json_mode=True),
    RequestShape("text-only+jsonmime", include_images=False, include_hints=True, json_mode=True),
    RequestShape("text-only+no-mime", include_images=False, include_hints=True, json_mode=False),
    RequestShape("minimal", include_images=False, include_hints=False, json_mode=False),
)


def supports_json_mode(model: str) -> bool:
    """Hosted Gemma variants reject responseMimeType."""
    return "gemma" not in (model or "").lower()


def _image_parts(attachments_raw: str, project_dir: Path) -> list[dict]:
    parts = []
    for path in resolve_image_paths(attachments_raw, project_dir):
        encoded = base64.b64encode(path.read_bytes()).decode("ascii")
        parts.append({"inlineData": {"mimeType": mime_type_for(path), "data": encoded}})
        logger.debug("Inlined image attachment %s", path.name)
    return parts


def build_request(
    text: str,
    attachments_raw: str,
    project_dir: Path,
    attachment_hints: str,
    shape: RequestShape,
    model_supports_json: bool = True,
) -> dict:
    """Build the generateContent body for *shape*.

    Parts are ordered: prompt, ticket text, optional hints, optional images.
    JSON mode is requested only when both the shape and the model allow it.
    """
    parts: list[dict] = [
        {"text": CLASSIFIER_PROMPT},
        {"text": f"Ticket text:\n{text}"},
    ]

    if shape.include_hints and attachment_hints and attachment_hints.strip():
        parts.append({"text": f"Attachment hints:\n{attachment_hints}"})

    if shape.include_images and attachments_raw:
        parts.extend(_image_parts(attachments_raw, project_dir))

    generation_config: dict = {"temperature": TEMPERATURE}
    if shape.json_mode and model_supports_json:
        generation_config["responseMimeType"] = JSON_MIME_TYPE

    return {
        "contents": [{"parts": parts}],
        "generationConfig": generation_config,
    }
