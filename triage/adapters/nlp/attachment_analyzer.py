"""Attachment analysis — sniff attachment descriptors and resolve local images."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from urllib.parse import urlparse

from triage.domain.entities.attachment_insights import AttachmentInsights

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {
    ".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp", ".tif", ".tiff", ".heic",
}
IMAGE_NAME_MARKERS = ("screenshot", "скрин", "фото", "image")

MIME_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".heic": "image/heic",
}

# Candidate sub-directories (relative to the project root) for attachment files
ATTACHMENT_DIRS = (Path("."), Path("datasets"), Path("datasets") / "attachments")

_SPLIT_RE = re.compile(r"[;|\n]")


def split_attachments(raw: str | None) -> list[str]:
    """Split a descriptor on ';', '|' or newlines, dropping blanks."""
    if not raw or not raw.strip():
        return []
    normalized = raw.replace("\r", "\n")
    return [part.strip() for part in _SPLIT_RE.split(normalized) if part.strip()]


def extract_extension(value: str) -> str:
    """Lower-cased extension of a filename, path or absolute URL."""
    parsed = urlparse(value)
    if parsed.scheme and parsed.netloc:
        value = parsed.path
    name = value.replace("\\", "/").rsplit("/", 1)[-1]
    return os.path.splitext(name)[1].lower()


def analyze_attachments(raw: str | None) -> AttachmentInsights:
    """Count attachments/images and derive hint text for the classifiers."""
    tokens = split_attachments(raw)
    if not tokens:
        return AttachmentInsights()

    image_count = 0
    context: list[str] = []

    for token in tokens:
        lower = token.lower()
        if extract_extension(lower) in IMAGE_EXTENSIONS or any(m in lower for m in IMAGE_NAME_MARKERS):
            image_count += 1

        if "error" in lower or "ошиб" in lower:
            context.append("app error screenshot")

        if "fraud" in lower or "мошен" in lower:
            context.append("fraud evidence")

    return AttachmentInsights(
        has_attachments=True,
        attachment_count=len(tokens),
        has_image_attachment=image_count > 0,
        image_attachment_count=image_count,
        context_for_nlp=" ".join(context).strip(),
    )


def _candidate_paths(token: str, project_dir: Path) -> list[Path]:
    path = Path(token)
    if path.is_absolute():
        return [path]
    return [project_dir / sub / token for sub in ATTACHMENT_DIRS]


def resolve_image_paths(raw: str | None, project_dir: Path | str) -> list[Path]:
    """Existing image files referenced by the descriptor, de-duplicated."""
    project_dir = Path(project_dir)
    result: list[Path] = []
    seen: set[str] = set()

    for token in split_attachments(raw):
        if extract_extension(token) not in IMAGE_EXTENSIONS:
            continue

        existing = next((p for p in _candidate_paths(token, project_dir) if p.is_file()), None)
        if existing is None:
            logger.debug("Attachment %s not found under %s", token, project_dir)
            continue

        key = str(existing).casefold()
        if key not in seen:
            seen.add(key)
            result.append(existing)

    return result


def mime_type_for(path: Path | str) -> str:
    return MIME_TYPES.get(Path(path).suffix.lower(), "application/octet-stream")
