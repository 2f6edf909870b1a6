"""Results export — one CSV row per processed ticket."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable

from triage.domain.entities.assignment import ProcessedTicket

logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "ClientId",
    "Segment",
    "Language",
    "RequestType",
    "Tone",
    "Priority",
    "HasImageAttachment",
    "SelectedOffice",
    "SelectedManager",
    "AssignmentReason",
    "Summary",
    "Recommendation",
    "AnalysisSource",
]
UNASSIGNED = "UNASSIGNED"


def to_row(item: ProcessedTicket) -> list[str]:
    meta = item.ai_metadata
    return [
        item.ticket.guid,
        item.ticket.segment,
        meta.language.value,
        meta.request_type.value,
        meta.tone.value,
        str(meta.priority),
        str(item.attachment_insights.has_image_attachment),
        item.selected_office,
        item.selected_manager or UNASSIGNED,
        item.assignment_reason,
        meta.summary,
        meta.recommendation,
        meta.analysis_source,
    ]


def write_results(path: Path | str, rows: Iterable[ProcessedTicket]) -> int:
    """Write *rows* to a UTF-8 CSV at *path*; returns the number of rows written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(RESULT_COLUMNS)
        for item in rows:
            writer.writerow(to_row(item))
            count += 1

    logger.info("Wrote %d results to %s", count, path)
    return count
