"""Dashboard endpoint — aggregated view of the latest batch results."""

from __future__ import annotations

from collections import Counter
from datetime import datetime

from fastapi import APIRouter, Depends

from triage.domain.entities.assignment import ProcessedTicket
from triage.infrastructure.api.dependencies import ResultsStore, get_results_store

router = APIRouter(tags=["dashboard"])


def _breakdown(values) -> list[dict]:
    counts = Counter(values)
    return [
        {"key": key, "count": counts[key]}
        for key in sorted(counts, key=lambda k: (k.casefold(), k))
    ]


def _ticket_view(item: ProcessedTicket) -> dict:
    meta = item.ai_metadata
    return {
        "client_id": item.ticket.guid,
        "segment": item.ticket.segment,
        "request_type": meta.request_type.value,
        "tone": meta.tone.value,
        "priority": meta.priority,
        "language": meta.language.value,
        "office": item.selected_office,
        "manager": item.selected_manager,
        "assignment_reason": item.assignment_reason,
        "has_image_attachment": item.attachment_insights.has_image_attachment,
        "summary": meta.summary,
        "recommendation": meta.recommendation,
        "analysis_source": meta.analysis_source,
    }


def build_dashboard(items: list[ProcessedTicket], generated_at: datetime | None) -> dict:
    return {
        "generated_at": generated_at.isoformat() if generated_at else None,
        "total_tickets": len(items),
        "unassigned_tickets": sum(1 for i in items if not i.is_assigned),
        "tickets_with_images": sum(1 for i in items if i.attachment_insights.has_image_attachment),
        "by_request_type": _breakdown(i.ai_metadata.request_type.value for i in items),
        "by_tone": _breakdown(i.ai_metadata.tone.value for i in items),
        "by_office": _breakdown(i.selected_office or "-" for i in items),
        "tickets": [_ticket_view(i) for i in items],
    }


@router.get("/dashboard")
async def dashboard(store: ResultsStore = Depends(get_results_store)):
    """Aggregate stats for the dashboard."""
    items, generated_at = store.snapshot()
    return build_dashboard(items, generated_at)
