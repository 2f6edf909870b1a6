"""Health check endpoint."""

from fastapi import APIRouter, Depends

from triage.infrastructure.api.dependencies import ResultsStore, get_results_store

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(store: ResultsStore = Depends(get_results_store)):
    """Liveness plus the size of the current results set."""
    return {"status": "ok", "total_tickets": len(store)}
