"""Processing endpoints — run a batch over the CSV dataset, classify ad-hoc text."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from triage.adapters.csv_loader.loader import load_dataset
from triage.adapters.export.results_writer import write_results
from triage.application.ports.classifier_port import TicketClassifierPort
from triage.config import settings
from triage.infrastructure.api.dependencies import (
    ResultsStore,
    build_batch_uc,
    get_classifier,
    get_results_store,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["processing"])


class ClassifyRequest(BaseModel):
    text: str
    attachments: str = ""


@router.post("/process")
async def process_all(
    classifier: TicketClassifierPort = Depends(get_classifier),
    store: ResultsStore = Depends(get_results_store),
):
    """Load the CSV dataset, classify and assign every ticket, export results."""
    data_dir = Path(settings.csv_data_path)
    if not data_dir.is_dir():
        raise HTTPException(status_code=400, detail=f"Data directory not found: {data_dir}")

    try:
        dataset = load_dataset(data_dir)
    except FileNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        logger.exception("Error reading CSV data")
        raise HTTPException(status_code=500, detail=str(e))

    try:
        result = await build_batch_uc(dataset, classifier).execute(dataset.tickets)
        store.replace(result.processed)
        write_results(settings.results_path, result.processed)
    except Exception as e:
        logger.exception("Error processing batch")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "status": "ok" if not result.aborted else "aborted",
        "total_tickets": result.total_input,
        "processed": len(result.processed),
        "assigned": result.assigned,
        "unassigned": result.unassigned,
        "error": result.error,
        "results_path": str(settings.results_path),
    }


@router.post("/classify")
async def classify_text(
    request: ClassifyRequest,
    classifier: TicketClassifierPort = Depends(get_classifier),
):
    """Classify a single piece of ticket text."""
    metadata = await classifier.classify(
        request.text, request.attachments, Path(settings.project_dir)
    )
    return metadata.to_dict()
