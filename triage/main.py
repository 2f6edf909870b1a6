"""Ticket triage — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from triage.config import settings
from triage.infrastructure.api.dependencies import shutdown
from triage.infrastructure.api.routes_dashboard import router as dashboard_router
from triage.infrastructure.api.routes_health import router as health_router
from triage.infrastructure.api.routes_processing import router as processing_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    if not settings.gemini_api_key:
        logger.info("GEMINI_API_KEY not set, tickets will be classified by rules only")
    yield
    await shutdown()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ticket Triage & Routing Engine",
        description="Multilingual ticket classification and manager assignment",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS for the dashboard frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/api")
    app.include_router(processing_router, prefix="/api")
    app.include_router(dashboard_router, prefix="/api")

    return app


app = create_app()
