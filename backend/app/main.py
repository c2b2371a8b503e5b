"""ORCID++ API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - Global error handlers map OrcidPlusError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and ORCID client initialized on startup, closed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py (ADR: ExMA import fan-out < 10)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import register_error_handlers, list_endpoints
from app.api.routes import (
    health, orcid_proxy, researchers, profiles, publications, projects,
)
from app.config import get_settings
from app.infrastructure import database
from app.infrastructure.observability import setup_logging, log_requests
from app.infrastructure.orcid_client import init_orcid_client, close_orcid_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    init_orcid_client(
        api_base_url=settings.orcid_api_base_url,
        oauth_url=settings.orcid_oauth_url,
        timeout_seconds=settings.orcid_timeout_seconds,
        max_retries=settings.orcid_max_retries,
        base_delay_ms=settings.orcid_base_delay_ms,
        max_delay_ms=settings.orcid_max_delay_ms,
    )
    logger.info("ORCID++ API started")
    yield
    logger.info("ORCID++ API shutting down")
    await close_orcid_client()
    if database.db_manager:
        await database.db_manager.close()


app = FastAPI(
    title="ORCID++ API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)

# Routes — explicit registration (ExMA: no convention-over-config)
app.include_router(health.router)
app.include_router(orcid_proxy.router)
app.include_router(researchers.router)
app.include_router(profiles.router)
app.include_router(publications.router)
app.include_router(projects.router)

register_error_handlers(app)


@app.get("/", tags=["meta"])
async def root(request: Request):
    """Service banner with the endpoint listing."""
    return {
        "message": "ORCID++ API is running",
        "version": app.version,
        "endpoints": list_endpoints(request.app),
    }
