"""Persona Graph API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PersonaGraphError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py and are registered once here
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from persona_graph import __version__
from persona_graph.api.error_handlers import register_error_handlers
from persona_graph.api.routes import (
    accounts, follows, health, persona_session, personas,
)
from persona_graph.config import get_settings
from persona_graph.infrastructure import database
from persona_graph.infrastructure.observability import setup_logging

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
    logger.info("Persona Graph API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("Persona Graph API shutting down")


app = FastAPI(
    title="Persona Graph API", version=__version__, lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(personas.router)
app.include_router(persona_session.router)
app.include_router(follows.router)
app.include_router(accounts.router)

register_error_handlers(app)
