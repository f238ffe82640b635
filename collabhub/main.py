"""CollabHub API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CollabError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py to keep this module's imports small
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from collabhub import __version__
from collabhub.api.error_handlers import register_error_handlers
from collabhub.api.routes import (
    admin_collaborations, analytics, brand_requests, creator_requests,
    health, profile_views,
)
from collabhub.config import get_settings
import collabhub.infrastructure.database as database
from collabhub.infrastructure.observability import setup_logging

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
    logger.info("CollabHub API started")
    yield
    if database.db_manager is not None:
        await database.db_manager.dispose()
    logger.info("CollabHub API shutting down")


app = FastAPI(title="CollabHub API", version=__version__, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(brand_requests.router)
app.include_router(creator_requests.router)
app.include_router(admin_collaborations.router)
app.include_router(analytics.router)
app.include_router(profile_views.router)

register_error_handlers(app)
