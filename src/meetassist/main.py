"""Application factory for the meeting assistant FastAPI app."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from meetassist.core.errors import AppError, app_error_handler, validation_error_handler
from meetassist.core.logging import setup_logging
from meetassist.core.settings import Settings, get_settings
from meetassist.db.base import Database
from meetassist.routers import health as health_router
from meetassist.routers import meeting as meeting_router
from meetassist.routers import meetings as meetings_router
from meetassist.routers import processing as processing_router
from meetassist.services.pipelines import Providers, default_providers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    database: Database = app.state.database
    database.connect()
    if settings.auto_create_tables:
        await database.create_all()
    logger.info(f"Meeting assistant started ({settings.environment})")
    try:
        yield
    finally:
        await database.dispose()


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    providers: Providers | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(
        title="Meeting Assistant API",
        version="0.1.0",
        description="Meeting recordings to transcripts, summaries and follow-up email",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database(settings.database_url, echo=settings.sql_echo)
    app.state.providers = providers or default_providers(settings)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(meetings_router.router, prefix=settings.api_prefix)
    app.include_router(meeting_router.router, prefix=settings.api_prefix)
    app.include_router(processing_router.router, prefix=settings.api_prefix)

    # Error handlers
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    return app


app = create_app()
