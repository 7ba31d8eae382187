"""FastAPI dependency helpers resolving the handles created at startup."""
from __future__ import annotations

from fastapi import Depends, Request

from meetassist.core.settings import Settings
from meetassist.db.base import Database
from meetassist.services.gateway import PersistenceGateway
from meetassist.services.pipelines import PipelineService, Providers


def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_database(request: Request) -> Database:
    database: Database = request.app.state.database
    return database


def get_gateway(database: Database = Depends(get_database)) -> PersistenceGateway:  # noqa: B008 - FastAPI DI
    return PersistenceGateway(database)


def get_pipeline_service(
    request: Request,
    gateway: PersistenceGateway = Depends(get_gateway),  # noqa: B008 - FastAPI DI
    settings: Settings = Depends(get_app_settings),  # noqa: B008 - FastAPI DI
) -> PipelineService:
    providers: Providers = request.app.state.providers
    return PipelineService(gateway, providers, settings)
