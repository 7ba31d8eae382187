"""Health and readiness endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy import text

from meetassist import __version__
from meetassist.core.settings import Settings
from meetassist.db.base import Database
from meetassist.db.dependencies import get_app_settings, get_database

router = APIRouter()


@router.get("/health", tags=["meta"])  # simple health
async def health(settings: Settings = Depends(get_app_settings)) -> dict[str, object]:  # noqa: B008
    return {
        "status": "ok",
        "environment": settings.environment,
        "debug": settings.debug,
        "version": __version__,
        "providers": {
            "transcription": bool(settings.elevenlabs_api_key),
            "summarization": bool(settings.deepseek_api_key),
            "email": bool(settings.resend_api_key),
        },
    }


@router.get("/health/db", tags=["meta"])
async def database_health(database: Database = Depends(get_database)) -> dict[str, object]:  # noqa: B008
    """Database round-trip check."""
    try:
        async with database.session() as session:
            await session.execute(text("SELECT 1"))
        return {"status": "ok", "database_connected": True}
    except Exception as e:
        return {"status": "error", "database_connected": False, "error": str(e)}
