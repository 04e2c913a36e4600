"""Health and version endpoints."""

from fastapi import APIRouter, Depends

from geev.config import get_settings
from geev.dependencies import get_storage
from geev.storage import KeyValueStorage, RedisStorage

router = APIRouter()


@router.get("/health")
async def health(
    storage: KeyValueStorage = Depends(get_storage),  # noqa: B008
) -> dict[str, str]:
    """Liveness probe, with the storage backend's connectivity."""
    status = "connected"
    if isinstance(storage, RedisStorage):
        try:
            await storage.ping()
        except Exception:
            status = "disconnected"
    return {"status": "ok", "storage": status}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
