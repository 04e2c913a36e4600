"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from geev.analytics.client import AnalyticsClient
from geev.analytics.router import router as analytics_router
from geev.analytics.service import EventLog
from geev.auth.directory import UserDirectory
from geev.auth.router import router as auth_router
from geev.auth.session import AuthProvider
from geev.config import get_settings
from geev.drafts.router import router as drafts_router
from geev.drafts.service import DraftStore
from geev.health.router import router as health_router
from geev.leaderboard.router import router as leaderboard_router
from geev.middleware import setup_middleware
from geev.storage import RedisStorage, create_storage
from geev.store.provider import Store
from geev.store.seed import default_seed

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    storage = create_storage(settings)
    seed = default_seed()

    directory = UserDirectory(seed.users)
    auth = AuthProvider(directory, storage, settings.auth_storage_key)
    analytics = AnalyticsClient.from_settings(settings)
    store = Store(
        storage=storage,
        seed=seed,
        directory=directory,
        auth=auth,
        analytics=analytics,
        settings=settings,
    )
    await store.hydrate()

    app.state.storage = storage
    app.state.directory = directory
    app.state.store = store
    app.state.drafts = DraftStore(storage, settings.drafts_storage_key)
    app.state.event_log = EventLog(
        max_event_bytes=settings.analytics_max_event_bytes,
        cache_ttl_seconds=settings.metrics_cache_ttl_seconds,
        max_events=settings.analytics_max_events,
    )
    logger.info("app_started", storage_backend=settings.storage_backend)

    yield

    await store.aclose()
    await analytics.aclose()
    if isinstance(storage, RedisStorage):
        await storage.aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Geev API",
        description="Backend API for Geev, a community giveaway and help-request platform",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(analytics_router)
    app.include_router(leaderboard_router)
    app.include_router(drafts_router)

    return app


app = create_app()
