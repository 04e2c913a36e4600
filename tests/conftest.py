"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from geev.analytics.schemas import EventType
from geev.analytics.service import EventLog
from geev.auth.directory import UserDirectory
from geev.config import Settings
from geev.drafts.service import DraftStore
from geev.storage import MemoryStorage
from geev.store.provider import Store
from geev.store.seed import SeedData, default_seed


class RecordingAnalytics:
    """Analytics sink that keeps every fired event in memory."""

    def __init__(self) -> None:
        self.events: list[tuple[EventType, dict[str, Any], str | None]] = []

    def fire(
        self,
        event_type: EventType,
        event_data: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> None:
        self.events.append((event_type, event_data or {}, user_id))

    def of_type(self, event_type: EventType) -> list[dict[str, Any]]:
        return [data for kind, data, _ in self.events if kind == event_type]


class RecordingStorage(MemoryStorage):
    """Memory storage that also records every write."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.writes: list[tuple[str, str]] = []

    async def set(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        await super().set(key, value)

    def writes_to(self, key: str) -> list[str]:
        return [value for k, value in self.writes if k == key]


class FailingStorage(MemoryStorage):
    """Storage whose writes always fail."""

    async def set(self, key: str, value: str) -> None:
        raise ConnectionError("storage unavailable")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        persist_debounce_seconds=0.01,
        analytics_enabled=False,
    )


@pytest.fixture
def seed() -> SeedData:
    return default_seed()


@pytest.fixture
def directory(seed: SeedData) -> UserDirectory:
    return UserDirectory(seed.users)


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def analytics() -> RecordingAnalytics:
    return RecordingAnalytics()


@pytest.fixture
def dark_mode_calls() -> list[bool]:
    return []


@pytest_asyncio.fixture
async def store(
    storage: RecordingStorage,
    seed: SeedData,
    directory: UserDirectory,
    analytics: RecordingAnalytics,
    settings: Settings,
    dark_mode_calls: list[bool],
) -> AsyncGenerator[Store, None]:
    """A store that has not been hydrated yet."""
    s = Store(
        storage=storage,
        seed=seed,
        directory=directory,
        analytics=analytics,
        settings=settings,
        apply_dark_mode=dark_mode_calls.append,
    )
    yield s
    await s.aclose()


@pytest_asyncio.fixture
async def hydrated_store(store: Store) -> Store:
    await store.hydrate()
    return store


@pytest_asyncio.fixture
async def client(
    storage: RecordingStorage,
    directory: UserDirectory,
    hydrated_store: Store,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app whose state is wired to the test fixtures."""
    from geev.main import create_app

    app = create_app()
    app.state.storage = storage
    app.state.directory = directory
    app.state.store = hydrated_store
    app.state.drafts = DraftStore(storage, key="geev_drafts")
    app.state.event_log = EventLog(max_event_bytes=10_000, cache_ttl_seconds=300)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def memory_storage():
    """Factory for RecordingStorage instances with pre-populated keys."""

    def factory(initial: dict[str, str] | None = None) -> RecordingStorage:
        return RecordingStorage(initial)

    return factory


@pytest_asyncio.fixture
async def make_store(
    seed: SeedData,
    directory: UserDirectory,
    analytics: RecordingAnalytics,
    settings: Settings,
    dark_mode_calls: list[bool],
):
    """Factory for stores over custom storage or auth; closes them on teardown."""
    created: list[Store] = []

    def factory(storage: Any, **kwargs: Any) -> Store:
        s = Store(
            storage=storage,
            seed=seed,
            directory=directory,
            analytics=analytics,
            settings=settings,
            apply_dark_mode=dark_mode_calls.append,
            **kwargs,
        )
        created.append(s)
        return s

    yield factory
    for s in created:
        await s.aclose()
