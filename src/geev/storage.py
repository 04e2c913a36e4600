"""String key-value storage backends.

The store persists its snapshot, the theme preference, the auth record and
drafts as plain strings under fixed keys. Two backends share one async
interface: an in-process dict and Redis.
"""

from __future__ import annotations

from typing import Protocol

import redis.asyncio as redis

from geev.config import Settings


class KeyValueStorage(Protocol):
    """Async string key-value store."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage, local to the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class RedisStorage:
    """Redis-backed storage using a shared connection pool."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisStorage:
        client = redis.from_url(  # type: ignore[no-untyped-call]
            url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
        return cls(client)

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str) -> None:
        await self._client.set(key, value)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def aclose(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()


def create_storage(settings: Settings) -> KeyValueStorage:
    """Build the storage backend selected by ``settings.storage_backend``."""
    if settings.storage_backend == "redis":
        return RedisStorage.from_url(settings.redis_url)
    if settings.storage_backend == "memory":
        return MemoryStorage()
    msg = f"Unknown storage backend: {settings.storage_backend}"
    raise ValueError(msg)
