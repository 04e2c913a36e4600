"""Fire-and-forget analytics sink.

Sends never block the caller and never raise into it: a failed delivery is
logged at debug level and dropped.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx
import structlog

from geev.analytics.schemas import EventType
from geev.config import Settings

logger = structlog.get_logger()


class AnalyticsSink(Protocol):
    def fire(
        self,
        event_type: EventType,
        event_data: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> None: ...


class AnalyticsClient:
    """Posts events to the analytics endpoint over HTTP."""

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 2.0,
        enabled: bool = True,
        page_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._enabled = enabled
        self.page_url = page_url
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._pending: set[asyncio.Task[bool]] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> AnalyticsClient:
        return cls(
            settings.analytics_endpoint,
            timeout=settings.analytics_timeout_seconds,
            enabled=settings.analytics_enabled,
        )

    async def track(
        self,
        event_type: EventType,
        event_data: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> bool:
        """Deliver one event. Returns False instead of raising on any failure."""
        headers = {"Content-Type": "application/json"}
        if user_id:
            headers["x-user-id"] = user_id

        try:
            response = await self._http.post(
                self._endpoint,
                headers=headers,
                json={
                    "event_type": EventType(event_type).value,
                    "event_data": event_data or {},
                    "page_url": self.page_url,
                },
            )
            response.raise_for_status()
        except Exception as exc:
            logger.debug("analytics_delivery_failed", event_type=str(event_type), error=str(exc))
            return False
        return True

    def fire(
        self,
        event_type: EventType,
        event_data: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> None:
        """Schedule ``track`` on the running loop without awaiting it."""
        if not self._enabled:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("analytics_no_event_loop", event_type=str(event_type))
            return

        task = loop.create_task(self.track(event_type, event_data, user_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def aclose(self) -> None:
        """Wait for in-flight sends, then close the HTTP client if we created it."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        if self._owns_client:
            await self._http.aclose()
