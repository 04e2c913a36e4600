"""In-memory analytics event log with per-period cached metrics."""

from __future__ import annotations

import json
from collections import deque
from datetime import datetime, timedelta

import structlog

from geev.analytics.schemas import AnalyticsEvent, EventType, Metrics, MetricsResponse, TrackEventRequest
from geev.exceptions import EventPayloadTooLargeError
from geev.store.schemas import new_id, utcnow

logger = structlog.get_logger()

PERIODS: dict[str, timedelta] = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
DEFAULT_PERIOD = "7d"
RETENTION = max(PERIODS.values())


class EventLog:
    """Stores ingested events and answers metrics queries.

    Metrics for a period are computed once and served from cache until
    ``cache_ttl_seconds`` have passed. Events older than the longest period
    are dropped, and at most ``max_events`` are kept.
    """

    def __init__(
        self,
        *,
        max_event_bytes: int = 10_000,
        cache_ttl_seconds: int = 300,
        max_events: int = 100_000,
    ) -> None:
        self.max_event_bytes = max_event_bytes
        self.cache_ttl = timedelta(seconds=cache_ttl_seconds)
        self._events: deque[AnalyticsEvent] = deque(maxlen=max_events)
        self._cache: dict[str, tuple[MetricsResponse, datetime]] = {}

    def __len__(self) -> int:
        return len(self._events)

    def record(
        self,
        request: TrackEventRequest,
        user_id: str | None = None,
        user_agent: str | None = None,
        now: datetime | None = None,
    ) -> AnalyticsEvent:
        """Validate and append one event.

        Raises ValueError for an unknown event type and
        EventPayloadTooLargeError when the JSON payload exceeds the limit.
        """
        event_type = EventType(request.event_type)
        size = len(json.dumps(request.event_data))
        if size > self.max_event_bytes:
            raise EventPayloadTooLargeError(size, self.max_event_bytes)

        event = AnalyticsEvent(
            id=new_id("evt"),
            user_id=user_id or None,
            event_type=event_type,
            event_data=request.event_data,
            page_url=request.page_url,
            user_agent=user_agent,
            created_at=now or utcnow(),
        )
        self._events.append(event)
        self._expire(event.created_at)
        logger.debug("analytics_event_recorded", event_type=event_type.value, user_id=user_id)
        return event

    def metrics(self, period: str = DEFAULT_PERIOD, now: datetime | None = None) -> MetricsResponse:
        """Aggregate events for ``period`` ("24h", "7d" or "30d"; anything else means "7d")."""
        now = now or utcnow()
        key = period if period in PERIODS else DEFAULT_PERIOD
        cached = self._cache.get(key)
        if cached is None or cached[1] <= now:
            cached = (self._aggregate(key, now), now + self.cache_ttl)
            self._cache[key] = cached

        payload = cached[0]
        return payload if key == period else payload.model_copy(update={"period": period})

    def _aggregate(self, period: str, now: datetime) -> MetricsResponse:
        since = now - PERIODS[period]
        window = [e for e in self._events if e.created_at >= since]

        def count(event_type: EventType) -> int:
            return sum(1 for e in window if e.event_type == event_type)

        return MetricsResponse(
            period=period,
            metrics=Metrics(
                active_users=len({e.user_id for e in window if e.user_id}),
                posts_created=count(EventType.POST_CREATED),
                entries_submitted=count(EventType.ENTRY_SUBMITTED),
                page_views=count(EventType.PAGE_VIEW),
            ),
        )

    def _expire(self, now: datetime) -> None:
        cutoff = now - RETENTION
        while self._events and self._events[0].created_at < cutoff:
            self._events.popleft()
