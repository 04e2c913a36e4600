"""Analytics ingestion and metrics endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Query

from geev.analytics.schemas import VALID_EVENTS, MetricsResponse, TrackEventRequest, TrackEventResponse
from geev.analytics.service import DEFAULT_PERIOD, EventLog
from geev.dependencies import get_event_log
from geev.exceptions import EventPayloadTooLargeError

logger = structlog.get_logger()

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.post("/events", response_model=TrackEventResponse)
async def track_event(
    body: TrackEventRequest,
    x_user_id: str | None = Header(None),
    user_agent: str | None = Header(None),
    event_log: EventLog = Depends(get_event_log),
) -> TrackEventResponse:
    """Record one client event. Storage failures degrade to ``tracked: false``."""
    if body.event_type not in VALID_EVENTS:
        raise HTTPException(status_code=400, detail="Invalid event type")

    try:
        event_log.record(body, user_id=x_user_id, user_agent=user_agent)
    except EventPayloadTooLargeError as e:
        raise HTTPException(status_code=400, detail="Event data too large") from e
    except Exception:
        logger.error("analytics_tracking_failed", event_type=body.event_type, exc_info=True)
        return TrackEventResponse(tracked=False)

    return TrackEventResponse(tracked=True)


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(
    period: str = Query(DEFAULT_PERIOD, description="24h, 7d or 30d"),
    event_log: EventLog = Depends(get_event_log),
) -> MetricsResponse:
    """Aggregated counts for the period, cached per period."""
    return event_log.metrics(period)
