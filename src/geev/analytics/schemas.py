"""Pydantic models for analytics events and metrics."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel


class EventType(str, Enum):
    PAGE_VIEW = "page_view"
    POST_CREATED = "post_created"
    ENTRY_SUBMITTED = "entry_submitted"
    LIKE_ADDED = "like_added"
    SHARE_CLICKED = "share_clicked"
    ERROR_OCCURRED = "error_occurred"


VALID_EVENTS = frozenset(e.value for e in EventType)


class TrackEventRequest(BaseModel):
    event_type: str
    event_data: dict[str, Any] = {}
    page_url: str | None = None


class TrackEventResponse(BaseModel):
    tracked: bool


class AnalyticsEvent(BaseModel):
    id: str
    user_id: str | None = None
    event_type: EventType
    event_data: dict[str, Any] = {}
    page_url: str | None = None
    user_agent: str | None = None
    created_at: datetime


class Metrics(BaseModel):
    active_users: int
    posts_created: int
    entries_submitted: int
    page_views: int


class MetricsResponse(BaseModel):
    period: str
    metrics: Metrics
