"""Saved, unpublished post drafts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class DraftType(str, Enum):
    GIVEAWAY = "giveaway"
    REQUEST = "request"


class DraftFields(BaseModel):
    category: str | None = None
    prize_amount: float | None = None
    currency: str | None = None
    max_winners: int | None = None
    selection_method: str | None = None
    target_amount: float | None = None
    entry_requirements: list[str] | None = None
    proof_required: bool | None = None
    duration: int | None = None  # days


class Draft(DraftFields):
    id: str
    type: DraftType
    title: str
    description: str
    saved_at: datetime
    updated_at: datetime


class DraftCreateRequest(DraftFields):
    type: DraftType
    title: str
    description: str


class DraftUpdateRequest(DraftFields):
    type: DraftType | None = None
    title: str | None = None
    description: str | None = None


class DraftListResponse(BaseModel):
    drafts: list[Draft]
    total: int
