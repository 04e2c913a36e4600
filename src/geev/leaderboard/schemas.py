"""Pydantic response models for the leaderboard endpoint."""

from __future__ import annotations

from pydantic import BaseModel

from geev.store.schemas import Badge


class LeaderboardEntryResponse(BaseModel):
    rank: int
    id: str
    name: str
    username: str
    avatar_url: str
    xp: int
    post_count: int
    entry_count: int
    total_contributions: int
    badges: list[Badge]


class LeaderboardResponse(BaseModel):
    leaderboard: list[LeaderboardEntryResponse]
    page: int
    limit: int
    period: str
    total: int
