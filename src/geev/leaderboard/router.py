"""Leaderboard endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from geev.config import get_settings
from geev.dependencies import get_store
from geev.leaderboard.schemas import LeaderboardResponse
from geev.leaderboard.service import build_leaderboard
from geev.store.provider import Store

router = APIRouter(prefix="/api", tags=["Leaderboard"])


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    period: str = Query("all-time", description="all-time, weekly or monthly"),
    page: int = Query(1),
    limit: int = Query(50),
    store: Store = Depends(get_store),
) -> LeaderboardResponse:
    """Users ranked by posts plus entries within the period."""
    state = store.state
    try:
        return build_leaderboard(
            state.users,
            state.posts,
            state.entries,
            period=period,
            page=page,
            limit=limit,
            max_limit=get_settings().leaderboard_max_limit,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
