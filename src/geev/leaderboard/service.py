"""Leaderboard ranking over the in-memory users, posts and entries.

Users are scored by ``total_contributions`` (posts authored plus entries
submitted inside the period), sorted descending, then paginated.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from geev.gamification.ranks import calculate_xp
from geev.leaderboard.schemas import LeaderboardEntryResponse, LeaderboardResponse
from geev.store.schemas import Entry, Post, User, utcnow

MAX_LIMIT = 100

PERIOD_WINDOWS: dict[str, timedelta] = {
    "weekly": timedelta(days=7),
    "monthly": timedelta(days=30),
}


def period_start(period: str, now: datetime | None = None) -> datetime | None:
    """Start of the ranking window; None means all time (also for unknown periods)."""
    window = PERIOD_WINDOWS.get(period)
    if window is None:
        return None
    return (now or utcnow()) - window


def build_leaderboard(
    users: Sequence[User],
    posts: Iterable[Post],
    entries: Iterable[Entry],
    *,
    period: str = "all-time",
    page: int = 1,
    limit: int = 50,
    now: datetime | None = None,
    max_limit: int = MAX_LIMIT,
) -> LeaderboardResponse:
    """Rank users by contributions within ``period``.

    Raises:
        ValueError: If ``page < 1``, ``limit < 1`` or ``limit > max_limit``.
    """
    if page < 1 or limit < 1 or limit > max_limit:
        msg = "Invalid pagination parameters"
        raise ValueError(msg)

    since = period_start(period, now)
    post_counts = Counter(p.author_id for p in posts if since is None or p.created_at >= since)
    entry_counts = Counter(e.user_id for e in entries if since is None or e.submitted_at >= since)

    rows: list[dict] = []
    for user in users:
        post_count = post_counts[user.id]
        entry_count = entry_counts[user.id]
        rows.append(
            {
                "id": user.id,
                "name": user.name,
                "username": user.username,
                "avatar_url": user.avatar,
                "xp": post_count * calculate_xp("post_created") + entry_count * calculate_xp("entry_submitted"),
                "post_count": post_count,
                "entry_count": entry_count,
                "total_contributions": post_count + entry_count,
                "badges": sorted(user.badges, key=lambda b: b.tier or 0, reverse=True),
            }
        )

    rows.sort(key=lambda r: r["total_contributions"], reverse=True)

    offset = (page - 1) * limit
    page_rows = rows[offset : offset + limit]
    return LeaderboardResponse(
        leaderboard=[
            LeaderboardEntryResponse(rank=offset + i + 1, **row) for i, row in enumerate(page_rows)
        ],
        page=page,
        limit=limit,
        period=period,
        total=len(rows),
    )
