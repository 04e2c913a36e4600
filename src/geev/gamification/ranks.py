"""User rank thresholds and XP values per action."""

from __future__ import annotations

from geev.store.schemas import UserRank

RANK_THRESHOLDS: list[UserRank] = [
    UserRank(level=1, title="Newcomer", color="text-gray-500", min_points=0),
    UserRank(level=2, title="Helper", color="text-green-500", min_points=100),
    UserRank(level=3, title="Contributor", color="text-blue-500", min_points=500),
    UserRank(level=4, title="Champion", color="text-orange-500", min_points=1000),
    UserRank(level=5, title="Legend", color="text-purple-500", min_points=2500),
]

XP_PER_ACTION: dict[str, int] = {
    "post_created": 10,
    "giveaway_won": 50,
    "entry_submitted": 5,
    "like_given": 1,
    "like_received": 2,
}


def compute_rank(points: int) -> UserRank:
    """Highest rank whose minimum is met; negative points still map to level 1."""
    current = RANK_THRESHOLDS[0]
    for rank in RANK_THRESHOLDS:
        if points >= rank.min_points:
            current = rank
    return current


def rank_for_level(level: int) -> UserRank:
    """Look up a rank by level number."""
    for rank in RANK_THRESHOLDS:
        if rank.level == level:
            return rank
    msg = f"Unknown rank level: {level}"
    raise ValueError(msg)


def calculate_xp(action: str) -> int:
    """XP granted for a single action; unknown actions are worth nothing."""
    return XP_PER_ACTION.get(action, 0)
