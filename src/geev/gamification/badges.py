"""Activity badge evaluation: entries plus contributions against fixed thresholds."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from geev.store.schemas import Badge, BadgeTier, Entry, HelpContribution, new_id, utcnow

logger = logging.getLogger(__name__)

# Cumulative thresholds, ascending. Every threshold met is awarded, not only the highest.
ACTIVITY_BADGES: list[dict] = [
    {
        "threshold": 1,
        "name": "First Step",
        "icon": "\U0001f463",
        "color": "bg-gray-100 text-gray-800",
        "tier": BadgeTier.BRONZE,
    },
    {
        "threshold": 5,
        "name": "Generous Giver",
        "icon": "\U0001f381",
        "color": "bg-blue-100 text-blue-800",
        "tier": BadgeTier.SILVER,
    },
    {
        "threshold": 10,
        "name": "Community Hero",
        "icon": "\U0001f9b8",
        "color": "bg-purple-100 text-purple-800",
        "tier": BadgeTier.GOLD,
    },
    {
        "threshold": 25,
        "name": "Legendary Giver",
        "icon": "⭐",
        "color": "bg-yellow-100 text-yellow-800",
        "tier": BadgeTier.PLATINUM,
    },
    {
        "threshold": 50,
        "name": "Giveaway Champion",
        "icon": "\U0001f3c6",
        "color": "bg-orange-100 text-orange-800",
        "tier": BadgeTier.DIAMOND,
    },
]


def count_activity(
    user_id: str,
    entries: Iterable[Entry],
    contributions: Iterable[HelpContribution],
) -> int:
    """Number of entries plus contributions authored by ``user_id``."""
    return sum(1 for e in entries if e.user_id == user_id) + sum(
        1 for c in contributions if c.user_id == user_id
    )


def evaluate_badges(
    user_id: str,
    entries: Iterable[Entry],
    contributions: Iterable[HelpContribution],
    existing_badges: Iterable[Badge],
    now: datetime | None = None,
) -> list[Badge]:
    """Return the activity badges ``user_id`` has newly earned, in threshold order.

    A threshold is skipped when a badge with the same name is already in
    ``existing_badges``, so repeated evaluation at the same count yields nothing.
    """
    activity = count_activity(user_id, entries, contributions)
    owned = {b.name for b in existing_badges}
    earned_at = now or utcnow()

    awarded: list[Badge] = []
    for badge_def in ACTIVITY_BADGES:
        if activity < badge_def["threshold"] or badge_def["name"] in owned:
            continue
        awarded.append(
            Badge(
                id=new_id("badge"),
                name=badge_def["name"],
                description=f"Earned after {badge_def['threshold']} giveaway/contribution activities",
                icon=badge_def["icon"],
                color=badge_def["color"],
                tier=badge_def["tier"],
                criteria=f"{badge_def['threshold']} entries or contributions",
                earned_at=earned_at,
            )
        )

    if awarded:
        logger.info(
            "User %s reached %d activities, earned: %s",
            user_id,
            activity,
            ", ".join(b.name for b in awarded),
        )
    return awarded
