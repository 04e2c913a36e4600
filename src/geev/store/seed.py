"""Seed users and posts loaded into the store at hydration time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from geev.gamification.ranks import rank_for_level
from geev.store.schemas import (
    Badge,
    Post,
    PostCategory,
    PostStatus,
    PostType,
    SelectionMethod,
    User,
)


def _at(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class SeedData:
    """Read-only snapshot of reference users and posts."""

    users: tuple[User, ...] = ()
    posts: tuple[Post, ...] = ()


SEED_BADGES: dict[str, Badge] = {
    "first_giveaway": Badge(
        id="badge-1",
        name="First Giveaway",
        description="Created your first giveaway",
        icon="\U0001f381",
        color="bg-blue-100 text-blue-800",
        earned_at=_at("2024-01-15"),
    ),
    "generous_heart": Badge(
        id="badge-2",
        name="Generous Heart",
        description="Helped 10 people with their requests",
        icon="❤️",
        color="bg-red-100 text-red-800",
        earned_at=_at("2024-02-01"),
    ),
    "community_builder": Badge(
        id="badge-3",
        name="Community Builder",
        description="Gained 100 followers",
        icon="\U0001f3d7️",
        color="bg-green-100 text-green-800",
        earned_at=_at("2024-02-15"),
    ),
    "verified_giver": Badge(
        id="badge-4",
        name="Verified Giver",
        description="Completed 5 verified giveaways",
        icon="✅",
        color="bg-emerald-100 text-emerald-800",
        earned_at=_at("2024-03-01"),
    ),
    "top_contributor": Badge(
        id="badge-5",
        name="Top Contributor",
        description="Among top 10% of contributors",
        icon="\U0001f3c6",
        color="bg-yellow-100 text-yellow-800",
        earned_at=_at("2024-03-10"),
    ),
}

SEED_USERS: tuple[User, ...] = (
    User(
        id="user-1",
        name="Alex Chen",
        username="alexchen",
        email="alex@example.com",
        avatar="/avatars/alex.png",
        bio="Crypto enthusiast and community builder. Love helping others succeed!",
        wallet_address="0x1234...5678",
        wallet_balance=2500.75,
        followers_count=1250,
        following_count=340,
        posts_count=45,
        rank=rank_for_level(5),
        badges=tuple(SEED_BADGES.values()),
        joined_at=_at("2023-06-15"),
        is_verified=True,
    ),
    User(
        id="user-2",
        name="Sarah Johnson",
        username="sarahj",
        email="sarah@example.com",
        avatar="/avatars/sarah.png",
        bio="Artist and designer. Creating beautiful things and spreading positivity",
        wallet_address="0x2345...6789",
        wallet_balance=890.25,
        followers_count=850,
        following_count=200,
        posts_count=32,
        rank=rank_for_level(4),
        badges=(
            SEED_BADGES["first_giveaway"],
            SEED_BADGES["community_builder"],
            SEED_BADGES["verified_giver"],
        ),
        joined_at=_at("2023-09-20"),
        is_verified=True,
    ),
    User(
        id="user-3",
        name="Marcus Williams",
        username="marcusw",
        email="marcus@example.com",
        avatar="/avatars/marcus.png",
        bio="Tech entrepreneur. Building the future one project at a time",
        wallet_address="0x3456...7890",
        wallet_balance=5200.0,
        followers_count=2100,
        following_count=150,
        posts_count=67,
        rank=rank_for_level(5),
        badges=tuple(SEED_BADGES.values()),
        joined_at=_at("2023-06-10"),
        is_verified=True,
    ),
    User(
        id="user-4",
        name="Emma Rodriguez",
        username="emmar",
        email="emma@example.com",
        avatar="/avatars/emma.png",
        bio="Student learning web3. Grateful for this amazing community",
        wallet_address="0x4567...8901",
        wallet_balance=45.5,
        followers_count=120,
        following_count=310,
        posts_count=4,
        rank=rank_for_level(2),
        badges=(SEED_BADGES["first_giveaway"],),
        joined_at=_at("2024-01-05"),
    ),
    User(
        id="user-5",
        name="New User",
        username="newbie",
        email="newbie@example.com",
        avatar="/avatars/newbie.png",
        bio="Just joined Geev!",
        wallet_address="0x5678...9012",
        rank=rank_for_level(1),
        joined_at=_at("2024-03-20"),
    ),
)

_USERS = {u.id: u for u in SEED_USERS}

SEED_POSTS: tuple[Post, ...] = (
    Post(
        id="post-1",
        type=PostType.GIVEAWAY,
        category=PostCategory.GIVEAWAY,
        author_id="user-1",
        author=_USERS["user-1"],
        title="Giving away 100 XLM to celebrate 1000 followers",
        description="Thank you all for the support! Drop an entry telling me what you would build with it.",
        status=PostStatus.OPEN,
        created_at=_at("2024-03-01T10:00:00"),
        updated_at=_at("2024-03-01T10:00:00"),
        ends_at=_at("2024-03-08T10:00:00"),
        burn_count=12,
        share_count=30,
        comment_count=8,
        likes_count=54,
        entries_count=3,
        prize_amount=100,
        currency="XLM",
        max_winners=2,
        selection_method=SelectionMethod.RANDOM,
    ),
    Post(
        id="post-2",
        type=PostType.HELP_REQUEST,
        category=PostCategory.HELP_REQUEST,
        author_id="user-4",
        author=_USERS["user-4"],
        title="Help me buy a laptop for my coding bootcamp",
        description="My old laptop died mid-course. Any contribution towards a replacement helps a lot.",
        status=PostStatus.OPEN,
        created_at=_at("2024-03-05T14:30:00"),
        updated_at=_at("2024-03-05T14:30:00"),
        burn_count=4,
        share_count=9,
        comment_count=3,
        likes_count=21,
        target_amount=500,
        current_amount=120,
        currency="USDC",
    ),
    Post(
        id="post-3",
        type=PostType.GIVEAWAY,
        category=PostCategory.SKILL_SHARE,
        author_id="user-2",
        author=_USERS["user-2"],
        title="Free logo design for three community projects",
        description="I have some free time this month. Tell me about your project and I will pick three.",
        status=PostStatus.IN_PROGRESS,
        created_at=_at("2024-02-20T09:15:00"),
        updated_at=_at("2024-02-25T09:15:00"),
        burn_count=7,
        share_count=14,
        comment_count=11,
        likes_count=38,
        entries_count=11,
        max_winners=3,
        selection_method=SelectionMethod.MERIT_BASED,
        proof_required=True,
        entry_requirements=("Describe your project", "Link to a repository or website"),
    ),
    Post(
        id="post-4",
        type=PostType.GIVEAWAY,
        category=PostCategory.GIVEAWAY,
        author_id="user-3",
        author=_USERS["user-3"],
        title="First come, first served: 10 x 5 USDC",
        description="Quick giveaway for new members. First ten valid entries get 5 USDC each.",
        status=PostStatus.COMPLETED,
        created_at=_at("2024-01-10T18:00:00"),
        updated_at=_at("2024-01-11T18:00:00"),
        burn_count=20,
        share_count=41,
        comment_count=25,
        likes_count=102,
        entries_count=10,
        prize_amount=50,
        currency="USDC",
        max_winners=10,
        selection_method=SelectionMethod.FIRST_COME,
    ),
)


def default_seed() -> SeedData:
    """The bundled reference users and posts."""
    return SeedData(users=SEED_USERS, posts=SEED_POSTS)
