"""Domain models held by the application state store.

Every model is frozen: reducers build new instances with ``model_copy``
instead of assigning attributes. Collections are tuples and membership sets
are frozensets so a state value can be shared safely between snapshots.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_serializer


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Mint a globally unique, prefixed identifier."""
    return f"{prefix}_{uuid.uuid4().hex}"


# --- Enums ---


class PostType(str, Enum):
    GIVEAWAY = "giveaway"
    HELP_REQUEST = "help-request"


class PostCategory(str, Enum):
    GIVEAWAY = "giveaway"
    HELP_REQUEST = "help-request"
    SKILL_SHARE = "skill-share"


class PostStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SelectionMethod(str, Enum):
    RANDOM = "random"
    FIRST_COME = "first-come"
    MERIT_BASED = "merit-based"


class BadgeTier(IntEnum):
    BRONZE = 1
    SILVER = 2
    GOLD = 3
    PLATINUM = 4
    DIAMOND = 5


class ParentType(str, Enum):
    """Discriminator routing a reply to the entry or contribution collection."""

    ENTRY = "entry"
    CONTRIBUTION = "contribution"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Users ---


class UserRank(_Frozen):
    level: int
    title: str
    color: str = ""
    min_points: int = 0


class Badge(_Frozen):
    id: str
    name: str
    description: str
    icon: str
    color: str | None = None
    tier: BadgeTier | None = None
    xp_reward: int | None = None
    criteria: str | None = None
    earned_at: datetime | None = None


class User(_Frozen):
    id: str
    name: str
    username: str
    email: str = ""
    avatar: str = ""
    bio: str = ""
    public_key: str | None = None
    wallet_address: str | None = None
    wallet_balance: float = 0.0
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    rank: UserRank
    badges: tuple[Badge, ...] = ()
    joined_at: datetime
    is_verified: bool = False


# --- Posts, entries, contributions, replies ---


class MediaFile(_Frozen):
    id: str
    url: str
    type: Literal["image", "video"]
    thumbnail: str | None = None


class ProofData(_Frozen):
    type: Literal["image", "link"]
    url: str


class Reply(_Frozen):
    id: str
    parent_id: str
    parent_type: ParentType
    user_id: str
    user: User | None = None
    content: str
    burn_count: int = 0
    created_at: datetime


class Entry(_Frozen):
    id: str
    post_id: str
    user_id: str
    user: User | None = None
    message: str | None = None
    content: str | None = None
    proof_url: str | None = None
    proof: ProofData | None = None
    is_winner: bool = False
    submitted_at: datetime
    replies: tuple[Reply, ...] = ()


class HelpContribution(_Frozen):
    id: str
    post_id: str
    user_id: str
    user: User | None = None
    amount: float
    currency: str | None = None
    message: str | None = None
    is_anonymous: bool = False
    contributed_at: datetime
    replies: tuple[Reply, ...] = ()


class Post(_Frozen):
    id: str
    type: PostType
    category: PostCategory | None = None
    author_id: str
    author: User | None = None
    title: str
    description: str
    media: tuple[MediaFile, ...] = ()
    status: PostStatus = PostStatus.OPEN
    created_at: datetime
    updated_at: datetime
    ends_at: datetime | None = None

    burn_count: int = 0
    share_count: int = 0
    comment_count: int = 0
    likes_count: int = 0
    entries_count: int = 0

    # Giveaway fields
    prize_amount: float | None = None
    currency: str | None = None
    max_winners: int | None = None
    selection_method: SelectionMethod | None = None
    proof_required: bool = False
    entry_requirements: tuple[str, ...] = ()
    winners: tuple[str, ...] = ()
    entries: tuple[Entry, ...] = ()

    # Help request fields
    target_amount: float | None = None
    current_amount: float | None = None
    contributions: tuple[HelpContribution, ...] = ()


# --- Store state ---


class AppState(_Frozen):
    """Everything the store holds for one client session."""

    user: User | None = None
    posts: tuple[Post, ...] = ()
    users: tuple[User, ...] = ()
    entries: tuple[Entry, ...] = ()
    contributions: tuple[HelpContribution, ...] = ()
    replies: tuple[Reply, ...] = ()
    likes: frozenset[str] = frozenset()
    burns: frozenset[str] = frozenset()
    is_loading: bool = False
    error: str | None = None
    theme: Theme = Theme.LIGHT
    show_create_modal: bool = False
    show_giveaway_modal: bool = False
    show_request_modal: bool = False

    @field_serializer("likes", "burns", when_used="json")
    def _sorted_ids(self, ids: frozenset[str]) -> list[str]:
        return sorted(ids)
