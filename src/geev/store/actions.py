"""Actions understood by the store reducer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from geev.store.schemas import Badge, Entry, HelpContribution, ParentType, Post, Reply, User


@dataclass(frozen=True)
class Action:
    """Base class for all reducer actions."""


# --- Replace collections ---


@dataclass(frozen=True)
class SetUser(Action):
    user: User | None


@dataclass(frozen=True)
class SetPosts(Action):
    posts: tuple[Post, ...]


@dataclass(frozen=True)
class SetUsers(Action):
    users: tuple[User, ...]


@dataclass(frozen=True)
class HydrateState(Action):
    """Merge a validated partial state, as produced by ``deserialize_state``."""

    fields: Mapping[str, Any]


# --- Posts ---


@dataclass(frozen=True)
class AddPost(Action):
    post: Post


@dataclass(frozen=True)
class UpdatePost(Action):
    post_id: str
    updates: Mapping[str, Any]


@dataclass(frozen=True)
class DeletePost(Action):
    post_id: str


@dataclass(frozen=True)
class BurnPost(Action):
    post_id: str


# --- Entries, contributions, replies ---


@dataclass(frozen=True)
class AddEntry(Action):
    entry: Entry


@dataclass(frozen=True)
class UpdateEntry(Action):
    entry_id: str
    updates: Mapping[str, Any]


@dataclass(frozen=True)
class AddContribution(Action):
    contribution: HelpContribution


@dataclass(frozen=True)
class AddReply(Action):
    parent_id: str
    parent_type: ParentType
    reply: Reply


@dataclass(frozen=True)
class BurnReply(Action):
    """Increment a reply's burn count.

    With ``parent_id``/``parent_type`` set only that parent's replies are
    searched; otherwise every entry and contribution is.
    """

    reply_id: str
    parent_id: str | None = None
    parent_type: ParentType | None = None


# --- Interactions ---


@dataclass(frozen=True)
class ToggleLike(Action):
    target_id: str


@dataclass(frozen=True)
class ToggleBurn(Action):
    target_id: str


@dataclass(frozen=True)
class IncrementShare(Action):
    post_id: str


@dataclass(frozen=True)
class AwardBadge(Action):
    user_id: str
    badge: Badge


# --- UI / meta ---


@dataclass(frozen=True)
class SetLoading(Action):
    loading: bool


@dataclass(frozen=True)
class SetError(Action):
    message: str | None


@dataclass(frozen=True)
class ToggleTheme(Action):
    pass


@dataclass(frozen=True)
class SetCreateModal(Action):
    show: bool


@dataclass(frozen=True)
class SetGiveawayModal(Action):
    show: bool


@dataclass(frozen=True)
class SetRequestModal(Action):
    show: bool
