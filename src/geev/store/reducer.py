"""Pure state transitions for the application store.

``reduce(state, action)`` never mutates ``state`` and never raises. An action
that names an id which is not present leaves the affected collection as the
very same tuple object, so callers can detect no-ops with ``is``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from geev.store import actions as a
from geev.store.schemas import AppState, ParentType, Reply, Theme

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

_Handler = Callable[[AppState, Any], AppState]
_HANDLERS: dict[type[a.Action], _Handler] = {}


def _handles(action_type: type[a.Action]) -> Callable[[_Handler], _Handler]:
    def register(fn: _Handler) -> _Handler:
        _HANDLERS[action_type] = fn
        return fn

    return register


def reduce(state: AppState, action: a.Action) -> AppState:
    """Return the state that results from applying ``action`` to ``state``."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action)


# --- Helpers ---


def _map_matching(
    items: tuple[T, ...],
    predicate: Callable[[T], bool],
    transform: Callable[[T], T],
) -> tuple[T, ...]:
    """Transform the items matching ``predicate``; return ``items`` itself if none match."""
    changed = False
    result: list[T] = []
    for item in items:
        if predicate(item):
            result.append(transform(item))
            changed = True
        else:
            result.append(item)
    return tuple(result) if changed else items


def _patch(model: T, updates: Mapping[str, Any]) -> T:
    """Shallow-merge ``updates`` into ``model`` and re-validate the result.

    Unknown field names are ignored. A merge that fails validation leaves
    ``model`` as it was.
    """
    known = {k: v for k, v in updates.items() if k in type(model).model_fields and k != "id"}
    if not known:
        return model
    try:
        return type(model).model_validate({**dict(model), **known})
    except ValidationError as e:
        logger.warning(
            "patch_rejected",
            model=type(model).__name__,
            id=getattr(model, "id", None),
            errors=e.error_count(),
        )
        return model


def _with_id(target_id: str) -> Callable[[Any], bool]:
    return lambda item: item.id == target_id


def _burn_reply(replies: tuple[Reply, ...], reply_id: str) -> tuple[Reply, ...]:
    return _map_matching(
        replies,
        _with_id(reply_id),
        lambda r: r.model_copy(update={"burn_count": r.burn_count + 1}),
    )


def _burn_reply_in(items: tuple[T, ...], reply_id: str, parent_id: str | None) -> tuple[T, ...]:
    def has_reply(item: Any) -> bool:
        if parent_id is not None and item.id != parent_id:
            return False
        return any(r.id == reply_id for r in item.replies)

    return _map_matching(
        items,
        has_reply,
        lambda item: item.model_copy(update={"replies": _burn_reply(item.replies, reply_id)}),  # type: ignore[attr-defined]
    )


# --- Replace collections ---


@_handles(a.SetUser)
def _set_user(state: AppState, action: a.SetUser) -> AppState:
    return state.model_copy(update={"user": action.user})


@_handles(a.SetPosts)
def _set_posts(state: AppState, action: a.SetPosts) -> AppState:
    return state.model_copy(update={"posts": tuple(action.posts)})


@_handles(a.SetUsers)
def _set_users(state: AppState, action: a.SetUsers) -> AppState:
    return state.model_copy(update={"users": tuple(action.users)})


@_handles(a.HydrateState)
def _hydrate(state: AppState, action: a.HydrateState) -> AppState:
    fields = {k: v for k, v in action.fields.items() if k in AppState.model_fields and k != "user"}
    return state.model_copy(update=fields)


# --- Posts ---


@_handles(a.AddPost)
def _add_post(state: AppState, action: a.AddPost) -> AppState:
    return state.model_copy(update={"posts": (action.post, *state.posts)})


@_handles(a.UpdatePost)
def _update_post(state: AppState, action: a.UpdatePost) -> AppState:
    posts = _map_matching(state.posts, _with_id(action.post_id), lambda p: _patch(p, action.updates))
    return state if posts is state.posts else state.model_copy(update={"posts": posts})


@_handles(a.DeletePost)
def _delete_post(state: AppState, action: a.DeletePost) -> AppState:
    posts = tuple(p for p in state.posts if p.id != action.post_id)
    if len(posts) == len(state.posts):
        return state
    return state.model_copy(update={"posts": posts})


@_handles(a.BurnPost)
def _burn_post(state: AppState, action: a.BurnPost) -> AppState:
    posts = _map_matching(
        state.posts,
        _with_id(action.post_id),
        lambda p: p.model_copy(update={"burn_count": p.burn_count + 1}),
    )
    return state if posts is state.posts else state.model_copy(update={"posts": posts})


# --- Entries, contributions, replies ---


@_handles(a.AddEntry)
def _add_entry(state: AppState, action: a.AddEntry) -> AppState:
    return state.model_copy(update={"entries": (*state.entries, action.entry)})


@_handles(a.UpdateEntry)
def _update_entry(state: AppState, action: a.UpdateEntry) -> AppState:
    entries = _map_matching(state.entries, _with_id(action.entry_id), lambda e: _patch(e, action.updates))
    return state if entries is state.entries else state.model_copy(update={"entries": entries})


@_handles(a.AddContribution)
def _add_contribution(state: AppState, action: a.AddContribution) -> AppState:
    return state.model_copy(update={"contributions": (*state.contributions, action.contribution)})


@_handles(a.AddReply)
def _add_reply(state: AppState, action: a.AddReply) -> AppState:
    def append(item: Any) -> Any:
        return item.model_copy(update={"replies": (*item.replies, action.reply)})

    if action.parent_type == ParentType.ENTRY:
        entries = _map_matching(state.entries, _with_id(action.parent_id), append)
        return state if entries is state.entries else state.model_copy(update={"entries": entries})

    contributions = _map_matching(state.contributions, _with_id(action.parent_id), append)
    if contributions is state.contributions:
        return state
    return state.model_copy(update={"contributions": contributions})


@_handles(a.BurnReply)
def _burn_reply_action(state: AppState, action: a.BurnReply) -> AppState:
    entries = state.entries
    contributions = state.contributions

    if action.parent_type in (None, ParentType.ENTRY):
        entries = _burn_reply_in(state.entries, action.reply_id, action.parent_id)
    if action.parent_type in (None, ParentType.CONTRIBUTION):
        contributions = _burn_reply_in(state.contributions, action.reply_id, action.parent_id)

    if entries is state.entries and contributions is state.contributions:
        return state
    return state.model_copy(update={"entries": entries, "contributions": contributions})


# --- Interactions ---


@_handles(a.ToggleLike)
def _toggle_like(state: AppState, action: a.ToggleLike) -> AppState:
    liked = action.target_id not in state.likes
    likes = state.likes | {action.target_id} if liked else state.likes - {action.target_id}
    delta = 1 if liked else -1
    posts = _map_matching(
        state.posts,
        _with_id(action.target_id),
        lambda p: p.model_copy(update={"likes_count": p.likes_count + delta}),
    )
    return state.model_copy(update={"likes": likes, "posts": posts})


@_handles(a.ToggleBurn)
def _toggle_burn(state: AppState, action: a.ToggleBurn) -> AppState:
    burned = action.target_id not in state.burns
    burns = state.burns | {action.target_id} if burned else state.burns - {action.target_id}
    delta = 1 if burned else -1
    posts = _map_matching(
        state.posts,
        _with_id(action.target_id),
        lambda p: p.model_copy(update={"burn_count": p.burn_count + delta}),
    )
    return state.model_copy(update={"burns": burns, "posts": posts})


@_handles(a.IncrementShare)
def _increment_share(state: AppState, action: a.IncrementShare) -> AppState:
    posts = _map_matching(
        state.posts,
        _with_id(action.post_id),
        lambda p: p.model_copy(update={"share_count": p.share_count + 1}),
    )
    return state if posts is state.posts else state.model_copy(update={"posts": posts})


@_handles(a.AwardBadge)
def _award_badge(state: AppState, action: a.AwardBadge) -> AppState:
    def append(user: Any) -> Any:
        return user.model_copy(update={"badges": (*user.badges, action.badge)})

    user = state.user
    if user is not None and user.id == action.user_id:
        user = append(user)
    users = _map_matching(state.users, _with_id(action.user_id), append)

    if user is state.user and users is state.users:
        return state
    return state.model_copy(update={"user": user, "users": users})


# --- UI / meta ---


@_handles(a.SetLoading)
def _set_loading(state: AppState, action: a.SetLoading) -> AppState:
    return state.model_copy(update={"is_loading": action.loading})


@_handles(a.SetError)
def _set_error(state: AppState, action: a.SetError) -> AppState:
    return state.model_copy(update={"error": action.message})


@_handles(a.ToggleTheme)
def _toggle_theme(state: AppState, _action: a.ToggleTheme) -> AppState:
    theme = Theme.DARK if state.theme == Theme.LIGHT else Theme.LIGHT
    return state.model_copy(update={"theme": theme})


@_handles(a.SetCreateModal)
def _set_create_modal(state: AppState, action: a.SetCreateModal) -> AppState:
    return state.model_copy(update={"show_create_modal": action.show})


@_handles(a.SetGiveawayModal)
def _set_giveaway_modal(state: AppState, action: a.SetGiveawayModal) -> AppState:
    return state.model_copy(update={"show_giveaway_modal": action.show})


@_handles(a.SetRequestModal)
def _set_request_modal(state: AppState, action: a.SetRequestModal) -> AppState:
    return state.model_copy(update={"show_request_modal": action.show})
