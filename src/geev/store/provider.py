"""Application state store.

``Store`` owns one ``AppState`` and exposes the action surface used by the
API and by tests. Every action goes through ``dispatch``, which runs the pure
reducer and then fans out the side effects: subscriber notification,
debounced snapshot persistence and theme sync. Side effects never block or
roll back a state change.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

import structlog

from geev.analytics.client import AnalyticsSink
from geev.analytics.schemas import EventType
from geev.auth.directory import UserDirectory
from geev.auth.schemas import Session, WalletCredentials
from geev.auth.session import AuthProvider
from geev.auth.wallet import authorize
from geev.config import Settings, get_settings
from geev.exceptions import NotAuthenticatedError
from geev.gamification.badges import evaluate_badges
from geev.storage import KeyValueStorage
from geev.store import actions as a
from geev.store.codec import deserialize_state, serialize_state
from geev.store.reducer import reduce
from geev.store.schemas import (
    AppState,
    Badge,
    Entry,
    HelpContribution,
    ParentType,
    Post,
    ProofData,
    Reply,
    Theme,
    User,
    new_id,
    utcnow,
)
from geev.store.seed import SeedData

logger = structlog.get_logger()

Listener = Callable[[AppState], None]

MAX_ERROR_MESSAGE_LENGTH = 200


def _truncate(message: str, limit: int = MAX_ERROR_MESSAGE_LENGTH) -> str:
    return message if len(message) <= limit else message[:limit] + "…"


class Store:
    """Holds the application state for one client session.

    Construct it inside a running event loop: persistence and theme writes
    are scheduled on that loop.
    """

    def __init__(
        self,
        *,
        storage: KeyValueStorage,
        seed: SeedData,
        directory: UserDirectory,
        auth: AuthProvider | None = None,
        analytics: AnalyticsSink | None = None,
        settings: Settings | None = None,
        apply_dark_mode: Callable[[bool], None] | None = None,
        initial_state: AppState | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._storage = storage
        self._seed = seed
        self._directory = directory
        self._auth = auth
        self._analytics = analytics
        self._apply_dark_mode = apply_dark_mode

        self._state = initial_state or AppState()
        self._hydrated = False
        self._listeners: list[Listener] = []
        self._persist_handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()

        self._unsubscribe_auth = auth.subscribe(self.sync_session) if auth is not None else None

    # --- State access ---

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def is_hydrated(self) -> bool:
        return self._hydrated

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: a.Action) -> AppState:
        previous = self._state
        state = reduce(previous, action)
        if state is previous:
            return state

        self._state = state
        if self._hydrated and state.theme != previous.theme:
            self._sync_theme(state.theme)
        for listener in list(self._listeners):
            listener(state)
        if self._hydrated:
            self._schedule_persist()
        return state

    # --- Lifecycle ---

    async def hydrate(self) -> None:
        """Load the persisted snapshot and seed data. Runs at most once."""
        if self._hydrated:
            return

        raw = await self._read(self._settings.state_storage_key)
        if raw:
            fields = deserialize_state(raw)
            if fields is not None:
                self.dispatch(a.HydrateState(fields))

        # Seed users and posts always win over the snapshot.
        self.dispatch(a.SetUsers(self._seed.users))
        self.dispatch(a.SetPosts(self._seed.posts))

        saved_theme = await self._read(self._settings.theme_storage_key)
        if saved_theme in (Theme.LIGHT.value, Theme.DARK.value) and saved_theme != self._state.theme.value:
            self.dispatch(a.ToggleTheme())
        if self._apply_dark_mode is not None:
            self._apply_dark_mode(self._state.theme == Theme.DARK)

        if self._auth is not None:
            if self._auth.session is None:
                await self._auth.restore()
            else:
                self.sync_session(self._auth.session)

        self._hydrated = True
        logger.info("store_hydrated", posts=len(self._state.posts), users=len(self._state.users))
        self._schedule_persist()

    async def flush(self) -> None:
        """Write the current state now if a debounced write is pending."""
        if self._persist_handle is None:
            return
        self._persist_handle.cancel()
        self._persist_handle = None
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self._write_snapshot(serialize_state(self._state))

    async def aclose(self) -> None:
        """Flush pending persistence and wait for outstanding side tasks."""
        if self._unsubscribe_auth is not None:
            self._unsubscribe_auth()
            self._unsubscribe_auth = None
        await self.flush()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def sync_session(self, session: Session | None) -> None:
        """Mirror an auth session into the ``user`` slot."""
        if session is None:
            self.dispatch(a.SetUser(None))
            return

        user = self._directory.lookup_user_by_id(session.user_id)
        if user is None:
            logger.warning("session_user_not_found", user_id=session.user_id)
            return
        self.dispatch(a.SetUser(user))

    # --- Session ---

    async def login(self, user_id: str) -> User | None:
        """Mock login as an existing user."""
        if self._auth is not None:
            session = await self._auth.sign_in_user(user_id)
            return self._state.user if session is not None else None

        user = self._directory.lookup_user_by_id(user_id)
        if user is not None:
            self.dispatch(a.SetUser(user))
        return user

    async def login_with_wallet(self, credentials: WalletCredentials) -> User | None:
        """Sign in with a wallet signature, registering the wallet when a username is given.

        Returns None for a bad signature or an unknown wallet without a username.
        """
        if self._auth is not None:
            session = await self._auth.sign_in(credentials)
            return self._state.user if session is not None else None

        user = authorize(credentials, self._directory)
        if user is not None:
            self.dispatch(a.SetUser(user))
        return user

    async def logout(self) -> None:
        if self._auth is not None:
            await self._auth.sign_out()
        else:
            self.dispatch(a.SetUser(None))

    def set_current_user(self, user: User | None) -> None:
        self.dispatch(a.SetUser(user))

    # --- Posts ---

    def create_post(self, **fields: Any) -> Post:
        """Create a post authored by the current user, with fresh counters."""
        user = self._require_user()
        now = utcnow()
        post = Post.model_validate(
            {
                **fields,
                "id": new_id("post"),
                "author_id": user.id,
                "author": user,
                "created_at": now,
                "updated_at": now,
                "burn_count": 0,
                "share_count": 0,
                "comment_count": 0,
                "likes_count": 0,
                "entries_count": 0,
                "entries": (),
                "contributions": (),
            }
        )
        self.dispatch(a.AddPost(post))
        self._track(
            EventType.POST_CREATED,
            {
                "postId": post.id,
                "category": post.category.value if post.category else None,
                "type": post.type.value,
            },
        )
        return post

    def add_post(self, post: Post) -> None:
        self.dispatch(a.AddPost(post))

    def update_post(self, post_id: str, **updates: Any) -> None:
        self.dispatch(a.UpdatePost(post_id, updates))

    def delete_post(self, post_id: str) -> None:
        self.dispatch(a.DeletePost(post_id))

    def burn_post(self, post_id: str) -> None:
        self.dispatch(a.BurnPost(post_id))

    # --- Entries and contributions ---

    def submit_entry(
        self,
        post_id: str,
        *,
        message: str | None = None,
        content: str | None = None,
        proof_url: str | None = None,
        proof: ProofData | dict[str, str] | None = None,
    ) -> Entry:
        """Enter the current user into a giveaway, then award any badges earned."""
        user = self._require_user()
        entry = Entry.model_validate(
            {
                "id": new_id("entry"),
                "post_id": post_id,
                "user_id": user.id,
                "user": user,
                "message": message,
                "content": content,
                "proof_url": proof_url,
                "proof": proof,
                "submitted_at": utcnow(),
            }
        )
        self.dispatch(a.AddEntry(entry))
        self._track(EventType.ENTRY_SUBMITTED, {"postId": post_id, "entryId": entry.id})
        self._award_badges(user.id)
        return entry

    def add_entry(self, entry: Entry) -> None:
        self.dispatch(a.AddEntry(entry))

    def update_entry(self, entry_id: str, **updates: Any) -> None:
        self.dispatch(a.UpdateEntry(entry_id, updates))

    def make_contribution(
        self,
        post_id: str,
        amount: float,
        *,
        currency: str | None = None,
        message: str | None = None,
        is_anonymous: bool = False,
    ) -> HelpContribution:
        """Contribute to a help request as the current user, then award any badges earned."""
        user = self._require_user()
        contribution = HelpContribution(
            id=new_id("contribution"),
            post_id=post_id,
            user_id=user.id,
            user=user,
            amount=amount,
            currency=currency,
            message=message,
            is_anonymous=is_anonymous,
            contributed_at=utcnow(),
        )
        self.dispatch(a.AddContribution(contribution))
        self._award_badges(user.id)
        return contribution

    # --- Replies ---

    def add_reply(self, parent_id: str, parent_type: ParentType | str, content: str) -> Reply:
        user = self._require_user()
        parent_type = ParentType(parent_type)
        reply = Reply(
            id=new_id(f"reply_{parent_type.value}"),
            parent_id=parent_id,
            parent_type=parent_type,
            user_id=user.id,
            user=user,
            content=content,
            created_at=utcnow(),
        )
        self.dispatch(a.AddReply(parent_id, parent_type, reply))
        return reply

    def burn_reply(
        self,
        reply_id: str,
        parent_id: str | None = None,
        parent_type: ParentType | str | None = None,
    ) -> None:
        scope = ParentType(parent_type) if parent_type is not None else None
        self.dispatch(a.BurnReply(reply_id, parent_id, scope))

    # --- Interactions ---

    def toggle_like(self, target_id: str) -> None:
        was_liked = target_id in self._state.likes
        self.dispatch(a.ToggleLike(target_id))
        if not was_liked:
            self._track(EventType.LIKE_ADDED, {"postId": target_id})

    def toggle_burn(self, target_id: str) -> None:
        self.dispatch(a.ToggleBurn(target_id))

    def increment_share(self, post_id: str) -> None:
        self.dispatch(a.IncrementShare(post_id))
        self._track(EventType.SHARE_CLICKED, {"postId": post_id})

    # --- UI / meta ---

    def set_error(
        self,
        message: str | None,
        *,
        source: str = "store",
        auto_clear_after: float | None = None,
    ) -> None:
        """Set the error field; with ``auto_clear_after`` the same message is cleared later."""
        self.dispatch(a.SetError(message))
        if not message:
            return

        self._track(EventType.ERROR_OCCURRED, {"message": _truncate(message), "source": source})
        if auto_clear_after is not None:
            asyncio.get_running_loop().call_later(auto_clear_after, self._clear_error_if, message)

    def clear_error(self) -> None:
        self.dispatch(a.SetError(None))

    def set_loading(self, loading: bool) -> None:
        self.dispatch(a.SetLoading(loading))

    def toggle_theme(self) -> None:
        self.dispatch(a.ToggleTheme())

    def set_show_create_modal(self, show: bool) -> None:
        self.dispatch(a.SetCreateModal(show))

    def set_show_giveaway_modal(self, show: bool) -> None:
        self.dispatch(a.SetGiveawayModal(show))

    def set_show_request_modal(self, show: bool) -> None:
        self.dispatch(a.SetRequestModal(show))

    def track_page_view(self, page_url: str, **data: Any) -> None:
        self._track(EventType.PAGE_VIEW, {"page": page_url, **data})

    # --- Internals ---

    def _require_user(self) -> User:
        if self._state.user is None:
            msg = "A logged-in user is required"
            raise NotAuthenticatedError(msg)
        return self._state.user

    def _award_badges(self, user_id: str) -> list[Badge]:
        state = self._state
        user = next((u for u in state.users if u.id == user_id), None)
        if user is None and state.user is not None and state.user.id == user_id:
            user = state.user
        if user is None:
            return []

        badges = evaluate_badges(user_id, state.entries, state.contributions, user.badges)
        for badge in badges:
            self.dispatch(a.AwardBadge(user_id, badge))
        return badges

    def _clear_error_if(self, message: str) -> None:
        if self._state.error == message:
            self.clear_error()

    def _track(self, event_type: EventType, data: dict[str, Any]) -> None:
        if self._analytics is None:
            return
        user_id = self._state.user.id if self._state.user is not None else None
        try:
            self._analytics.fire(event_type, data, user_id)
        except Exception:
            logger.debug("analytics_fire_failed", event_type=event_type.value, exc_info=True)

    def _sync_theme(self, theme: Theme) -> None:
        self._spawn(self._write(self._settings.theme_storage_key, theme.value, "theme_persist_failed"))
        if self._apply_dark_mode is not None:
            self._apply_dark_mode(theme == Theme.DARK)

    def _schedule_persist(self) -> None:
        if self._persist_handle is not None:
            self._persist_handle.cancel()
        loop = asyncio.get_running_loop()
        self._persist_handle = loop.call_later(self._settings.persist_debounce_seconds, self._persist_now)

    def _persist_now(self) -> None:
        self._persist_handle = None
        self._spawn(self._write_snapshot(serialize_state(self._state)))

    async def _write_snapshot(self, snapshot: str) -> None:
        await self._write(self._settings.state_storage_key, snapshot, "state_persist_failed")

    async def _write(self, key: str, value: str, failure_event: str) -> None:
        try:
            await self._storage.set(key, value)
        except Exception:
            logger.error(failure_event, key=key, exc_info=True)

    async def _read(self, key: str) -> str | None:
        try:
            return await self._storage.get(key)
        except Exception:
            logger.warning("storage_read_failed", key=key, exc_info=True)
            return None

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
