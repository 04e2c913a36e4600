"""Store provider tests: hydration, debounced persistence, session and theme sync,
badge awarding and analytics events."""

from __future__ import annotations

import asyncio
import json

import pytest

from geev.analytics.schemas import EventType
from geev.auth.schemas import WalletCredentials
from geev.auth.session import AuthProvider
from geev.exceptions import NotAuthenticatedError
from geev.store.codec import serialize_state
from geev.store.provider import Store
from geev.store.schemas import AppState, ParentType, Theme
from geev.store.seed import SEED_POSTS

STATE_KEY = "geev_app_state"
THEME_KEY = "theme"

# Comfortably longer than the 10ms debounce used by the test settings.
SETTLE = 0.08


async def _settle() -> None:
    await asyncio.sleep(SETTLE)


class TestHydration:
    @pytest.mark.asyncio
    async def test_hydrate_without_snapshot(self, store, storage, seed):
        await store.hydrate()

        assert store.is_hydrated
        assert store.state.users == seed.users
        assert store.state.posts == seed.posts
        assert store.state.likes == frozenset()

        await _settle()
        assert len(storage.writes_to(STATE_KEY)) == 1

    @pytest.mark.asyncio
    async def test_hydrate_restores_snapshot(self, make_store, memory_storage):
        snapshot = AppState(likes=frozenset({"post-1"}), burns=frozenset({"post-2"}), error="stale")
        store = make_store(memory_storage({STATE_KEY: serialize_state(snapshot)}))

        await store.hydrate()

        assert store.state.likes == frozenset({"post-1"})
        assert store.state.burns == frozenset({"post-2"})
        assert store.state.error == "stale"

    @pytest.mark.asyncio
    async def test_seed_posts_replace_snapshot_posts(self, make_store, memory_storage):
        snapshot = AppState(posts=SEED_POSTS[:1])
        store = make_store(memory_storage({STATE_KEY: serialize_state(snapshot)}))

        await store.hydrate()

        assert store.state.posts == SEED_POSTS

    @pytest.mark.asyncio
    async def test_corrupt_snapshot_falls_back_to_defaults(self, make_store, memory_storage):
        store = make_store(memory_storage({STATE_KEY: "{definitely not json"}))

        await store.hydrate()

        assert store.is_hydrated
        assert store.state.likes == frozenset()
        assert store.state.posts == SEED_POSTS

    @pytest.mark.asyncio
    async def test_hydrate_runs_once(self, store):
        await store.hydrate()
        changes = []
        store.subscribe(changes.append)

        await store.hydrate()

        assert changes == []

    @pytest.mark.asyncio
    async def test_saved_dark_theme_applied(self, make_store, memory_storage, dark_mode_calls):
        store = make_store(memory_storage({THEME_KEY: "dark"}))

        await store.hydrate()

        assert store.state.theme == Theme.DARK
        assert dark_mode_calls == [True]

    @pytest.mark.asyncio
    async def test_no_saved_theme_stays_light(self, store, dark_mode_calls):
        await store.hydrate()
        assert store.state.theme == Theme.LIGHT
        assert dark_mode_calls == [False]


class TestPersistence:
    @pytest.mark.asyncio
    async def test_no_writes_before_hydration(self, store, storage):
        store.toggle_like("post-1")
        await _settle()
        assert storage.writes_to(STATE_KEY) == []

    @pytest.mark.asyncio
    async def test_burst_of_changes_writes_latest_state_once(self, hydrated_store, storage):
        await _settle()
        storage.writes.clear()

        hydrated_store.toggle_like("post-1")
        hydrated_store.toggle_burn("post-2")
        hydrated_store.increment_share("post-3")
        await _settle()

        writes = storage.writes_to(STATE_KEY)
        assert len(writes) == 1
        data = json.loads(writes[0])
        assert data["likes"] == ["post-1"]
        assert data["burns"] == ["post-2"]
        assert "user" not in data

    @pytest.mark.asyncio
    async def test_flush_writes_immediately(self, hydrated_store, storage):
        await _settle()
        storage.writes.clear()

        hydrated_store.toggle_like("post-4")
        await hydrated_store.flush()

        assert json.loads(storage.writes_to(STATE_KEY)[-1])["likes"] == ["post-4"]

    @pytest.mark.asyncio
    async def test_write_failure_does_not_raise(self, make_store, failing_storage):
        store = make_store(failing_storage)
        await store.hydrate()

        store.toggle_like("post-1")
        await _settle()

        assert store.state.likes == frozenset({"post-1"})


class TestSessionSync:
    @pytest.mark.asyncio
    async def test_login_and_logout_through_auth_provider(self, make_store, memory_storage, directory):
        storage = memory_storage()
        auth = AuthProvider(directory, storage)
        store = make_store(storage, auth=auth)
        await store.hydrate()

        user = await store.login("user-2")
        assert user is not None
        assert store.state.user.id == "user-2"

        await store.logout()
        assert store.state.user is None
        assert auth.session is None

    @pytest.mark.asyncio
    async def test_wallet_login_through_auth_provider(self, make_store, memory_storage, directory):
        storage = memory_storage()
        auth = AuthProvider(directory, storage)
        store = make_store(storage, auth=auth)
        await store.hydrate()

        bad = WalletCredentials(wallet_address="0x2345...6789", signature="short", message="Sign in")
        assert await store.login_with_wallet(bad) is None
        assert store.state.user is None

        known = WalletCredentials(wallet_address="0x2345...6789", signature="s" * 20, message="Sign in")
        user = await store.login_with_wallet(known)
        assert user is not None
        assert user.id == "user-2"
        assert auth.session.user_id == "user-2"
        assert json.loads(await storage.get("geev_auth"))["user_id"] == "user-2"

    @pytest.mark.asyncio
    async def test_wallet_login_registers_new_wallet(self, make_store, memory_storage, directory):
        storage = memory_storage()
        store = make_store(storage, auth=AuthProvider(directory, storage))
        await store.hydrate()

        credentials = WalletCredentials(
            wallet_address="0xfresh", signature="s" * 20, message="Sign in", username="newbie"
        )
        user = await store.login_with_wallet(credentials)

        assert user is not None
        assert user.username == "newbie"
        assert store.state.user == user
        assert directory.lookup_user_by_wallet("0xfresh") == user

    @pytest.mark.asyncio
    async def test_wallet_login_without_auth_uses_directory(self, hydrated_store):
        unknown = WalletCredentials(wallet_address="0xnone", signature="s" * 20, message="Sign in")
        assert await hydrated_store.login_with_wallet(unknown) is None

        known = WalletCredentials(wallet_address="0x2345...6789", signature="s" * 20, message="Sign in")
        assert (await hydrated_store.login_with_wallet(known)).id == "user-2"
        assert hydrated_store.state.user.id == "user-2"

    @pytest.mark.asyncio
    async def test_hydrate_restores_auth_session(self, make_store, memory_storage, directory):
        storage = memory_storage({"geev_auth": json.dumps({"user_id": "user-3"})})
        store = make_store(storage, auth=AuthProvider(directory, storage))

        await store.hydrate()

        assert store.state.user is not None
        assert store.state.user.username == "marcusw"

    @pytest.mark.asyncio
    async def test_session_for_unknown_user_is_ignored(self, hydrated_store):
        from geev.auth.schemas import Session

        await hydrated_store.login("user-1")
        hydrated_store.sync_session(Session(user_id="ghost", username="ghost", token="t"))
        assert hydrated_store.state.user.id == "user-1"

    @pytest.mark.asyncio
    async def test_login_without_auth_uses_directory(self, hydrated_store):
        assert await hydrated_store.login("nobody") is None
        assert hydrated_store.state.user is None

        await hydrated_store.login("user-4")
        assert hydrated_store.state.user.name == "Emma Rodriguez"


class TestThemeSync:
    @pytest.mark.asyncio
    async def test_toggle_persists_and_applies(self, hydrated_store, storage, dark_mode_calls):
        hydrated_store.toggle_theme()
        await _settle()

        assert storage.writes_to(THEME_KEY) == ["dark"]
        assert dark_mode_calls[-1] is True

        hydrated_store.toggle_theme()
        await _settle()
        assert storage.writes_to(THEME_KEY) == ["dark", "light"]
        assert dark_mode_calls[-1] is False


class TestBadgeAwarding:
    @pytest.mark.asyncio
    async def test_thresholds_five_and_ten(self, hydrated_store):
        await hydrated_store.login("user-5")

        for _ in range(4):
            hydrated_store.submit_entry("post-1", message="count me in")
        assert [b.name for b in hydrated_store.state.user.badges] == ["First Step"]

        hydrated_store.submit_entry("post-1")
        names = [b.name for b in hydrated_store.state.user.badges]
        assert names == ["First Step", "Generous Giver"]

        for _ in range(5):
            hydrated_store.submit_entry("post-3")
        names = [b.name for b in hydrated_store.state.user.badges]
        assert names == ["First Step", "Generous Giver", "Community Hero"]

        directory_copy = next(u for u in hydrated_store.state.users if u.id == "user-5")
        assert [b.name for b in directory_copy.badges] == names

    @pytest.mark.asyncio
    async def test_contributions_count_towards_badges(self, hydrated_store):
        await hydrated_store.login("user-5")
        hydrated_store.make_contribution("post-2", 10, currency="USDC")
        assert [b.name for b in hydrated_store.state.user.badges] == ["First Step"]

    @pytest.mark.asyncio
    async def test_user_outside_users_list_gets_badges_in_slot(self, hydrated_store, directory):
        newcomer = directory.register("0xfresh", "fresh")
        hydrated_store.set_current_user(newcomer)

        hydrated_store.submit_entry("post-1")

        assert [b.name for b in hydrated_store.state.user.badges] == ["First Step"]


class TestActions:
    @pytest.mark.asyncio
    async def test_minting_requires_login(self, hydrated_store):
        with pytest.raises(NotAuthenticatedError):
            hydrated_store.create_post(type="giveaway", title="t", description="d")
        with pytest.raises(NotAuthenticatedError):
            hydrated_store.submit_entry("post-1")
        with pytest.raises(NotAuthenticatedError):
            hydrated_store.make_contribution("post-2", 5)
        with pytest.raises(NotAuthenticatedError):
            hydrated_store.add_reply("e1", ParentType.ENTRY, "hi")

    @pytest.mark.asyncio
    async def test_create_post(self, hydrated_store, analytics):
        await hydrated_store.login("user-2")

        post = hydrated_store.create_post(
            type="giveaway",
            category="skill-share",
            title="Free mentoring",
            description="One hour calls",
            likes_count=999,
        )

        assert hydrated_store.state.posts[0] == post
        assert post.author_id == "user-2"
        assert post.likes_count == 0
        assert analytics.of_type(EventType.POST_CREATED) == [
            {"postId": post.id, "category": "skill-share", "type": "giveaway"}
        ]

    @pytest.mark.asyncio
    async def test_update_and_delete_post(self, hydrated_store):
        hydrated_store.update_post("post-2", title="New title")
        assert hydrated_store.state.posts[1].title == "New title"

        hydrated_store.delete_post("post-2")
        assert "post-2" not in [p.id for p in hydrated_store.state.posts]

    @pytest.mark.asyncio
    async def test_burn_unknown_post_keeps_posts_identical(self, hydrated_store):
        posts = hydrated_store.state.posts
        hydrated_store.burn_post("no-such-post")
        assert hydrated_store.state.posts is posts

    @pytest.mark.asyncio
    async def test_like_scenario_on_post_1(self, hydrated_store, analytics):
        hydrated_store.toggle_like("post-1")
        assert hydrated_store.state.posts[0].likes_count == 55
        assert "post-1" in hydrated_store.state.likes

        hydrated_store.toggle_like("post-1")
        assert hydrated_store.state.posts[0].likes_count == 54
        assert hydrated_store.state.likes == frozenset()

        assert analytics.of_type(EventType.LIKE_ADDED) == [{"postId": "post-1"}]

    @pytest.mark.asyncio
    async def test_replies_are_namespaced_and_scoped(self, hydrated_store):
        await hydrated_store.login("user-1")
        entry = hydrated_store.submit_entry("post-1", content="entry")
        contribution = hydrated_store.make_contribution("post-2", 3)

        entry_reply = hydrated_store.add_reply(entry.id, "entry", "nice")
        contribution_reply = hydrated_store.add_reply(contribution.id, ParentType.CONTRIBUTION, "thanks")

        assert entry_reply.id.startswith("reply_entry_")
        assert contribution_reply.id.startswith("reply_contribution_")

        hydrated_store.burn_reply(contribution_reply.id, contribution.id, "contribution")
        assert hydrated_store.state.contributions[-1].replies[0].burn_count == 1
        assert hydrated_store.state.entries[-1].replies[0].burn_count == 0

        hydrated_store.burn_reply(entry_reply.id)
        assert hydrated_store.state.entries[-1].replies[0].burn_count == 1

    @pytest.mark.asyncio
    async def test_submit_entry_fires_event(self, hydrated_store, analytics):
        await hydrated_store.login("user-3")
        entry = hydrated_store.submit_entry("post-1", proof={"type": "link", "url": "https://example.com"})
        assert entry.proof is not None
        assert analytics.events[-1][0] == EventType.ENTRY_SUBMITTED
        assert analytics.events[-1][2] == "user-3"
        assert analytics.of_type(EventType.ENTRY_SUBMITTED) == [{"postId": "post-1", "entryId": entry.id}]

    @pytest.mark.asyncio
    async def test_share_and_page_view_events(self, hydrated_store, analytics):
        hydrated_store.increment_share("post-1")
        hydrated_store.track_page_view("/feed", referrer="/")

        assert hydrated_store.state.posts[0].share_count == 31
        assert analytics.of_type(EventType.SHARE_CLICKED) == [{"postId": "post-1"}]
        assert analytics.of_type(EventType.PAGE_VIEW) == [{"page": "/feed", "referrer": "/"}]

    @pytest.mark.asyncio
    async def test_modals_and_loading(self, hydrated_store):
        hydrated_store.set_show_create_modal(True)
        hydrated_store.set_show_giveaway_modal(True)
        hydrated_store.set_show_request_modal(True)
        hydrated_store.set_loading(True)
        state = hydrated_store.state
        assert state.show_create_modal and state.show_giveaway_modal and state.show_request_modal
        assert state.is_loading


class TestErrors:
    @pytest.mark.asyncio
    async def test_long_error_message_truncated_in_event(self, hydrated_store, analytics):
        message = "x" * 250
        hydrated_store.set_error(message, source="upload")

        assert hydrated_store.state.error == message
        event = analytics.of_type(EventType.ERROR_OCCURRED)[0]
        assert event["message"] == "x" * 200 + "…"
        assert event["source"] == "upload"

    @pytest.mark.asyncio
    async def test_clear_error(self, hydrated_store, analytics):
        hydrated_store.set_error("boom")
        hydrated_store.clear_error()
        assert hydrated_store.state.error is None
        assert len(analytics.of_type(EventType.ERROR_OCCURRED)) == 1

    @pytest.mark.asyncio
    async def test_auto_clear(self, hydrated_store):
        hydrated_store.set_error("temporary", auto_clear_after=0.01)
        await _settle()
        assert hydrated_store.state.error is None

    @pytest.mark.asyncio
    async def test_auto_clear_skips_newer_error(self, hydrated_store):
        hydrated_store.set_error("first", auto_clear_after=0.01)
        hydrated_store.set_error("second")
        await _settle()
        assert hydrated_store.state.error == "second"


class TestSubscribe:
    @pytest.mark.asyncio
    async def test_listener_receives_changes_until_unsubscribed(self, hydrated_store):
        seen: list[AppState] = []
        unsubscribe = hydrated_store.subscribe(seen.append)

        hydrated_store.toggle_like("post-1")
        unsubscribe()
        hydrated_store.toggle_like("post-1")

        assert len(seen) == 1
        assert "post-1" in seen[0].likes

    @pytest.mark.asyncio
    async def test_no_op_action_does_not_notify(self, hydrated_store):
        seen: list[AppState] = []
        hydrated_store.subscribe(seen.append)
        hydrated_store.delete_post("no-such-post")
        assert seen == []


class _BrokenAnalytics:
    """Analytics sink whose every send blows up."""

    def __init__(self) -> None:
        self.calls = 0

    def fire(self, event_type, event_data=None, user_id=None) -> None:
        self.calls += 1
        raise RuntimeError("analytics endpoint down")


class TestAnalyticsFailure:
    """A failing sink never affects the action that fired the event."""

    @pytest.mark.asyncio
    async def test_actions_complete_when_sink_raises(self, storage, seed, directory, settings):
        sink = _BrokenAnalytics()
        store = Store(storage=storage, seed=seed, directory=directory, analytics=sink, settings=settings)
        await store.hydrate()
        try:
            await store.login("user-4")

            post = store.create_post(type="request", title="Groceries", description="This week")
            assert store.state.posts[0] == post

            entry = store.submit_entry("post-1")
            assert store.state.entries[-1] == entry

            contribution = store.make_contribution("post-2", 5)
            assert store.state.contributions[-1] == contribution

            store.toggle_like("post-1")
            assert "post-1" in store.state.likes

            store.increment_share("post-1")
            assert store.state.posts[1].share_count == 31

            store.set_error("Something went wrong")
            assert store.state.error == "Something went wrong"

            store.track_page_view("/feed")

            assert sink.calls >= 6
        finally:
            await store.aclose()

    @pytest.mark.asyncio
    async def test_state_still_persists_when_sink_raises(self, storage, seed, directory, settings):
        store = Store(
            storage=storage, seed=seed, directory=directory, analytics=_BrokenAnalytics(), settings=settings
        )
        await store.hydrate()
        try:
            store.toggle_like("post-3")
            await store.flush()
        finally:
            await store.aclose()

        assert json.loads(await storage.get(STATE_KEY))["likes"] == ["post-3"]
