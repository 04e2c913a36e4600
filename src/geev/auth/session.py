"""Session provider: holds the current session and notifies subscribers on change."""

from __future__ import annotations

import json
import time
from collections.abc import Callable

import structlog

from geev.auth.directory import UserDirectory
from geev.auth.jwt import create_token
from geev.auth.schemas import Session, WalletCredentials
from geev.auth.wallet import authorize
from geev.storage import KeyValueStorage
from geev.store.schemas import User

logger = structlog.get_logger()

SessionListener = Callable[[Session | None], None]


class AuthProvider:
    """Mock wallet auth with a persisted auth record.

    Listeners are called synchronously with the new session (or None) every
    time the session changes.
    """

    def __init__(
        self,
        directory: UserDirectory,
        storage: KeyValueStorage,
        storage_key: str = "geev_auth",
    ) -> None:
        self._directory = directory
        self._storage = storage
        self._storage_key = storage_key
        self._session: Session | None = None
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> Session | None:
        return self._session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a session listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, credentials: WalletCredentials) -> Session | None:
        """Sign in (or register) with wallet credentials."""
        user = authorize(credentials, self._directory)
        if user is None:
            return None
        return await self._start_session(user)

    async def sign_in_user(self, user_id: str) -> Session | None:
        """Mock login for a user already in the directory."""
        user = self._directory.lookup_user_by_id(user_id)
        if user is None:
            logger.warning("mock_login_unknown_user", user_id=user_id)
            return None
        return await self._start_session(user)

    async def sign_out(self) -> None:
        try:
            await self._storage.delete(self._storage_key)
        except Exception:
            logger.error("auth_record_clear_failed", exc_info=True)
        self._set_session(None)

    async def restore(self) -> Session | None:
        """Resume the session recorded in storage, if its user still exists."""
        try:
            raw = await self._storage.get(self._storage_key)
            record = json.loads(raw) if raw else None
        except Exception:
            logger.error("auth_record_load_failed", exc_info=True)
            return None

        if not isinstance(record, dict) or not record.get("user_id"):
            return None

        user = self._directory.lookup_user_by_id(record["user_id"])
        if user is None:
            logger.warning("auth_record_stale", user_id=record["user_id"])
            await self.sign_out()
            return None
        return await self._start_session(user)

    async def _start_session(self, user: User) -> Session:
        session = Session(
            user_id=user.id,
            wallet_address=user.wallet_address or "",
            username=user.username,
            token=create_token(user.id, user.wallet_address or "", user.username),
        )
        record = {"user_id": user.id, "username": user.username, "login_time": int(time.time() * 1000)}
        try:
            await self._storage.set(self._storage_key, json.dumps(record))
        except Exception:
            logger.error("auth_record_save_failed", exc_info=True)

        self._set_session(session)
        logger.info("session_started", user_id=user.id)
        return session

    def _set_session(self, session: Session | None) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(session)
