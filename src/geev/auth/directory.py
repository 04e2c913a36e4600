"""In-memory user directory backing session sync and mock login."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from geev.gamification.ranks import compute_rank
from geev.store.schemas import User, new_id, utcnow

logger = structlog.get_logger()


class UserDirectory:
    """Lookup of full user profiles by id, username or wallet address."""

    def __init__(self, users: Iterable[User] = ()) -> None:
        self._users: dict[str, User] = {u.id: u for u in users}

    def __len__(self) -> int:
        return len(self._users)

    def lookup_user_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def lookup_user_by_username(self, username: str) -> User | None:
        """Case-insensitive username lookup."""
        wanted = username.lower()
        return next((u for u in self._users.values() if u.username.lower() == wanted), None)

    def lookup_user_by_wallet(self, wallet_address: str) -> User | None:
        return next((u for u in self._users.values() if u.wallet_address == wallet_address), None)

    def all_users(self) -> list[User]:
        return list(self._users.values())

    def register(self, wallet_address: str, username: str, email: str | None = None) -> User:
        """Create a fresh user for ``wallet_address`` and add it to the directory."""
        user = User(
            id=new_id("user"),
            name=username,
            username=username,
            email=email or "",
            avatar=f"https://api.dicebear.com/7.x/identicon/svg?seed={wallet_address}",
            wallet_address=wallet_address,
            rank=compute_rank(0),
            joined_at=utcnow(),
        )
        self._users[user.id] = user
        logger.info("user_registered", user_id=user.id, wallet_address=wallet_address)
        return user
