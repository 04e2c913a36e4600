"""
HS256 JWT session tokens.

Tokens carry the user id, wallet address and username, plus a random `jti`.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from geev.config import get_settings

REQUIRED_CLAIMS = ("user_id", "wallet_address", "username")


def create_token(user_id: str, wallet_address: str, username: str) -> str:
    """
    Create a session token.

    Args:
        user_id: The user's id.
        wallet_address: The wallet the user signed in with.
        username: The user's handle.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "user_id": user_id,
        "wallet_address": wallet_address,
        "username": username,
        "jti": secrets.token_hex(8),
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a session token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or misses a claim.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    missing = [claim for claim in REQUIRED_CLAIMS if not payload.get(claim)]
    if missing:
        msg = f"Invalid token payload, missing: {', '.join(missing)}"
        raise jwt.InvalidTokenError(msg)

    return payload
