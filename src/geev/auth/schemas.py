"""Request/response schemas for authentication."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field

from geev.store.schemas import User


class WalletCredentials(BaseModel):
    """Wallet sign-in payload. A username turns an unknown wallet into a registration."""

    wallet_address: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    username: str | None = None
    email: EmailStr | None = None


class Session(BaseModel):
    """The authenticated session the store syncs its user slot from."""

    user_id: str
    wallet_address: str = ""
    username: str
    token: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: User


class SessionResponse(BaseModel):
    user: User


class RegisterRequest(WalletCredentials):
    username: str = Field(..., min_length=3, max_length=30)
