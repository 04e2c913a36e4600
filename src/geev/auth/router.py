"""Authentication router: /api/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response

from geev.auth.dependencies import get_current_user
from geev.auth.directory import UserDirectory
from geev.auth.jwt import create_token
from geev.auth.schemas import RegisterRequest, SessionResponse, TokenResponse, WalletCredentials
from geev.auth.wallet import verify_wallet_signature
from geev.config import get_settings
from geev.dependencies import get_directory
from geev.store.schemas import User

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

AUTH_COOKIE = "auth-token"


def _issue_token(user: User, response: Response) -> TokenResponse:
    """Create a session token and set it as an httpOnly cookie too."""
    settings = get_settings()
    token = create_token(user.id, user.wallet_address or "", user.username)
    max_age = settings.jwt_expire_days * 24 * 60 * 60
    response.set_cookie(
        AUTH_COOKIE,
        token,
        max_age=max_age,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        path="/",
    )
    return TokenResponse(token=token, expires_in=max_age, user=user)


def _check_signature(credentials: WalletCredentials) -> None:
    if not verify_wallet_signature(credentials.wallet_address, credentials.signature, credentials.message):
        raise HTTPException(status_code=401, detail="Invalid wallet signature")


@router.post("/login", response_model=TokenResponse)
async def login(
    body: WalletCredentials,
    response: Response,
    directory: UserDirectory = Depends(get_directory),
) -> TokenResponse:
    """Sign in with a wallet signature. The wallet must already be registered."""
    _check_signature(body)

    user = directory.lookup_user_by_wallet(body.wallet_address)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found. Please register first.")

    logger.info("user_login", user_id=user.id)
    return _issue_token(user, response)


@router.post("/register", response_model=TokenResponse)
async def register(
    body: RegisterRequest,
    response: Response,
    directory: UserDirectory = Depends(get_directory),
) -> TokenResponse:
    """Register a new wallet under a unique username."""
    _check_signature(body)

    if directory.lookup_user_by_wallet(body.wallet_address) is not None:
        raise HTTPException(status_code=409, detail="User with this wallet address already exists")
    if directory.lookup_user_by_username(body.username) is not None:
        raise HTTPException(status_code=409, detail="Username already taken")

    user = directory.register(body.wallet_address, body.username, email=body.email)
    return _issue_token(user, response)


@router.get("/session", response_model=SessionResponse)
async def session(user: User = Depends(get_current_user)) -> SessionResponse:
    """Return the user behind the bearer token."""
    return SessionResponse(user=user)
