"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from geev.auth.directory import UserDirectory
from geev.auth.jwt import verify_token
from geev.dependencies import get_directory
from geev.store.schemas import User

_bearer = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    directory: UserDirectory = Depends(get_directory),
) -> User:
    """
    Extract and verify the bearer JWT, return the directory's User.

    Raises 401 on a bad token or an unknown user.
    """
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    user = directory.lookup_user_by_id(payload["user_id"])
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user
