"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from gamemaster.auth.jwt import verify_token
from gamemaster.auth.policy import require_site_admin
from gamemaster.auth.service import get_user_by_id
from gamemaster.database import get_session
from gamemaster.db.models import User
from gamemaster.errors import Unauthenticated

# auto_error=False so a missing header surfaces as our 401, not FastAPI's 403
_bearer = HTTPBearer(auto_error=False)


async def _resolve_user(credentials: HTTPAuthorizationCredentials | None, db: AsyncSession) -> User:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing authorization token")
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise Unauthenticated("Invalid or expired token") from e

    user = await get_user_by_id(db, str(payload["sub"]))
    if user is None:
        raise Unauthenticated("User not found")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Extract and verify the bearer token, return the User it names.

    The role is read from the database, so role changes apply without
    re-issuing tokens.
    """
    return await _resolve_user(credentials, db)


async def get_site_admin(user: User = Depends(get_current_user)) -> User:
    """Current user, required to be a SITE_ADMIN."""
    require_site_admin(user)
    return user
