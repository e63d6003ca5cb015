"""Authentication router: /auth/* credential issuance and /me."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gamemaster.auth.dependencies import get_current_user
from gamemaster.auth.jwt import create_access_token
from gamemaster.auth.schemas import (
    LoginRequest,
    MembershipResponse,
    MeResponse,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from gamemaster.auth.service import authenticate_email_user, get_memberships, register_email_user
from gamemaster.config import get_settings
from gamemaster.database import get_session
from gamemaster.db.models import User

logger = structlog.get_logger()

router = APIRouter(tags=["Authentication"])


def user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.display_name,
        role=user.role,
        created_at=user.created_at,
    )


def _issue_token(user: User) -> TokenResponse:
    settings = get_settings()
    return TokenResponse(
        token=create_access_token(user.id, user.email, user.role),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=user_response(user),
    )


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Register with email + password."""
    user = await register_email_user(db, email=body.email, password=body.password, display_name=body.name)
    await db.commit()
    return _issue_token(user)


@router.post("/auth/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Login with email + password."""
    user = await authenticate_email_user(db, body.email, body.password)
    await db.commit()
    logger.info("user_logged_in", user_id=user.id)
    return _issue_token(user)


@router.get("/me", response_model=MeResponse)
async def me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MeResponse:
    """Current identity with club memberships."""
    memberships = await get_memberships(db, user.id)
    return MeResponse(
        user_id=user.id,
        email=user.email,
        name=user.display_name,
        role=user.role,
        memberships=[
            MembershipResponse(club_id=club.id, club_name=club.name, club_slug=club.slug, role=member.role)
            for member, club in memberships
        ],
    )
