"""
User and identity business logic.

Users are created either by registration (with a password) or lazily on their
first competition join (email only). Registration claims such a
password-less account instead of failing on the duplicate email.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from gamemaster.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from gamemaster.db.models import Club, ClubMember, User, UserRole
from gamemaster.errors import Conflict, Unauthenticated, ValidationFailed

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user by ID."""
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower().strip()))
    return result.scalar_one_or_none()


async def get_memberships(db: AsyncSession, user_id: str) -> list[tuple[ClubMember, Club]]:
    """All club memberships of a user, with their clubs, ordered by club name."""
    result = await db.execute(
        select(ClubMember, Club)
        .join(Club, Club.id == ClubMember.club_id)
        .where(ClubMember.user_id == user_id)
        .order_by(Club.name)
    )
    return [(member, club) for member, club in result.all()]


# ---------------------------------------------------------------------------
# Upsert by email (join flow)
# ---------------------------------------------------------------------------


async def upsert_user_by_email(db: AsyncSession, email: str, display_name: str | None = None) -> User:
    """
    Return the user with this email, creating a PLAYER if none exists.

    A supplied display name replaces the stored one. Does not commit.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        user = User(
            email=email.lower().strip(),
            display_name=display_name,
            role=UserRole.PLAYER.value,
            created_at=datetime.now(timezone.utc),
        )
        db.add(user)
        await db.flush()
        logger.info("user_created", user_id=user.id, method="join")
    elif display_name and display_name != user.display_name:
        user.display_name = display_name
        await db.flush()
    return user


# ---------------------------------------------------------------------------
# Registration & login
# ---------------------------------------------------------------------------


async def register_email_user(
    db: AsyncSession,
    email: str,
    password: str,
    display_name: str | None = None,
) -> User:
    """
    Register a user with email + password.

    Raises:
        ValidationFailed: If the password is too weak.
        Conflict: If the email already belongs to an account with a password.
    """
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationFailed(str(e)) from e

    existing = await get_user_by_email(db, email)
    if existing is not None and existing.password_hash:
        raise Conflict("Email already registered")

    now = datetime.now(timezone.utc)
    if existing is not None:
        # Claim the account created when this email first joined a competition
        existing.password_hash = hash_password(password)
        existing.display_name = display_name or existing.display_name
        existing.last_login = now
        await db.flush()
        logger.info("user_claimed", user_id=existing.id)
        return existing

    user = User(
        email=email.lower().strip(),
        password_hash=hash_password(password),
        display_name=display_name,
        role=UserRole.PLAYER.value,
        created_at=now,
        last_login=now,
    )
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, method="register")
    return user


async def authenticate_email_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Authenticate a user with email + password.

    Raises:
        Unauthenticated: If the credentials are invalid.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", reason="bad_credentials")
        raise Unauthenticated("Invalid email or password")

    user.last_login = datetime.now(timezone.utc)
    if user.password_hash and check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        logger.info("password_rehashed", user_id=user.id)
    await db.flush()
    return user
