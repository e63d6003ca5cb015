"""Club business logic: tenants and their memberships.

Rules:
- Club slugs are unique (lower-case); duplicates are rejected by the database.
- One membership row per (club, user); its role is per club.
- Joining a competition makes the user a PLAYER member but never downgrades
  an existing CLUB_ADMIN.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gamemaster.auth.policy import get_membership
from gamemaster.db.models import Club, ClubMember, ClubRole, User, UserRole, new_id
from gamemaster.db.upsert import insert_for
from gamemaster.errors import Conflict, NotFound

logger = structlog.get_logger()


async def get_club(db: AsyncSession, club_id: str) -> Club:
    """Get a club by ID. Raises NotFound."""
    club = await db.get(Club, club_id)
    if club is None:
        raise NotFound("Club not found")
    return club


async def get_club_by_slug(db: AsyncSession, slug: str) -> Club:
    result = await db.execute(select(Club).where(Club.slug == slug.lower()))
    club = result.scalar_one_or_none()
    if club is None:
        raise NotFound("Club not found")
    return club


async def list_clubs(db: AsyncSession) -> list[Club]:
    result = await db.execute(select(Club).order_by(Club.created_at.desc(), Club.name))
    return list(result.scalars().all())


async def create_club(db: AsyncSession, name: str, slug: str, branding_json: str | None = None) -> Club:
    """Create a club. Raises Conflict when the slug is taken."""
    club = Club(name=name, slug=slug.lower(), branding_json=branding_json, created_at=datetime.now(timezone.utc))
    db.add(club)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise Conflict("Club slug already exists") from e
    logger.info("club_created", club_id=club.id, slug=club.slug)
    return club


async def ensure_player_membership(db: AsyncSession, club_id: str, user_id: str) -> None:
    """Insert a PLAYER membership unless one (of any role) already exists."""
    stmt = insert_for(db, ClubMember).values(
        id=new_id(),
        club_id=club_id,
        user_id=user_id,
        role=ClubRole.PLAYER.value,
        created_at=datetime.now(timezone.utc),
    )
    await db.execute(stmt.on_conflict_do_nothing(index_elements=["club_id", "user_id"]))


async def assign_club_admin(db: AsyncSession, club_id: str, user: User) -> ClubMember:
    """
    Make ``user`` a CLUB_ADMIN of the club, creating or promoting the membership.

    A global PLAYER is raised to CLUB_ADMIN; a SITE_ADMIN keeps their role.
    """
    await get_club(db, club_id)

    now = datetime.now(timezone.utc)
    stmt = insert_for(db, ClubMember).values(
        id=new_id(),
        club_id=club_id,
        user_id=user.id,
        role=ClubRole.CLUB_ADMIN.value,
        created_at=now,
    )
    await db.execute(
        stmt.on_conflict_do_update(
            index_elements=["club_id", "user_id"],
            set_={"role": ClubRole.CLUB_ADMIN.value},
        )
    )

    if user.role == UserRole.PLAYER.value:
        user.role = UserRole.CLUB_ADMIN.value
    await db.flush()

    membership = await get_membership(db, club_id, user.id)
    if membership is None:
        raise NotFound("Membership not found")
    # The upsert bypassed the identity map; make sure we report the stored role
    await db.refresh(membership)
    logger.info("club_admin_assigned", club_id=club_id, user_id=user.id)
    return membership
