"""Authorization policy: role and club-membership based access decisions.

Precedence for club-scoped operations:

1. A SITE_ADMIN is allowed for every club.
2. Otherwise the caller needs a CLUB_ADMIN membership row for that club.

Every decision is written to the audit log as ``authz_decision``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from gamemaster.db.models import ClubMember, ClubRole, User, UserRole
from gamemaster.errors import Forbidden

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def is_site_admin(user: User) -> bool:
    return user.role == UserRole.SITE_ADMIN.value


async def get_membership(db: AsyncSession, club_id: str, user_id: str) -> ClubMember | None:
    """Look up the (club, user) membership row."""
    result = await db.execute(
        select(ClubMember).where(ClubMember.club_id == club_id, ClubMember.user_id == user_id)
    )
    return result.scalar_one_or_none()


def _audit(outcome: str, user: User, **target: str | None) -> None:
    logger.info(
        "authz_decision",
        outcome=outcome,
        actor_id=user.id,
        actor_role=user.role,
        **{k: v for k, v in target.items() if v is not None},
    )


def require_site_admin(user: User) -> None:
    """Allow only SITE_ADMIN. Raises Forbidden otherwise."""
    if not is_site_admin(user):
        _audit("deny", user, policy="site_admin")
        raise Forbidden("Site admin access required")
    _audit("allow", user, policy="site_admin")


async def require_club_admin(
    db: AsyncSession,
    user: User,
    club_id: str,
    *,
    competition_id: str | None = None,
) -> None:
    """Allow SITE_ADMIN, or a CLUB_ADMIN member of ``club_id``. Raises Forbidden otherwise."""
    if is_site_admin(user):
        _audit("allow", user, policy="club_admin", club_id=club_id, competition_id=competition_id, via="site_admin")
        return

    membership = await get_membership(db, club_id, user.id)
    if membership is None or membership.role != ClubRole.CLUB_ADMIN.value:
        _audit("deny", user, policy="club_admin", club_id=club_id, competition_id=competition_id)
        raise Forbidden("Forbidden: not a club admin for this club")

    _audit("allow", user, policy="club_admin", club_id=club_id, competition_id=competition_id, via="membership")
