"""Site admin endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gamemaster.auth.dependencies import get_site_admin
from gamemaster.auth.service import get_user_by_email, get_user_by_id
from gamemaster.clubs.schemas import AssignClubAdminRequest, ClubMemberResponse
from gamemaster.clubs.service import assign_club_admin
from gamemaster.database import get_session
from gamemaster.db.models import User
from gamemaster.errors import NotFound

logger = structlog.get_logger()

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/clubs/{club_id}/assign-club-admin", response_model=ClubMemberResponse)
async def assign_club_admin_endpoint(
    club_id: str,
    body: AssignClubAdminRequest,
    admin: User = Depends(get_site_admin),
    db: AsyncSession = Depends(get_session),
) -> ClubMemberResponse:
    """Grant CLUB_ADMIN rights over a club to an existing user."""
    if body.user_id is not None:
        user = await get_user_by_id(db, body.user_id)
    else:
        user = await get_user_by_email(db, str(body.email))
    if user is None:
        raise NotFound("User not found")

    membership = await assign_club_admin(db, club_id, user)
    await db.commit()
    logger.info("audit_club_admin_assigned", actor_id=admin.id, club_id=club_id, user_id=user.id)
    return ClubMemberResponse.model_validate(membership)
