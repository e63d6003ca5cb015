"""Club endpoints: create, list, lookup by slug."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gamemaster.auth.dependencies import get_site_admin
from gamemaster.clubs.schemas import ClubListResponse, ClubResponse, ClubSummary, CreateClubRequest
from gamemaster.clubs.service import create_club, get_club_by_slug, list_clubs
from gamemaster.database import get_session
from gamemaster.db.models import User

router = APIRouter(tags=["Clubs"])


@router.post("/clubs", response_model=ClubResponse, status_code=201)
async def create_club_endpoint(
    body: CreateClubRequest,
    _admin: User = Depends(get_site_admin),
    db: AsyncSession = Depends(get_session),
) -> ClubResponse:
    """Create a club (site admin only)."""
    club = await create_club(db, name=body.name, slug=body.slug, branding_json=body.branding_json)
    await db.commit()
    return ClubResponse.model_validate(club)


@router.get("/clubs", response_model=ClubListResponse)
async def list_clubs_endpoint(db: AsyncSession = Depends(get_session)) -> ClubListResponse:
    """All clubs, newest first."""
    clubs = await list_clubs(db)
    return ClubListResponse(items=[ClubSummary.model_validate(c) for c in clubs])


@router.get("/clubs/by-slug/{slug}", response_model=ClubSummary)
async def get_club_by_slug_endpoint(slug: str, db: AsyncSession = Depends(get_session)) -> ClubSummary:
    """Look up a club by its slug."""
    return ClubSummary.model_validate(await get_club_by_slug(db, slug))
