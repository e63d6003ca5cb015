"""Entry and pick endpoints. Players are identified by email, not by token."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gamemaster.database import get_session
from gamemaster.entries.schemas import (
    EntrantListResponse,
    EntrantResponse,
    EntryResponse,
    JoinCompetitionRequest,
    PickListResponse,
    PickResponse,
    SubmitPickRequest,
)
from gamemaster.entries.service import join_competition, list_entrants, list_user_picks, submit_pick
from gamemaster.errors import ValidationFailed

router = APIRouter(tags=["Entries"])


@router.post("/competitions/{competition_id}/entries", response_model=EntryResponse, status_code=201)
async def join_competition_endpoint(
    competition_id: str,
    body: JoinCompetitionRequest,
    db: AsyncSession = Depends(get_session),
) -> EntryResponse:
    """Join an OPEN competition."""
    entry = await join_competition(db, competition_id, body.email, body.name)
    await db.commit()
    return EntryResponse.model_validate(entry)


@router.get("/competitions/{competition_id}/entries", response_model=EntrantListResponse)
async def list_entrants_endpoint(
    competition_id: str,
    db: AsyncSession = Depends(get_session),
) -> EntrantListResponse:
    rows = await list_entrants(db, competition_id)
    return EntrantListResponse(
        items=[
            EntrantResponse(
                entry_id=entry.id,
                user_id=user.id,
                name=user.display_name,
                status=entry.status,
                joined_at=entry.created_at,
            )
            for entry, user in rows
        ]
    )


@router.post("/picks", response_model=PickResponse)
async def submit_pick_endpoint(
    body: SubmitPickRequest,
    db: AsyncSession = Depends(get_session),
) -> PickResponse:
    """Submit or replace a pick for a fixture."""
    if not body.email or not body.fixture_id or not body.team_picked:
        raise ValidationFailed("email, fixtureId, and teamPicked are required")
    pick = await submit_pick(db, body.email, body.fixture_id, body.team_picked)
    await db.commit()
    return PickResponse.model_validate(pick)


@router.get("/competitions/{competition_id}/picks", response_model=PickListResponse)
async def list_my_picks_endpoint(
    competition_id: str,
    email: str = Query(..., min_length=3),
    db: AsyncSession = Depends(get_session),
) -> PickListResponse:
    """Picks of the player with ``email`` in this competition."""
    picks = await list_user_picks(db, competition_id, email)
    return PickListResponse(items=[PickResponse.model_validate(p) for p in picks])
