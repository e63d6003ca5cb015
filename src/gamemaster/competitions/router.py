"""Competition endpoints: activation, creation, opening and reads."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gamemaster.auth.dependencies import get_current_user
from gamemaster.clubs.schemas import ClubSummary
from gamemaster.competitions.schemas import (
    ActivateTemplateRequest,
    CompetitionDetailResponse,
    CompetitionListResponse,
    CompetitionResponse,
    CreateCompetitionRequest,
    RoundView,
    TemplateSnapshot,
)
from gamemaster.competitions.service import (
    CompetitionDetail,
    activate_template,
    create_competition,
    get_competition_detail,
    list_club_competitions,
    open_competition,
)
from gamemaster.database import get_session
from gamemaster.db.models import CompetitionStatus, User
from gamemaster.schemas import parse_enum_query

router = APIRouter(tags=["Competitions"])


def _detail_response(detail: CompetitionDetail) -> CompetitionDetailResponse:
    competition = detail.competition
    template = competition.template
    return CompetitionDetailResponse(
        **CompetitionResponse.model_validate(competition).model_dump(),
        club=ClubSummary.model_validate(competition.club),
        template=(
            TemplateSnapshot(game_type=template.game_type, rules_json=template.rules_json)
            if template is not None
            else None
        ),
        entry_count=detail.entry_count,
        rounds=[
            RoundView(
                id=r.id,
                round_number=r.round_number,
                name=f"Round {r.round_number}",
                status=r.status,
                deadline_at=r.pick_deadline_at,
            )
            for r in competition.rounds
        ],
    )


@router.post(
    "/clubs/{club_id}/activate-template/{template_id}",
    response_model=CompetitionResponse,
    status_code=201,
)
async def activate_template_endpoint(
    club_id: str,
    template_id: str,
    body: ActivateTemplateRequest | None = Body(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CompetitionResponse:
    """Activate a published template for a club (club admin or site admin)."""
    overrides = body or ActivateTemplateRequest()
    competition = await activate_template(
        db,
        user,
        club_id,
        template_id,
        name=overrides.name,
        entry_fee_cents=overrides.entry_fee_cents,
        currency=overrides.currency,
    )
    await db.commit()
    return CompetitionResponse.model_validate(competition)


@router.post("/clubs/{club_id}/competitions", response_model=CompetitionResponse, status_code=201)
async def create_competition_endpoint(
    club_id: str,
    body: CreateCompetitionRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CompetitionResponse:
    """Create a competition without a template (club admin or site admin)."""
    competition = await create_competition(db, user, club_id, **body.model_dump())
    await db.commit()
    return CompetitionResponse.model_validate(competition)


@router.get("/clubs/{club_id}/competitions", response_model=CompetitionListResponse)
async def list_club_competitions_endpoint(
    club_id: str,
    status: str | None = Query(None, description="DRAFT, OPEN, RUNNING or FINISHED"),
    db: AsyncSession = Depends(get_session),
) -> CompetitionListResponse:
    """A club's competitions, newest first."""
    competitions = await list_club_competitions(
        db, club_id, parse_enum_query(CompetitionStatus, status, "status"),
    )
    return CompetitionListResponse(items=[CompetitionResponse.model_validate(c) for c in competitions])


@router.post("/competitions/{competition_id}/open", response_model=CompetitionResponse)
async def open_competition_endpoint(
    competition_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CompetitionResponse:
    """Open a DRAFT competition for entries."""
    competition = await open_competition(db, user, competition_id)
    await db.commit()
    return CompetitionResponse.model_validate(competition)


@router.get("/competitions/{competition_id}", response_model=CompetitionDetailResponse)
async def get_competition_endpoint(
    competition_id: str,
    db: AsyncSession = Depends(get_session),
) -> CompetitionDetailResponse:
    return _detail_response(await get_competition_detail(db, competition_id))
