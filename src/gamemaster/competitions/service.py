"""Competition business logic: activation, direct creation, opening and reads.

Rules:
- Every competition starts in DRAFT; DRAFT -> OPEN happens exactly once.
- Activation copies sport, rules and start time from the template, so later
  template edits never reach existing competitions.
- Opening re-checks the status inside the UPDATE statement; a concurrent
  open that already won leaves zero matching rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gamemaster.auth.policy import require_club_admin
from gamemaster.clubs.service import get_club
from gamemaster.competitions.lifecycle import ensure_can_open_entries, validate_transition
from gamemaster.config import get_settings
from gamemaster.db.models import Competition, CompetitionEntry, CompetitionStatus, User
from gamemaster.errors import InvalidState, NotFound
from gamemaster.templates.service import ensure_activatable, get_template
from gamemaster.windows import utcnow

logger = structlog.get_logger()


@dataclass
class CompetitionDetail:
    competition: Competition
    entry_count: int


async def get_competition(db: AsyncSession, competition_id: str, *, with_relations: bool = False) -> Competition:
    """Get a competition by ID. Raises NotFound."""
    q = select(Competition).where(Competition.id == competition_id)
    if with_relations:
        q = q.options(
            selectinload(Competition.club),
            selectinload(Competition.template),
            selectinload(Competition.rounds),
        )
    result = await db.execute(q)
    competition = result.scalar_one_or_none()
    if competition is None:
        raise NotFound("Competition not found")
    return competition


async def activate_template(
    db: AsyncSession,
    user: User,
    club_id: str,
    template_id: str,
    *,
    name: str | None = None,
    entry_fee_cents: int = 0,
    currency: str | None = None,
) -> Competition:
    """
    Instantiate a template as a DRAFT competition owned by ``club_id``.

    Checks run in order: club exists, caller administers the club, template
    exists, template is published and inside its activation window.
    """
    await get_club(db, club_id)
    await require_club_admin(db, user, club_id)
    template = await get_template(db, template_id)
    ensure_activatable(template, utcnow())

    competition = Competition(
        club_id=club_id,
        template_id=template.id,
        name=name or template.name,
        sport=template.sport,
        status=CompetitionStatus.DRAFT.value,
        entry_fee_cents=entry_fee_cents,
        currency=currency or get_settings().default_currency,
        rules_json=template.rules_json,
        start_round_at=template.start_at,
        created_at=datetime.now(timezone.utc),
    )
    db.add(competition)
    await db.flush()

    logger.info(
        "template_activated",
        actor_id=user.id,
        club_id=club_id,
        template_id=template.id,
        competition_id=competition.id,
    )
    return competition


async def create_competition(
    db: AsyncSession,
    user: User,
    club_id: str,
    *,
    name: str,
    sport: str,
    entry_fee_cents: int = 0,
    currency: str | None = None,
    rules_json: str | None = None,
    start_round_at: datetime | None = None,
) -> Competition:
    """Create a template-less DRAFT competition for a club the caller administers."""
    await get_club(db, club_id)
    await require_club_admin(db, user, club_id)

    competition = Competition(
        club_id=club_id,
        name=name,
        sport=sport,
        status=CompetitionStatus.DRAFT.value,
        entry_fee_cents=entry_fee_cents,
        currency=currency or get_settings().default_currency,
        rules_json=rules_json,
        start_round_at=start_round_at,
        created_at=datetime.now(timezone.utc),
    )
    db.add(competition)
    await db.flush()
    logger.info("competition_created", actor_id=user.id, club_id=club_id, competition_id=competition.id)
    return competition


async def list_club_competitions(
    db: AsyncSession,
    club_id: str,
    status: CompetitionStatus | None = None,
) -> list[Competition]:
    """Competitions of a club, newest first."""
    await get_club(db, club_id)
    q = select(Competition).where(Competition.club_id == club_id)
    if status is not None:
        q = q.where(Competition.status == status.value)
    result = await db.execute(q.order_by(Competition.created_at.desc(), Competition.name))
    return list(result.scalars().all())


async def open_competition(db: AsyncSession, user: User, competition_id: str) -> Competition:
    """
    Move a DRAFT competition to OPEN.

    The competition is loaded first since authorization is scoped to its club.

    Raises:
        NotFound: unknown competition.
        Forbidden: caller does not administer the owning club.
        InvalidState: not DRAFT, or another request opened it first.
        TooEarlyToOpen / JoinWindowClosed: outside the template join window.
    """
    competition = await get_competition(db, competition_id, with_relations=True)
    await require_club_admin(db, user, competition.club_id, competition_id=competition.id)
    validate_transition(competition.status, CompetitionStatus.OPEN)
    ensure_can_open_entries(competition.template, utcnow())

    now = datetime.now(timezone.utc)
    result = await db.execute(
        update(Competition)
        .where(Competition.id == competition.id, Competition.status == CompetitionStatus.DRAFT.value)
        .values(status=CompetitionStatus.OPEN.value, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise InvalidState()

    competition.status = CompetitionStatus.OPEN.value
    competition.updated_at = now
    await db.flush()

    logger.info(
        "competition_opened",
        actor_id=user.id,
        competition_id=competition.id,
        club_id=competition.club_id,
        template_id=competition.template_id,
    )
    return competition


async def count_entries(db: AsyncSession, competition_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(CompetitionEntry).where(CompetitionEntry.competition_id == competition_id)
    )
    return int(result.scalar_one())


async def get_competition_detail(db: AsyncSession, competition_id: str) -> CompetitionDetail:
    """Competition with its club, template snapshot, rounds and entry count."""
    competition = await get_competition(db, competition_id, with_relations=True)
    return CompetitionDetail(competition=competition, entry_count=await count_entries(db, competition_id))
