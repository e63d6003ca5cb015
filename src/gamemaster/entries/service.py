"""Entry and pick business logic.

Rules:
- A player joins an OPEN competition at most once, inside its join window.
- Joining writes the user, the club membership and the entry as one unit;
  a duplicate entry rolls all three back.
- A pick names one of the fixture's two teams, while the round is UPCOMING
  and before its deadline. Resubmitting overwrites the previous pick.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gamemaster.auth.service import get_user_by_email, upsert_user_by_email
from gamemaster.clubs.service import ensure_player_membership
from gamemaster.competitions.service import get_competition
from gamemaster.db.models import (
    CompetitionEntry,
    CompetitionStatus,
    EntryStatus,
    Fixture,
    Pick,
    Round,
    RoundStatus,
    User,
    new_id,
)
from gamemaster.db.upsert import insert_for
from gamemaster.errors import (
    AlreadyJoined,
    CompetitionNotOpen,
    DeadlinePassed,
    InvalidTeamSelection,
    JoinWindowClosed,
    NotFound,
    RoundClosed,
)
from gamemaster.windows import is_after_close, is_within_window, join_window, utcnow

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


async def join_competition(
    db: AsyncSession,
    competition_id: str,
    email: str,
    display_name: str | None = None,
) -> CompetitionEntry:
    """
    Enter ``email`` into a competition.

    Raises:
        NotFound: unknown competition.
        CompetitionNotOpen: status is not OPEN.
        JoinWindowClosed: now is before the join open bound or after its close bound.
        AlreadyJoined: the user already has an entry (detected by the unique constraint).
    """
    competition = await get_competition(db, competition_id, with_relations=True)
    if competition.status != CompetitionStatus.OPEN.value:
        raise CompetitionNotOpen()
    if not is_within_window(utcnow(), *join_window(competition.template, competition)):
        raise JoinWindowClosed()

    club_id = competition.club_id
    try:
        user = await upsert_user_by_email(db, email, display_name)
        await ensure_player_membership(db, club_id, user.id)
        entry = CompetitionEntry(
            competition_id=competition_id,
            user_id=user.id,
            status=EntryStatus.ACTIVE.value,
            created_at=datetime.now(timezone.utc),
        )
        db.add(entry)
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.info("entry_rejected", competition_id=competition_id, reason="already_joined")
        raise AlreadyJoined() from e

    logger.info("entry_created", competition_id=competition_id, club_id=club_id, user_id=user.id, entry_id=entry.id)
    return entry


async def list_entrants(db: AsyncSession, competition_id: str) -> list[tuple[CompetitionEntry, User]]:
    """Entries of a competition with their users, in join order."""
    await get_competition(db, competition_id)
    result = await db.execute(
        select(CompetitionEntry, User)
        .join(User, User.id == CompetitionEntry.user_id)
        .where(CompetitionEntry.competition_id == competition_id)
        .order_by(CompetitionEntry.created_at, CompetitionEntry.id)
    )
    return [(entry, user) for entry, user in result.all()]


# ---------------------------------------------------------------------------
# Picks
# ---------------------------------------------------------------------------


async def _get_fixture(db: AsyncSession, fixture_id: str) -> Fixture:
    result = await db.execute(
        select(Fixture).where(Fixture.id == fixture_id).options(selectinload(Fixture.round))
    )
    fixture = result.scalar_one_or_none()
    if fixture is None:
        raise NotFound("Fixture not found")
    return fixture


def ensure_pick_allowed(fixture: Fixture, round_: Round, team_picked: str, now: datetime) -> None:
    """
    Raise unless ``team_picked`` may be recorded for ``fixture`` at ``now``.

    The deadline bound is inclusive.
    """
    if team_picked not in (fixture.home_team, fixture.away_team):
        raise InvalidTeamSelection()
    if round_.status != RoundStatus.UPCOMING.value:
        raise RoundClosed()
    if is_after_close(now, round_.pick_deadline_at):
        raise DeadlinePassed()


async def submit_pick(db: AsyncSession, email: str, fixture_id: str, team_picked: str) -> Pick:
    """
    Record a pick, replacing any earlier pick by the same user for the fixture.

    The user must already exist, which in practice means they joined.
    Rules stored on the competition are not applied here.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        raise NotFound("User not found")
    fixture = await _get_fixture(db, fixture_id)
    round_ = fixture.round
    ensure_pick_allowed(fixture, round_, team_picked, utcnow())

    now = datetime.now(timezone.utc)
    stmt = insert_for(db, Pick).values(
        id=new_id(),
        user_id=user.id,
        fixture_id=fixture.id,
        competition_id=round_.competition_id,
        team_picked=team_picked,
        created_at=now,
    )
    await db.execute(
        stmt.on_conflict_do_update(
            index_elements=["user_id", "fixture_id"],
            set_={"team_picked": team_picked, "updated_at": now},
        )
    )

    result = await db.execute(select(Pick).where(Pick.user_id == user.id, Pick.fixture_id == fixture.id))
    pick = result.scalar_one()
    # The upsert bypassed the identity map
    await db.refresh(pick)
    logger.info(
        "pick_submitted",
        user_id=user.id,
        fixture_id=fixture.id,
        competition_id=round_.competition_id,
        round_number=round_.round_number,
    )
    return pick


async def list_user_picks(db: AsyncSession, competition_id: str, email: str) -> list[Pick]:
    """A user's picks for one competition."""
    await get_competition(db, competition_id)
    user = await get_user_by_email(db, email)
    if user is None:
        raise NotFound("User not found")
    result = await db.execute(
        select(Pick)
        .where(Pick.competition_id == competition_id, Pick.user_id == user.id)
        .order_by(Pick.created_at, Pick.id)
    )
    return list(result.scalars().all())
