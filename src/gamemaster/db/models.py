"""ORM models for clubs, templates, competitions, entries, rounds and picks.

Status and role columns hold the string values of the enums below.
Uniqueness that the application relies on for race safety is declared here
as table constraints, never checked in Python first.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gamemaster.db.base import Base, UTCDateTime


def new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class UserRole(str, enum.Enum):
    SITE_ADMIN = "SITE_ADMIN"
    CLUB_ADMIN = "CLUB_ADMIN"
    PLAYER = "PLAYER"


class ClubRole(str, enum.Enum):
    CLUB_ADMIN = "CLUB_ADMIN"
    PLAYER = "PLAYER"


class TemplateStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class CompetitionStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"


class EntryStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PENDING_PAYMENT = "PENDING_PAYMENT"
    WITHDRAWN = "WITHDRAWN"


class RoundStatus(str, enum.Enum):
    UPCOMING = "UPCOMING"
    LOCKED = "LOCKED"
    COMPLETED = "COMPLETED"


class FixtureStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    IN_PLAY = "IN_PLAY"
    FINISHED = "FINISHED"
    POSTPONED = "POSTPONED"


# ---------------------------------------------------------------------------
# Users & clubs
# ---------------------------------------------------------------------------


class User(Base):
    """A person on the platform. Players may exist without a password."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(256), nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.PLAYER.value)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)
    last_login: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    memberships: Mapped[list[ClubMember]] = relationship("ClubMember", back_populates="user")


class Club(Base):
    """Tenant boundary: owns memberships and competitions."""

    __tablename__ = "clubs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    branding_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)

    members: Mapped[list[ClubMember]] = relationship("ClubMember", back_populates="club", cascade="all, delete-orphan")
    competitions: Mapped[list[Competition]] = relationship("Competition", back_populates="club")


class ClubMember(Base):
    """Per-club role of a user."""

    __tablename__ = "club_members"
    __table_args__ = (UniqueConstraint("club_id", "user_id", name="uq_club_members_club_user"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    club_id: Mapped[str] = mapped_column(String(36), ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ClubRole.PLAYER.value)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)

    club: Mapped[Club] = relationship("Club", back_populates="members")
    user: Mapped[User] = relationship("User", back_populates="memberships")


# ---------------------------------------------------------------------------
# Templates & competitions
# ---------------------------------------------------------------------------


class GameTemplate(Base):
    """Platform-level competition blueprint with activation and join windows."""

    __tablename__ = "game_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    game_type: Mapped[str] = mapped_column(String(32), nullable=False)
    sport: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=TemplateStatus.DRAFT.value)
    activation_open_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    activation_close_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    join_open_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    join_close_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    start_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    rules_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)


class Competition(Base):
    """A club's priced instance of a template, or an ad hoc competition."""

    __tablename__ = "competitions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    club_id: Mapped[str] = mapped_column(String(36), ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    template_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("game_templates.id", ondelete="SET NULL"), nullable=True,
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    sport: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=CompetitionStatus.DRAFT.value)
    entry_fee_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    rules_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_round_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    club: Mapped[Club] = relationship("Club", back_populates="competitions")
    template: Mapped[GameTemplate | None] = relationship("GameTemplate")
    rounds: Mapped[list[Round]] = relationship(
        "Round", back_populates="competition", cascade="all, delete-orphan", order_by="Round.round_number",
    )
    entries: Mapped[list[CompetitionEntry]] = relationship(
        "CompetitionEntry", back_populates="competition", cascade="all, delete-orphan",
    )


class CompetitionEntry(Base):
    """A user's entry into a competition. At most one per (competition, user)."""

    __tablename__ = "competition_entries"
    __table_args__ = (
        UniqueConstraint("competition_id", "user_id", name="uq_competition_entries_competition_user"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    competition_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=EntryStatus.ACTIVE.value)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)

    competition: Mapped[Competition] = relationship("Competition", back_populates="entries")
    user: Mapped[User] = relationship("User")


# ---------------------------------------------------------------------------
# Rounds, fixtures & picks
# ---------------------------------------------------------------------------


class Round(Base):
    """Ordered phase of a competition with an optional pick deadline."""

    __tablename__ = "rounds"
    __table_args__ = (UniqueConstraint("competition_id", "round_number", name="uq_rounds_competition_number"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    competition_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False,
    )
    round_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=RoundStatus.UPCOMING.value)
    pick_deadline_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    competition: Mapped[Competition] = relationship("Competition", back_populates="rounds")
    fixtures: Mapped[list[Fixture]] = relationship("Fixture", back_populates="round", cascade="all, delete-orphan")


class Fixture(Base):
    """A match between two teams inside a round."""

    __tablename__ = "fixtures"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    round_id: Mapped[str] = mapped_column(String(36), ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False)
    home_team: Mapped[str] = mapped_column(String(64), nullable=False)
    away_team: Mapped[str] = mapped_column(String(64), nullable=False)
    kickoff_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=FixtureStatus.SCHEDULED.value)
    result_home: Mapped[int | None] = mapped_column(Integer, nullable=True)
    result_away: Mapped[int | None] = mapped_column(Integer, nullable=True)

    round: Mapped[Round] = relationship("Round", back_populates="fixtures")


class Pick(Base):
    """A user's team selection for one fixture. Last write wins."""

    __tablename__ = "picks"
    __table_args__ = (UniqueConstraint("user_id", "fixture_id", name="uq_picks_user_fixture"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    fixture_id: Mapped[str] = mapped_column(String(36), ForeignKey("fixtures.id", ondelete="CASCADE"), nullable=False)
    competition_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False,
    )
    team_picked: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
