"""Request/response schemas for competition endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from gamemaster.clubs.schemas import ClubSummary
from gamemaster.schemas import ApiModel, RequestModel, ensure_utc


def _upper_currency(v: str | None) -> str | None:
    return v.upper() if isinstance(v, str) else v


class ActivateTemplateRequest(RequestModel):
    """Optional overrides applied when a club activates a template."""

    name: str | None = Field(None, min_length=2, max_length=128)
    entry_fee_cents: int = Field(0, ge=0)
    currency: str | None = Field(None, pattern=r"^[A-Za-z]{3}$")

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str | None) -> str | None:
        return _upper_currency(v)


class CreateCompetitionRequest(RequestModel):
    """Ad hoc competition without a template."""

    name: str = Field(..., min_length=2, max_length=128)
    sport: str = Field(..., min_length=2, max_length=64)
    entry_fee_cents: int = Field(0, ge=0)
    currency: str | None = Field(None, pattern=r"^[A-Za-z]{3}$")
    rules_json: str | None = None
    start_round_at: datetime | None = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str | None) -> str | None:
        return _upper_currency(v)

    @field_validator("start_round_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)


class CompetitionResponse(ApiModel):
    id: str
    club_id: str
    template_id: str | None = None
    name: str
    sport: str
    status: str
    entry_fee_cents: int
    currency: str
    rules_json: str | None = None
    start_round_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CompetitionListResponse(ApiModel):
    items: list[CompetitionResponse]


class TemplateSnapshot(ApiModel):
    game_type: str
    rules_json: str | None = None


class RoundView(ApiModel):
    id: str
    round_number: int
    name: str
    status: str
    deadline_at: datetime | None = None
    # Fixtures are not reported here yet; the shape is kept for clients.
    fixtures: list[dict] = Field(default_factory=list)


class CompetitionDetailResponse(CompetitionResponse):
    club: ClubSummary
    template: TemplateSnapshot | None = None
    entry_count: int = 0
    rounds: list[RoundView] = Field(default_factory=list)
