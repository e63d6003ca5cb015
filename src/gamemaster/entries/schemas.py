"""Request/response schemas for entries and picks."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from gamemaster.schemas import ApiModel, RequestModel


class JoinCompetitionRequest(RequestModel):
    """Players identify themselves by email; no account is needed to join."""

    email: EmailStr
    name: str | None = Field(None, min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class EntryResponse(ApiModel):
    id: str
    competition_id: str
    user_id: str
    status: str
    created_at: datetime | None = None


class EntrantResponse(ApiModel):
    entry_id: str
    user_id: str
    name: str | None = None
    status: str
    joined_at: datetime | None = None


class EntrantListResponse(ApiModel):
    items: list[EntrantResponse]


class SubmitPickRequest(RequestModel):
    """All fields are checked together by the endpoint so the error names them all."""

    email: str | None = None
    fixture_id: str | None = None
    team_picked: str | None = None


class PickResponse(ApiModel):
    id: str
    user_id: str
    fixture_id: str
    competition_id: str
    team_picked: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PickListResponse(ApiModel):
    items: list[PickResponse]
