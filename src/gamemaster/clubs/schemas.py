"""Request/response schemas for club endpoints."""

from __future__ import annotations

import json
from datetime import datetime

from pydantic import EmailStr, Field, field_validator, model_validator

from gamemaster.schemas import ApiModel, RequestModel


class CreateClubRequest(RequestModel):
    name: str = Field(..., min_length=2, max_length=128)
    slug: str = Field(..., min_length=1, max_length=128, pattern=r"^[A-Za-z0-9-]+$")
    branding_json: str | None = None

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v: str) -> str:
        return v.lower()

    @field_validator("branding_json")
    @classmethod
    def branding_is_json(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                json.loads(v)
            except ValueError as e:
                raise ValueError("brandingJson must be valid JSON") from e
        return v


class ClubSummary(ApiModel):
    id: str
    name: str
    slug: str


class ClubResponse(ClubSummary):
    branding_json: str | None = None
    created_at: datetime | None = None


class ClubListResponse(ApiModel):
    items: list[ClubSummary]


class AssignClubAdminRequest(RequestModel):
    """Identify the user by email or by id (exactly one)."""

    email: EmailStr | None = None
    user_id: str | None = None

    @model_validator(mode="after")
    def one_identifier(self) -> AssignClubAdminRequest:
        if (self.email is None) == (self.user_id is None):
            raise ValueError("Provide exactly one of email or userId")
        return self


class ClubMemberResponse(ApiModel):
    club_id: str
    user_id: str
    role: str
