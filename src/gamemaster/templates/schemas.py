"""Request/response schemas for game template endpoints."""

from __future__ import annotations

import json
from datetime import datetime

from pydantic import Field, field_validator

from gamemaster.db.models import TemplateStatus
from gamemaster.schemas import ApiModel, RequestModel, ensure_utc


class CreateTemplateRequest(RequestModel):
    """New template. Window bounds are optional; startAt is required.

    Windows are not cross-checked against each other or against startAt.
    """

    name: str = Field(..., min_length=2, max_length=128)
    game_type: str = Field(..., min_length=1, max_length=32)
    sport: str = Field(..., min_length=2, max_length=64)
    status: TemplateStatus = TemplateStatus.DRAFT
    activation_open_at: datetime | None = None
    activation_close_at: datetime | None = None
    join_open_at: datetime | None = None
    join_close_at: datetime | None = None
    start_at: datetime
    rules_json: str | None = None

    @field_validator("activation_open_at", "activation_close_at", "join_open_at", "join_close_at", "start_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)

    @field_validator("status", mode="before")
    @classmethod
    def upper_status(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v

    @field_validator("rules_json")
    @classmethod
    def rules_are_json(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                json.loads(v)
            except ValueError as e:
                raise ValueError("rulesJson must be valid JSON") from e
        return v


class TemplateResponse(ApiModel):
    id: str
    name: str
    game_type: str
    sport: str
    status: str
    activation_open_at: datetime | None = None
    activation_close_at: datetime | None = None
    join_open_at: datetime | None = None
    join_close_at: datetime | None = None
    start_at: datetime
    rules_json: str | None = None
    created_at: datetime | None = None


class TemplateListResponse(ApiModel):
    items: list[TemplateResponse]
