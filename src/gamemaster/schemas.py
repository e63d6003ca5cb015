"""Shared pydantic bases.

The wire format is camelCase (``entryFeeCents``, ``joinOpenAt``); Python
attributes stay snake_case. Request bodies reject unknown fields.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from gamemaster.errors import ValidationFailed

E = TypeVar("E", bound=enum.Enum)


class ApiModel(BaseModel):
    """Response base: camelCase aliases, buildable from ORM objects."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RequestModel(BaseModel):
    """Request base: camelCase aliases, unknown fields rejected."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


def ensure_utc(value: datetime | None) -> datetime | None:
    """Instants without an offset are taken to be UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_enum_query(enum_cls: type[E], value: str | None, field: str) -> E | None:
    """Case-insensitive enum lookup for query parameters. Raises ValidationFailed."""
    if value is None or value == "":
        return None
    try:
        return enum_cls(value.upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationFailed(
            issues=[{"path": [field], "message": f"Must be one of: {allowed}", "code": "enum"}],
        ) from None
