"""Request/response schemas for authentication and identity endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from gamemaster.schemas import ApiModel, RequestModel


class RegisterRequest(RequestModel):
    """Email registration request."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    name: str | None = Field(None, min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(RequestModel):
    """Login with email + password."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class UserResponse(ApiModel):
    id: str
    email: str
    name: str | None = None
    role: str
    created_at: datetime | None = None


class TokenResponse(ApiModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class MembershipResponse(ApiModel):
    club_id: str
    club_name: str
    club_slug: str
    role: str


class MeResponse(ApiModel):
    """Identity of the caller plus every club they belong to."""

    user_id: str
    email: str
    name: str | None = None
    role: str
    memberships: list[MembershipResponse]
