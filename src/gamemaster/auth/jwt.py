"""
JWT access token management.

RS256 with PEM key files is the default; HS* algorithms sign with
``GM_JWT_SECRET`` instead. Tokens carry the user's id (``sub``), email and
global role.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import jwt

from gamemaster.config import get_settings

_signing_key: str | None = None
_verifying_key: str | None = None


def _load_keys() -> tuple[str, str]:
    """Return (signing key, verifying key), cached after first call."""
    global _signing_key, _verifying_key  # noqa: PLW0603
    if _signing_key is None or _verifying_key is None:
        settings = get_settings()
        if settings.jwt_algorithm.upper().startswith("HS"):
            if not settings.jwt_secret:
                msg = "GM_JWT_SECRET must be set for HMAC algorithms"
                raise RuntimeError(msg)
            _signing_key = _verifying_key = settings.jwt_secret
        else:
            _signing_key = Path(settings.jwt_private_key_path).read_text()
            _verifying_key = Path(settings.jwt_public_key_path).read_text()
    return _signing_key, _verifying_key


def reset_keys() -> None:
    """Reset cached keys (useful for testing)."""
    global _signing_key, _verifying_key  # noqa: PLW0603
    _signing_key = None
    _verifying_key = None


def create_access_token(user_id: str, email: str, role: str) -> str:
    """
    Create an access token.

    Args:
        user_id: The user's database ID.
        email: The user's email address.
        role: The user's global role at issue time.

    Returns:
        Encoded JWT string.
    """
    signing_key, _ = _load_keys()
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
        "iss": settings.jwt_issuer,
        "type": "access",
    }
    return jwt.encode(payload, signing_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or not an access token.
    """
    _, verifying_key = _load_keys()
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            verifying_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if payload.get("type") != "access":
        msg = f"Expected token type 'access', got '{payload.get('type')}'"
        raise jwt.InvalidTokenError(msg)

    return payload
