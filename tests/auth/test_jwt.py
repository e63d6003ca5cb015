"""Tests for JWT token management."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from gamemaster.auth.jwt import _load_keys, create_access_token, reset_keys, verify_token
from gamemaster.config import get_settings


@pytest.fixture
def hs256(monkeypatch):
    """Switch signing to HS256 with a shared secret for one test."""
    monkeypatch.setenv("GM_JWT_ALGORITHM", "HS256")
    monkeypatch.setenv("GM_JWT_SECRET", "x" * 48)
    get_settings.cache_clear()
    reset_keys()
    yield
    get_settings.cache_clear()
    reset_keys()


class TestAccessToken:
    def test_create_and_verify(self):
        token = create_access_token("user-1", "ann@example.com", "PLAYER")
        payload = verify_token(token)
        assert payload["sub"] == "user-1"
        assert payload["email"] == "ann@example.com"
        assert payload["role"] == "PLAYER"
        assert payload["type"] == "access"
        assert payload["iss"] == "gamemaster"

    def test_rs256_by_default(self):
        token = create_access_token("user-1", "ann@example.com", "PLAYER")
        assert jwt.get_unverified_header(token)["alg"] == "RS256"

    def test_tampered_token_rejected(self):
        token = create_access_token("user-1", "ann@example.com", "PLAYER")
        head, body, sig = token.split(".")
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(f"{head}.{body}.{sig[::-1]}")

    def test_expired_token_rejected(self):
        signing_key, _ = _load_keys()
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": "user-1", "iat": past, "exp": past + timedelta(minutes=5), "iss": "gamemaster", "type": "access"},
            signing_key,
            algorithm="RS256",
        )
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            verify_token(token)

    def test_wrong_issuer_rejected(self):
        signing_key, _ = _load_keys()
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "user-1", "exp": now + timedelta(minutes=5), "iss": "someone-else", "type": "access"},
            signing_key,
            algorithm="RS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)

    def test_wrong_type_rejected(self):
        signing_key, _ = _load_keys()
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "user-1", "exp": now + timedelta(minutes=5), "iss": "gamemaster", "type": "refresh"},
            signing_key,
            algorithm="RS256",
        )
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            verify_token(token)


class TestSharedSecret:
    def test_hs256_round_trip(self, hs256):
        token = create_access_token("user-2", "bo@example.com", "SITE_ADMIN")
        assert jwt.get_unverified_header(token)["alg"] == "HS256"
        assert verify_token(token)["role"] == "SITE_ADMIN"

    def test_hs256_requires_secret(self, hs256, monkeypatch):
        monkeypatch.setenv("GM_JWT_SECRET", "")
        get_settings.cache_clear()
        reset_keys()
        with pytest.raises(RuntimeError, match="GM_JWT_SECRET"):
            create_access_token("user-2", "bo@example.com", "PLAYER")
