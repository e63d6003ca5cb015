"""Shared test fixtures.

Every test that uses ``client`` gets a fresh in-memory SQLite database; the
engine is disposed afterwards, which drops the database with it. Redis is not
configured, so the rate limiter passes requests through.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta, timezone

os.environ["GM_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GM_REDIS_URL"] = ""
os.environ["GM_LOG_FORMAT"] = "console"
os.environ["GM_ENVIRONMENT"] = "test"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from cryptography.hazmat.primitives import serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from gamemaster.auth.jwt import create_access_token, reset_keys  # noqa: E402
from gamemaster.config import get_settings  # noqa: E402
from gamemaster.database import close_db, create_schema, get_session, init_db  # noqa: E402
from gamemaster.db.models import (  # noqa: E402
    Club,
    ClubMember,
    ClubRole,
    Competition,
    CompetitionStatus,
    Fixture,
    GameTemplate,
    Round,
    RoundStatus,
    TemplateStatus,
    User,
    UserRole,
)


def _ensure_test_keys() -> None:
    """Generate an RSA key pair for testing once per session."""
    if os.environ.get("GM_JWT_PRIVATE_KEY_PATH"):
        return

    tmpdir = tempfile.mkdtemp(prefix="gm_test_keys_")
    private_path = os.path.join(tmpdir, "jwt_private.pem")
    public_path = os.path.join(tmpdir, "jwt_public.pem")

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    with open(private_path, "wb") as f:
        f.write(
            key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
    with open(public_path, "wb") as f:
        f.write(
            key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        )

    os.environ["GM_JWT_PRIVATE_KEY_PATH"] = private_path
    os.environ["GM_JWT_PUBLIC_KEY_PATH"] = public_path


_ensure_test_keys()
get_settings.cache_clear()
reset_keys()


def _now() -> datetime:
    return datetime.now(timezone.utc)


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client over a freshly created schema."""
    from gamemaster.main import create_app

    settings = get_settings()
    await init_db(settings.database_url)
    await create_schema()

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()


@pytest_asyncio.fixture
async def db_session(client: AsyncClient) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session on the same database the client talks to.

    Factories commit immediately: the in-memory database has a single shared
    connection, so uncommitted rows would be rolled back by the next request.
    """
    async for session in get_session():
        yield session
        break


# ---------------------------------------------------------------------------
# Users & auth
# ---------------------------------------------------------------------------


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build a bearer Authorization header for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}

    return _headers


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make(email: str, role: UserRole = UserRole.PLAYER, name: str | None = None) -> User:
        user = User(email=email, display_name=name, role=role.value)
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def site_admin(make_user) -> User:
    return await make_user("root@example.com", UserRole.SITE_ADMIN, "Root")


@pytest.fixture
def admin_headers(site_admin: User, auth_headers) -> dict[str, str]:
    return auth_headers(site_admin)


@pytest_asyncio.fixture
async def player(make_user) -> User:
    return await make_user("player@example.com", UserRole.PLAYER, "Pat Player")


@pytest.fixture
def player_headers(player: User, auth_headers) -> dict[str, str]:
    return auth_headers(player)


# ---------------------------------------------------------------------------
# Clubs
# ---------------------------------------------------------------------------


@pytest.fixture
def make_club(db_session: AsyncSession) -> Callable[..., Awaitable[Club]]:
    async def _make(slug: str, name: str | None = None) -> Club:
        club = Club(name=name or slug.replace("-", " ").title(), slug=slug)
        db_session.add(club)
        await db_session.commit()
        return club

    return _make


@pytest_asyncio.fixture
async def club(make_club) -> Club:
    return await make_club("riverside-fc", "Riverside FC")


@pytest_asyncio.fixture
async def other_club(make_club) -> Club:
    return await make_club("hilltop-united", "Hilltop United")


@pytest_asyncio.fixture
async def club_admin(db_session: AsyncSession, make_user, club: Club) -> User:
    """A CLUB_ADMIN of ``club`` (and of no other club)."""
    user = await make_user("captain@example.com", UserRole.CLUB_ADMIN, "Casey Captain")
    db_session.add(ClubMember(club_id=club.id, user_id=user.id, role=ClubRole.CLUB_ADMIN.value))
    await db_session.commit()
    return user


@pytest.fixture
def club_admin_headers(club_admin: User, auth_headers) -> dict[str, str]:
    return auth_headers(club_admin)


# ---------------------------------------------------------------------------
# Templates, competitions, rounds & fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_template(db_session: AsyncSession) -> Callable[..., Awaitable[GameTemplate]]:
    """Create a template; PUBLISHED and starting in a week unless overridden."""

    async def _make(**overrides: object) -> GameTemplate:
        fields: dict[str, object] = {
            "name": "Last Man Standing",
            "game_type": "LMS",
            "sport": "football",
            "status": TemplateStatus.PUBLISHED.value,
            "start_at": _now() + timedelta(days=7),
            "rules_json": '{"noReuseTeam": true}',
        }
        fields.update(overrides)
        if isinstance(fields["status"], TemplateStatus):
            fields["status"] = fields["status"].value
        template = GameTemplate(**fields)
        db_session.add(template)
        await db_session.commit()
        return template

    return _make


@pytest.fixture
def make_competition(db_session: AsyncSession, club: Club) -> Callable[..., Awaitable[Competition]]:
    """Create a competition in ``club`` (DRAFT, no template unless given)."""

    async def _make(
        template: GameTemplate | None = None,
        status: CompetitionStatus = CompetitionStatus.DRAFT,
        club_id: str | None = None,
        **overrides: object,
    ) -> Competition:
        fields: dict[str, object] = {
            "club_id": club_id or club.id,
            "template_id": template.id if template is not None else None,
            "name": template.name if template is not None else "Sunday League Survivor",
            "sport": "football",
            "status": status.value,
            "entry_fee_cents": 500,
            "currency": "EUR",
            "start_round_at": template.start_at if template is not None else None,
        }
        fields.update(overrides)
        competition = Competition(**fields)
        db_session.add(competition)
        await db_session.commit()
        return competition

    return _make


@pytest.fixture
def make_round(db_session: AsyncSession) -> Callable[..., Awaitable[Round]]:
    async def _make(
        competition: Competition,
        round_number: int = 1,
        status: RoundStatus = RoundStatus.UPCOMING,
        pick_deadline_at: datetime | None = None,
    ) -> Round:
        round_ = Round(
            competition_id=competition.id,
            round_number=round_number,
            status=status.value,
            pick_deadline_at=pick_deadline_at,
        )
        db_session.add(round_)
        await db_session.commit()
        return round_

    return _make


@pytest.fixture
def make_fixture(db_session: AsyncSession) -> Callable[..., Awaitable[Fixture]]:
    async def _make(round_: Round, home_team: str = "Arsenal", away_team: str = "Chelsea") -> Fixture:
        fixture = Fixture(round_id=round_.id, home_team=home_team, away_team=away_team)
        db_session.add(fixture)
        await db_session.commit()
        return fixture

    return _make
