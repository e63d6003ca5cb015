"""Game template lifecycle: creation, listing and the activation gate."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamemaster.db.models import GameTemplate, TemplateStatus
from gamemaster.errors import ActivationWindowClosed, NotFound, TemplateNotPublished
from gamemaster.windows import activation_window, is_within_window

logger = structlog.get_logger()


async def get_template(db: AsyncSession, template_id: str) -> GameTemplate:
    """Get a template by ID. Raises NotFound."""
    template = await db.get(GameTemplate, template_id)
    if template is None:
        raise NotFound("Template not found")
    return template


async def create_template(
    db: AsyncSession,
    *,
    name: str,
    game_type: str,
    sport: str,
    start_at: datetime,
    status: TemplateStatus = TemplateStatus.DRAFT,
    activation_open_at: datetime | None = None,
    activation_close_at: datetime | None = None,
    join_open_at: datetime | None = None,
    join_close_at: datetime | None = None,
    rules_json: str | None = None,
) -> GameTemplate:
    """Create a template. Does not commit."""
    template = GameTemplate(
        name=name,
        game_type=game_type,
        sport=sport,
        status=TemplateStatus(status).value,
        activation_open_at=activation_open_at,
        activation_close_at=activation_close_at,
        join_open_at=join_open_at,
        join_close_at=join_close_at,
        start_at=start_at,
        rules_json=rules_json,
        created_at=datetime.now(timezone.utc),
    )
    db.add(template)
    await db.flush()
    if join_close_at is not None and join_close_at > start_at:
        # Accepted as-is; players could join after the first round has started
        logger.warning("template_join_closes_after_start", template_id=template.id)
    logger.info("template_created", template_id=template.id, status=template.status)
    return template


async def list_templates(
    db: AsyncSession,
    *,
    status: TemplateStatus | None = None,
    upcoming_after: datetime | None = None,
) -> list[GameTemplate]:
    """Templates ordered by start time, optionally filtered by status and ``start_at >= upcoming_after``."""
    q = select(GameTemplate)
    if status is not None:
        q = q.where(GameTemplate.status == status.value)
    if upcoming_after is not None:
        q = q.where(GameTemplate.start_at >= upcoming_after)
    result = await db.execute(q.order_by(GameTemplate.start_at, GameTemplate.name))
    return list(result.scalars().all())


def ensure_activatable(template: GameTemplate, now: datetime) -> None:
    """
    Raise unless the template may be activated at ``now``.

    Raises:
        TemplateNotPublished: status is not PUBLISHED (checked first).
        ActivationWindowClosed: ``now`` is outside the activation window.
    """
    if template.status != TemplateStatus.PUBLISHED.value:
        raise TemplateNotPublished()
    if not is_within_window(now, *activation_window(template)):
        raise ActivationWindowClosed()
