"""Game template endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gamemaster.auth.dependencies import get_site_admin
from gamemaster.database import get_session
from gamemaster.db.models import TemplateStatus, User
from gamemaster.schemas import parse_enum_query
from gamemaster.templates.schemas import CreateTemplateRequest, TemplateListResponse, TemplateResponse
from gamemaster.templates.service import create_template, get_template, list_templates
from gamemaster.windows import utcnow

router = APIRouter(prefix="/templates", tags=["Templates"])


@router.post("", response_model=TemplateResponse, status_code=201)
async def create_template_endpoint(
    body: CreateTemplateRequest,
    _admin: User = Depends(get_site_admin),
    db: AsyncSession = Depends(get_session),
) -> TemplateResponse:
    """Create a template (site admin only)."""
    template = await create_template(db, **body.model_dump())
    await db.commit()
    return TemplateResponse.model_validate(template)


@router.get("", response_model=TemplateListResponse)
async def list_templates_endpoint(
    status: str | None = Query(None, description="DRAFT, PUBLISHED or ARCHIVED"),
    upcoming: bool = Query(False, description="Only templates starting now or later"),
    db: AsyncSession = Depends(get_session),
) -> TemplateListResponse:
    """Public template list."""
    templates = await list_templates(
        db,
        status=parse_enum_query(TemplateStatus, status, "status"),
        upcoming_after=utcnow() if upcoming else None,
    )
    return TemplateListResponse(items=[TemplateResponse.model_validate(t) for t in templates])


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template_endpoint(template_id: str, db: AsyncSession = Depends(get_session)) -> TemplateResponse:
    return TemplateResponse.model_validate(await get_template(db, template_id))
