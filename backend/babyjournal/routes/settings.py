"""
BabyJournal Backend — Visual and Site Settings Routes
======================================================
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.database import get_db_session
from babyjournal.dependencies import require_user_id
from babyjournal.schemas.common import ErrorResponse
from babyjournal.schemas.settings import SiteSettings, VisualConfig
from babyjournal.services.settings_service import settings_service

router = APIRouter(prefix="/api", tags=["Settings"])

_ADMIN_ERRORS = {403: {"description": "Administrators only", "model": ErrorResponse}}


@router.get("/settings/user", response_model=VisualConfig, summary="My theme")
async def get_user_settings(
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> VisualConfig:
    return await settings_service.get_visual_config(db, user_id)


@router.put("/settings/user", response_model=VisualConfig, summary="Save my theme")
async def save_user_settings(
    payload: VisualConfig,
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> VisualConfig:
    return await settings_service.save_visual_config(db, user_id, payload)


@router.get("/admin/site-settings", response_model=SiteSettings, responses=_ADMIN_ERRORS)
async def get_site_settings(
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> SiteSettings:
    return await settings_service.get_site_settings(db, user_id)


@router.put("/admin/site-settings", response_model=SiteSettings, responses=_ADMIN_ERRORS)
async def update_site_settings(
    payload: SiteSettings,
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> SiteSettings:
    return await settings_service.update_site_settings(db, user_id, payload)
