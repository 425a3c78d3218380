"""
BabyJournal Backend — Visual and Site Settings Service
=======================================================

What:  Per-user theme values (upsert, one row per user) and the site-wide
       configuration singleton, which only admins may read or change.
"""

import logging

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.database import fetch_one, run_mutation
from babyjournal.exceptions import ForbiddenError
from babyjournal.models import SiteConfig, User, UserVisualConfig
from babyjournal.models.site_config import DEFAULT_SITE_NAME
from babyjournal.schemas.settings import SiteSettings, VisualConfig

logger = logging.getLogger(__name__)


class SettingsService:

    async def get_visual_config(self, db: AsyncSession, user_id: int) -> VisualConfig:
        row = await fetch_one(
            db,
            select(UserVisualConfig)
            .where(UserVisualConfig.user_id == user_id)
            .execution_options(populate_existing=True),
        )
        if row is None:
            return VisualConfig()
        return VisualConfig.model_validate(row[0])

    async def save_visual_config(
        self,
        db: AsyncSession,
        user_id: int,
        config: VisualConfig,
    ) -> VisualConfig:
        """Replace the user's theme; fields left out are stored as null."""
        values = config.model_dump()
        result = await run_mutation(
            db,
            update(UserVisualConfig)
            .where(UserVisualConfig.user_id == user_id)
            .values(**values),
        )
        if result.affected_rows == 0:
            await run_mutation(
                db, insert(UserVisualConfig.__table__).values(user_id=user_id, **values)
            )
        logger.info("Visual configuration saved for user %s", user_id)
        return await self.get_visual_config(db, user_id)

    async def _require_admin(self, db: AsyncSession, user_id: int) -> None:
        row = await fetch_one(db, select(User.role).where(User.id == user_id))
        if row is None or row.role != "admin":
            raise ForbiddenError("Administrator privileges are required.")

    async def get_site_settings(self, db: AsyncSession, user_id: int) -> SiteSettings:
        await self._require_admin(db, user_id)
        row = await fetch_one(
            db,
            select(SiteConfig)
            .where(SiteConfig.id == 1)
            .execution_options(populate_existing=True),
        )
        if row is None:
            return SiteSettings(site_name=DEFAULT_SITE_NAME, allow_new_registrations=True)
        return SiteSettings.model_validate(row[0])

    async def update_site_settings(
        self,
        db: AsyncSession,
        user_id: int,
        payload: SiteSettings,
    ) -> SiteSettings:
        await self._require_admin(db, user_id)
        result = await run_mutation(
            db,
            update(SiteConfig)
            .where(SiteConfig.id == 1)
            .values(
                site_name=payload.site_name,
                allow_new_registrations=payload.allow_new_registrations,
            ),
        )
        if result.affected_rows == 0:
            await run_mutation(
                db,
                insert(SiteConfig.__table__).values(
                    id=1,
                    site_name=payload.site_name,
                    allow_new_registrations=payload.allow_new_registrations,
                ),
            )
        logger.info("Site settings updated by admin %s", user_id)
        return payload


# ── Singleton Instance ────────────────────────────────────────────────────
settings_service = SettingsService()
