"""
BabyJournal Backend — Site Configuration Model
===============================================

Singleton row (id = 1) holding site-wide settings editable by admins.
Seeded by `Database.create_schema()` and by migration 001.
"""

from sqlalchemy import Boolean, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from babyjournal.database import Base

DEFAULT_SITE_NAME = "My Little Treasure"


class SiteConfig(Base):
    __tablename__ = "site_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    site_name: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        default=DEFAULT_SITE_NAME,
        server_default=text(f"'{DEFAULT_SITE_NAME}'"),
    )
    allow_new_registrations: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )
