"""
BabyJournal Backend — User SQLAlchemy Models
=============================================

What:  `users` (accounts) and `user_visual_configs` (one theme row per user).

Table Design:
    - email is unique; there is no update path for it once registered
    - role is the site-wide role ('user' | 'admin'), unrelated to journal roles
    - password_hash holds a werkzeug-generated salted hash, never the password
    - user_visual_configs uses user_id as its primary key (one-to-one, upsert)
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from babyjournal.database import Base

SITE_ROLES = ("user", "admin")


class User(Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="user",
        server_default=text("'user'"),
    )
    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"


class UserVisualConfig(Base):
    """
    Per-user theme values (colours and fonts).

    Stored verbatim; the browser turns them into CSS variables.
    """

    __tablename__ = "user_visual_configs"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    primary_color: Mapped[Optional[str]] = mapped_column(String(32))
    secondary_color: Mapped[Optional[str]] = mapped_column(String(32))
    accent_color: Mapped[Optional[str]] = mapped_column(String(32))
    background_color: Mapped[Optional[str]] = mapped_column(String(32))
    card_color: Mapped[Optional[str]] = mapped_column(String(32))
    text_color: Mapped[Optional[str]] = mapped_column(String(32))
    light_text_color: Mapped[Optional[str]] = mapped_column(String(32))
    border_color: Mapped[Optional[str]] = mapped_column(String(32))
    main_font: Mapped[Optional[str]] = mapped_column(String(120))
    font_size: Mapped[Optional[str]] = mapped_column(String(16))
