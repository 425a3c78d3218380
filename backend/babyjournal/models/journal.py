"""
BabyJournal Backend — Journal and Shared Access Models
=======================================================

What:  `journals` (one per baby, owned by exactly one user) and
       `shared_access` (explicit editor/reader grants to other users).

Ownership Model:
    owner   ← derived: journals.owner_user_id == requester (never stored
              in shared_access)
    editor  ← shared_access.role == 'editor'
    reader  ← shared_access.role == 'reader'

Cascades:
    Deleting a journal removes its events, memories and shared_access rows
    through ON DELETE CASCADE; its media directory is removed by the
    journal service.
"""

import uuid
import datetime as dt
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from babyjournal.database import Base


def generate_journal_id() -> str:
    return uuid.uuid4().hex


class Journal(Base):
    """A baby's journal: the shareable container for events and memories."""

    __tablename__ = "journals"

    # Opaque, globally unique token (also the media directory name)
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_journal_id)
    owner_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    baby_birth_date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)
    baby_gender: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Journal(id={self.id}, owner={self.owner_user_id})>"


class SharedAccess(Base):
    """At most one role per (journal, user) pair; re-sharing overwrites it."""

    __tablename__ = "shared_access"

    journal_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("journals.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    shared_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )
