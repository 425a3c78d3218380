"""
BabyJournal Backend — Memory SQLAlchemy Model
==============================================

What:  ORM model for the `memories` table: one uploaded photo or video.

File Ownership:
    file_url and thumbnail_url are public-relative URLs
    (/media/journals/<journal_id>/<name>) of files owned jointly by the row
    and the filesystem. MemoryService removes both when the row goes.
    Videos never have a thumbnail (thumbnail_url is NULL).
"""

import datetime as dt
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from babyjournal.database import Base


class Memory(Base):
    __tablename__ = "memories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    journal_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("journals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    file_url: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    favorite: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
        index=True,
    )
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Memory(id={self.id}, journal={self.journal_id}, kind='{self.kind}')>"


Index("idx_memories_date_uploaded", Memory.date.desc(), Memory.uploaded_at.desc())
