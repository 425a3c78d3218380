"""
BabyJournal Backend — Event SQLAlchemy Model
=============================================

What:  ORM model for the `events` table: one dated, timed journal entry
       (feeding, sleep, nappy change, medicine, ...).

Query Patterns:
    - List a journal's events: WHERE journal_id = :id ORDER BY date DESC, time DESC
      → idx_events_date_time
    - Get one event: WHERE id = :id AND journal_id = :journal_id
      (scoped so ids from other journals never match)

Time is stored as zero-padded "HH:MM" text, so lexical order equals
chronological order within a day.
"""

import datetime as dt
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from babyjournal.database import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    journal_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("journals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(5), nullable=False)
    kind: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    favorite: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, journal={self.journal_id}, kind='{self.kind}')>"


Index("idx_events_date_time", Event.date.desc(), Event.time.desc())
