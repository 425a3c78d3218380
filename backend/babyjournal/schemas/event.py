"""
BabyJournal Backend — Event Schemas
====================================

What:  Event payloads plus the validated query parameters of the list
       endpoint.

Time Format:
    Accepted as "H:MM" or "HH:MM" (24h) and always stored as "HH:MM", so
    "7:05" and "07:05" are the same value and sort correctly as text.
"""

import re
import datetime as dt
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def normalize_time(value: str) -> str:
    """
    >>> normalize_time("7:05")
    '07:05'
    """
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError("Time must be formatted as HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError("Time must be a valid 24-hour clock value")
    return f"{hours:02d}:{minutes:02d}"


class EventPayload(BaseModel):
    """Body of both create and update (update overwrites every field)."""
    date: dt.date
    time: str
    kind: str = Field(min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=5000)
    quantity: Optional[float] = None
    unit: Optional[str] = Field(default=None, max_length=20)
    notes: Optional[str] = Field(default=None, max_length=5000)
    favorite: bool = False

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return normalize_time(v)

    @field_validator("kind")
    @classmethod
    def strip_kind(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Event type must not be blank")
        return v


class EventResponse(BaseModel):
    id: int
    journal_id: str
    date: dt.date
    time: str
    kind: str
    description: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    notes: Optional[str] = None
    favorite: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    items: List[EventResponse]
    total_count: int = Field(description="Matching events, ignoring limit/offset")


class EventCreatedResponse(BaseModel):
    message: str = "Event created"
    event: EventResponse


class EventFilterParams(BaseModel):
    """
    Conjunctive filters for GET /api/journals/{journal_id}/events.

    limit: 1-100, default 10
    search: case-insensitive substring of description OR notes
    """
    kind: Optional[str] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    favorite_only: bool = False
    search: Optional[str] = None
    limit: int = Field(default=10, ge=1, le=100)
    offset: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_date_range(self) -> "EventFilterParams":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self
