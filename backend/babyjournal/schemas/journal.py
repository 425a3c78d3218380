"""
BabyJournal Backend — Journal and Sharing Schemas
==================================================

What:  Request/response contracts for journal lifecycle and sharing.

Journal update is a full overwrite: optional fields omitted from the body
are stored as null.
"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class JournalCreateRequest(BaseModel):
    display_name: str = Field(min_length=1, max_length=200)
    baby_birth_date: Optional[date] = None
    baby_gender: Optional[str] = Field(default=None, max_length=32)

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Display name must not be blank")
        return v


class JournalUpdateRequest(JournalCreateRequest):
    pass


class JournalResponse(BaseModel):
    id: str
    owner_user_id: int
    display_name: str
    baby_birth_date: Optional[date] = None
    baby_gender: Optional[str] = None
    created_at: Optional[datetime] = None
    user_role: str = Field(description="Requester's role: owner, editor or reader")


class JournalListResponse(BaseModel):
    journals: List[JournalResponse]


class JournalCreatedResponse(BaseModel):
    message: str = "Journal created"
    journal_id: str


class ActiveJournalRequest(BaseModel):
    journal_id: str = Field(min_length=1)


class ActiveJournalResponse(BaseModel):
    id: str
    display_name: str
    user_role: str


# ── Sharing ───────────────────────────────────────────────────────────────

class ShareRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    role: Literal["editor", "reader"]

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class SharedUserResponse(BaseModel):
    user_id: int
    name: str
    email: str
    role: str
    shared_at: Optional[datetime] = None


class SharedUserListResponse(BaseModel):
    users: List[SharedUserResponse]
