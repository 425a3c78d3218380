"""
BabyJournal Backend — Memory Schemas
=====================================

Uploads arrive as multipart form data (see routes/memories.py); these
models cover updates, responses and list filters.
"""

import datetime as dt
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class MemoryUpdateRequest(BaseModel):
    """Only these three fields are mutable; file and kind are fixed at upload."""
    date: dt.date
    description: Optional[str] = Field(default=None, max_length=5000)
    favorite: bool = False


class MemoryResponse(BaseModel):
    id: int
    journal_id: str
    kind: str
    file_url: str
    thumbnail_url: Optional[str] = None
    date: dt.date
    description: Optional[str] = None
    favorite: bool
    uploaded_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MemoryListResponse(BaseModel):
    items: List[MemoryResponse]
    total_count: int


class MemoryCreatedResponse(BaseModel):
    message: str = "Memory uploaded"
    memory: MemoryResponse


class MemoryFilterParams(BaseModel):
    kind: Optional[Literal["photo", "video"]] = None
    favorite_only: bool = False
    search: Optional[str] = None
    limit: int = Field(default=12, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
