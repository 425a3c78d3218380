"""
BabyJournal Backend — Memory Routes
====================================

Nested under a journal: /api/journals/{journal_id}/memories

Upload (multipart/form-data):
    file         photo (jpeg/png/gif) or video (mp4/quicktime), max 25MB
    date         ISO date the memory belongs to
    description  optional
    favorite     optional boolean
"""

import datetime as dt
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.access import JournalAccess
from babyjournal.config import settings
from babyjournal.database import get_db_session
from babyjournal.dependencies import get_journal_access
from babyjournal.schemas.common import ErrorResponse, MessageResponse
from babyjournal.schemas.memory import (
    MemoryCreatedResponse,
    MemoryFilterParams,
    MemoryListResponse,
    MemoryResponse,
    MemoryUpdateRequest,
)
from babyjournal.services.memory_service import memory_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/journals/{journal_id}/memories", tags=["Memories"])

_ERRORS = {
    400: {"description": "Missing or invalid file", "model": ErrorResponse},
    403: {"description": "Role insufficient", "model": ErrorResponse},
    404: {"description": "Memory or journal not found", "model": ErrorResponse},
}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=MemoryCreatedResponse,
    responses=_ERRORS,
    summary="Upload a photo or video (owner or editor)",
)
async def upload_memory(
    date: dt.date = Form(...),
    description: Optional[str] = Form(default=None),
    favorite: bool = Form(default=False),
    file: Optional[UploadFile] = File(default=None),
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryCreatedResponse:
    content: Optional[bytes] = None
    content_type: Optional[str] = None
    if file is not None:
        # One byte past the limit is enough to reject an oversized upload
        content = await file.read(settings.max_upload_size + 1)
        content_type = file.content_type
        await file.close()

    memory = await memory_service.create_memory(
        db,
        access,
        content=content,
        content_type=content_type,
        date=date,
        description=description,
        favorite=favorite,
    )
    return MemoryCreatedResponse(memory=memory)


@router.get("", response_model=MemoryListResponse, responses=_ERRORS)
async def list_memories(
    response: Response,
    filters: Annotated[MemoryFilterParams, Query()],
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryListResponse:
    result = await memory_service.list_memories(db, access, filters)
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get("/{memory_id}", response_model=MemoryResponse, responses=_ERRORS)
async def get_memory(
    memory_id: int,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryResponse:
    return await memory_service.get_memory(db, access, memory_id)


@router.put(
    "/{memory_id}",
    response_model=MemoryResponse,
    responses=_ERRORS,
    summary="Change date, description or favorite flag (owner or editor)",
)
async def update_memory(
    memory_id: int,
    payload: MemoryUpdateRequest,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> MemoryResponse:
    return await memory_service.update_memory(db, access, memory_id, payload)


@router.delete(
    "/{memory_id}",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a memory and its files (owner or editor)",
)
async def delete_memory(
    memory_id: int,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await memory_service.delete_memory(db, access, memory_id)
    return MessageResponse(message="Memory deleted")
