"""
BabyJournal Backend — Event Routes
===================================

Nested under a journal: /api/journals/{journal_id}/events

Pagination:
    limit/offset query parameters; the total number of matches (ignoring
    limit/offset) is returned in the body and in the X-Total-Count header.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.access import JournalAccess
from babyjournal.database import get_db_session
from babyjournal.dependencies import get_journal_access
from babyjournal.schemas.common import ErrorResponse, MessageResponse
from babyjournal.schemas.event import (
    EventCreatedResponse,
    EventFilterParams,
    EventListResponse,
    EventPayload,
    EventResponse,
)
from babyjournal.services.event_service import event_service

router = APIRouter(prefix="/api/journals/{journal_id}/events", tags=["Events"])

_ERRORS = {
    403: {"description": "Role insufficient", "model": ErrorResponse},
    404: {"description": "Event or journal not found", "model": ErrorResponse},
}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=EventCreatedResponse,
    responses=_ERRORS,
    summary="Log an event (owner or editor)",
)
async def create_event(
    payload: EventPayload,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> EventCreatedResponse:
    event = await event_service.create_event(db, access, payload)
    return EventCreatedResponse(event=event)


@router.get(
    "",
    response_model=EventListResponse,
    responses=_ERRORS,
    summary="List events, newest first",
)
async def list_events(
    response: Response,
    filters: Annotated[EventFilterParams, Query()],
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> EventListResponse:
    result = await event_service.list_events(db, access, filters)
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get("/{event_id}", response_model=EventResponse, responses=_ERRORS)
async def get_event(
    event_id: int,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> EventResponse:
    return await event_service.get_event(db, access, event_id)


@router.put(
    "/{event_id}",
    response_model=EventResponse,
    responses=_ERRORS,
    summary="Overwrite an event (owner or editor)",
)
async def update_event(
    event_id: int,
    payload: EventPayload,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> EventResponse:
    return await event_service.update_event(db, access, event_id, payload)


@router.delete(
    "/{event_id}",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete an event (owner or editor)",
)
async def delete_event(
    event_id: int,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await event_service.delete_event(db, access, event_id)
    return MessageResponse(message="Event deleted")
