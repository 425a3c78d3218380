"""
BabyJournal Backend — Journal and Sharing Routes
=================================================

Every route below except list/create/active-lookup resolves the caller's
role through `get_journal_access`; role checks themselves happen in the
services via the shared policy table.

Route order matters: /active must be declared before /{journal_id}.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.access import JournalAccess
from babyjournal.database import get_db_session
from babyjournal.dependencies import (
    SESSION_ACTIVE_JOURNAL_KEY,
    get_journal_access,
    require_user_id,
)
from babyjournal.schemas.common import ErrorResponse, MessageResponse
from babyjournal.schemas.journal import (
    ActiveJournalRequest,
    ActiveJournalResponse,
    JournalCreatedResponse,
    JournalCreateRequest,
    JournalListResponse,
    JournalResponse,
    JournalUpdateRequest,
    SharedUserListResponse,
    SharedUserResponse,
    ShareRequest,
)
from babyjournal.services.journal_service import journal_service
from babyjournal.services.sharing_service import sharing_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/journals", tags=["Journals"])

_ACCESS_ERRORS = {
    400: {"description": "Missing journal id", "model": ErrorResponse},
    401: {"description": "Not logged in", "model": ErrorResponse},
    403: {"description": "Role insufficient", "model": ErrorResponse},
    404: {"description": "Journal not found", "model": ErrorResponse},
}


@router.get("", response_model=JournalListResponse, summary="Journals I own or can access")
async def list_journals(
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> JournalListResponse:
    return await journal_service.list_journals(db, user_id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=JournalCreatedResponse,
    summary="Create a journal (caller becomes owner)",
)
async def create_journal(
    payload: JournalCreateRequest,
    request: Request,
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> JournalCreatedResponse:
    journal_id = await journal_service.create_journal(db, user_id, payload)
    request.session[SESSION_ACTIVE_JOURNAL_KEY] = journal_id
    return JournalCreatedResponse(journal_id=journal_id)


@router.get(
    "/active",
    response_model=Optional[ActiveJournalResponse],
    summary="The journal currently selected in this session",
)
async def get_active_journal(
    request: Request,
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[ActiveJournalResponse]:
    return await journal_service.get_active_journal(db, user_id, request.session)


@router.post(
    "/active",
    response_model=ActiveJournalResponse,
    responses=_ACCESS_ERRORS,
    summary="Select the journal to work on",
)
async def set_active_journal(
    payload: ActiveJournalRequest,
    request: Request,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> ActiveJournalResponse:
    return await journal_service.set_active_journal(db, access, request.session)


@router.get(
    "/{journal_id}",
    response_model=JournalResponse,
    responses=_ACCESS_ERRORS,
    summary="Journal details and my role",
)
async def get_journal(
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> JournalResponse:
    return await journal_service.get_journal(db, access)


@router.put(
    "/{journal_id}",
    response_model=JournalResponse,
    responses=_ACCESS_ERRORS,
    summary="Overwrite journal details (owner or editor)",
)
async def update_journal(
    payload: JournalUpdateRequest,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> JournalResponse:
    return await journal_service.update_journal(db, access, payload)


@router.delete(
    "/{journal_id}",
    response_model=MessageResponse,
    responses=_ACCESS_ERRORS,
    summary="Delete a journal with all its events, memories and files (owner)",
)
async def delete_journal(
    request: Request,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await journal_service.delete_journal(db, access, request.session)
    return MessageResponse(message="Journal deleted")


# ── Sharing ───────────────────────────────────────────────────────────────

@router.post(
    "/{journal_id}/share",
    response_model=SharedUserResponse,
    responses=_ACCESS_ERRORS,
    summary="Grant a user editor or reader access (owner)",
)
async def share_journal(
    payload: ShareRequest,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> SharedUserResponse:
    return await sharing_service.share_journal(db, access, payload)


@router.get(
    "/{journal_id}/shared-users",
    response_model=SharedUserListResponse,
    responses=_ACCESS_ERRORS,
    summary="Users the journal is shared with (owner or editor)",
)
async def list_shared_users(
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> SharedUserListResponse:
    return await sharing_service.list_shared_users(db, access)


@router.delete(
    "/{journal_id}/shared-users/{user_id}",
    response_model=MessageResponse,
    responses=_ACCESS_ERRORS,
    summary="Revoke a user's access (owner)",
)
async def unshare_journal(
    user_id: int,
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await sharing_service.unshare_journal(db, access, user_id)
    return MessageResponse(message="Access revoked")
