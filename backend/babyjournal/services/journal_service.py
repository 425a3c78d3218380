"""
BabyJournal Backend — Journal Lifecycle Service
================================================

What:  Create, list, read, overwrite and delete journals, and track which
       journal is "active" in the requester's session.
Who:   Called by routes/journals.py.

Journal Deletion (owner only):
    ┌───────────────────────────── atomic ─────────────────────────────┐
    │ 1. DELETE journal row (FK cascade: events, memories, shares)     │
    │    zero rows → NotFound                                          │
    │ 2. Rename media dir to .trash-<id>-<hex> inside media_root        │
    │    failure → FileStorageError, rows rolled back                  │
    │ 3. COMMIT                                                        │
    │    failure → staged dir renamed back, error propagates           │
    └──────────────────────────────────────────────────────────────────┘
    4. Purge the staged dir (failures only logged; rows are gone)
    5. Clear the session's active journal if it pointed here

    The rename keeps the filesystem step reversible until the rows are
    committed, so a failed commit never leaves a journal without media.
"""

import logging
from pathlib import Path
from typing import Any, MutableMapping, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.access import JournalAccess, Role, authorize, resolve_role
from babyjournal.database import atomic, fetch_all, fetch_one, run_mutation
from babyjournal.dependencies import SESSION_ACTIVE_JOURNAL_KEY
from babyjournal.exceptions import BabyJournalError, DatabaseError, NotFoundError
from babyjournal.models import Journal, SharedAccess, generate_journal_id
from babyjournal.schemas.journal import (
    ActiveJournalResponse,
    JournalCreateRequest,
    JournalListResponse,
    JournalResponse,
    JournalUpdateRequest,
)
from babyjournal.services.file_service import FileService, file_service

logger = logging.getLogger(__name__)


def _to_response(journal: Journal, role: Role) -> JournalResponse:
    return JournalResponse(
        id=journal.id,
        owner_user_id=journal.owner_user_id,
        display_name=journal.display_name,
        baby_birth_date=journal.baby_birth_date,
        baby_gender=journal.baby_gender,
        created_at=journal.created_at,
        user_role=role.value,
    )


class JournalService:

    def __init__(self, files: Optional[FileService] = None):
        self.files = files or file_service

    async def create_journal(
        self,
        db: AsyncSession,
        owner_user_id: int,
        payload: JournalCreateRequest,
    ) -> str:
        """Insert a journal owned by the requester and return its new id."""
        journal_id = generate_journal_id()
        try:
            await run_mutation(
                db,
                insert(Journal.__table__).values(
                    id=journal_id,
                    owner_user_id=owner_user_id,
                    display_name=payload.display_name,
                    baby_birth_date=payload.baby_birth_date,
                    baby_gender=payload.baby_gender,
                ),
            )
        except Exception as e:
            logger.error("Failed to create journal: %s", e, exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__}) from e

        logger.info("Journal %s created by user %s", journal_id, owner_user_id)
        return journal_id

    async def list_journals(self, db: AsyncSession, user_id: int) -> JournalListResponse:
        """Journals the user owns or has been granted, newest first."""
        owned = await fetch_all(db, select(Journal).where(Journal.owner_user_id == user_id))
        shared = await fetch_all(
            db,
            select(Journal, SharedAccess.role)
            .join(SharedAccess, SharedAccess.journal_id == Journal.id)
            .where(SharedAccess.user_id == user_id),
        )

        entries = [(row[0], Role.OWNER) for row in owned]
        entries.extend((row[0], Role(row[1])) for row in shared)
        entries.sort(key=lambda entry: (entry[0].created_at, entry[0].id), reverse=True)
        return JournalListResponse(journals=[_to_response(j, role) for j, role in entries])

    async def get_journal(self, db: AsyncSession, access: JournalAccess) -> JournalResponse:
        authorize(access, "journal", "read")
        row = await fetch_one(
            db,
            select(Journal)
            .where(Journal.id == access.journal_id)
            .execution_options(populate_existing=True),
        )
        if row is None:
            raise NotFoundError("journal", access.journal_id)
        return _to_response(row[0], access.role)

    async def update_journal(
        self,
        db: AsyncSession,
        access: JournalAccess,
        payload: JournalUpdateRequest,
    ) -> JournalResponse:
        """Full overwrite: optional fields missing from the payload become null."""
        authorize(access, "journal", "update")
        result = await run_mutation(
            db,
            update(Journal)
            .where(Journal.id == access.journal_id)
            .values(
                display_name=payload.display_name,
                baby_birth_date=payload.baby_birth_date,
                baby_gender=payload.baby_gender,
            ),
        )
        if result.affected_rows == 0:
            raise NotFoundError("journal", access.journal_id)
        logger.info("Journal %s updated by user %s", access.journal_id, access.user_id)
        return await self.get_journal(db, access)

    async def delete_journal(
        self,
        db: AsyncSession,
        access: JournalAccess,
        session: MutableMapping[str, Any],
    ) -> None:
        authorize(access, "journal", "delete")
        staged: Optional[Path] = None
        try:
            async with atomic(db):
                result = await run_mutation(
                    db, delete(Journal).where(Journal.id == access.journal_id)
                )
                if result.affected_rows == 0:
                    raise NotFoundError("journal", access.journal_id)
                staged = await self.files.stage_journal_dir(access.journal_id)
        except Exception as e:
            if staged is not None:
                await self.files.restore_journal_dir(staged, access.journal_id)
            if isinstance(e, BabyJournalError):
                raise
            logger.error("Failed to delete journal %s: %s", access.journal_id, e, exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__}) from e

        if staged is not None:
            await self.files.purge(staged)

        if session.get(SESSION_ACTIVE_JOURNAL_KEY) == access.journal_id:
            session.pop(SESSION_ACTIVE_JOURNAL_KEY, None)
        logger.info("Journal %s deleted by owner %s", access.journal_id, access.user_id)

    # ── Active Journal ────────────────────────────────────────────────────

    async def set_active_journal(
        self,
        db: AsyncSession,
        access: JournalAccess,
        session: MutableMapping[str, Any],
    ) -> ActiveJournalResponse:
        authorize(access, "journal", "set_active")
        journal = await self.get_journal(db, access)
        session[SESSION_ACTIVE_JOURNAL_KEY] = access.journal_id
        return ActiveJournalResponse(
            id=journal.id, display_name=journal.display_name, user_role=journal.user_role
        )

    async def get_active_journal(
        self,
        db: AsyncSession,
        user_id: int,
        session: MutableMapping[str, Any],
    ) -> Optional[ActiveJournalResponse]:
        """
        The journal stored in the session, if the user can still open it.

        A stale marker (journal deleted or access revoked) is dropped from
        the session.
        """
        journal_id = session.get(SESSION_ACTIVE_JOURNAL_KEY)
        if not journal_id:
            return None

        try:
            role = await resolve_role(db, user_id, journal_id)
        except NotFoundError:
            role = None
        if role is None:
            session.pop(SESSION_ACTIVE_JOURNAL_KEY, None)
            return None

        row = await fetch_one(
            db, select(Journal.display_name).where(Journal.id == journal_id)
        )
        if row is None:
            session.pop(SESSION_ACTIVE_JOURNAL_KEY, None)
            return None
        return ActiveJournalResponse(id=journal_id, display_name=row.display_name, user_role=role.value)


# ── Singleton Instance ────────────────────────────────────────────────────
journal_service = JournalService()
