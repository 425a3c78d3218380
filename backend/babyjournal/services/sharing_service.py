"""
BabyJournal Backend — Sharing Service
======================================

What:  Grants, lists and revokes collaborator roles on a journal.

Rules:
    - Only the owner shares and unshares; owner and editors may list.
    - The owner is never stored in shared_access, so sharing with yourself
      or unsharing yourself is rejected as a bad request.
    - Re-sharing with the same user replaces the role (one row per pair).
    - Revoking a grant that does not exist succeeds without changes.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.access import JournalAccess, authorize
from babyjournal.database import fetch_all, fetch_one, run_mutation
from babyjournal.exceptions import NotFoundError, ValidationError
from babyjournal.models import SharedAccess, User
from babyjournal.schemas.journal import (
    SharedUserListResponse,
    SharedUserResponse,
    ShareRequest,
)

logger = logging.getLogger(__name__)


class SharingService:

    async def share_journal(
        self,
        db: AsyncSession,
        access: JournalAccess,
        request: ShareRequest,
    ) -> SharedUserResponse:
        authorize(access, "sharing", "share")

        invitee = await fetch_one(
            db, select(User.id, User.name, User.email).where(User.email == request.email)
        )
        if invitee is None:
            raise NotFoundError("user", request.email)
        if invitee.id == access.user_id:
            raise ValidationError("You cannot share a journal with yourself.", field="email")

        now = datetime.now(timezone.utc)
        result = await run_mutation(
            db,
            update(SharedAccess)
            .where(
                SharedAccess.journal_id == access.journal_id,
                SharedAccess.user_id == invitee.id,
            )
            .values(role=request.role, shared_at=now),
        )
        if result.affected_rows == 0:
            await run_mutation(
                db,
                insert(SharedAccess.__table__).values(
                    journal_id=access.journal_id,
                    user_id=invitee.id,
                    role=request.role,
                    shared_at=now,
                ),
            )

        logger.info(
            "Journal %s shared with user %s as %s", access.journal_id, invitee.id, request.role
        )
        return SharedUserResponse(
            user_id=invitee.id,
            name=invitee.name,
            email=invitee.email,
            role=request.role,
            shared_at=now,
        )

    async def list_shared_users(
        self,
        db: AsyncSession,
        access: JournalAccess,
    ) -> SharedUserListResponse:
        authorize(access, "sharing", "list")
        rows = await fetch_all(
            db,
            select(User.id, User.name, User.email, SharedAccess.role, SharedAccess.shared_at)
            .join(SharedAccess, SharedAccess.user_id == User.id)
            .where(SharedAccess.journal_id == access.journal_id)
            .order_by(User.name),
        )
        return SharedUserListResponse(
            users=[
                SharedUserResponse(
                    user_id=row.id,
                    name=row.name,
                    email=row.email,
                    role=row.role,
                    shared_at=row.shared_at,
                )
                for row in rows
            ]
        )

    async def unshare_journal(
        self,
        db: AsyncSession,
        access: JournalAccess,
        target_user_id: int,
    ) -> bool:
        """Revoke a grant. Returns whether a grant actually existed."""
        authorize(access, "sharing", "unshare")
        if target_user_id == access.user_id:
            raise ValidationError("You cannot remove your own access.", field="user_id")

        result = await run_mutation(
            db,
            delete(SharedAccess).where(
                SharedAccess.journal_id == access.journal_id,
                SharedAccess.user_id == target_user_id,
            ),
        )
        if result.affected_rows:
            logger.info("Access of user %s to journal %s revoked", target_user_id, access.journal_id)
        return result.affected_rows > 0


# ── Singleton Instance ────────────────────────────────────────────────────
sharing_service = SharingService()
