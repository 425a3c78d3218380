"""
BabyJournal Backend — Journal Access Resolution and Authorization Policy
========================================================================

What:  Resolves the requester's role on a journal and decides whether a
       role may perform an operation on a resource.
How:   `resolve_access()` runs once per request (through the
       `get_journal_access` dependency) and produces an immutable
       `JournalAccess`. Services call `authorize()` with that value before
       touching any row; the minimum role for each (resource, operation)
       lives in one table, `POLICY`.

Role Ranking:
    reader (1) < editor (2) < owner (3)

    owner is never stored: it is derived from journals.owner_user_id.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.database import fetch_one
from babyjournal.exceptions import (
    AccessDeniedError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from babyjournal.models import Journal, SharedAccess

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    READER = "reader"
    EDITOR = "editor"
    OWNER = "owner"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def at_least(self, minimum: "Role") -> bool:
        return self.rank >= minimum.rank


_RANKS = {Role.READER: 1, Role.EDITOR: 2, Role.OWNER: 3}


# ── Policy Table ──────────────────────────────────────────────────────────
# (resource, operation) → minimum role
POLICY: Dict[Tuple[str, str], Role] = {
    ("journal", "read"): Role.READER,
    ("journal", "set_active"): Role.READER,
    ("journal", "update"): Role.EDITOR,
    ("journal", "delete"): Role.OWNER,
    ("sharing", "share"): Role.OWNER,
    ("sharing", "list"): Role.EDITOR,
    ("sharing", "unshare"): Role.OWNER,
    ("event", "create"): Role.EDITOR,
    ("event", "read"): Role.READER,
    ("event", "update"): Role.EDITOR,
    ("event", "delete"): Role.EDITOR,
    ("memory", "create"): Role.EDITOR,
    ("memory", "read"): Role.READER,
    ("memory", "update"): Role.EDITOR,
    ("memory", "delete"): Role.EDITOR,
    ("backup", "export"): Role.OWNER,
}


@dataclass(frozen=True)
class JournalAccess:
    """The requester's resolved standing on one journal, for one request."""

    journal_id: str
    user_id: int
    role: Role

    @property
    def is_owner(self) -> bool:
        return self.role is Role.OWNER


def authorize(access: JournalAccess, resource: str, operation: str) -> None:
    """
    Raise ForbiddenError unless the resolved role meets the minimum role for
    (resource, operation). Unknown pairs are a programming error.
    """
    try:
        minimum = POLICY[(resource, operation)]
    except KeyError:
        raise KeyError(f"No access policy for {resource}.{operation}") from None

    if not access.role.at_least(minimum):
        logger.info(
            "Denied %s.%s on journal %s to user %s (role=%s, requires=%s)",
            resource, operation, access.journal_id, access.user_id,
            access.role.value, minimum.value,
        )
        raise ForbiddenError(
            f"Your role on this journal does not allow this action ({resource} {operation}).",
            context={"journal_id": access.journal_id, "required_role": minimum.value},
        )


async def resolve_role(
    db: AsyncSession,
    user_id: int,
    journal_id: str,
) -> Optional[Role]:
    """
    Returns the user's role on the journal, or None when they have none.

    Raises:
        NotFoundError: The journal does not exist.
    """
    owner_row = await fetch_one(
        db, select(Journal.owner_user_id).where(Journal.id == journal_id)
    )
    if owner_row is None:
        raise NotFoundError("journal", journal_id)
    if owner_row.owner_user_id == user_id:
        return Role.OWNER

    shared_row = await fetch_one(
        db,
        select(SharedAccess.role).where(
            SharedAccess.journal_id == journal_id,
            SharedAccess.user_id == user_id,
        ),
    )
    if shared_row is None:
        return None
    return Role(shared_row.role)


async def resolve_access(
    db: AsyncSession,
    user_id: Optional[int],
    journal_id: Optional[str],
) -> JournalAccess:
    """
    Resolution order:
        1. missing journal id       → ValidationError (400), before any lookup
        2. missing identity         → UnauthenticatedError (401)
        3. journal does not exist   → NotFoundError (404)
        4. owner / shared role      → JournalAccess
        5. otherwise                → AccessDeniedError (403)
    """
    if not journal_id:
        raise ValidationError("Journal ID is required.", field="journal_id")
    if user_id is None:
        raise UnauthenticatedError()

    role = await resolve_role(db, user_id, journal_id)
    if role is None:
        raise AccessDeniedError(journal_id)
    return JournalAccess(journal_id=journal_id, user_id=user_id, role=role)
