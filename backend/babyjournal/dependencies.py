"""
BabyJournal Backend — Request Dependencies
===========================================

What:  FastAPI dependencies that turn the signed session cookie and the
       request's journal id into values routes can rely on.

    get_requester_id     → Optional[int]  (never raises)
    require_user_id      → int            (401 when not logged in)
    get_journal_access   → JournalAccess  (400/401/403/404, see access.py)

The journal id is taken from the first non-empty of: path parameter,
JSON/form body field, query parameter.
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.access import JournalAccess, resolve_access
from babyjournal.database import get_db_session
from babyjournal.exceptions import UnauthenticatedError

SESSION_USER_KEY = "user_id"
SESSION_ACTIVE_JOURNAL_KEY = "active_journal_id"

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def get_requester_id(request: Request) -> Optional[int]:
    user_id = request.session.get(SESSION_USER_KEY)
    return int(user_id) if user_id is not None else None


def require_user_id(request: Request) -> int:
    user_id = get_requester_id(request)
    if user_id is None:
        raise UnauthenticatedError()
    return user_id


async def _journal_id_from_request(request: Request) -> Optional[str]:
    journal_id = request.path_params.get("journal_id")
    if journal_id:
        return str(journal_id)

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        # Starlette caches the parsed body, so the route still sees it
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("journal_id"):
            return str(body["journal_id"])
    elif content_type.startswith(_FORM_TYPES):
        form = await request.form()
        if form.get("journal_id"):
            return str(form["journal_id"])

    return request.query_params.get("journal_id") or None


async def get_journal_access(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> JournalAccess:
    """Resolve the requester's role on the requested journal, once per request."""
    journal_id = await _journal_id_from_request(request)
    return await resolve_access(db, get_requester_id(request), journal_id)
