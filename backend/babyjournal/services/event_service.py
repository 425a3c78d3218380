"""
BabyJournal Backend — Event Service
====================================

What:  The event ledger of a journal: create, list with filters, read,
       overwrite and delete timed entries.
Who:   Called by routes/events.py with an already-resolved JournalAccess.

Every statement is scoped by journal_id as well as by event id, so an id
belonging to another journal behaves exactly like an id that does not
exist (NotFound).

Ordering:
    date DESC, time DESC. Time is zero-padded "HH:MM", so text ordering is
    chronological.
"""

import logging
from typing import Any, Dict

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.access import JournalAccess, authorize
from babyjournal.database import fetch_all, fetch_one, run_mutation
from babyjournal.exceptions import BabyJournalError, DatabaseError, NotFoundError
from babyjournal.models import Event
from babyjournal.schemas.event import (
    EventFilterParams,
    EventListResponse,
    EventPayload,
    EventResponse,
)
from babyjournal.services.filters import FilterBuilder

logger = logging.getLogger(__name__)


def _event_values(payload: EventPayload) -> Dict[str, Any]:
    return {
        "date": payload.date,
        "time": payload.time,
        "kind": payload.kind,
        "description": payload.description,
        "quantity": payload.quantity,
        "unit": payload.unit,
        "notes": payload.notes,
        "favorite": payload.favorite,
    }


class EventService:
    """
    Error Handling:
        Application errors (NotFound, Forbidden) pass through unchanged;
        anything else is logged and wrapped in DatabaseError.
    """

    async def create_event(
        self,
        db: AsyncSession,
        access: JournalAccess,
        payload: EventPayload,
    ) -> EventResponse:
        authorize(access, "event", "create")
        try:
            result = await run_mutation(
                db,
                insert(Event.__table__).values(
                    journal_id=access.journal_id, **_event_values(payload)
                ),
            )
            logger.info("Event %s created in journal %s", result.inserted_id, access.journal_id)
            return await self.get_event(db, access, result.inserted_id)
        except BabyJournalError:
            raise
        except Exception as e:
            logger.error("Failed to create event: %s", e, exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__}) from e

    async def list_events(
        self,
        db: AsyncSession,
        access: JournalAccess,
        filters: EventFilterParams,
    ) -> EventListResponse:
        """
        Filtered page of a journal's events plus the total match count.

        Query plan:
            SELECT ... FROM events WHERE journal_id = :id [AND ...]
            ORDER BY date DESC, time DESC LIMIT :limit OFFSET :offset
            SELECT count(*) FROM events WHERE <same predicates>
        """
        authorize(access, "event", "read")
        builder = (
            FilterBuilder()
            .equals(Event.journal_id, access.journal_id)
            .equals(Event.kind, filters.kind)
            .on_or_after(Event.date, filters.date_from)
            .on_or_before(Event.date, filters.date_to)
            .flag(Event.favorite, filters.favorite_only)
            .contains_any([Event.description, Event.notes], filters.search)
        )

        try:
            page_query = (
                builder.apply(select(Event))
                .order_by(Event.date.desc(), Event.time.desc())
                .limit(filters.limit)
                .offset(filters.offset)
            )
            rows = await fetch_all(db, page_query)
            count_row = await fetch_one(
                db, builder.apply(select(func.count()).select_from(Event))
            )
        except Exception as e:
            logger.error("Failed to list events: %s", e, exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__}) from e

        return EventListResponse(
            items=[EventResponse.model_validate(row[0]) for row in rows],
            total_count=count_row[0] if count_row else 0,
        )

    async def get_event(
        self,
        db: AsyncSession,
        access: JournalAccess,
        event_id: int,
    ) -> EventResponse:
        authorize(access, "event", "read")
        row = await fetch_one(
            db,
            select(Event)
            .where(Event.id == event_id, Event.journal_id == access.journal_id)
            .execution_options(populate_existing=True),
        )
        if row is None:
            raise NotFoundError("event", str(event_id))
        return EventResponse.model_validate(row[0])

    async def update_event(
        self,
        db: AsyncSession,
        access: JournalAccess,
        event_id: int,
        payload: EventPayload,
    ) -> EventResponse:
        """Overwrite every field of the event; zero rows affected → NotFound."""
        authorize(access, "event", "update")
        result = await run_mutation(
            db,
            update(Event)
            .where(Event.id == event_id, Event.journal_id == access.journal_id)
            .values(**_event_values(payload)),
        )
        if result.affected_rows == 0:
            raise NotFoundError("event", str(event_id))
        logger.info("Event %s updated in journal %s", event_id, access.journal_id)
        return await self.get_event(db, access, event_id)

    async def delete_event(
        self,
        db: AsyncSession,
        access: JournalAccess,
        event_id: int,
    ) -> None:
        authorize(access, "event", "delete")
        result = await run_mutation(
            db,
            delete(Event).where(Event.id == event_id, Event.journal_id == access.journal_id),
        )
        if result.affected_rows == 0:
            raise NotFoundError("event", str(event_id))
        logger.info("Event %s deleted from journal %s", event_id, access.journal_id)


# ── Singleton Instance ────────────────────────────────────────────────────
event_service = EventService()
