"""
BabyJournal Backend — Event Service Tests
==========================================

What we test:
    ✅ Update/delete affecting zero rows → NotFoundError
    ✅ Readers are refused before any statement runs
    ✅ Create reads the new row back through the inserted id
    ✅ Time values are normalized to HH:MM
"""

import datetime as dt
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError as PydanticValidationError

from babyjournal.access import JournalAccess, Role
from babyjournal.exceptions import DatabaseError, ForbiddenError, NotFoundError
from babyjournal.schemas.event import EventFilterParams, EventPayload, normalize_time
from babyjournal.services.event_service import EventService


def _access(role: Role = Role.EDITOR) -> JournalAccess:
    return JournalAccess(journal_id="j1", user_id=1, role=role)


def _payload(**overrides) -> EventPayload:
    values = {"date": "2024-02-01", "time": "08:30", "kind": "feeding", "quantity": 120, "unit": "ml"}
    values.update(overrides)
    return EventPayload(**values)


def _event_row(event_id: int = 5) -> SimpleNamespace:
    return SimpleNamespace(
        id=event_id,
        journal_id="j1",
        date=dt.date(2024, 2, 1),
        time="08:30",
        kind="feeding",
        description=None,
        quantity=120.0,
        unit="ml",
        notes=None,
        favorite=False,
        created_at=None,
    )


class TestEventMutations:

    def setup_method(self):
        self.service = EventService()

    @pytest.mark.asyncio
    async def test_update_missing_event(self, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=0)
        with pytest.raises(NotFoundError):
            await self.service.update_event(mock_db_session, _access(), 99, _payload())

    @pytest.mark.asyncio
    async def test_delete_missing_event(self, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=0)
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.delete_event(mock_db_session, _access(), 99)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_existing_event(self, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=1)
        await self.service.delete_event(mock_db_session, _access(), 5)
        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["delete_event", "update_event", "create_event"])
    async def test_reader_cannot_write(self, mock_db_session, method):
        args = {
            "delete_event": (5,),
            "update_event": (5, _payload()),
            "create_event": (_payload(),),
        }[method]
        with pytest.raises(ForbiddenError):
            await getattr(self.service, method)(mock_db_session, _access(Role.READER), *args)
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_reads_back_inserted_row(self, mock_db_session):
        mock_db_session.execute.side_effect = [
            MagicMock(rowcount=1, inserted_primary_key=(5,)),
            MagicMock(first=MagicMock(return_value=(_event_row(5),))),
        ]
        event = await self.service.create_event(mock_db_session, _access(), _payload())
        assert event.id == 5
        assert event.quantity == 120.0

    @pytest.mark.asyncio
    async def test_create_wraps_driver_errors(self, mock_db_session):
        mock_db_session.execute.side_effect = RuntimeError("disk I/O error")
        with pytest.raises(DatabaseError):
            await self.service.create_event(mock_db_session, _access(), _payload())


class TestEventSchemas:

    @pytest.mark.parametrize(
        "raw,expected", [("7:05", "07:05"), ("07:05", "07:05"), ("23:59", "23:59"), (" 0:00 ", "00:00")]
    )
    def test_normalize_time(self, raw, expected):
        assert normalize_time(raw) == expected

    @pytest.mark.parametrize("raw", ["24:00", "12:60", "noon", "1230", "12:5"])
    def test_invalid_time(self, raw):
        with pytest.raises(ValueError):
            normalize_time(raw)

    def test_blank_kind_rejected(self):
        with pytest.raises(PydanticValidationError):
            _payload(kind="   ")

    def test_filter_date_range_order(self):
        with pytest.raises(PydanticValidationError):
            EventFilterParams(date_from="2024-03-01", date_to="2024-02-01")

    @pytest.mark.parametrize("limit", [0, 101])
    def test_filter_limit_bounds(self, limit):
        with pytest.raises(PydanticValidationError):
            EventFilterParams(limit=limit)

    def test_filter_defaults(self):
        params = EventFilterParams()
        assert params.limit == 10
        assert params.offset == 0
        assert params.favorite_only is False
