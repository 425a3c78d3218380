"""
BabyJournal Backend — Journal Service Tests
============================================

What we test:
    ✅ New journals get a 32-character hex id
    ✅ Delete: staging failure → error propagates, rows rolled back,
       nothing to restore
    ✅ Delete: commit failure → staged media renamed back, DatabaseError
    ✅ Delete: success purges the staged media and clears the active marker
    ✅ Delete: zero rows → NotFound before any file is touched
"""

import re
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from babyjournal.access import JournalAccess, Role
from babyjournal.dependencies import SESSION_ACTIVE_JOURNAL_KEY
from babyjournal.exceptions import (
    DatabaseError,
    FileStorageError,
    ForbiddenError,
    NotFoundError,
)
from babyjournal.schemas.journal import JournalCreateRequest
from babyjournal.services.journal_service import JournalService

STAGED = Path("/srv/media/journals/.trash-j1-0badc0de")


def _owner() -> JournalAccess:
    return JournalAccess(journal_id="j1", user_id=1, role=Role.OWNER)


@pytest.fixture
def files():
    mock = MagicMock()
    mock.stage_journal_dir = AsyncMock(return_value=STAGED)
    mock.restore_journal_dir = AsyncMock()
    mock.purge = AsyncMock()
    return mock


class TestCreateJournal:

    @pytest.mark.asyncio
    async def test_id_is_hex_token(self, mock_db_session, files):
        mock_db_session.execute.return_value = MagicMock(rowcount=1, inserted_primary_key=None)
        service = JournalService(files=files)

        journal_id = await service.create_journal(
            mock_db_session, 1, JournalCreateRequest(display_name="Baby Lucas")
        )

        assert re.fullmatch(r"[0-9a-f]{32}", journal_id)
        mock_db_session.execute.assert_awaited_once()


class TestDeleteJournal:

    @pytest.mark.asyncio
    async def test_staging_failure_rolls_back(self, mock_db_session, files):
        mock_db_session.execute.return_value = MagicMock(rowcount=1)
        files.stage_journal_dir.side_effect = FileStorageError(
            "Failed to remove the journal's media files."
        )
        service = JournalService(files=files)
        session = {SESSION_ACTIVE_JOURNAL_KEY: "j1"}

        with pytest.raises(FileStorageError):
            await service.delete_journal(mock_db_session, _owner(), session)

        mock_db_session.rollback.assert_awaited_once()
        mock_db_session.commit.assert_not_called()
        files.restore_journal_dir.assert_not_called()
        files.purge.assert_not_called()
        assert session[SESSION_ACTIVE_JOURNAL_KEY] == "j1"

    @pytest.mark.asyncio
    async def test_commit_failure_restores_media(self, mock_db_session, files):
        mock_db_session.execute.return_value = MagicMock(rowcount=1)
        mock_db_session.commit.side_effect = RuntimeError("database is locked")
        service = JournalService(files=files)
        session = {SESSION_ACTIVE_JOURNAL_KEY: "j1"}

        with pytest.raises(DatabaseError):
            await service.delete_journal(mock_db_session, _owner(), session)

        files.restore_journal_dir.assert_awaited_once_with(STAGED, "j1")
        files.purge.assert_not_called()
        mock_db_session.rollback.assert_awaited_once()
        assert session[SESSION_ACTIVE_JOURNAL_KEY] == "j1"

    @pytest.mark.asyncio
    async def test_success_purges_staged_media(self, mock_db_session, files):
        mock_db_session.execute.return_value = MagicMock(rowcount=1)
        service = JournalService(files=files)
        session = {SESSION_ACTIVE_JOURNAL_KEY: "j1"}

        await service.delete_journal(mock_db_session, _owner(), session)

        mock_db_session.commit.assert_awaited_once()
        files.purge.assert_awaited_once_with(STAGED)
        files.restore_journal_dir.assert_not_called()
        assert SESSION_ACTIVE_JOURNAL_KEY not in session

    @pytest.mark.asyncio
    async def test_journal_without_media(self, mock_db_session, files):
        mock_db_session.execute.return_value = MagicMock(rowcount=1)
        files.stage_journal_dir.return_value = None
        service = JournalService(files=files)

        await service.delete_journal(mock_db_session, _owner(), {})

        files.purge.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_journal(self, mock_db_session, files):
        mock_db_session.execute.return_value = MagicMock(rowcount=0)
        service = JournalService(files=files)

        with pytest.raises(NotFoundError):
            await service.delete_journal(mock_db_session, _owner(), {})

        files.stage_journal_dir.assert_not_called()

    @pytest.mark.asyncio
    async def test_editor_cannot_delete(self, mock_db_session, files):
        service = JournalService(files=files)
        editor = JournalAccess(journal_id="j1", user_id=2, role=Role.EDITOR)

        with pytest.raises(ForbiddenError):
            await service.delete_journal(mock_db_session, editor, {})

        mock_db_session.execute.assert_not_called()
