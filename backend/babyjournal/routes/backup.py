"""
BabyJournal Backend — Backup Export Route
==========================================

POST /api/backup/export/{journal_id} streams a ZIP of the journal's data
and media to its owner. Temporary files are removed once sending ends,
however it ends.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.types import Receive, Scope, Send

from babyjournal.access import JournalAccess
from babyjournal.database import get_db_session
from babyjournal.dependencies import get_journal_access
from babyjournal.schemas.common import ErrorResponse
from babyjournal.services.backup_service import BackupArchive, backup_service

router = APIRouter(prefix="/api/backup", tags=["Backup"])


class BackupResponse(StreamingResponse):
    """
    Streams a backup archive and always removes its temporary files.

    The stream's own `finally` only runs if the body iterator was started;
    a send that fails on the response start never reaches it.
    """

    media_type = "application/zip"

    def __init__(self, archive: BackupArchive):
        super().__init__(
            backup_service.stream(archive),
            headers={"Content-Disposition": f'attachment; filename="{archive.filename}"'},
        )
        self.archive = archive

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await backup_service.cleanup(self.archive.staging_dir, self.archive.path)


@router.post(
    "/export/{journal_id}",
    response_class=BackupResponse,
    responses={
        200: {"description": "ZIP archive", "content": {"application/zip": {}}},
        403: {"description": "Only the owner can export", "model": ErrorResponse},
        404: {"description": "Journal not found", "model": ErrorResponse},
    },
    summary="Download a ZIP backup of a journal (owner)",
)
async def export_journal(
    access: JournalAccess = Depends(get_journal_access),
    db: AsyncSession = Depends(get_db_session),
) -> BackupResponse:
    archive = await backup_service.build_archive(db, access)
    return BackupResponse(archive)
