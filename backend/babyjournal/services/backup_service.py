"""
BabyJournal Backend — Journal Backup Exporter
==============================================

What:  Builds a ZIP backup of one journal (rows as JSON plus its media
       tree) and streams it to the owner.

Archive Layout:
    journal_backup_<journal_id>.zip
    ├── data/
    │   ├── journal.json
    │   ├── events.json
    │   ├── memories.json
    │   └── shared_access.json
    └── media/
        ├── <uuid>.jpg ...
        └── thumbnails/ ...

Temporary Files:
    temp_root/
    ├── backup_<journal_id>_<random>/        ← staging dir (tempfile.mkdtemp)
    └── backup_<journal_id>_<random>.zip     ← archive

    Both are removed on every exit path. Before the response exists, a
    failure removes whatever was created and propagates. Afterwards the
    response removes them once sending ends, including a client that
    disconnects before the body is read (see routes/backup.py). Failures
    there are only logged.
"""

import asyncio
import json
import logging
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional

import aiofiles
import aiofiles.os
import anyio
from fastapi.encoders import jsonable_encoder
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.access import JournalAccess, authorize
from babyjournal.config import settings
from babyjournal.database import fetch_all, fetch_one
from babyjournal.exceptions import BabyJournalError, FileStorageError, NotFoundError
from babyjournal.models import Event, Journal, Memory, SharedAccess
from babyjournal.services.file_service import FileService, file_service

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class BackupArchive:
    path: Path
    staging_dir: Path
    filename: str


def _zip_tree(source: Path, archive_path: Path) -> None:
    with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zf:
        for path in sorted(source.rglob("*")):
            zf.write(path, path.relative_to(source).as_posix())


class BackupService:

    def __init__(self, files: Optional[FileService] = None, temp_root: Optional[str] = None):
        self.files = files or file_service
        self.temp_root = Path(temp_root or settings.temp_root).resolve()

    async def _table_rows(self, db: AsyncSession, statement) -> List[Dict[str, Any]]:
        return [dict(row._mapping) for row in await fetch_all(db, statement)]

    async def _write_json(self, path: Path, payload: Any) -> None:
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(jsonable_encoder(payload), ensure_ascii=False, indent=2))

    async def build_archive(self, db: AsyncSession, access: JournalAccess) -> BackupArchive:
        """
        Stage the journal's data and media and compress them.

        Raises:
            ForbiddenError:   Requester is not the owner.
            NotFoundError:    Journal vanished before the export.
            FileStorageError: Staging, copying or compression failed.
        """
        authorize(access, "backup", "export")
        journal_id = access.journal_id

        staging: Optional[Path] = None
        archive_path: Optional[Path] = None
        try:
            await aiofiles.os.makedirs(self.temp_root, exist_ok=True)
            staging = Path(
                await asyncio.to_thread(
                    tempfile.mkdtemp, prefix=f"backup_{journal_id}_", dir=self.temp_root
                )
            )
            data_dir = staging / "data"
            await aiofiles.os.makedirs(data_dir)

            journal_row = await fetch_one(
                db, select(Journal.__table__).where(Journal.id == journal_id)
            )
            if journal_row is None:
                raise NotFoundError("journal", journal_id)

            await self._write_json(data_dir / "journal.json", dict(journal_row._mapping))
            await self._write_json(
                data_dir / "events.json",
                await self._table_rows(
                    db,
                    select(Event.__table__)
                    .where(Event.journal_id == journal_id)
                    .order_by(Event.date, Event.time),
                ),
            )
            await self._write_json(
                data_dir / "memories.json",
                await self._table_rows(
                    db,
                    select(Memory.__table__)
                    .where(Memory.journal_id == journal_id)
                    .order_by(Memory.date, Memory.uploaded_at),
                ),
            )
            await self._write_json(
                data_dir / "shared_access.json",
                await self._table_rows(
                    db,
                    select(SharedAccess.__table__).where(SharedAccess.journal_id == journal_id),
                ),
            )

            media_dir = staging / "media"
            if not await self.files.copy_journal_media(journal_id, media_dir):
                await aiofiles.os.makedirs(media_dir)

            archive_path = self.temp_root / f"{staging.name}.zip"
            await asyncio.to_thread(_zip_tree, staging, archive_path)

        except Exception as e:
            await self.cleanup(staging, archive_path)
            if isinstance(e, BabyJournalError):
                raise
            logger.error("Backup of journal %s failed: %s", journal_id, e, exc_info=True)
            raise FileStorageError(
                message="Failed to create the journal backup.",
                context={"journal_id": journal_id, "error": type(e).__name__},
            ) from e

        logger.info("Backup archive for journal %s created: %s", journal_id, archive_path.name)
        return BackupArchive(
            path=archive_path,
            staging_dir=staging,
            filename=f"journal_backup_{journal_id}.zip",
        )

    async def stream(self, archive: BackupArchive) -> AsyncIterator[bytes]:
        """Yield the archive in chunks, then remove every temporary file."""
        try:
            async with aiofiles.open(archive.path, "rb") as f:
                while True:
                    chunk = await f.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk
        finally:
            await self.cleanup(archive.staging_dir, archive.path)

    async def cleanup(self, staging: Optional[Path], archive_path: Optional[Path]) -> None:
        """
        Remove the staging directory and the archive. Safe to call twice.

        Shielded: a client disconnect cancels the response task, and the
        removal must still finish.
        """
        with anyio.CancelScope(shield=True):
            if staging is not None:
                await self.files.purge(staging)
            if archive_path is not None:
                await self.files.discard(archive_path)


# ── Singleton Instance ────────────────────────────────────────────────────
backup_service = BackupService()
