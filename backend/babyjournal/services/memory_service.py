"""
BabyJournal Backend — Memory Service
=====================================

What:  Photo and video memories of a journal: upload (with thumbnail),
       list, read, update metadata and delete (rows and files together).
Who:   Called by routes/memories.py with an already-resolved JournalAccess.

Upload Flow:
    ┌──────────┐   ┌──────────┐   ┌─────────────┐   ┌──────────┐
    │ Validate │──▶│  Store   │──▶│  Thumbnail  │──▶│  Insert  │
    │ type/size│   │  file    │   │ (photo only)│   │  row     │
    └──────────┘   └──────────┘   └─────────────┘   └──────────┘
    Any failure after "Store" removes the files already written.

Delete Flow (one atomic unit):
    read row (missing → NotFound, nothing touched)
    → remove file → remove thumbnail → delete row
    A delete that then affects zero rows means the row vanished mid-way;
    that is reported as DatabaseError and the transaction is rolled back.
"""

import datetime as dt
import logging
from typing import Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.access import JournalAccess, authorize
from babyjournal.database import atomic, fetch_all, fetch_one, run_mutation
from babyjournal.exceptions import (
    BabyJournalError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from babyjournal.models import Memory
from babyjournal.schemas.memory import (
    MemoryFilterParams,
    MemoryListResponse,
    MemoryResponse,
    MemoryUpdateRequest,
)
from babyjournal.services.file_service import FileService, StoredFile, file_service
from babyjournal.services.filters import FilterBuilder

logger = logging.getLogger(__name__)


def memory_kind(content_type: str) -> str:
    return "photo" if content_type.lower().startswith("image/") else "video"


class MemoryService:

    def __init__(self, files: Optional[FileService] = None):
        self.files = files or file_service

    async def create_memory(
        self,
        db: AsyncSession,
        access: JournalAccess,
        content: Optional[bytes],
        content_type: Optional[str],
        date: dt.date,
        description: Optional[str] = None,
        favorite: bool = False,
    ) -> MemoryResponse:
        """
        Store an uploaded photo/video and record it.

        Raises:
            ForbiddenError:   Reader role.
            ValidationError:  No file, unsupported type, or too large.
            FileStorageError: The file or thumbnail could not be written.
        """
        authorize(access, "memory", "create")
        if not content:
            raise ValidationError("No file was uploaded.", field="file")

        extension = self.files.validate_upload(content_type, len(content))
        kind = memory_kind(content_type or "")

        stored: Optional[StoredFile] = None
        thumbnail: Optional[StoredFile] = None
        try:
            stored = await self.files.store_upload(access.journal_id, content, extension)
            if kind == "photo":
                thumbnail = await self.files.create_thumbnail(access.journal_id, stored.path)

            result = await run_mutation(
                db,
                insert(Memory.__table__).values(
                    journal_id=access.journal_id,
                    kind=kind,
                    file_url=stored.url,
                    thumbnail_url=thumbnail.url if thumbnail else None,
                    date=date,
                    description=description,
                    favorite=favorite,
                ),
            )
            logger.info(
                "Memory %s (%s) uploaded to journal %s",
                result.inserted_id, kind, access.journal_id,
            )
            return await self.get_memory(db, access, result.inserted_id)

        except Exception as e:
            if stored is not None:
                await self.files.discard(stored.path)
            if thumbnail is not None:
                await self.files.discard(thumbnail.path)
            if isinstance(e, BabyJournalError):
                raise
            logger.error("Failed to record memory: %s", e, exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__}) from e

    async def list_memories(
        self,
        db: AsyncSession,
        access: JournalAccess,
        filters: MemoryFilterParams,
    ) -> MemoryListResponse:
        authorize(access, "memory", "read")
        builder = (
            FilterBuilder()
            .equals(Memory.journal_id, access.journal_id)
            .equals(Memory.kind, filters.kind)
            .flag(Memory.favorite, filters.favorite_only)
            .contains_any([Memory.description], filters.search)
        )
        try:
            rows = await fetch_all(
                db,
                builder.apply(select(Memory))
                .order_by(Memory.date.desc(), Memory.uploaded_at.desc())
                .limit(filters.limit)
                .offset(filters.offset),
            )
            count_row = await fetch_one(
                db, builder.apply(select(func.count()).select_from(Memory))
            )
        except Exception as e:
            logger.error("Failed to list memories: %s", e, exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__}) from e

        return MemoryListResponse(
            items=[MemoryResponse.model_validate(row[0]) for row in rows],
            total_count=count_row[0] if count_row else 0,
        )

    async def get_memory(
        self,
        db: AsyncSession,
        access: JournalAccess,
        memory_id: int,
    ) -> MemoryResponse:
        authorize(access, "memory", "read")
        row = await fetch_one(
            db,
            select(Memory)
            .where(Memory.id == memory_id, Memory.journal_id == access.journal_id)
            .execution_options(populate_existing=True),
        )
        if row is None:
            raise NotFoundError("memory", str(memory_id))
        return MemoryResponse.model_validate(row[0])

    async def update_memory(
        self,
        db: AsyncSession,
        access: JournalAccess,
        memory_id: int,
        payload: MemoryUpdateRequest,
    ) -> MemoryResponse:
        authorize(access, "memory", "update")
        result = await run_mutation(
            db,
            update(Memory)
            .where(Memory.id == memory_id, Memory.journal_id == access.journal_id)
            .values(
                date=payload.date,
                description=payload.description,
                favorite=payload.favorite,
            ),
        )
        if result.affected_rows == 0:
            raise NotFoundError("memory", str(memory_id))
        return await self.get_memory(db, access, memory_id)

    async def delete_memory(
        self,
        db: AsyncSession,
        access: JournalAccess,
        memory_id: int,
    ) -> None:
        authorize(access, "memory", "delete")
        async with atomic(db):
            row = await fetch_one(
                db,
                select(Memory.file_url, Memory.thumbnail_url).where(
                    Memory.id == memory_id, Memory.journal_id == access.journal_id
                ),
            )
            if row is None:
                raise NotFoundError("memory", str(memory_id))

            await self.files.remove_file(self.files.path_for_url(row.file_url))
            await self.files.remove_file(self.files.path_for_url(row.thumbnail_url))

            result = await run_mutation(
                db,
                delete(Memory).where(
                    Memory.id == memory_id, Memory.journal_id == access.journal_id
                ),
            )
            if result.affected_rows == 0:
                raise DatabaseError(
                    message="The memory could not be deleted.",
                    context={"memory_id": memory_id, "journal_id": access.journal_id},
                )
        logger.info("Memory %s deleted from journal %s", memory_id, access.journal_id)


# ── Singleton Instance ────────────────────────────────────────────────────
memory_service = MemoryService()
