"""
BabyJournal Backend — Media File Storage Service
=================================================

What:  Every filesystem side effect of the application: upload validation
       and storage, photo thumbnails, file removal, journal media
       directories, and URL ↔ path translation.
How:   Async writes with aiofiles; Pillow resizing and directory trees
       (rename, copy, remove) run in worker threads so the event loop is
       never blocked.
Who:   MemoryService, JournalService, BackupService and the media route.

Directory Structure:
    public_root/
    └── media/
        └── journals/                    ← media_root
            ├── <journal_id>/
            │   ├── 5c1e...9a.jpg
            │   ├── 77b0...41.mp4
            │   └── thumbnails/
            │       └── thumb-0f3d...c2.webp
            └── .trash-<journal_id>-<hex>/   ← staged for removal

URLs:
    Stored URLs are public-relative with forward slashes, e.g.
    /media/journals/<journal_id>/5c1e...9a.jpg, regardless of host OS.

File Names:
    uuid4 hex plus an extension derived from the declared MIME type; no
    part of the client's file name reaches the disk.
"""

import asyncio
import logging
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from PIL import Image, UnidentifiedImageError

from babyjournal.config import settings
from babyjournal.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed Upload Types ──────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
}

THUMBNAIL_DIR = "thumbnails"
STAGING_PREFIX = ".trash-"


@dataclass(frozen=True)
class StoredFile:
    path: Path
    url: str


class FileService:
    """
    Filesystem gateway rooted at `public_root`.

    Args:
        public_root: Override of settings.public_root (tests use tmp_path).
    """

    def __init__(
        self,
        public_root: Optional[str] = None,
        max_upload_size: Optional[int] = None,
        thumbnail_size: Optional[int] = None,
        thumbnail_quality: Optional[int] = None,
    ):
        self.public_root = Path(public_root or settings.public_root).resolve()
        self.media_root = self.public_root / "media" / "journals"
        self.max_upload_size = max_upload_size or settings.max_upload_size
        self.thumbnail_size = thumbnail_size or settings.thumbnail_size
        self.thumbnail_quality = thumbnail_quality or settings.thumbnail_quality

    # ── Validation ────────────────────────────────────────────────────────

    def validate_upload(self, content_type: Optional[str], size: int) -> str:
        """
        Check the declared MIME type and the byte size of an upload.

        Returns:
            The extension files of this type are stored with.
        Raises:
            ValidationError: Type not allowed, or file larger than the limit.
        """
        mime_type = (content_type or "").split(";")[0].strip().lower()
        extension = ALLOWED_MIME_TYPES.get(mime_type)
        if extension is None:
            raise ValidationError(
                message=(
                    f"File type '{mime_type or 'unknown'}' is not supported. "
                    "Upload a JPEG, PNG or GIF image, or an MP4 or QuickTime video."
                ),
                field="file",
                context={"content_type": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )

        if size > self.max_upload_size:
            max_mb = self.max_upload_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": size},
            )
        return extension

    # ── Paths and URLs ────────────────────────────────────────────────────

    def journal_dir(self, journal_id: str) -> Path:
        return self.media_root / journal_id

    def url_for(self, path: Path) -> str:
        return "/" + path.relative_to(self.public_root).as_posix()

    def path_for_url(self, url: Optional[str]) -> Optional[Path]:
        """Map a stored URL back to a path, or None if it points outside public_root."""
        if not url:
            return None
        candidate = (self.public_root / url.lstrip("/")).resolve()
        if not candidate.is_relative_to(self.public_root):
            logger.warning("Refusing to resolve URL outside public root: %s", url)
            return None
        return candidate

    def resolve_media_path(self, relative_path: str) -> Path:
        """
        Resolve a path requested under /media to a file on disk.

        Raises:
            ValidationError: The path escapes the media directory or names
                             a hidden (staged) entry.
        """
        media_dir = self.public_root / "media"
        candidate = (media_dir / relative_path).resolve()
        parts = Path(relative_path).parts
        if not candidate.is_relative_to(media_dir) or any(p.startswith(".") for p in parts):
            raise ValidationError("Invalid media path.", field="path")
        return candidate

    # ── Uploads ───────────────────────────────────────────────────────────

    async def store_upload(self, journal_id: str, content: bytes, extension: str) -> StoredFile:
        directory = self.journal_dir(journal_id)
        path = directory / f"{uuid.uuid4().hex}{extension}"
        try:
            await aiofiles.os.makedirs(directory, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, e)
            raise FileStorageError(
                message="Failed to save the uploaded file. Please try again.",
                context={"os_error": str(e)},
            ) from e

        logger.info("Stored upload %s (%d bytes)", path.name, len(content))
        return StoredFile(path=path, url=self.url_for(path))

    def _render_thumbnail(self, source: Path, destination: Path) -> None:
        with Image.open(source) as image:
            # thumbnail() keeps the aspect ratio and never enlarges
            image.thumbnail((self.thumbnail_size, self.thumbnail_size))
            if image.mode not in ("RGB", "RGBA"):
                image = image.convert("RGBA")
            image.save(destination, "WEBP", quality=self.thumbnail_quality)

    async def create_thumbnail(self, journal_id: str, source: Path) -> StoredFile:
        directory = self.journal_dir(journal_id) / THUMBNAIL_DIR
        destination = directory / f"thumb-{uuid.uuid4().hex}.webp"
        try:
            await aiofiles.os.makedirs(directory, exist_ok=True)
            await asyncio.to_thread(self._render_thumbnail, source, destination)
        except UnidentifiedImageError as e:
            await self.discard(destination)
            raise ValidationError(
                "The uploaded image could not be read.",
                field="file",
            ) from e
        except OSError as e:
            await self.discard(destination)
            logger.error("Thumbnail generation failed for %s: %s", source.name, e)
            raise FileStorageError(
                message="Failed to generate a thumbnail for the uploaded image.",
                context={"os_error": str(e)},
            ) from e
        return StoredFile(path=destination, url=self.url_for(destination))

    # ── Removal ───────────────────────────────────────────────────────────

    async def remove_file(self, path: Optional[Path]) -> bool:
        """
        Remove a file if present. Returns whether something was removed.

        Raises:
            FileStorageError: The file exists but could not be removed.
        """
        if path is None:
            return False
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error("Failed to remove %s: %s", path, e)
            raise FileStorageError(
                message="Failed to remove a stored file.",
                context={"os_error": str(e)},
            ) from e
        logger.info("Removed file %s", path.name)
        return True

    async def discard(self, path: Optional[Path]) -> None:
        """Best-effort removal used when unwinding a failed upload."""
        try:
            await self.remove_file(path)
        except FileStorageError:
            logger.warning("Could not discard %s; leaving it for manual cleanup", path)

    # ── Journal Directories ───────────────────────────────────────────────

    async def stage_journal_dir(self, journal_id: str) -> Optional[Path]:
        """
        Move a journal's media directory aside so it can be restored or
        purged later. Returns the staged path, or None if there was no
        directory.
        """
        directory = self.journal_dir(journal_id)
        if not await aiofiles.os.path.isdir(directory):
            return None
        staged = self.media_root / f"{STAGING_PREFIX}{journal_id}-{uuid.uuid4().hex[:8]}"
        try:
            await aiofiles.os.rename(directory, staged)
        except OSError as e:
            logger.error("Failed to stage media directory of journal %s: %s", journal_id, e)
            raise FileStorageError(
                message="Failed to remove the journal's media files.",
                context={"journal_id": journal_id, "os_error": str(e)},
            ) from e
        return staged

    async def restore_journal_dir(self, staged: Path, journal_id: str) -> None:
        try:
            await aiofiles.os.rename(staged, self.journal_dir(journal_id))
        except OSError as e:
            logger.error(
                "Could not restore staged media %s for journal %s: %s", staged, journal_id, e
            )

    async def purge(self, directory: Path) -> None:
        """Recursively remove a directory. Failures are logged, never raised."""
        try:
            await asyncio.to_thread(shutil.rmtree, directory)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("Failed to remove directory %s: %s", directory, e)

    async def copy_journal_media(self, journal_id: str, destination: Path) -> bool:
        """Copy a journal's media tree to `destination`. Returns False if it has none."""
        source = self.journal_dir(journal_id)
        if not await aiofiles.os.path.isdir(source):
            return False
        try:
            await asyncio.to_thread(shutil.copytree, source, destination)
        except OSError as e:
            raise FileStorageError(
                message="Failed to copy the journal's media files.",
                context={"journal_id": journal_id, "os_error": str(e)},
            ) from e
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
