"""
BabyJournal Backend — File Service Tests
=========================================

What we test:
    ✅ Declared MIME type and size validation
    ✅ Uploads land under <media_root>/<journal_id>/ with public URLs
    ✅ Thumbnails fit 300x300, keep aspect ratio, never upscale, are WEBP
    ✅ URL ↔ path mapping refuses anything outside public_root
    ✅ Journal directory staging: stage, restore, purge
"""

import io

import pytest
from PIL import Image

from babyjournal.exceptions import ValidationError
from babyjournal.services.file_service import ALLOWED_MIME_TYPES, FileService


def _image_bytes(size, fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(10, 120, 200)).save(buffer, format=fmt)
    return buffer.getvalue()


class TestValidateUpload:

    def setup_method(self):
        self.service = FileService(public_root="/tmp/unused", max_upload_size=1_048_576)

    @pytest.mark.parametrize("content_type", sorted(ALLOWED_MIME_TYPES))
    def test_allowed_types(self, content_type):
        assert self.service.validate_upload(content_type, 10) == ALLOWED_MIME_TYPES[content_type]

    def test_type_parameters_and_case_are_ignored(self):
        assert self.service.validate_upload("Image/JPEG; charset=binary", 10) == ".jpg"

    @pytest.mark.parametrize("content_type", ["application/pdf", "image/webp", "", None])
    def test_rejected_types(self, content_type):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_upload(content_type, 10)
        assert exc_info.value.field == "file"

    def test_size_limit(self):
        self.service.validate_upload("image/png", 1_048_576)
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_upload("image/png", 1_048_577)


class TestStorage:

    @pytest.fixture(autouse=True)
    def _service(self, tmp_path):
        self.service = FileService(public_root=str(tmp_path))
        self.root = tmp_path.resolve()

    @pytest.mark.asyncio
    async def test_store_upload(self):
        stored = await self.service.store_upload("j1", b"payload", ".jpg")

        assert stored.path.read_bytes() == b"payload"
        assert stored.path.parent == self.root / "media" / "journals" / "j1"
        assert stored.url == f"/media/journals/j1/{stored.path.name}"
        assert self.service.path_for_url(stored.url) == stored.path

    @pytest.mark.asyncio
    async def test_file_names_are_unique(self):
        first = await self.service.store_upload("j1", b"a", ".png")
        second = await self.service.store_upload("j1", b"a", ".png")
        assert first.path != second.path

    @pytest.mark.asyncio
    async def test_thumbnail_fits_bounding_box(self):
        stored = await self.service.store_upload("j1", _image_bytes((640, 480)), ".png")
        thumb = await self.service.create_thumbnail("j1", stored.path)

        assert thumb.path.parent.name == "thumbnails"
        assert thumb.path.name.startswith("thumb-")
        assert thumb.url.startswith("/media/journals/j1/thumbnails/thumb-")
        with Image.open(thumb.path) as image:
            assert image.format == "WEBP"
            assert image.size == (300, 225)

    @pytest.mark.asyncio
    async def test_thumbnail_never_upscales(self):
        stored = await self.service.store_upload("j1", _image_bytes((120, 80)), ".png")
        thumb = await self.service.create_thumbnail("j1", stored.path)
        with Image.open(thumb.path) as image:
            assert image.size == (120, 80)

    @pytest.mark.asyncio
    async def test_thumbnail_of_unreadable_image(self):
        stored = await self.service.store_upload("j1", b"not an image", ".png")
        with pytest.raises(ValidationError):
            await self.service.create_thumbnail("j1", stored.path)
        assert list((stored.path.parent / "thumbnails").iterdir()) == []

    @pytest.mark.asyncio
    async def test_remove_file(self):
        stored = await self.service.store_upload("j1", b"x", ".gif")
        assert await self.service.remove_file(stored.path) is True
        assert not stored.path.exists()
        assert await self.service.remove_file(stored.path) is False
        assert await self.service.remove_file(None) is False

    def test_path_for_url_rejects_escape(self):
        assert self.service.path_for_url("/../../etc/passwd") is None
        assert self.service.path_for_url(None) is None

    def test_resolve_media_path(self):
        path = self.service.resolve_media_path("journals/j1/a.jpg")
        assert path == self.root / "media" / "journals" / "j1" / "a.jpg"

    @pytest.mark.parametrize(
        "relative",
        ["../secret.txt", "journals/../../secret.txt", "journals/.trash-j1-1234/a.jpg"],
    )
    def test_resolve_media_path_rejects(self, relative):
        with pytest.raises(ValidationError):
            self.service.resolve_media_path(relative)


class TestJournalDirectories:

    @pytest.fixture(autouse=True)
    def _service(self, tmp_path):
        self.service = FileService(public_root=str(tmp_path))

    @pytest.mark.asyncio
    async def test_stage_missing_directory(self):
        assert await self.service.stage_journal_dir("nothing-here") is None

    @pytest.mark.asyncio
    async def test_stage_then_restore(self):
        stored = await self.service.store_upload("j1", b"x", ".jpg")
        staged = await self.service.stage_journal_dir("j1")

        assert staged is not None
        assert not self.service.journal_dir("j1").exists()
        assert staged.parent == self.service.media_root
        assert staged.name.startswith(".trash-j1-")

        await self.service.restore_journal_dir(staged, "j1")
        assert stored.path.exists()

    @pytest.mark.asyncio
    async def test_stage_then_purge(self):
        await self.service.store_upload("j1", b"x", ".jpg")
        staged = await self.service.stage_journal_dir("j1")
        await self.service.purge(staged)
        assert not staged.exists()
        # Purging twice is harmless
        await self.service.purge(staged)

    @pytest.mark.asyncio
    async def test_copy_journal_media(self, tmp_path):
        stored = await self.service.store_upload("j1", b"x", ".jpg")
        destination = tmp_path / "copy"
        assert await self.service.copy_journal_media("j1", destination) is True
        assert (destination / stored.path.name).read_bytes() == b"x"
        assert await self.service.copy_journal_media("j2", tmp_path / "none") is False
