"""
BabyJournal Backend — Backup Export Tests
==========================================

What we test:
    ✅ Owner downloads a ZIP with data/*.json and media/
    ✅ Staging directory and archive are gone once the download ends
    ✅ Editors and readers cannot export
    ✅ Failures while building the archive leave nothing behind (500)
    ✅ A client that goes away mid-download leaves nothing behind
"""

import contextlib
import io
import json
import zipfile
from pathlib import Path
from unittest.mock import AsyncMock, patch

import anyio
import pytest

from babyjournal.config import settings
from babyjournal.exceptions import FileStorageError
from babyjournal.services.backup_service import backup_service


def _backup_leftovers():
    root = Path(backup_service.temp_root)
    if not root.exists():
        return []
    return [p.name for p in root.iterdir() if p.name.startswith("backup_")]


class TestBackupExport:

    @pytest.mark.asyncio
    async def test_export(self, signed_in, journal_of, png_bytes):
        ana = await signed_in("Ana")
        journal_id = await journal_of(ana, "Baby Lucas")
        await ana.client.post(
            f"/api/journals/{journal_id}/events",
            json={"date": "2024-01-05", "time": "08:30", "kind": "feeding"},
        )
        upload = await ana.client.post(
            f"/api/journals/{journal_id}/memories",
            data={"date": "2024-01-05"},
            files={"file": ("smile.png", png_bytes, "image/png")},
        )
        stored_name = upload.json()["memory"]["file_url"].rsplit("/", 1)[-1]

        response = await ana.client.post(f"/api/backup/export/{journal_id}")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        assert f"journal_backup_{journal_id}.zip" in response.headers["content-disposition"]
        assert len(response.content) > 0

        with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
            names = set(archive.namelist())
            assert {
                "data/journal.json",
                "data/events.json",
                "data/memories.json",
                "data/shared_access.json",
            } <= names
            assert f"media/{stored_name}" in names
            journal = json.loads(archive.read("data/journal.json"))
            events = json.loads(archive.read("data/events.json"))

        assert journal["display_name"] == "Baby Lucas"
        assert [e["kind"] for e in events] == ["feeding"]
        assert _backup_leftovers() == []

    @pytest.mark.asyncio
    async def test_export_without_media(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        journal_id = await journal_of(ana)

        response = await ana.client.post(f"/api/backup/export/{journal_id}")
        assert response.status_code == 200
        with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
            assert "media/" in archive.namelist()
        assert _backup_leftovers() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["editor", "reader"])
    async def test_only_owner_exports(self, signed_in, journal_of, role):
        ana = await signed_in("Ana")
        eva = await signed_in("Eva")
        journal_id = await journal_of(ana)
        await ana.client.post(
            f"/api/journals/{journal_id}/share", json={"email": eva.email, "role": role}
        )

        response = await eva.client.post(f"/api/backup/export/{journal_id}")
        assert response.status_code == 403
        assert _backup_leftovers() == []


class TestBackupCleanup:

    @pytest.mark.asyncio
    async def test_compression_failure(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        journal_id = await journal_of(ana)

        with patch(
            "babyjournal.services.backup_service._zip_tree",
            side_effect=OSError("disk full"),
        ):
            response = await ana.client.post(f"/api/backup/export/{journal_id}")

        assert response.status_code == 500
        assert "disk full" not in response.text
        assert _backup_leftovers() == []

    @pytest.mark.asyncio
    async def test_media_copy_failure(self, signed_in, journal_of):
        ana = await signed_in("Ana")
        journal_id = await journal_of(ana)

        with patch.object(
            backup_service.files,
            "copy_journal_media",
            AsyncMock(side_effect=FileStorageError("Failed to copy the journal's media files.")),
        ):
            response = await ana.client.post(f"/api/backup/export/{journal_id}")

        assert response.status_code == 500
        assert _backup_leftovers() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing_message", ["http.response.start", "http.response.body"])
    async def test_client_disconnect(self, app, signed_in, journal_of, png_bytes, failing_message):
        """Drive the ASGI app directly with a send that fails part-way."""
        ana = await signed_in("Ana")
        journal_id = await journal_of(ana)
        await ana.client.post(
            f"/api/journals/{journal_id}/memories",
            data={"date": "2024-01-05"},
            files={"file": ("smile.png", png_bytes, "image/png")},
        )
        cookie = ana.client.cookies.get(settings.session_cookie)
        path = f"/api/backup/export/{journal_id}"
        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "POST",
            "scheme": "http",
            "path": path,
            "raw_path": path.encode(),
            "root_path": "",
            "query_string": b"",
            "headers": [
                (b"host", b"test"),
                (b"cookie", f"{settings.session_cookie}={cookie}".encode()),
            ],
            "client": ("127.0.0.1", 50000),
            "server": ("test", 80),
        }
        request_sent = False

        async def receive():
            nonlocal request_sent
            if not request_sent:
                request_sent = True
                return {"type": "http.request", "body": b"", "more_body": False}
            await anyio.sleep_forever()

        async def send(message):
            if message["type"] == failing_message:
                raise OSError("client went away")

        with contextlib.suppress(Exception):
            await app(scope, receive, send)

        assert _backup_leftovers() == []
