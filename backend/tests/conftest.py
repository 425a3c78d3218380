"""
BabyJournal Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the whole suite.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── database:        real SQLite database in tmp_path (schema + seed)
    ├── app:             the FastAPI app bound to `database`
    ├── client_factory:  builds independent HTTPX clients (one cookie jar each)
    ├── client:          one anonymous client
    ├── signed_in:       registers a user on a fresh client
    ├── png_bytes:       a real 640x480 PNG generated with Pillow
    └── mp4_bytes:       opaque bytes uploaded as video/mp4

ASGITransport does not run the lifespan, so `app` attaches the test
database to app.state directly.
"""

import io
import os
import tempfile
from dataclasses import dataclass
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time: configure the environment before any
# babyjournal import.
_TEST_ROOT = tempfile.mkdtemp(prefix="babyjournal_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/unused.db"
os.environ["PUBLIC_ROOT"] = os.path.join(_TEST_ROOT, "public")
os.environ["TEMP_ROOT"] = os.path.join(_TEST_ROOT, "temp")
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SESSION_SECRET"] = "test-session-secret"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from PIL import Image  # noqa: E402

from babyjournal.database import Database  # noqa: E402

DEFAULT_PASSWORD = "correct-horse-42"


@dataclass
class Member:
    """A logged-in test user and the client carrying their session cookie."""

    client: AsyncClient
    user: Dict[str, Any]

    @property
    def id(self) -> int:
        return self.user["id"]

    @property
    def email(self) -> str:
        return self.user["email"]


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession.

    Usage:
        mock_db_session.execute.return_value = MagicMock(rowcount=0)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (640, 480), color=(240, 180, 200)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def mp4_bytes() -> bytes:
    return b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom" + b"\x00" * 256


# ══════════════════════════════════════════════════════════════════════════
# API fixtures (real SQLite database per test)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.connect()
    await db.create_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def app(database):
    from babyjournal.main import app as application

    application.state.database = database
    yield application


@pytest_asyncio.fixture
async def client_factory(app):
    clients = []

    def make_client() -> AsyncClient:
        # Unhandled errors become 500 responses instead of test crashes
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        new_client = AsyncClient(transport=transport, base_url="http://test")
        clients.append(new_client)
        return new_client

    yield make_client

    for open_client in clients:
        await open_client.aclose()


@pytest_asyncio.fixture
async def client(client_factory) -> AsyncClient:
    return client_factory()


@pytest_asyncio.fixture
async def signed_in(client_factory):
    """
    Factory: register (and thereby log in) a user on a new client.

        owner = await signed_in("Ana")
        await owner.client.post("/api/journals", json={...})
    """

    async def _signed_in(
        name: str,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
    ) -> Member:
        new_client = client_factory()
        response = await new_client.post(
            "/api/auth/register",
            json={
                "name": name,
                "email": email or f"{name.lower()}@example.com",
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        return Member(client=new_client, user=response.json()["user"])

    return _signed_in


@pytest.fixture
def journal_of():
    """Factory: create a journal owned by `member`, returning its id."""

    async def _journal_of(member: Member, display_name: str = "Baby Lucas") -> str:
        response = await member.client.post(
            "/api/journals",
            json={"display_name": display_name, "baby_birth_date": "2024-01-01"},
        )
        assert response.status_code == 201, response.text
        return response.json()["journal_id"]

    return _journal_of
