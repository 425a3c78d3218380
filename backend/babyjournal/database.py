"""
BabyJournal Backend — Database Lifecycle and Session Management
================================================================

What:  Injected `Database` (async engine + session factory), the per-request
       session dependency, and the small persistence primitives services use.
How:   `Database` is created in the application lifespan, connected once,
       stored on `app.state.database`, and disposed at shutdown. Request
       handlers never reach for a module-level engine; they receive a session
       through `get_db_session`, which commits on success and rolls back on error.
Who:   Routes (via Depends), services (via the primitives), Alembic (via Base).

Persistence primitives:
    fetch_one(session, stmt)     → first row or None
    fetch_all(session, stmt)     → list of rows
    run_mutation(session, stmt)  → MutationResult(affected_rows, inserted_id)
    atomic(session)              → explicit all-or-nothing boundary
                                   (commit on success, rollback on any error)

SQLite Notes:
    Foreign-key enforcement is off by default in SQLite, so every new DBAPI
    connection runs `PRAGMA foreign_keys=ON`. Journal deletion relies on
    ON DELETE CASCADE to remove events, memories and shared access rows.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator, AsyncIterator, List, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from babyjournal.config import Settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with the shared metadata
    used by `Database.create_schema()` and by Alembic.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Storage client with an explicit lifecycle.

    Lifecycle:
        database = Database.from_settings(settings)
        await database.connect()        # startup
        await database.create_schema()  # optional, development/tests
        ...
        await database.dispose()        # shutdown
    """

    def __init__(self, url: str, echo: bool = False, **engine_options: Any):
        self.url = url
        self.echo = echo
        self.engine_options = engine_options
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        options: dict = {}
        if not settings.database_url.startswith("sqlite"):
            # Pool configuration only makes sense for server databases
            options = {
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_max_overflow,
                "pool_pre_ping": settings.db_pool_pre_ping,
                "pool_recycle": 3600,
            }
        return cls(settings.database_url, echo=settings.log_level == "DEBUG", **options)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    async def connect(self) -> None:
        """Create the engine and session factory."""
        if self.engine is not None:
            return
        self.engine = create_async_engine(self.url, echo=self.echo, **self.engine_options)
        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        # expire_on_commit=False: objects stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database engine created (%s)", self.engine.url.render_as_string(hide_password=True))

    async def create_schema(self) -> None:
        """
        Create all tables and seed the site configuration singleton.

        Idempotent: existing tables are left untouched and the singleton is
        only inserted when missing.
        """
        # Imported here so every model is registered on Base.metadata
        from babyjournal.models import SiteConfig

        engine = self._require_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with self.session() as session:
            if await session.get(SiteConfig, 1) is None:
                session.add(SiteConfig(id=1))
                await session.commit()
                logger.info("Seeded default site configuration")

    def session(self) -> AsyncSession:
        if self.session_factory is None:
            raise RuntimeError("Database.connect() must be called before opening sessions")
        return self.session_factory()

    async def dispose(self) -> None:
        """Close every pooled connection. Safe to call more than once."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None

    def _require_engine(self) -> AsyncEngine:
        if self.engine is None:
            raise RuntimeError("Database.connect() has not been called")
        return self.engine


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the Database stored on app.state
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns connection to pool)
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Persistence Primitives ────────────────────────────────────────────────
@dataclass(frozen=True)
class MutationResult:
    """Outcome of an INSERT, UPDATE or DELETE statement."""

    affected_rows: int
    inserted_id: Optional[Any] = None


async def fetch_one(session: AsyncSession, statement) -> Optional[Any]:
    result = await session.execute(statement)
    return result.first()


async def fetch_all(session: AsyncSession, statement) -> List[Any]:
    result = await session.execute(statement)
    return list(result.all())


async def run_mutation(session: AsyncSession, statement) -> MutationResult:
    """
    Execute an INSERT/UPDATE/DELETE and report its row metadata.

    Inserts are expected to target a Core table (`Model.__table__`) so the
    new primary key is available. ORM-enabled UPDATE/DELETE run with
    synchronize_session=False, which keeps them plain statements so
    `rowcount` is reliable on every backend.
    """
    if statement.is_insert:
        result = await session.execute(statement)
        primary_key = result.inserted_primary_key
        return MutationResult(
            affected_rows=result.rowcount or 1,
            inserted_id=primary_key[0] if primary_key else None,
        )

    result = await session.execute(
        statement.execution_options(synchronize_session=False)
    )
    return MutationResult(affected_rows=result.rowcount or 0)


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Explicit transaction boundary for multi-step mutations.

    Every row change made inside the block is committed together, or rolled
    back together when anything inside raises. Filesystem work done inside the
    block is NOT covered; callers stage it so it can be undone.
    """
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
