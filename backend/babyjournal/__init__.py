"""
BabyJournal Backend — Application Package Initializer
=====================================================

What: Marks the `babyjournal` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Dependencies (Identity, Access)   │  ← Session user, journal role
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Role checks, file side effects
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Injected async Database
    └─────────────────────────────────────┘

    Every request that touches a journal's sub-resources (events, memories,
    sharing, backups) first resolves the requester's role on that journal;
    services branch on that role before talking to the database.
"""

__version__ = "1.0.0"
