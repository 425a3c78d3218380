"""
BabyJournal Backend — ORM Models
=================================

Importing this package registers every table on `Base.metadata`
(used by `Database.create_schema()` and Alembic autogenerate).
"""

from babyjournal.models.event import Event
from babyjournal.models.journal import Journal, SharedAccess, generate_journal_id
from babyjournal.models.memory import Memory
from babyjournal.models.site_config import SiteConfig
from babyjournal.models.user import User, UserVisualConfig

__all__ = [
    "Event",
    "Journal",
    "Memory",
    "SharedAccess",
    "SiteConfig",
    "User",
    "UserVisualConfig",
    "generate_journal_id",
]
