"""Initial schema: users, journals, sharing, events, memories, settings

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates every table of babyjournal.models and seeds the site
       configuration singleton (id = 1).
How:   Portable column types only, so the same revision runs on SQLite and
       PostgreSQL. Child tables reference their parents with
       ON DELETE CASCADE.

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        _created_at("registered_at"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_visual_configs",
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("primary_color", sa.String(32)),
        sa.Column("secondary_color", sa.String(32)),
        sa.Column("accent_color", sa.String(32)),
        sa.Column("background_color", sa.String(32)),
        sa.Column("card_color", sa.String(32)),
        sa.Column("text_color", sa.String(32)),
        sa.Column("light_text_color", sa.String(32)),
        sa.Column("border_color", sa.String(32)),
        sa.Column("main_font", sa.String(120)),
        sa.Column("font_size", sa.String(16)),
    )

    site_config = op.create_table(
        "site_config",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "site_name",
            sa.String(120),
            nullable=False,
            server_default=sa.text("'My Little Treasure'"),
        ),
        sa.Column(
            "allow_new_registrations",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
    )

    op.create_table(
        "journals",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column(
            "owner_user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("display_name", sa.String(200), nullable=False),
        sa.Column("baby_birth_date", sa.Date()),
        sa.Column("baby_gender", sa.String(32)),
        _created_at("created_at"),
    )
    op.create_index("ix_journals_owner_user_id", "journals", ["owner_user_id"])

    op.create_table(
        "shared_access",
        sa.Column(
            "journal_id",
            sa.String(32),
            sa.ForeignKey("journals.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("role", sa.String(20), nullable=False),
        _created_at("shared_at"),
    )
    op.create_index("ix_shared_access_journal_id", "shared_access", ["journal_id"])
    op.create_index("ix_shared_access_user_id", "shared_access", ["user_id"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "journal_id",
            sa.String(32),
            sa.ForeignKey("journals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(5), nullable=False),
        sa.Column("kind", sa.String(50), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("quantity", sa.Float()),
        sa.Column("unit", sa.String(20)),
        sa.Column("notes", sa.Text()),
        sa.Column("favorite", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at("created_at"),
    )
    op.create_index("ix_events_journal_id", "events", ["journal_id"])
    op.create_index("ix_events_kind", "events", ["kind"])
    op.create_index("ix_events_favorite", "events", ["favorite"])
    op.create_index(
        "idx_events_date_time", "events", [sa.text("date DESC"), sa.text("time DESC")]
    )

    op.create_table(
        "memories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "journal_id",
            sa.String(32),
            sa.ForeignKey("journals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("kind", sa.String(10), nullable=False),
        sa.Column("file_url", sa.String(500), nullable=False),
        sa.Column("thumbnail_url", sa.String(500)),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("favorite", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at("uploaded_at"),
    )
    op.create_index("ix_memories_journal_id", "memories", ["journal_id"])
    op.create_index("ix_memories_kind", "memories", ["kind"])
    op.create_index("ix_memories_favorite", "memories", ["favorite"])
    op.create_index(
        "idx_memories_date_uploaded",
        "memories",
        [sa.text("date DESC"), sa.text("uploaded_at DESC")],
    )

    op.bulk_insert(
        site_config,
        [{"id": 1, "site_name": "My Little Treasure", "allow_new_registrations": True}],
    )


def downgrade() -> None:
    op.drop_table("memories")
    op.drop_table("events")
    op.drop_table("shared_access")
    op.drop_table("journals")
    op.drop_table("site_config")
    op.drop_table("user_visual_configs")
    op.drop_table("users")
