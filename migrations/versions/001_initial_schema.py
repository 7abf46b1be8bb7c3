"""Initial schema — guest_groups and guests.

Revision: 001_initial_schema
Created:  2026-10-19

Append-only: never edit this file after it has been applied to a database.
A schema change gets a NEW migration file.

Creation order: guest_groups, then guests (FK dependency order).

ON DELETE policies:
  guests.group_id → CASCADE (a guest is owned by its group)
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# ── Alembic revision identifiers ──────────────────────────────────────────
revision: str = "001_initial_schema"
down_revision: str | None = None      # first migration, no parent
branch_labels: tuple | None = None
depends_on: tuple | None = None


def upgrade() -> None:

    # ── guest_groups ───────────────────────────────────────────────────────
    # main_guest_name and guest_count are denormalised; the service layer
    # keeps them in step with the guests rows.

    op.create_table(
        "guest_groups",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("main_guest_name", sa.Text(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("guest_count", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_guest_groups"),
        sa.CheckConstraint(
            "LENGTH(TRIM(main_guest_name)) > 0",
            name="ck_guest_groups_main_guest_name_nonempty",
        ),
        sa.CheckConstraint(
            "guest_count >= 0",
            name="ck_guest_groups_guest_count_nonnegative",
        ),
        sqlite_autoincrement=True,
    )

    # ── guests ─────────────────────────────────────────────────────────────
    # FK: group_id ON DELETE CASCADE.

    op.create_table(
        "guests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "group_id",
            sa.Integer(),
            sa.ForeignKey("guest_groups.id", ondelete="CASCADE", name="fk_guests_group"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column(
            "is_main",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_guests"),
        sa.CheckConstraint(
            "LENGTH(TRIM(name)) > 0",
            name="ck_guests_name_nonempty",
        ),
        sqlite_autoincrement=True,
    )

    op.create_index("ix_guests_group_id", "guests", ["group_id"])


def downgrade() -> None:
    """Drops both tables in reverse dependency order. Local resets only."""
    op.drop_index("ix_guests_group_id", table_name="guests")
    op.drop_table("guests")
    op.drop_table("guest_groups")
