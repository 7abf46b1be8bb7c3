"""
models/guest_group.py — guest_groups table definition.

One row per RSVP unit: a main guest plus zero or more companions.
No business logic. No imports from services or routes.

Denormalised columns (kept in step by services/guest_service.py only):
  main_guest_name — copy of the name of the group's is_main guest
  guest_count     — number of live guests rows referencing this group

FK policy: guests.group_id ON DELETE CASCADE — deleting a group removes its
guests at the store. Nothing runs the other way: a group whose last guest is
removed must be deleted explicitly by the service.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from guestbook.extensions import db


class GuestGroup(db.Model):
    __tablename__ = "guest_groups"

    __table_args__ = (
        CheckConstraint(
            "LENGTH(TRIM(main_guest_name)) > 0",
            name="ck_guest_groups_main_guest_name_nonempty",
        ),
        CheckConstraint(
            "guest_count >= 0",
            name="ck_guest_groups_guest_count_nonnegative",
        ),
        # Row ids stand in for insertion order, so SQLite must never reuse them.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    main_guest_name: Mapped[str] = mapped_column(Text, nullable=False)

    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    guest_count: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    # passive_deletes: the store's ON DELETE CASCADE removes the rows; the
    # ORM must not load and delete them one by one first.
    guests: Mapped[list["Guest"]] = relationship(  # noqa: F821
        "Guest",
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Guest.id",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<GuestGroup id={self.id} "
            f"main_guest_name={self.main_guest_name!r} "
            f"guest_count={self.guest_count}>"
        )
