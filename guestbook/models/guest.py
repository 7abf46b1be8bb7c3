"""
models/guest.py — guests table definition.

A guest always belongs to exactly one GuestGroup.
No business logic. No imports from services or routes.

Invariant (enforced by services/guest_service.py, not by the store):
  every non-empty group has exactly one row with is_main = TRUE.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from guestbook.extensions import db


class Guest(db.Model):
    __tablename__ = "guests"

    __table_args__ = (
        CheckConstraint(
            "LENGTH(TRIM(name)) > 0",
            name="ck_guests_name_nonempty",
        ),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # ON DELETE CASCADE: a guest cannot outlive its group.
    group_id: Mapped[int] = mapped_column(
        ForeignKey("guest_groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)

    is_main: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    group: Mapped["GuestGroup"] = relationship(  # noqa: F821
        "GuestGroup",
        back_populates="guests",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Guest id={self.id} "
            f"group_id={self.group_id} "
            f"name={self.name!r} "
            f"is_main={self.is_main}>"
        )
