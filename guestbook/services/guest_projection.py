"""
services/guest_projection.py — Read side: groups with their companions.

One join query returns one row per (group, guest) pair, ordered by group id,
main guest first, then guest id. fold_group_rows() turns that flat stream
into one record per group.

A group with no guests has no join rows and so produces no record. The
write side never leaves such a group behind (see guest_service.delete_guest).

Layer rules:
  - No Flask imports. Returns plain dicts ready for jsonify().
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from guestbook.models.guest import Guest
from guestbook.models.guest_group import GuestGroup


def fold_group_rows(rows: Iterable) -> list[dict]:
    """
    Folds ordered join rows into group records.

    Each row needs group_id, main_guest_name, comment, name and is_main.
    Rows of one group must be contiguous. A new record starts whenever the
    group id changes; the first row of a run supplies the group fields and
    every non-main row adds a companion.
    """
    groups: list[dict] = []
    current: dict | None = None

    for row in rows:
        if current is None or row.group_id != current["group_id"]:
            current = {
                "group_id": row.group_id,
                "main_guest": row.main_guest_name,
                "comment": row.comment or "",
                "companions": [],
            }
            groups.append(current)

        if not row.is_main:
            current["companions"].append(row.name)

    return groups


def list_groups(session: Session) -> list[dict]:
    """
    Returns every group with its companions, ordered by group id.

    Record shape: {"group_id", "main_guest", "comment", "companions"}.
    """
    stmt = (
        select(
            GuestGroup.id.label("group_id"),
            GuestGroup.main_guest_name,
            GuestGroup.comment,
            Guest.name,
            Guest.is_main,
        )
        .join(Guest, Guest.group_id == GuestGroup.id)
        .order_by(GuestGroup.id.asc(), Guest.is_main.desc(), Guest.id.asc())
    )
    return fold_group_rows(session.execute(stmt))
