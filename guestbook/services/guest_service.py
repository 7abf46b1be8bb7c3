"""
services/guest_service.py — Guest group consistency engine (write side).

Every public function here is one transaction: it runs its statements,
commits, and on any failure rolls back everything before re-raising.
Nothing is committed halfway.

Denormalised state kept in step here and nowhere else:
  guest_groups.main_guest_name — equals the name of the group's is_main guest
  guest_groups.guest_count     — equals the number of live guests rows
  guests.is_main               — exactly one per non-empty group

Both write paths that can change the main guest's name (delete-repair and
rename) go through _resync_main_guest_name().

Group lifecycle on delete_guest():
  Populated (n > 1) --delete--> Populated   (promote oldest if main was removed)
  Populated (n == 1) --delete--> Empty      (group row deleted explicitly)

Concurrency: delete and rename lock the owning group row before re-reading
the guest, so two repairs on the same group are serialised by the store.
SQLite has no FOR UPDATE and takes its write lock on the first write, so
whether a main guest is still present is decided after our own write, never
from the pre-write read.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Unlike flush-only services, these functions own commit and rollback.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guestbook.errors import AppError, NotFoundError, StatementError, TransactionError
from guestbook.models.guest import Guest
from guestbook.models.guest_group import GuestGroup

logger = logging.getLogger(__name__)


# ── Transaction helper ─────────────────────────────────────────────────────

def _rollback(operation: str, session: Session) -> None:
    logger.warning("Rolling back %s", operation)
    try:
        session.rollback()
    except SQLAlchemyError as exc:
        raise TransactionError(operation, exc) from exc


@contextmanager
def transaction(operation: str, session: Session) -> Iterator[None]:
    """
    Runs the body as one all-or-nothing unit of work.

    - AppError (e.g. NotFoundError) → rollback, re-raised unchanged.
    - SQLAlchemyError in the body   → rollback, raised as StatementError.
    - SQLAlchemyError on commit     → rollback, raised as TransactionError.
    - anything else                 → rollback, re-raised unchanged.
    """
    try:
        yield
        session.flush()
    except AppError:
        _rollback(operation, session)
        raise
    except SQLAlchemyError as exc:
        _rollback(operation, session)
        raise StatementError(operation, exc) from exc
    except Exception:
        _rollback(operation, session)
        raise

    try:
        session.commit()
    except SQLAlchemyError as exc:
        _rollback(operation, session)
        raise TransactionError(operation, exc) from exc


# ── Private helpers ────────────────────────────────────────────────────────

def _lock_guest_or_404(guest_id: int, session: Session) -> Guest:
    """
    Returns the Guest with its group row locked, or raises NotFoundError.

    The guest is re-read after the lock is taken: a concurrent transaction
    may have deleted it while we waited.
    """
    group_id = session.execute(
        select(Guest.group_id).where(Guest.id == guest_id)
    ).scalar_one_or_none()
    if group_id is None:
        raise NotFoundError(guest_id)

    session.execute(
        select(GuestGroup.id)
        .where(GuestGroup.id == group_id)
        .with_for_update()
    ).scalar_one_or_none()

    guest = session.execute(
        select(Guest)
        .where(Guest.id == guest_id)
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if guest is None:
        raise NotFoundError(guest_id)
    return guest


def _oldest_remaining_guest(group_id: int, session: Session) -> Guest | None:
    """Lowest id wins: row id order is the insertion order."""
    return session.execute(
        select(Guest)
        .where(Guest.group_id == group_id)
        .order_by(Guest.id.asc())
        .limit(1)
    ).scalar_one_or_none()


def _has_main_guest(group_id: int, session: Session) -> bool:
    return session.execute(
        select(Guest.id).where(
            Guest.group_id == group_id,
            Guest.is_main.is_(True),
        ).limit(1)
    ).scalar_one_or_none() is not None


def _resync_main_guest_name(group_id: int, session: Session) -> str:
    """
    Copies the current main guest's name onto guest_groups.main_guest_name.

    Raises (→ StatementError) unless the group has exactly one main guest.
    """
    session.flush()
    name = session.execute(
        select(Guest.name).where(
            Guest.group_id == group_id,
            Guest.is_main.is_(True),
        )
    ).scalar_one()
    session.execute(
        update(GuestGroup)
        .where(GuestGroup.id == group_id)
        .values(main_guest_name=name)
    )
    return name


# ── Public service functions ───────────────────────────────────────────────

def create_group(
        main_guest: str,
        comment: str | None,
        companions: list[str] | None,
        session: Session,
) -> int:
    """
    Creates a group together with its main guest and companions.

    Args:
        main_guest: Main guest display name (validated non-blank by the caller).
        comment:    Optional free text stored on the group.
        companions: Companion names in the order they should be listed.

    Returns: the new group's id.
    """
    companions = list(companions or [])

    with transaction("create_group", session):
        group = GuestGroup(
            main_guest_name=main_guest,
            comment=comment,
            guest_count=1 + len(companions),
        )
        session.add(group)
        session.flush()  # populate group.id before inserting guests

        session.add(Guest(group_id=group.id, name=main_guest, is_main=True))
        session.flush()

        # Insert order becomes id order, which is the listing order.
        session.add_all(
            Guest(group_id=group.id, name=name, is_main=False)
            for name in companions
        )
        group_id = group.id

    logger.info("Created guest group %s with %d guest(s)", group_id, 1 + len(companions))
    return group_id


def delete_guest(guest_id: int, session: Session) -> None:
    """
    Deletes one guest and repairs its group.

    - If the group still has guests and the deleted one was main (no main
      guest is left), the oldest remaining guest becomes main and the
      group's cached name follows it.
    - If the group is now empty, the group row is deleted.
    - guest_count is then decremented; for a deleted group this is a
      zero-row update.

    Raises:
        NotFoundError — no guest with this id (nothing is changed).
    """
    with transaction("delete_guest", session):
        group_id = _lock_guest_or_404(guest_id, session).group_id

        deleted = session.execute(delete(Guest).where(Guest.id == guest_id)).rowcount
        if deleted == 0:
            # Removed by a concurrent transaction after our lookup.
            raise NotFoundError(guest_id)

        replacement = _oldest_remaining_guest(group_id, session)
        if replacement is None:
            session.execute(delete(GuestGroup).where(GuestGroup.id == group_id))
            repair = "group removed"
        elif not _has_main_guest(group_id, session):
            replacement.is_main = True
            _resync_main_guest_name(group_id, session)
            repair = f"guest {replacement.id} promoted"
        else:
            repair = "none"

        session.execute(
            update(GuestGroup)
            .where(GuestGroup.id == group_id)
            .values(guest_count=GuestGroup.guest_count - 1)
        )

    logger.info("Deleted guest %s from group %s (repair: %s)", guest_id, group_id, repair)


def edit_guest_name(guest_id: int, new_name: str, session: Session) -> None:
    """
    Renames a guest. A main guest's group gets the new name in the same
    transaction, so the two never diverge.

    Raises:
        NotFoundError — no guest with this id (nothing is changed).
    """
    with transaction("edit_guest_name", session):
        guest = _lock_guest_or_404(guest_id, session)
        guest.name = new_name
        session.flush()
        # Re-read main-ness now that the row is write-locked.
        session.refresh(guest, ["is_main"])
        resynced = guest.is_main
        if resynced:
            _resync_main_guest_name(guest.group_id, session)

    logger.info("Renamed guest %s (group name resynced: %s)", guest_id, resynced)
