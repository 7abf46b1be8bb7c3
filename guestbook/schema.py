"""
schema.py — idempotent table creation.

Creates guest_groups and guests if they are absent; existing tables are left
untouched. Deployments that manage schema with Alembic run
`alembic upgrade head` instead (migrations/versions/001_initial_schema.py
produces the same tables).
"""

from __future__ import annotations

import logging

from guestbook.extensions import db

logger = logging.getLogger(__name__)


def create_schema() -> None:
    """
    Creates both tables (create-if-absent). Must run inside an app context.

    Errors propagate: a failed schema creation at startup is fatal to the
    bootstrap path, not something to recover from here.
    """
    # Populate the metadata before create_all() inspects it.
    from guestbook import models  # noqa: F401

    db.create_all()
    logger.info("Schema ready: guest_groups, guests")
