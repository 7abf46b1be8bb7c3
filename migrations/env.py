"""
migrations/env.py — Alembic environment.

Uses the same store URL resolution as the app (DATABASE_URL, or the
DATABASE_HOST family of variables); TEST_DATABASE_URL when TEST_RUN=1.
"""

from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from guestbook.config import ProductionConfig, TestingConfig
from guestbook.extensions import db
from guestbook import models  # noqa: F401  (populates db.metadata)

target_metadata = db.metadata

# ── Pick the right database URL ───────────────────────────────────────────
if os.getenv("TEST_RUN"):
    db_url = TestingConfig.SQLALCHEMY_DATABASE_URI
else:
    db_url = ProductionConfig.SQLALCHEMY_DATABASE_URI
if not db_url:
    raise RuntimeError("Set DATABASE_URL (or DATABASE_HOST ...) before running migrations.")

# ── Alembic config ────────────────────────────────────────────────────────
config = context.config
config.set_main_option("sqlalchemy.url", db_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def run_migrations_offline() -> None:
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
