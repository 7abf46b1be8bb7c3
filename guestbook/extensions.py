"""
extensions.py — Flask extension singletons.

SQLAlchemy and marshmallow live here as module-level objects so models,
services and routes can import them without circular imports.

Pattern:
    1. Create the extension object here (no app attached yet).
    2. Call init_app(app) inside the app factory in guestbook/__init__.py.
    3. Import `db` or `ma` from here wherever needed.

    from guestbook.extensions import db, ma
"""

from flask_marshmallow import Marshmallow
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()

# Request schemas in guestbook/schemas/ inherit from marshmallow.Schema
# directly, never ma.Schema: ma.Schema needs an app context and the unit
# tests load schemas without one.
ma = Marshmallow()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """
    SQLite ignores FOREIGN KEY clauses unless the pragma is set per connection.
    guests.group_id ON DELETE CASCADE depends on it.
    """
    if type(dbapi_connection).__module__ != "sqlite3":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
