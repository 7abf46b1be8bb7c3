"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - Tests run against a real store. TEST_DATABASE_URL picks it (e.g. a
    PostgreSQL test database); without it a SQLite file in a temp dir is used.
  - The app is created once per session using create_app("testing").
  - Tables are created once via create_schema() at session start.
  - Between tests all rows are deleted so tests are isolated.

Helper functions (not fixtures):
  - guests_of(group_id)        → list of guest rows, oldest first
  - group_row(group_id)        → the guest_groups row or None
  - assert_invariants()        → checks count / single-main / cached-name rules
  - login_token(client)        → bearer token for the admin account
  - auth_headers(token)        → {"Authorization": "Bearer <token>"}
"""

from __future__ import annotations

import os

import bcrypt
import pytest
from sqlalchemy import func, select, text

from guestbook import create_app
from guestbook.extensions import db as _db
from guestbook.models import Guest, GuestGroup
from guestbook.schema import create_schema

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "Password1"


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """
    Creates the Flask application in 'testing' mode once for the whole run.
    """
    db_url = os.getenv("TEST_DATABASE_URL") or (
        "sqlite:///" + str(tmp_path_factory.mktemp("db") / "guestbook_test.db")
    )
    flask_app = create_app("testing", test_config={
        "SQLALCHEMY_DATABASE_URI": db_url,
        "JWT_SECRET_KEY": "integration-test-secret-0123456789abcdef",
        "ADMIN_USERNAME": ADMIN_USERNAME,
        "ADMIN_PASSWORD_HASH": bcrypt.hashpw(
            ADMIN_PASSWORD.encode("utf-8"),
            bcrypt.gensalt(rounds=4),
        ).decode("utf-8"),
    })

    with flask_app.app_context():
        create_schema()

    yield flask_app

    with flask_app.app_context():
        _db.session.remove()
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """Deletes all rows after every test; guests first, then groups."""
    yield

    with app.app_context():
        _db.session.rollback()
        with _db.engine.connect() as conn:
            conn.execute(text("DELETE FROM guests"))
            conn.execute(text("DELETE FROM guest_groups"))
            conn.commit()


@pytest.fixture
def session(app):
    """The app's scoped session inside an app context."""
    with app.app_context():
        yield _db.session
        _db.session.remove()


@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def guests_of(group_id: int) -> list[Guest]:
    """Returns the live guests of a group, oldest first. Needs an app context."""
    _db.session.expire_all()
    return list(_db.session.execute(
        select(Guest).where(Guest.group_id == group_id).order_by(Guest.id)
    ).scalars().all())


def group_row(group_id: int) -> GuestGroup | None:
    """Returns the freshly loaded group row, or None. Needs an app context."""
    _db.session.expire_all()
    return _db.session.get(GuestGroup, group_id)


def assert_invariants() -> None:
    """
    For every existing group:
      - guest_count equals the number of guests rows
      - exactly one guest is main
      - main_guest_name equals that guest's name
    and no group exists without guests.
    """
    _db.session.expire_all()
    groups = _db.session.execute(select(GuestGroup)).scalars().all()
    for group in groups:
        live = _db.session.execute(
            select(func.count()).select_from(Guest).where(Guest.group_id == group.id)
        ).scalar_one()
        mains = _db.session.execute(
            select(Guest.name).where(Guest.group_id == group.id, Guest.is_main.is_(True))
        ).scalars().all()

        assert live > 0, f"group {group.id} survives with no guests"
        assert group.guest_count == live, (
            f"group {group.id}: guest_count={group.guest_count}, live rows={live}"
        )
        assert len(mains) == 1, f"group {group.id} has {len(mains)} main guests"
        assert group.main_guest_name == mains[0]


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def login_token(client) -> str:
    """Logs in as the admin and returns the access token."""
    resp = client.post(
        "/api/v1/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert resp.status_code == 200, f"login failed: {resp.get_json()}"
    return resp.get_json()["data"]["access_token"]
