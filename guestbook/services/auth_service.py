"""
services/auth_service.py — Admin login.

There is a single administrator account configured through the environment:
  ADMIN_USERNAME       — login name
  ADMIN_PASSWORD_HASH  — bcrypt hash of the password

A successful login returns a signed HS256 JWT used as the bearer token for
the guarded guest endpoints (middleware/auth_middleware.py). The guest
engine itself knows nothing about this.

current_app.config is the only Flask dependency: the JWT secret and TTL
must come from validated config, never straight from the environment.
"""

from __future__ import annotations

import hmac
import secrets
from datetime import datetime, timezone

import bcrypt
import jwt
from flask import current_app

from guestbook.errors import AppError, ErrorCode


def _invalid_credentials() -> AppError:
    return AppError(
        ErrorCode.INVALID_CREDENTIALS,
        "Invalid username or password.",
        401,
    )


def _check_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in config (not a bcrypt string).
        return False


def create_access_token(subject: str) -> str:
    """
    Creates a signed JWT access token.
    Payload: sub, iat, exp, jti. TTL from JWT_ACCESS_TOKEN_EXPIRES (timedelta).
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": now,
        "exp": now + current_app.config["JWT_ACCESS_TOKEN_EXPIRES"],
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def login_admin(username: str, password: str) -> dict:
    """
    Validates the admin credentials and issues an access token.

    Raises:
      AppError(INVALID_CREDENTIALS, 401) — wrong username or password, or no
      password hash configured. Same error in every case.

    Returns: {"access_token": "..."}
    """
    expected_username = current_app.config.get("ADMIN_USERNAME", "admin")
    username_ok = hmac.compare_digest(username.encode("utf-8"), expected_username.encode("utf-8"))
    # Always run the bcrypt check so a wrong username costs the same time.
    password_ok = _check_password(password, current_app.config.get("ADMIN_PASSWORD_HASH", ""))

    if not (username_ok and password_ok):
        raise _invalid_credentials()

    return {"access_token": create_access_token(expected_username)}
