"""
errors.py — AppError base class, engine error taxonomy and code registry.

Every error returned by the guest-list API uses a code defined here.
Do not raise strings or generic exceptions from service or route code.

Engine taxonomy:
  NotFoundError     — the referenced guest id does not exist (404)
  TransactionError  — commit/rollback failed at the store (500)
  StatementError    — a single insert/update/delete/query failed (500)
  Input validation is marshmallow's ValidationError, raised by the request
  schemas before the engine is called.
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.field       = field  # which request field caused the error

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


# ── Error Code Registry ────────────────────────────────────────────────────
#
# These are the string values sent in the API response.
# Do not rename them without a major version bump.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Schema / Input Errors (400) ────────────────────────────────────────
    MISSING_FIELD       = "MISSING_FIELD"
    INVALID_FIELD       = "INVALID_FIELD"

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    GUEST_NOT_FOUND     = "GUEST_NOT_FOUND"

    # ── Auth Errors (401) ──────────────────────────────────────────────────
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_MISSING       = "TOKEN_MISSING"
    TOKEN_INVALID       = "TOKEN_INVALID"
    TOKEN_EXPIRED       = "TOKEN_EXPIRED"

    # ── Store Errors (500) ─────────────────────────────────────────────────
    TRANSACTION_FAILED  = "TRANSACTION_FAILED"
    STATEMENT_FAILED    = "STATEMENT_FAILED"

    # ── System Errors (500) ────────────────────────────────────────────────
    INTERNAL_ERROR      = "INTERNAL_ERROR"


class NotFoundError(AppError):
    """The guest id passed to an engine operation does not exist."""

    def __init__(self, guest_id: int) -> None:
        super().__init__(
            ErrorCode.GUEST_NOT_FOUND,
            f"Guest {guest_id} does not exist.",
            404,
        )
        self.guest_id = guest_id


class StoreError(AppError):
    """
    Base for failures reported by the relational store.

    `original` is the SQLAlchemy exception that caused it (also chained as
    __cause__ by the raising site).
    """

    code_value = ErrorCode.INTERNAL_ERROR

    def __init__(self, operation: str, original: Exception) -> None:
        super().__init__(
            self.code_value,
            f"{operation} failed: {type(original).__name__}.",
            500,
        )
        self.operation = operation
        self.original  = original


class StatementError(StoreError):
    """An individual statement failed (constraint violation, lost connection)."""

    code_value = ErrorCode.STATEMENT_FAILED


class TransactionError(StoreError):
    """Begin, commit or rollback failed at the store."""

    code_value = ErrorCode.TRANSACTION_FAILED
