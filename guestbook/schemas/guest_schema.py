"""
schemas/guest_schema.py — Marshmallow schemas for the guest endpoints.

Validation split:
  - This file: field types and non-blank names (after trim).
  - services/guest_service.py: GUEST_NOT_FOUND (needs a DB lookup).
  - The DB: CHECK(LENGTH(TRIM(name)) > 0) as the last resort.

Inherits from marshmallow.Schema directly, never ma.Schema.
See extensions.py.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate


def _validate_non_empty_after_trim(value: str) -> None:
    """
    validate.Length(min=1) lets "   " through; this mirrors the DB's
    CHECK(LENGTH(TRIM(...)) > 0) instead.
    """
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


_NAME_VALIDATORS = [
    validate.Length(min=1, error="Name must not be empty."),
    _validate_non_empty_after_trim,
]


class CreateGuestGroupSchema(Schema):
    """
    POST /guest

    main_guest : required, non-blank
    comment    : optional free text (missing or null → "")
    companions : optional list of non-blank names, order preserved
    """

    main_guest = fields.Str(required=True, validate=_NAME_VALIDATORS)

    comment = fields.Str(load_default="", allow_none=True)

    companions = fields.List(
        fields.Str(validate=_NAME_VALIDATORS),
        load_default=list,
        allow_none=True,
    )


class EditGuestSchema(Schema):
    """PATCH /guest/:id — only the display name can change."""

    name = fields.Str(required=True, validate=_NAME_VALIDATORS)

