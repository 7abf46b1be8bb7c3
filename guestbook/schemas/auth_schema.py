"""
schemas/auth_schema.py — Marshmallow schema for the admin login endpoint.

Inherits from marshmallow.Schema directly, never ma.Schema.
"""

from __future__ import annotations

from marshmallow import Schema, fields


class LoginSchema(Schema):
    """
    POST /login

    Credential correctness is checked in auth_service.py
    (INVALID_CREDENTIALS, 401).
    """

    username = fields.Str(required=True)
    password = fields.Str(required=True, load_only=True)
