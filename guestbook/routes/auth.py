"""
routes/auth.py — Admin login.

Endpoints (base url_prefix=/api/v1):
  POST /login → 200  exchange admin credentials for a bearer token
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from guestbook.schemas.auth_schema import LoginSchema
from guestbook.services import auth_service

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/login", methods=["POST"])
def login():
    """POST /login — Authenticate the administrator. (No auth required.)"""
    data = LoginSchema().load(request.get_json(force=True) or {})
    result = auth_service.login_admin(
        username=data["username"],
        password=data["password"],
    )
    return jsonify({"data": result, "warnings": []}), 200
