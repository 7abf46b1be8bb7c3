"""
routes/guests.py — Guest route handlers.

Layer rules:
  - Parse, validate, call ONE service, return envelope.
  - No business logic. No DB queries. No commits: each service call is its
    own transaction.

Endpoints (base url_prefix=/api/v1):
  POST   /guest        → 201  create group (main guest + companions)
  GET    /guests       → 200  list groups with companions
  DELETE /guest/:id    → 200  delete one guest, repairing its group (auth)
  PATCH  /guest/:id    → 200  rename one guest (auth)
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from guestbook.extensions import db
from guestbook.middleware.auth_middleware import require_auth
from guestbook.schemas.guest_schema import CreateGuestGroupSchema, EditGuestSchema
from guestbook.services import guest_projection, guest_service

guests_bp = Blueprint("guests", __name__)


@guests_bp.route("/guest", methods=["POST"])
def create_guest_group():
    """POST /guest — Record an RSVP: main guest plus companions."""
    data = CreateGuestGroupSchema().load(request.get_json(force=True) or {})
    current_app.logger.info(
        "Guest to save: %s (+%d companion(s))",
        data["main_guest"],
        len(data["companions"] or []),
    )
    group_id = guest_service.create_group(
        main_guest=data["main_guest"],
        comment=data["comment"] or "",
        companions=data["companions"] or [],
        session=db.session,
    )
    return jsonify({"data": {"guest_group_id": group_id}, "warnings": []}), 201


@guests_bp.route("/guests", methods=["GET"])
def list_guest_groups():
    """GET /guests — All groups, each with its ordered companions."""
    result = guest_projection.list_groups(session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@guests_bp.route("/guest/<int:guest_id>", methods=["DELETE"])
@require_auth
def delete_guest(guest_id: int):
    """DELETE /guest/:id — Remove a guest; promotes a new main guest or drops the empty group."""
    guest_service.delete_guest(guest_id=guest_id, session=db.session)
    return jsonify({
        "data": {"deleted": True, "guest_id": guest_id},
        "warnings": [],
    }), 200


@guests_bp.route("/guest/<int:guest_id>", methods=["PATCH"])
@require_auth
def edit_guest(guest_id: int):
    """PATCH /guest/:id — Rename a guest (and its group, if it is the main guest)."""
    data = EditGuestSchema().load(request.get_json(force=True) or {})
    guest_service.edit_guest_name(
        guest_id=guest_id,
        new_name=data["name"],
        session=db.session,
    )
    return jsonify({
        "data": {"updated": True, "guest_id": guest_id},
        "warnings": [],
    }), 200
