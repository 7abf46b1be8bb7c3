"""
tests/integration/test_guest_routes.py — HTTP surface over the engine.

Endpoints covered (url_prefix=/api/v1):
  POST   /guest       → 201 / 400
  GET    /guests      → 200
  DELETE /guest/:id   → 200 / 401 / 404
  PATCH  /guest/:id   → 200 / 400 / 401 / 404
  POST   /login       → 200 / 401
"""

from __future__ import annotations

from .conftest import ADMIN_PASSWORD, ADMIN_USERNAME, auth_headers, guests_of, login_token


def _post_group(client, main_guest="Alice", comment="vip", companions=None):
    payload = {"main_guest": main_guest, "comment": comment}
    if companions is not None:
        payload["companions"] = companions
    return client.post("/api/v1/guest", json=payload)


def _list(client) -> list[dict]:
    resp = client.get("/api/v1/guests")
    assert resp.status_code == 200
    return resp.get_json()["data"]


def _guest_id(app, group_id: int, name: str) -> int:
    with app.app_context():
        return next(g.id for g in guests_of(group_id) if g.name == name)


# ═══════════════════════════════════════════════════════════════════════════
# POST /guest + GET /guests
# ═══════════════════════════════════════════════════════════════════════════

class TestCreateAndListRoutes:

    def test_create_returns_201_with_group_id(self, client):
        resp = _post_group(client, companions=["Bob", "Carol"])

        assert resp.status_code == 201
        payload = resp.get_json()
        assert isinstance(payload["data"]["guest_group_id"], int)
        assert payload["warnings"] == []

    def test_list_returns_created_group(self, client):
        group_id = _post_group(client, companions=["Bob", "Carol"]).get_json()["data"]["guest_group_id"]

        assert _list(client) == [
            {
                "group_id": group_id,
                "main_guest": "Alice",
                "comment": "vip",
                "companions": ["Bob", "Carol"],
            }
        ]

    def test_comment_and_companions_are_optional(self, client):
        resp = client.post("/api/v1/guest", json={"main_guest": "Solo"})

        assert resp.status_code == 201
        [record] = _list(client)
        assert record["comment"] == ""
        assert record["companions"] == []

    def test_missing_main_guest_returns_400(self, client):
        resp = client.post("/api/v1/guest", json={"comment": "no name"})

        assert resp.status_code == 400
        error = resp.get_json()["error"]
        assert error["code"] == "MISSING_FIELD"
        assert error["field"] == "main_guest"
        assert _list(client) == []

    def test_blank_main_guest_returns_400(self, client):
        resp = _post_group(client, main_guest="   ")

        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "INVALID_FIELD"

    def test_blank_companion_returns_400(self, client):
        resp = _post_group(client, companions=["Bob", ""])

        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "companions"
        assert _list(client) == []

    def test_listing_needs_no_auth(self, client):
        assert client.get("/api/v1/guests").status_code == 200


# ═══════════════════════════════════════════════════════════════════════════
# DELETE /guest/:id
# ═══════════════════════════════════════════════════════════════════════════

class TestDeleteRoute:

    def test_delete_requires_token(self, app, client):
        group_id = _post_group(client, companions=["Bob"]).get_json()["data"]["guest_group_id"]
        alice_id = _guest_id(app, group_id, "Alice")

        resp = client.delete(f"/api/v1/guest/{alice_id}")

        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISSING"
        assert len(_list(client)) == 1

    def test_delete_with_bad_token_returns_401(self, client):
        resp = client.delete("/api/v1/guest/1", headers=auth_headers("not-a-jwt"))

        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_INVALID"

    def test_delete_main_promotes_companion(self, app, client):
        token = login_token(client)
        group_id = _post_group(client, companions=["Bob"]).get_json()["data"]["guest_group_id"]
        alice_id = _guest_id(app, group_id, "Alice")

        resp = client.delete(f"/api/v1/guest/{alice_id}", headers=auth_headers(token))

        assert resp.status_code == 200
        assert resp.get_json()["data"] == {"deleted": True, "guest_id": alice_id}
        assert _list(client) == [
            {"group_id": group_id, "main_guest": "Bob", "comment": "vip", "companions": []}
        ]

    def test_delete_last_guest_drops_group(self, app, client):
        token = login_token(client)
        group_id = _post_group(client).get_json()["data"]["guest_group_id"]
        alice_id = _guest_id(app, group_id, "Alice")

        resp = client.delete(f"/api/v1/guest/{alice_id}", headers=auth_headers(token))

        assert resp.status_code == 200
        assert _list(client) == []

    def test_delete_unknown_guest_returns_404(self, client):
        token = login_token(client)

        resp = client.delete("/api/v1/guest/987654", headers=auth_headers(token))

        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "GUEST_NOT_FOUND"


# ═══════════════════════════════════════════════════════════════════════════
# PATCH /guest/:id
# ═══════════════════════════════════════════════════════════════════════════

class TestEditRoute:

    def test_patch_requires_token(self, client):
        resp = client.patch("/api/v1/guest/1", json={"name": "X"})

        assert resp.status_code == 401

    def test_patch_main_renames_group(self, app, client):
        token = login_token(client)
        group_id = _post_group(client, companions=["Bob"]).get_json()["data"]["guest_group_id"]
        alice_id = _guest_id(app, group_id, "Alice")

        resp = client.patch(
            f"/api/v1/guest/{alice_id}",
            json={"name": "Alicia"},
            headers=auth_headers(token),
        )

        assert resp.status_code == 200
        assert resp.get_json()["data"] == {"updated": True, "guest_id": alice_id}
        assert _list(client)[0]["main_guest"] == "Alicia"

    def test_patch_companion_keeps_group_name(self, app, client):
        token = login_token(client)
        group_id = _post_group(client, companions=["Bob"]).get_json()["data"]["guest_group_id"]
        bob_id = _guest_id(app, group_id, "Bob")

        client.patch(f"/api/v1/guest/{bob_id}", json={"name": "Robert"}, headers=auth_headers(token))

        [record] = _list(client)
        assert record["main_guest"] == "Alice"
        assert record["companions"] == ["Robert"]

    def test_patch_without_name_returns_400(self, client):
        token = login_token(client)

        resp = client.patch("/api/v1/guest/1", json={}, headers=auth_headers(token))

        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "MISSING_FIELD"

    def test_patch_unknown_guest_returns_404(self, client):
        token = login_token(client)

        resp = client.patch(
            "/api/v1/guest/555555",
            json={"name": "Ghost"},
            headers=auth_headers(token),
        )

        assert resp.status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# POST /login
# ═══════════════════════════════════════════════════════════════════════════

class TestLogin:

    def test_login_returns_token(self, client):
        assert login_token(client)

    def test_wrong_password_returns_401(self, client):
        resp = client.post(
            "/api/v1/login",
            json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD + "x"},
        )

        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "INVALID_CREDENTIALS"

    def test_wrong_username_returns_401(self, client):
        resp = client.post(
            "/api/v1/login",
            json={"username": "root", "password": ADMIN_PASSWORD},
        )

        assert resp.status_code == 401


# ═══════════════════════════════════════════════════════════════════════════
# CORS
# ═══════════════════════════════════════════════════════════════════════════

def test_cors_headers_reflect_origin_in_testing(client):
    resp = client.get("/api/v1/guests", headers={"Origin": "http://localhost:3000"})

    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert resp.headers["Access-Control-Allow-Credentials"] == "true"
    assert "PATCH" in resp.headers["Access-Control-Allow-Methods"]


def test_unknown_route_keeps_404(client):
    assert client.get("/api/v1/nowhere").status_code == 404
