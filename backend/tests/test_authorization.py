"""
Authorization tests.

Verifies:
- Unauthenticated requests return 401
- Viewer role is read-only (403 on writes)
- Storekeeper cannot delete or manage users
- Admin role can perform privileged operations
"""

from types import SimpleNamespace

import pytest
from flask import g

from fabricstore.decorators import require_all_permissions, require_any_permission


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/rolls"),
            ("POST", "/api/rolls"),
            ("GET", "/api/rolls/summary"),
            ("PUT", "/api/rolls/some-id"),
            ("DELETE", "/api/rolls/some-id"),
            ("GET", "/api/catalogs"),
            ("POST", "/api/catalogs"),
            ("GET", "/api/users"),
            ("GET", "/api/audit"),
            ("GET", "/api/auth/me"),
            ("POST", "/api/auth/logout"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        body = resp.get_json()
        assert body["success"] is False
        assert body["error"]["code"] == "AUTH_REQUIRED"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/rolls", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "AUTH_INVALID"

    def test_health_is_public(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["status"] == "healthy"


# =============================================================================
# VIEWER IS READ-ONLY - 403
# =============================================================================


class TestViewerReadOnly:

    def test_can_read(self, client, viewer_headers, make_roll):
        make_roll("V-1")
        resp = client.get("/api/rolls", headers=viewer_headers)
        assert resp.status_code == 200
        assert len(resp.get_json()["data"]) == 1

    def test_cannot_create_roll(self, client, viewer_headers, catalog):
        resp = client.post(
            "/api/rolls",
            json={"barcode": "V-2", "catalogId": catalog.id, "color": "Blue", "degree": "A", "lengthMeters": 5},
            headers=viewer_headers,
        )
        assert resp.status_code == 403
        error = resp.get_json()["error"]
        assert error["code"] == "PERMISSION_DENIED"
        assert "rolls:create" in error["message"]

    def test_cannot_update_catalog(self, client, viewer_headers, catalog):
        resp = client.put(f"/api/catalogs/{catalog.id}", json={"name": "Nope"}, headers=viewer_headers)
        assert resp.status_code == 403

    def test_cannot_read_audit(self, client, viewer_headers):
        assert client.get("/api/audit", headers=viewer_headers).status_code == 403


# =============================================================================
# STOREKEEPER LIMITS - 403
# =============================================================================


class TestStorekeeperLimits:

    def test_cannot_delete_roll(self, client, storekeeper_headers, make_roll):
        roll = make_roll("S-1")
        resp = client.delete(f"/api/rolls/{roll.id}", headers=storekeeper_headers)
        assert resp.status_code == 403

    def test_cannot_delete_catalog(self, client, storekeeper_headers, catalog):
        resp = client.delete(f"/api/catalogs/{catalog.id}", headers=storekeeper_headers)
        assert resp.status_code == 403

    def test_cannot_list_users(self, client, storekeeper_headers):
        assert client.get("/api/users", headers=storekeeper_headers).status_code == 403

    def test_cannot_change_someone_elses_password(self, client, storekeeper_headers, admin_user):
        resp = client.post(
            f"/api/users/{admin_user.id}/password",
            json={"currentPassword": "Password123", "newPassword": "Hijack123"},
            headers=storekeeper_headers,
        )
        assert resp.status_code == 403


# =============================================================================
# ADMIN ALLOWED
# =============================================================================


class TestAdminAllowed:

    def test_can_delete_roll(self, client, admin_headers, make_roll):
        roll = make_roll("A-1")
        resp = client.delete(f"/api/rolls/{roll.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json() == {"success": True, "data": None}

    def test_can_list_users(self, client, admin_headers):
        resp = client.get("/api/users", headers=admin_headers)
        assert resp.status_code == 200
        users = resp.get_json()["data"]
        assert [u["email"] for u in users] == ["admin@fabric.test"]
        assert "passwordHash" not in users[0]

    def test_can_read_audit(self, client, admin_headers):
        assert client.get("/api/audit", headers=admin_headers).status_code == 200


# =============================================================================
# COMPOSED PERMISSION DECORATORS
# =============================================================================


class TestComposedDecorators:

    @staticmethod
    def _call(app, role, view):
        with app.test_request_context("/"):
            g.pop("current_user", None)
            if role is not None:
                g.current_user = SimpleNamespace(id="u1", role=role)
            result = view()
        return result if isinstance(result, str) else result[1]

    def test_any(self, app):
        @require_any_permission("rolls:create", "rolls:read")
        def view():
            return "ok"

        assert self._call(app, "viewer", view) == "ok"
        assert self._call(app, "ghost", view) == 403
        assert self._call(app, None, view) == 401

    def test_all(self, app):
        @require_all_permissions("rolls:read", "rolls:delete")
        def view():
            return "ok"

        assert self._call(app, "admin", view) == "ok"
        assert self._call(app, "storekeeper", view) == 403
