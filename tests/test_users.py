"""Tests for admin user management and role checks."""
from tests.conftest import PASSWORD, auth_headers, register_user


class TestUserAdmin:
    """CRUD on /api/users (admin only)."""

    def test_create_user_with_roles(self, client, admin):
        resp = client.post("/api/users/", json={
            "username": "planner",
            "email": "planner@example.com",
            "password": PASSWORD,
            "roles": ["event_manager", "hospitality"],
        }, headers=admin["headers"])
        assert resp.status_code == 201
        assert sorted(r["name"] for r in resp.json()["roles"]) == ["event_manager", "hospitality"]

    def test_list_users_paginated(self, client, admin):
        for name in ("u1", "u2", "u3"):
            register_user(client, name)
        resp = client.get("/api/users/?limit=2&page=1", headers=admin["headers"])
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 4
        assert data["page"] == 1
        assert data["limit"] == 2
        assert len(data["items"]) == 2

    def test_list_users_filter_by_role(self, client, admin):
        register_user(client, "someguest")
        resp = client.get("/api/users/?role=admin", headers=admin["headers"])
        assert [u["username"] for u in resp.json()["items"]] == ["admin"]

    def test_list_users_search(self, client, admin):
        register_user(client, "zelda")
        resp = client.get("/api/users/?search=zel", headers=admin["headers"])
        assert [u["username"] for u in resp.json()["items"]] == ["zelda"]

    def test_get_user_not_found(self, client, admin):
        resp = client.get("/api/users/does-not-exist", headers=admin["headers"])
        assert resp.status_code == 404
        assert resp.json()["detail"] == "User not found"

    def test_update_user_password(self, client, admin):
        user = register_user(client, "rita")["user"]
        resp = client.patch(f"/api/users/{user['id']}", json={"password": "set-by-admin"}, headers=admin["headers"])
        assert resp.status_code == 200
        login = client.post("/api/auth/login", json={"email": "rita@example.com", "password": "set-by-admin"})
        assert login.status_code == 200

    def test_set_roles(self, client, admin):
        user = register_user(client, "sam")["user"]
        resp = client.put(f"/api/users/{user['id']}/roles", json={"roles": ["event_host"]}, headers=admin["headers"])
        assert resp.status_code == 200
        assert [r["name"] for r in resp.json()["roles"]] == ["event_host"]

    def test_admin_cannot_drop_own_admin_role(self, client, admin):
        resp = client.put(f"/api/users/{admin['id']}/roles", json={"roles": ["guest"]}, headers=admin["headers"])
        assert resp.status_code == 400

    def test_admin_cannot_deactivate_self(self, client, admin):
        resp = client.put(f"/api/users/{admin['id']}/toggle-active", headers=admin["headers"])
        assert resp.status_code == 400

    def test_toggle_active_twice(self, client, admin):
        user = register_user(client, "tina")["user"]
        first = client.put(f"/api/users/{user['id']}/toggle-active", headers=admin["headers"])
        assert first.json()["is_active"] is False
        second = client.put(f"/api/users/{user['id']}/toggle-active", headers=admin["headers"])
        assert second.json()["is_active"] is True

    def test_delete_user(self, client, admin):
        user = register_user(client, "uma")["user"]
        resp = client.delete(f"/api/users/{user['id']}", headers=admin["headers"])
        assert resp.status_code == 204
        assert client.get(f"/api/users/{user['id']}", headers=admin["headers"]).status_code == 404

    def test_delete_self_rejected(self, client, admin):
        resp = client.delete(f"/api/users/{admin['id']}", headers=admin["headers"])
        assert resp.status_code == 400

    def test_list_roles(self, client, admin):
        resp = client.get("/api/users/roles", headers=admin["headers"])
        assert resp.status_code == 200
        assert {r["name"] for r in resp.json()} == {
            "admin", "event_manager", "event_host", "guest", "hospitality", "vendor",
        }


class TestUserAdminAccess:
    """Non-admins are turned away."""

    def test_guest_forbidden(self, client):
        token = register_user(client, "victor")["access_token"]
        resp = client.get("/api/users/", headers=auth_headers(token))
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Requires role admin"

    def test_event_host_forbidden(self, client, host):
        assert client.get("/api/users/", headers=host["headers"]).status_code == 403

    def test_anonymous_unauthorized(self, client):
        assert client.get("/api/users/").status_code == 401
