"""Tests for system settings and the email template shortcut."""


class TestSettings:
    """Sectioned settings merged over defaults."""

    def test_defaults(self, client, admin):
        resp = client.get("/api/settings/", headers=admin["headers"])
        assert resp.status_code == 200
        data = resp.json()
        assert set(data) == {"general", "email", "notifications", "security", "backup"}
        assert data["security"]["allow_user_registration"] is True
        assert data["general"]["time_zone"] == "UTC"

    def test_update_merges(self, client, admin):
        resp = client.put("/api/settings/", json={"general": {"site_name": "Wedding Planner"}}, headers=admin["headers"])
        assert resp.status_code == 200
        assert resp.json()["general"]["site_name"] == "Wedding Planner"
        assert resp.json()["general"]["time_format"] == "12h"

        single = client.get("/api/settings/general", headers=admin["headers"]).json()
        assert single == {"key": "general", "value": resp.json()["general"]}

    def test_unknown_section_or_field(self, client, admin):
        assert client.put("/api/settings/", json={"colors": {"a": 1}}, headers=admin["headers"]).status_code == 400
        assert client.put("/api/settings/", json={"general": {"font": "x"}}, headers=admin["headers"]).status_code == 400

    def test_security_holds_only_enforced_switches(self, client, admin):
        security = client.get("/api/settings/security", headers=admin["headers"]).json()["value"]
        assert security == {"allow_user_registration": True}
        resp = client.put("/api/settings/", json={"security": {"session_timeout_minutes": 5}}, headers=admin["headers"])
        assert resp.status_code == 400

    def test_unknown_key(self, client, admin):
        assert client.get("/api/settings/colors", headers=admin["headers"]).status_code == 404

    def test_reset(self, client, admin):
        client.put("/api/settings/", json={"backup": {"auto_backup_enabled": True}}, headers=admin["headers"])
        resp = client.post("/api/settings/reset", headers=admin["headers"])
        assert resp.status_code == 200
        assert resp.json()["backup"]["auto_backup_enabled"] is False

    def test_admin_only(self, client, host):
        assert client.get("/api/settings/", headers=host["headers"]).status_code == 403


class TestEmailTemplates:
    """Settings view of email templates."""

    def _template(self, client, admin, name, channel):
        resp = client.post("/api/notifications/templates", json={
            "name": name, "subject": "Hello", "content": "Hi {{ guest.first_name }}", "type": channel,
        }, headers=admin["headers"])
        assert resp.status_code == 201, resp.text
        return resp.json()

    def test_lists_only_email(self, client, admin):
        self._template(client, admin, "Welcome", "email")
        self._template(client, admin, "Ping", "sms")
        resp = client.get("/api/settings/email-templates", headers=admin["headers"])
        assert [t["name"] for t in resp.json()] == ["Welcome"]

    def test_update_email_template(self, client, admin):
        template = self._template(client, admin, "Welcome", "email")
        resp = client.put(f"/api/settings/email-templates/{template['id']}", json={"subject": "Welcome aboard"},
                          headers=admin["headers"])
        assert resp.status_code == 200
        assert resp.json()["subject"] == "Welcome aboard"

    def test_sms_template_not_editable_here(self, client, admin):
        template = self._template(client, admin, "Ping", "sms")
        resp = client.put(f"/api/settings/email-templates/{template['id']}", json={"subject": "x"},
                          headers=admin["headers"])
        assert resp.status_code == 404
