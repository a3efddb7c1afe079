"""Tests for the per-event guest list: invitation, confirmation, seating and check-in.

Each step of invited → invitation sent → confirmed → checked in → checked out
requires the one before it.
"""
from rsvp_app.models.user import RoleName
from tests.conftest import create_staff_user, create_test_event, create_test_guest, invite, rsvp_for


def _invited(client, host):
    event = create_test_event(client, host["headers"])
    guest = create_test_guest(client, host["headers"])
    link = invite(client, host["headers"], event["id"], guest["id"])
    return event, guest, link


def _url(event, guest, action=""):
    base = f"/api/events/{event['id']}/guests/{guest['id']}"
    return f"{base}/{action}" if action else base


class TestInvite:
    """Putting guests on the list."""

    def test_invite_opens_pending_rsvp(self, client, host):
        event, guest, link = _invited(client, host)
        assert link["invitation_sent"] is False
        assert link["is_confirmed"] is False
        assert link["guest"]["id"] == guest["id"]
        rsvp = rsvp_for(client, host["headers"], event["id"], guest["id"])
        assert rsvp["status"] == "pending"
        assert len(rsvp["token"]) >= 32

    def test_duplicate_invite(self, client, host):
        event, guest, _ = _invited(client, host)
        resp = client.post(f"/api/events/{event['id']}/guests", json={"guest_id": guest["id"]}, headers=host["headers"])
        assert resp.status_code == 409

    def test_invite_unknown_guest(self, client, host):
        event = create_test_event(client, host["headers"])
        resp = client.post(f"/api/events/{event['id']}/guests", json={"guest_id": "missing"}, headers=host["headers"])
        assert resp.status_code == 404

    def test_list_event_guests(self, client, host):
        event, guest, _ = _invited(client, host)
        other = create_test_guest(client, host["headers"], "Bea")
        invite(client, host["headers"], event["id"], other["id"])
        data = client.get(f"/api/events/{event['id']}/guests", headers=host["headers"]).json()
        assert data["total"] == 2

    def test_remove_keeps_rsvp(self, client, host):
        event, guest, _ = _invited(client, host)
        assert client.delete(_url(event, guest), headers=host["headers"]).status_code == 204
        assert client.get(f"/api/events/{event['id']}/guests", headers=host["headers"]).json()["total"] == 0
        assert rsvp_for(client, host["headers"], event["id"], guest["id"])["status"] == "pending"

    def test_remove_not_on_list(self, client, host):
        event = create_test_event(client, host["headers"])
        guest = create_test_guest(client, host["headers"])
        assert client.delete(_url(event, guest), headers=host["headers"]).status_code == 404


class TestLifecycle:
    """Invitation → confirmation → check-in → check-out."""

    def test_full_lifecycle(self, client, host):
        event, guest, _ = _invited(client, host)
        headers = host["headers"]

        sent = client.post(_url(event, guest, "invitation"), json={"method": "sms"}, headers=headers)
        assert sent.status_code == 200
        assert sent.json()["invitation_sent"] is True
        assert sent.json()["invitation_method"] == "sms"
        assert sent.json()["invitation_sent_at"] is not None

        confirmed = client.post(_url(event, guest, "confirm"), headers=headers)
        assert confirmed.status_code == 200
        assert confirmed.json()["is_confirmed"] is True

        checked_in = client.post(_url(event, guest, "check-in"), headers=headers)
        assert checked_in.status_code == 200
        assert checked_in.json()["check_in_time"] is not None

        checked_out = client.post(_url(event, guest, "check-out"), headers=headers)
        assert checked_out.status_code == 200
        assert checked_out.json()["check_out_time"] is not None

    def test_confirm_before_invitation_sent(self, client, host):
        event, guest, _ = _invited(client, host)
        resp = client.post(_url(event, guest, "confirm"), headers=host["headers"])
        assert resp.status_code == 400

    def test_confirm_twice(self, client, host):
        event, guest, _ = _invited(client, host)
        client.post(_url(event, guest, "invitation"), json={}, headers=host["headers"])
        client.post(_url(event, guest, "confirm"), headers=host["headers"])
        assert client.post(_url(event, guest, "confirm"), headers=host["headers"]).status_code == 400

    def test_check_in_requires_confirmation(self, client, host):
        event, guest, _ = _invited(client, host)
        resp = client.post(_url(event, guest, "check-in"), headers=host["headers"])
        assert resp.status_code == 400

    def test_check_in_twice(self, client, host):
        event, guest, _ = _invited(client, host)
        client.post(_url(event, guest, "invitation"), json={}, headers=host["headers"])
        client.post(_url(event, guest, "confirm"), headers=host["headers"])
        client.post(_url(event, guest, "check-in"), headers=host["headers"])
        assert client.post(_url(event, guest, "check-in"), headers=host["headers"]).status_code == 400

    def test_check_out_requires_check_in(self, client, host):
        event, guest, _ = _invited(client, host)
        resp = client.post(_url(event, guest, "check-out"), headers=host["headers"])
        assert resp.status_code == 400

    def test_filter_checked_in(self, client, host):
        event, guest, _ = _invited(client, host)
        other = create_test_guest(client, host["headers"], "Bea")
        invite(client, host["headers"], event["id"], other["id"])
        client.post(_url(event, guest, "invitation"), json={}, headers=host["headers"])
        client.post(_url(event, guest, "confirm"), headers=host["headers"])
        client.post(_url(event, guest, "check-in"), headers=host["headers"])

        base = f"/api/events/{event['id']}/guests"
        assert client.get(f"{base}?checked_in=true", headers=host["headers"]).json()["total"] == 1
        assert client.get(f"{base}?checked_in=false", headers=host["headers"]).json()["total"] == 1
        assert client.get(f"{base}?confirmed=true", headers=host["headers"]).json()["total"] == 1


class TestSeatingAndAccess:
    """Seating and role checks."""

    def test_update_seating(self, client, host):
        event, guest, _ = _invited(client, host)
        resp = client.patch(_url(event, guest, "seating"), json={"table_number": "7", "seat_number": "B"},
                            headers=host["headers"])
        assert resp.status_code == 200
        assert resp.json()["table_number"] == "7"
        assert resp.json()["seat_number"] == "B"

    def test_hospitality_can_check_in_but_not_invite(self, client, host, db):
        staff = create_staff_user(db, "doorman", RoleName.hospitality)
        event, guest, _ = _invited(client, host)
        client.post(_url(event, guest, "invitation"), json={}, headers=host["headers"])
        client.post(_url(event, guest, "confirm"), headers=host["headers"])

        assert client.post(_url(event, guest, "check-in"), headers=staff["headers"]).status_code == 200
        assert client.get(f"/api/events/{event['id']}/guests", headers=staff["headers"]).status_code == 200

        other = create_test_guest(client, host["headers"], "Bea")
        resp = client.post(f"/api/events/{event['id']}/guests", json={"guest_id": other["id"]},
                           headers=staff["headers"])
        assert resp.status_code == 403

    def test_vendor_cannot_check_in(self, client, host, db):
        vendor = create_staff_user(db, "caterer", RoleName.vendor)
        event, guest, _ = _invited(client, host)
        assert client.post(_url(event, guest, "check-in"), headers=vendor["headers"]).status_code == 403

    def test_other_host_cannot_invite(self, client, host, db):
        other_host = create_staff_user(db, "otherhost", RoleName.event_host)
        event = create_test_event(client, host["headers"])
        guest = create_test_guest(client, host["headers"])
        resp = client.post(f"/api/events/{event['id']}/guests", json={"guest_id": guest["id"]},
                           headers=other_host["headers"])
        assert resp.status_code == 403
