"""Tests for RSVPs: staff-managed records, plus-ones, capacity and token responses.

Covers:
- One RSVP per guest per event → 409 on a second one
- Plus-ones never exceed the party size minus the guest
- max_attendees enforced on attending RSVPs → 409 "Event is full"
- Public respond via token: no login, published events only, records client info
"""
from rsvp_app.models.audit_log import AuditLog
from tests.conftest import create_test_event, create_test_guest, invite, publish_event, rsvp_for


def _event_and_guest(client, host, **event_fields):
    event = create_test_event(client, host["headers"], **event_fields)
    guest = create_test_guest(client, host["headers"])
    return event, guest


def _create_rsvp(client, host, event, guest, **fields):
    return client.post(f"/api/events/{event['id']}/rsvps", json={"guest_id": guest["id"], **fields},
                       headers=host["headers"])


class TestStaffRSVPs:
    """RSVPs recorded by staff."""

    def test_create_rsvp_adds_guest_to_list(self, client, host):
        event, guest = _event_and_guest(client, host)
        resp = _create_rsvp(client, host, event, guest, status="attending", number_of_guests=2,
                            dietary_restrictions="vegan")
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "attending"
        assert data["response_date"] is not None
        assert data["token"]
        guests = client.get(f"/api/events/{event['id']}/guests", headers=host["headers"]).json()
        assert [g["guest_id"] for g in guests["items"]] == [guest["id"]]

    def test_duplicate_rsvp(self, client, host):
        event, guest = _event_and_guest(client, host)
        _create_rsvp(client, host, event, guest)
        resp = _create_rsvp(client, host, event, guest)
        assert resp.status_code == 409

    def test_invited_guest_already_has_rsvp(self, client, host):
        event, guest = _event_and_guest(client, host)
        invite(client, host["headers"], event["id"], guest["id"])
        assert _create_rsvp(client, host, event, guest).status_code == 409

    def test_number_of_guests_must_be_positive(self, client, host):
        event, guest = _event_and_guest(client, host)
        assert _create_rsvp(client, host, event, guest, number_of_guests=0).status_code == 422

    def test_update_rsvp_sets_response_date(self, client, host):
        event, guest = _event_and_guest(client, host)
        rsvp = _create_rsvp(client, host, event, guest).json()
        assert rsvp["response_date"] is None
        resp = client.put(f"/api/rsvps/{rsvp['id']}", json={"status": "maybe"}, headers=host["headers"])
        assert resp.status_code == 200
        assert resp.json()["status"] == "maybe"
        assert resp.json()["response_date"] is not None

    def test_null_party_size_rejected(self, client, host):
        event, guest = _event_and_guest(client, host)
        rsvp = _create_rsvp(client, host, event, guest).json()
        resp = client.put(f"/api/rsvps/{rsvp['id']}", json={"number_of_guests": None}, headers=host["headers"])
        assert resp.status_code == 422

    def test_list_filter_by_status(self, client, host):
        event, guest = _event_and_guest(client, host)
        other = create_test_guest(client, host["headers"], "Bea")
        _create_rsvp(client, host, event, guest, status="attending")
        _create_rsvp(client, host, event, other, status="not_attending")
        resp = client.get(f"/api/events/{event['id']}/rsvps?status=attending", headers=host["headers"])
        assert resp.json()["total"] == 1
        assert resp.json()["items"][0]["guest"]["first_name"] == "Ada"

    def test_delete_rsvp(self, client, host):
        event, guest = _event_and_guest(client, host)
        rsvp = _create_rsvp(client, host, event, guest).json()
        assert client.delete(f"/api/rsvps/{rsvp['id']}", headers=host["headers"]).status_code == 204
        assert client.get(f"/api/rsvps/{rsvp['id']}", headers=host["headers"]).status_code == 404


class TestPlusOnes:
    """Plus-one bookkeeping."""

    def test_create_with_plus_ones(self, client, host):
        event, guest = _event_and_guest(client, host)
        resp = _create_rsvp(client, host, event, guest, status="attending", number_of_guests=3, plus_ones=[
            {"first_name": "Tom"}, {"first_name": "Ann", "dietary_restrictions": "nuts"},
        ])
        assert resp.status_code == 201
        assert sorted(p["first_name"] for p in resp.json()["plus_ones"]) == ["Ann", "Tom"]

    def test_too_many_plus_ones(self, client, host):
        event, guest = _event_and_guest(client, host)
        resp = _create_rsvp(client, host, event, guest, status="attending", number_of_guests=2, plus_ones=[
            {"first_name": "Tom"}, {"first_name": "Ann"},
        ])
        assert resp.status_code == 400

    def test_non_attending_plus_one_not_counted(self, client, host):
        event, guest = _event_and_guest(client, host)
        resp = _create_rsvp(client, host, event, guest, status="attending", number_of_guests=2, plus_ones=[
            {"first_name": "Tom"}, {"first_name": "Ann", "is_attending": False},
        ])
        assert resp.status_code == 201

    def test_add_and_delete_plus_one(self, client, host):
        event, guest = _event_and_guest(client, host)
        rsvp = _create_rsvp(client, host, event, guest, status="attending", number_of_guests=2).json()
        added = client.post(f"/api/rsvps/{rsvp['id']}/plus-ones", json={"first_name": "Tom"}, headers=host["headers"])
        assert added.status_code == 201
        over = client.post(f"/api/rsvps/{rsvp['id']}/plus-ones", json={"first_name": "Ann"}, headers=host["headers"])
        assert over.status_code == 400

        plus_one_id = added.json()["id"]
        resp = client.delete(f"/api/rsvps/{rsvp['id']}/plus-ones/{plus_one_id}", headers=host["headers"])
        assert resp.status_code == 204
        assert client.get(f"/api/rsvps/{rsvp['id']}", headers=host["headers"]).json()["plus_ones"] == []

    def test_shrinking_party_below_plus_ones(self, client, host):
        event, guest = _event_and_guest(client, host)
        rsvp = _create_rsvp(client, host, event, guest, status="attending", number_of_guests=2,
                            plus_ones=[{"first_name": "Tom"}]).json()
        resp = client.put(f"/api/rsvps/{rsvp['id']}", json={"number_of_guests": 1}, headers=host["headers"])
        assert resp.status_code == 400

    def test_declining_keeps_plus_ones_on_record(self, client, host):
        event, guest = _event_and_guest(client, host)
        rsvp = _create_rsvp(client, host, event, guest, status="attending", number_of_guests=2,
                            plus_ones=[{"first_name": "Tom"}]).json()
        resp = client.put(f"/api/rsvps/{rsvp['id']}", json={"status": "not_attending", "number_of_guests": 1},
                          headers=host["headers"])
        assert resp.status_code == 200
        assert resp.json()["status"] == "not_attending"
        assert [p["first_name"] for p in resp.json()["plus_ones"]] == ["Tom"]

    def test_plus_ones_unchecked_until_attending(self, client, host):
        event, guest = _event_and_guest(client, host)
        resp = _create_rsvp(client, host, event, guest, status="maybe", plus_ones=[{"first_name": "Tom"}])
        assert resp.status_code == 201
        rsvp_id = resp.json()["id"]
        attending = client.put(f"/api/rsvps/{rsvp_id}", json={"status": "attending"}, headers=host["headers"])
        assert attending.status_code == 400


class TestCapacity:
    """max_attendees on the event."""

    def test_event_full(self, client, host):
        event, guest = _event_and_guest(client, host, max_attendees=3)
        other = create_test_guest(client, host["headers"], "Bea")
        assert _create_rsvp(client, host, event, guest, status="attending", number_of_guests=2).status_code == 201
        resp = _create_rsvp(client, host, event, other, status="attending", number_of_guests=2)
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Event is full"

    def test_not_attending_ignores_capacity(self, client, host):
        event, guest = _event_and_guest(client, host, max_attendees=1)
        other = create_test_guest(client, host["headers"], "Bea")
        _create_rsvp(client, host, event, guest, status="attending")
        assert _create_rsvp(client, host, event, other, status="not_attending", number_of_guests=4).status_code == 201

    def test_updating_own_rsvp_not_double_counted(self, client, host):
        event, guest = _event_and_guest(client, host, max_attendees=2)
        rsvp = _create_rsvp(client, host, event, guest, status="attending", number_of_guests=2).json()
        resp = client.put(f"/api/rsvps/{rsvp['id']}", json={"message": "See you"}, headers=host["headers"])
        assert resp.status_code == 200


class TestPublicRespond:
    """Token-based responses from guests."""

    def _open(self, client, host, **event_fields):
        event = create_test_event(client, host["headers"], venues=[{"name": "Chateau", "is_primary": True}],
                                  **event_fields)
        guest = create_test_guest(client, host["headers"])
        invite(client, host["headers"], event["id"], guest["id"])
        token = rsvp_for(client, host["headers"], event["id"], guest["id"])["token"]
        return event, guest, token

    def test_view_invitation(self, client, host):
        event, _, token = self._open(client, host)
        publish_event(client, host["headers"], event["id"])
        resp = client.get(f"/api/rsvps/respond/{token}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["event_name"] == event["name"]
        assert data["venue_name"] == "Chateau"
        assert data["guest_first_name"] == "Ada"
        assert data["status"] == "pending"
        assert "token" not in data

    def test_respond_attending_with_plus_ones(self, client, host, db):
        event, guest, token = self._open(client, host)
        publish_event(client, host["headers"], event["id"])
        resp = client.post(f"/api/rsvps/respond/{token}", json={
            "status": "attending",
            "number_of_guests": 2,
            "message": "Can't wait",
            "plus_ones": [{"first_name": "Tom"}],
        }, headers={"User-Agent": "pytest-browser"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "attending"
        assert [p["first_name"] for p in resp.json()["plus_ones"]] == ["Tom"]

        rsvp = rsvp_for(client, host["headers"], event["id"], guest["id"])
        assert rsvp["response_date"] is not None

        entry = db.query(AuditLog).filter(AuditLog.action == "respond").one()
        assert entry.user_id is None
        assert entry.user_agent == "pytest-browser"

    def test_respond_replaces_plus_ones(self, client, host):
        event, _, token = self._open(client, host)
        publish_event(client, host["headers"], event["id"])
        client.post(f"/api/rsvps/respond/{token}", json={
            "status": "attending", "number_of_guests": 2, "plus_ones": [{"first_name": "Tom"}],
        })
        resp = client.post(f"/api/rsvps/respond/{token}", json={
            "status": "attending", "number_of_guests": 2, "plus_ones": [{"first_name": "Ann"}],
        })
        assert [p["first_name"] for p in resp.json()["plus_ones"]] == ["Ann"]

    def test_respond_to_draft_event(self, client, host):
        _, _, token = self._open(client, host)
        resp = client.post(f"/api/rsvps/respond/{token}", json={"status": "attending"})
        assert resp.status_code == 400

    def test_respond_pending_rejected(self, client, host):
        event, _, token = self._open(client, host)
        publish_event(client, host["headers"], event["id"])
        resp = client.post(f"/api/rsvps/respond/{token}", json={"status": "pending"})
        assert resp.status_code == 400

    def test_unknown_token(self, client):
        assert client.get("/api/rsvps/respond/not-a-token").status_code == 404

    def test_respond_when_full(self, client, host):
        event, _, token = self._open(client, host, max_attendees=1)
        publish_event(client, host["headers"], event["id"])
        resp = client.post(f"/api/rsvps/respond/{token}", json={"status": "attending", "number_of_guests": 2})
        assert resp.status_code == 409

    def test_decline_with_attending_plus_ones(self, client, host):
        event, _, token = self._open(client, host)
        publish_event(client, host["headers"], event["id"])
        accepted = client.post(f"/api/rsvps/respond/{token}", json={
            "status": "attending", "number_of_guests": 2, "plus_ones": [{"first_name": "Tom"}],
        })
        assert accepted.status_code == 200

        resp = client.post(f"/api/rsvps/respond/{token}", json={"status": "not_attending"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "not_attending"
        assert resp.json()["number_of_guests"] == 1
