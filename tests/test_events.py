"""Tests for Event CRUD, venues, status lifecycle and visibility.

Covers:
- Event create with venues; only one primary venue survives
- Date and recurrence validation
- Organizer / event manager authorization on writes
- Status transitions (draft → published → completed, cancel)
- Visibility of draft and private events per role
- List filters and pagination
- Delete cascades to venues, guest list and RSVPs
"""
from datetime import timedelta

from rsvp_app.models.audit_log import AuditLog
from rsvp_app.models.event import EventVenue
from rsvp_app.models.guest import EventGuest
from rsvp_app.models.rsvp import RSVP
from rsvp_app.models.user import RoleName
from tests.conftest import (
    auth_headers, create_staff_user, create_test_event, create_test_guest, future, invite, publish_event,
    register_user,
)


class TestEventCreate:
    """Event creation and initial state."""

    def test_create_event(self, client, host):
        data = create_test_event(client, host["headers"], name="Gala")
        assert data["name"] == "Gala"
        assert data["status"] == "draft"
        assert data["created_by"] == host["id"]
        assert data["timezone"] == "Europe/Paris"

    def test_create_event_with_venues_single_primary(self, client, host):
        data = create_test_event(client, host["headers"], venues=[
            {"name": "Chapel", "is_primary": True, "city": "Lyon"},
            {"name": "Garden", "is_primary": True},
            {"name": "Hall"},
        ])
        primaries = [v["name"] for v in data["venues"] if v["is_primary"]]
        assert primaries == ["Chapel"]
        assert len(data["venues"]) == 3

    def test_end_before_start_rejected(self, client, host):
        start = future()
        resp = client.post("/api/events/", json={
            "name": "Backwards",
            "start_date": start.isoformat(),
            "end_date": (start - timedelta(hours=1)).isoformat(),
        }, headers=host["headers"])
        assert resp.status_code == 422

    def test_recurring_requires_pattern(self, client, host):
        start = future()
        resp = client.post("/api/events/", json={
            "name": "Weekly Standup",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(hours=1)).isoformat(),
            "is_recurring": True,
        }, headers=host["headers"])
        assert resp.status_code == 422

    def test_unknown_timezone_rejected(self, client, host):
        start = future()
        resp = client.post("/api/events/", json={
            "name": "Nowhere",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(hours=1)).isoformat(),
            "timezone": "Mars/Olympus_Mons",
        }, headers=host["headers"])
        assert resp.status_code == 422

    def test_guest_role_cannot_create(self, client):
        token = register_user(client, "wanda")["access_token"]
        start = future()
        resp = client.post("/api/events/", json={
            "name": "Party",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(hours=1)).isoformat(),
        }, headers=auth_headers(token))
        assert resp.status_code == 403

    def test_create_writes_audit_entry(self, client, host, db):
        event = create_test_event(client, host["headers"])
        entry = db.query(AuditLog).filter(AuditLog.entity_type == "event", AuditLog.entity_id == event["id"]).one()
        assert entry.action == "create"
        assert entry.user_id == host["id"]
        assert entry.new_values["name"] == event["name"]
        assert entry.ip_address == "testclient"


class TestEventUpdate:
    """Updates with organizer checks."""

    def test_update_by_organizer(self, client, host):
        event = create_test_event(client, host["headers"])
        resp = client.put(f"/api/events/{event['id']}", json={"name": "Renamed", "max_attendees": 80},
                          headers=host["headers"])
        assert resp.status_code == 200
        assert resp.json()["name"] == "Renamed"
        assert resp.json()["max_attendees"] == 80

    def test_update_by_other_host_forbidden(self, client, host, db):
        other = create_staff_user(db, "otherhost", RoleName.event_host)
        event = create_test_event(client, host["headers"])
        resp = client.put(f"/api/events/{event['id']}", json={"name": "Hijacked"}, headers=other["headers"])
        assert resp.status_code == 403

    def test_update_by_event_manager(self, client, host, db):
        manager = create_staff_user(db, "manager", RoleName.event_manager)
        event = create_test_event(client, host["headers"])
        resp = client.put(f"/api/events/{event['id']}", json={"name": "Managed"}, headers=manager["headers"])
        assert resp.status_code == 200

    def test_update_end_before_existing_start(self, client, host):
        event = create_test_event(client, host["headers"])
        resp = client.put(f"/api/events/{event['id']}", json={"end_date": future(days=1).isoformat()},
                          headers=host["headers"])
        assert resp.status_code == 400

    def test_cannot_edit_cancelled_event(self, client, host):
        event = create_test_event(client, host["headers"])
        client.post(f"/api/events/{event['id']}/status", json={"status": "cancelled"}, headers=host["headers"])
        resp = client.put(f"/api/events/{event['id']}", json={"name": "Too late"}, headers=host["headers"])
        assert resp.status_code == 400

    def test_null_for_required_field_rejected(self, client, host):
        event = create_test_event(client, host["headers"], description="Garden party")
        for field in ("name", "start_date", "is_private"):
            resp = client.put(f"/api/events/{event['id']}", json={field: None}, headers=host["headers"])
            assert resp.status_code == 422, field
        assert client.get(f"/api/events/{event['id']}", headers=host["headers"]).json()["name"] == "Summer Wedding"

    def test_null_clears_optional_field(self, client, host):
        event = create_test_event(client, host["headers"], description="Garden party")
        resp = client.put(f"/api/events/{event['id']}", json={"description": None}, headers=host["headers"])
        assert resp.status_code == 200
        assert resp.json()["description"] is None

    def test_null_venue_name_rejected(self, client, host):
        event = create_test_event(client, host["headers"], venues=[{"name": "Barn"}])
        venue_id = event["venues"][0]["id"]
        resp = client.put(f"/api/venues/{venue_id}", json={"name": None}, headers=host["headers"])
        assert resp.status_code == 422


class TestEventStatus:
    """Status lifecycle."""

    def test_publish_then_complete(self, client, host):
        event = create_test_event(client, host["headers"])
        assert publish_event(client, host["headers"], event["id"])["status"] == "published"
        resp = client.post(f"/api/events/{event['id']}/status", json={"status": "completed"}, headers=host["headers"])
        assert resp.status_code == 200
        assert resp.json()["status"] == "completed"

    def test_draft_cannot_complete(self, client, host):
        event = create_test_event(client, host["headers"])
        resp = client.post(f"/api/events/{event['id']}/status", json={"status": "completed"}, headers=host["headers"])
        assert resp.status_code == 400

    def test_cancelled_is_final(self, client, host):
        event = create_test_event(client, host["headers"])
        client.post(f"/api/events/{event['id']}/status", json={"status": "cancelled"}, headers=host["headers"])
        resp = client.post(f"/api/events/{event['id']}/status", json={"status": "published"}, headers=host["headers"])
        assert resp.status_code == 400


class TestEventVisibility:
    """Below event_host only published, public events show; hosts add their own, managers see all."""

    def test_anonymous_cannot_see_draft(self, client, host):
        event = create_test_event(client, host["headers"])
        assert client.get(f"/api/events/{event['id']}").status_code == 404

    def test_anonymous_sees_published(self, client, host):
        event = create_test_event(client, host["headers"])
        publish_event(client, host["headers"], event["id"])
        assert client.get(f"/api/events/{event['id']}").status_code == 200

    def test_anonymous_cannot_see_private(self, client, host):
        event = create_test_event(client, host["headers"], is_private=True)
        publish_event(client, host["headers"], event["id"])
        assert client.get(f"/api/events/{event['id']}").status_code == 404
        assert client.get(f"/api/events/{event['id']}", headers=host["headers"]).status_code == 200

    def test_anonymous_list(self, client, host):
        draft = create_test_event(client, host["headers"], name="Draft")
        public = create_test_event(client, host["headers"], name="Public")
        publish_event(client, host["headers"], public["id"])
        names = [e["name"] for e in client.get("/api/events/").json()["items"]]
        assert names == ["Public"]
        assert draft["id"]

    def test_guest_account_sees_only_public(self, client, host):
        draft = create_test_event(client, host["headers"], name="Draft", venues=[{"name": "Barn"}])
        private = create_test_event(client, host["headers"], name="Private", is_private=True)
        publish_event(client, host["headers"], private["id"])
        public = create_test_event(client, host["headers"], name="Public")
        publish_event(client, host["headers"], public["id"])
        guest = auth_headers(register_user(client)["access_token"])

        names = [e["name"] for e in client.get("/api/events/", headers=guest).json()["items"]]
        assert names == ["Public"]
        assert client.get(f"/api/events/{draft['id']}", headers=guest).status_code == 404
        assert client.get(f"/api/events/{private['id']}", headers=guest).status_code == 404
        assert client.get(f"/api/events/{draft['id']}/venues", headers=guest).status_code == 404
        venue_id = draft["venues"][0]["id"]
        assert client.get(f"/api/venues/{venue_id}", headers=guest).status_code == 404
        assert client.get(f"/api/venues/{venue_id}").status_code == 404
        assert client.get(f"/api/venues/{venue_id}", headers=host["headers"]).status_code == 200

    def test_hospitality_sees_only_public(self, client, host, db):
        staff = create_staff_user(db, "frontdesk", RoleName.hospitality)
        draft = create_test_event(client, host["headers"])
        assert client.get(f"/api/events/{draft['id']}", headers=staff["headers"]).status_code == 404
        assert client.get("/api/events/", headers=staff["headers"]).json()["total"] == 0

    def test_host_sees_own_and_public_only(self, client, host, db):
        other = create_staff_user(db, "otherhost", RoleName.event_host)
        create_test_event(client, host["headers"], name="Their Draft")
        public = create_test_event(client, host["headers"], name="Public")
        publish_event(client, host["headers"], public["id"])
        mine = create_test_event(client, other["headers"], name="My Draft", start_date=future(days=40))

        names = [e["name"] for e in client.get("/api/events/", headers=other["headers"]).json()["items"]]
        assert names == ["Public", "My Draft"]
        assert client.get(f"/api/events/{mine['id']}", headers=other["headers"]).status_code == 200

    def test_manager_sees_everything(self, client, host, db):
        manager = create_staff_user(db, "manager", RoleName.event_manager)
        draft = create_test_event(client, host["headers"], name="Draft")
        create_test_event(client, host["headers"], name="Private", is_private=True)
        assert client.get("/api/events/", headers=manager["headers"]).json()["total"] == 2
        assert client.get(f"/api/events/{draft['id']}", headers=manager["headers"]).status_code == 200


class TestEventList:
    """Filters and pagination."""

    def test_filters(self, client, host):
        create_test_event(client, host["headers"], name="Alpha Wedding")
        create_test_event(client, host["headers"], name="Beta Offsite", type="corporate")
        headers = host["headers"]
        assert client.get("/api/events/?type=corporate", headers=headers).json()["total"] == 1
        assert client.get("/api/events/?search=alpha", headers=headers).json()["items"][0]["name"] == "Alpha Wedding"
        assert client.get("/api/events/?status=published", headers=headers).json()["total"] == 0

    def test_upcoming_excludes_past(self, client, host):
        create_test_event(client, host["headers"], name="Past", start_date=future(days=-10))
        create_test_event(client, host["headers"], name="Next", start_date=future(days=10))
        data = client.get("/api/events/?upcoming=true", headers=host["headers"]).json()
        assert [e["name"] for e in data["items"]] == ["Next"]

    def test_mine(self, client, host, db):
        other = create_staff_user(db, "otherhost", RoleName.event_host)
        create_test_event(client, host["headers"], name="Mine")
        create_test_event(client, other["headers"], name="Theirs")
        data = client.get("/api/events/?mine=true", headers=host["headers"]).json()
        assert [e["name"] for e in data["items"]] == ["Mine"]

    def test_pagination_sorted_by_start(self, client, host):
        for i in range(3):
            create_test_event(client, host["headers"], name=f"E{i}", start_date=future(days=10 - i))
        data = client.get("/api/events/?limit=2", headers=host["headers"]).json()
        assert data["total"] == 3
        assert [e["name"] for e in data["items"]] == ["E2", "E1"]


class TestVenues:
    """Venue sub-resource."""

    def test_add_primary_venue_clears_others(self, client, host):
        event = create_test_event(client, host["headers"], venues=[{"name": "Old", "is_primary": True}])
        resp = client.post(f"/api/events/{event['id']}/venues", json={"name": "New", "is_primary": True},
                           headers=host["headers"])
        assert resp.status_code == 201
        venues = client.get(f"/api/events/{event['id']}/venues", headers=host["headers"]).json()
        assert {v["name"]: v["is_primary"] for v in venues} == {"Old": False, "New": True}

    def test_update_and_delete_venue(self, client, host):
        event = create_test_event(client, host["headers"], venues=[{"name": "Barn"}])
        venue_id = event["venues"][0]["id"]
        resp = client.put(f"/api/venues/{venue_id}", json={"capacity": 120}, headers=host["headers"])
        assert resp.status_code == 200
        assert resp.json()["capacity"] == 120
        assert client.delete(f"/api/venues/{venue_id}", headers=host["headers"]).status_code == 204
        assert client.get(f"/api/venues/{venue_id}", headers=host["headers"]).status_code == 404

    def test_other_host_cannot_edit_venue(self, client, host, db):
        other = create_staff_user(db, "otherhost", RoleName.event_host)
        event = create_test_event(client, host["headers"], venues=[{"name": "Barn"}])
        venue_id = event["venues"][0]["id"]
        resp = client.put(f"/api/venues/{venue_id}", json={"capacity": 1}, headers=other["headers"])
        assert resp.status_code == 403

    def test_search_venues(self, client, host):
        create_test_event(client, host["headers"], venues=[
            {"name": "Grand Hall", "city": "Paris", "capacity": 300},
            {"name": "Garden Hall", "city": "Lyon", "capacity": 80},
            {"name": "Boathouse", "city": "Paris", "capacity": 40},
        ])

        def names(params):
            resp = client.get("/api/venues/", params=params, headers=host["headers"])
            return [v["name"] for v in resp.json()["items"]]

        assert names({"search": "hall"}) == ["Garden Hall", "Grand Hall"]
        assert names({"city": "paris"}) == ["Boathouse", "Grand Hall"]
        assert names({"capacity": 100}) == ["Grand Hall"]

    def test_search_hides_venues_of_drafts(self, client, host):
        create_test_event(client, host["headers"], venues=[{"name": "Secret Barn"}])
        assert client.get("/api/venues/").json()["total"] == 0
        assert client.get("/api/venues/", headers=host["headers"]).json()["total"] == 1

    def test_available_venues(self, client, host):
        start = future(days=10)
        booked = create_test_event(client, host["headers"], start_date=start, venues=[
            {"name": "Grand Hall", "city": "Paris", "capacity": 300},
        ])
        publish_event(client, host["headers"], booked["id"])
        create_test_event(client, host["headers"], name="Later", start_date=future(days=20), venues=[
            {"name": "grand hall", "city": "Paris", "capacity": 300},
            {"name": "Boathouse", "city": "Paris", "capacity": 40},
        ])
        params = {"start_date": (start + timedelta(hours=1)).isoformat(), "end_date": (start + timedelta(hours=3)).isoformat()}

        resp = client.get("/api/venues/available", params=params, headers=host["headers"])
        assert resp.status_code == 200
        assert [v["name"] for v in resp.json()] == ["Boathouse"]

        resp = client.get("/api/venues/available", params={**params, "capacity": 100}, headers=host["headers"])
        assert resp.json() == []

        later = {"start_date": future(days=15).isoformat(), "end_date": future(days=16).isoformat()}
        resp = client.get("/api/venues/available", params=later, headers=host["headers"])
        assert sorted(v["name"].lower() for v in resp.json()) == ["boathouse", "grand hall"]

    def test_available_venues_needs_valid_range(self, client, host):
        start = future()
        resp = client.get("/api/venues/available", params={"start_date": start.isoformat()}, headers=host["headers"])
        assert resp.status_code == 422
        params = {"start_date": start.isoformat(), "end_date": (start - timedelta(hours=1)).isoformat()}
        assert client.get("/api/venues/available", params=params, headers=host["headers"]).status_code == 400


class TestEventDelete:
    """Delete cascades."""

    def test_delete_cascades(self, client, host, db):
        event = create_test_event(client, host["headers"], venues=[{"name": "Barn"}])
        guest = create_test_guest(client, host["headers"])
        invite(client, host["headers"], event["id"], guest["id"])

        resp = client.delete(f"/api/events/{event['id']}", headers=host["headers"])
        assert resp.status_code == 204
        assert client.get(f"/api/events/{event['id']}", headers=host["headers"]).status_code == 404
        assert db.query(EventVenue).filter(EventVenue.event_id == event["id"]).count() == 0
        assert db.query(EventGuest).filter(EventGuest.event_id == event["id"]).count() == 0
        assert db.query(RSVP).filter(RSVP.event_id == event["id"]).count() == 0
        # The guest record itself survives
        assert client.get(f"/api/guests/{guest['id']}", headers=host["headers"]).status_code == 200

    def test_delete_by_other_host_forbidden(self, client, host, db):
        other = create_staff_user(db, "otherhost", RoleName.event_host)
        event = create_test_event(client, host["headers"])
        assert client.delete(f"/api/events/{event['id']}", headers=other["headers"]).status_code == 403
