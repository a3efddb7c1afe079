"""Reporting — read-only aggregates over RSVPs, guest lists and check-ins.

Everything is recomputed per request with COUNT/SUM/GROUP BY queries.
"""
import logging
from collections import Counter
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from rsvp_app.models.event import Event, EventStatus
from rsvp_app.models.guest import EventGuest, Guest, GuestGroup, guest_group_members
from rsvp_app.models.rsvp import RSVP, RSVPPlusOne, RSVPStatus
from rsvp_app.services.common import get_or_404, utcnow

logger = logging.getLogger(__name__)

AGE_BUCKETS = ("under18", "18-25", "26-35", "36-45", "46-55", "56-65", "over65", "unknown")


def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _status_counts(db: Session, event_id: str) -> dict[str, int]:
    counts = {s.value: 0 for s in RSVPStatus}
    rows = db.query(RSVP.status, func.count(RSVP.id)).filter(RSVP.event_id == event_id).group_by(RSVP.status).all()
    for rsvp_status, count in rows:
        counts[rsvp_status.value] = count
    return counts


def _invited_count(db: Session, event_id: str) -> int:
    return db.query(func.count(EventGuest.id)).filter(EventGuest.event_id == event_id).scalar()


def _checked_in_count(db: Session, event_id: str) -> int:
    return (
        db.query(func.count(EventGuest.id))
        .filter(EventGuest.event_id == event_id, EventGuest.check_in_time.isnot(None))
        .scalar()
    )


def rsvp_stats(db: Session, event_id: str) -> dict:
    event = get_or_404(db, Event, event_id, "Event")
    counts = _status_counts(db, event.id)
    plus_ones = (
        db.query(func.count(RSVPPlusOne.id))
        .join(RSVP, RSVP.id == RSVPPlusOne.rsvp_id)
        .filter(RSVP.event_id == event.id, RSVP.status == RSVPStatus.attending, RSVPPlusOne.is_attending.is_(True))
        .scalar()
    )
    expected = (
        db.query(func.coalesce(func.sum(RSVP.number_of_guests), 0))
        .filter(RSVP.event_id == event.id, RSVP.status == RSVPStatus.attending)
        .scalar()
    )
    total_invited = _invited_count(db, event.id)
    responded = counts["attending"] + counts["not_attending"] + counts["maybe"]
    return {
        "event_id": event.id,
        "event_name": event.name,
        "total_invited": total_invited,
        **counts,
        "plus_ones": plus_ones,
        "expected_attendees": expected,
        "total_responded": responded,
        "response_rate": _rate(responded, total_invited),
    }


def attendance(db: Session, event_id: str) -> dict:
    event = get_or_404(db, Event, event_id, "Event")
    expected = (
        db.query(func.count(RSVP.id))
        .filter(RSVP.event_id == event.id, RSVP.status == RSVPStatus.attending)
        .scalar()
    )
    attended = _checked_in_count(db, event.id)
    checked_out = (
        db.query(func.count(EventGuest.id))
        .filter(EventGuest.event_id == event.id, EventGuest.check_out_time.isnot(None))
        .scalar()
    )

    by_group = []
    groups = db.query(GuestGroup).filter(GuestGroup.event_id == event.id).order_by(GuestGroup.name).all()
    for group in groups:
        assigned = (
            db.query(func.count(guest_group_members.c.guest_id))
            .filter(guest_group_members.c.group_id == group.id)
            .scalar()
        )
        checked_in = (
            db.query(func.count(EventGuest.id))
            .join(guest_group_members, guest_group_members.c.guest_id == EventGuest.guest_id)
            .filter(
                guest_group_members.c.group_id == group.id,
                EventGuest.event_id == event.id,
                EventGuest.check_in_time.isnot(None),
            )
            .scalar()
        )
        by_group.append({
            "group_id": group.id,
            "group_name": group.name,
            "total_assigned": assigned,
            "checked_in": checked_in,
            "check_in_rate": _rate(checked_in, assigned),
        })

    return {
        "event_id": event.id,
        "event_name": event.name,
        "total_expected": expected,
        "total_attended": attended,
        "checked_out": checked_out,
        "attendance_rate": _rate(attended, expected),
        "by_group": by_group,
    }


def age_bucket(born: Optional[date], today: date) -> str:
    if born is None:
        return "unknown"
    age = today.year - born.year - ((today.month, today.day) < (born.month, born.day))
    if age < 18:
        return "under18"
    for upper, label in ((25, "18-25"), (35, "26-35"), (45, "36-45"), (55, "46-55"), (65, "56-65")):
        if age <= upper:
            return label
    return "over65"


def demographics(db: Session, event_id: str, today: Optional[date] = None) -> dict:
    """Profile of the guests with an attending RSVP."""
    event = get_or_404(db, Event, event_id, "Event")
    today = today or utcnow().date()
    rows = (
        db.query(Guest, RSVP.dietary_restrictions)
        .join(RSVP, RSVP.guest_id == Guest.id)
        .filter(RSVP.event_id == event.id, RSVP.status == RSVPStatus.attending)
        .all()
    )

    gender: Counter = Counter()
    ages: Counter = Counter({bucket: 0 for bucket in AGE_BUCKETS})
    locations: Counter = Counter()
    dietary: Counter = Counter()
    for guest, restrictions in rows:
        gender[guest.gender.value if guest.gender else "unknown"] += 1
        ages[age_bucket(guest.date_of_birth, today)] += 1
        if guest.city:
            locations[f"{guest.city}, {guest.state}" if guest.state else guest.city] += 1
        for item in (restrictions or "").split(","):
            item = item.strip()
            if item:
                dietary[item] += 1

    return {
        "event_id": event.id,
        "total_guests": len(rows),
        "gender": dict(gender),
        "age_groups": {bucket: ages[bucket] for bucket in AGE_BUCKETS},
        "locations": dict(locations),
        "dietary_preferences": dict(dietary),
    }


def compare_events(db: Session, event_ids: list[str]) -> list[dict]:
    ids = list(dict.fromkeys(event_ids))
    if len(ids) < 2:
        raise HTTPException(status_code=400, detail="Provide at least two event ids to compare")
    events = {e.id: e for e in db.query(Event).filter(Event.id.in_(ids)).all()}
    missing = [eid for eid in ids if eid not in events]
    if missing:
        raise HTTPException(status_code=404, detail=f"Event not found: {', '.join(missing)}")

    rows = []
    for event_id in ids:
        event = events[event_id]
        counts = _status_counts(db, event.id)
        invited = _invited_count(db, event.id)
        checked_in = _checked_in_count(db, event.id)
        responded = counts["attending"] + counts["not_attending"] + counts["maybe"]
        rows.append({
            "event_id": event.id,
            "event_name": event.name,
            "start_date": event.start_date,
            "total_invited": invited,
            **counts,
            "response_rate": _rate(responded, invited),
            "checked_in": checked_in,
            "attendance_rate": _rate(checked_in, counts["attending"]),
        })
    return rows


def dashboard(db: Session) -> dict:
    now = utcnow()
    active_filter = (Event.start_date > now, Event.status != EventStatus.cancelled)
    upcoming = db.query(Event).filter(*active_filter).order_by(Event.start_date).limit(5).all()

    upcoming_rows = []
    for event in upcoming:
        venue = event.primary_venue
        location = None
        if venue is not None:
            location = ", ".join(part for part in (venue.name, venue.city) if part)
        upcoming_rows.append({
            "id": event.id,
            "name": event.name,
            "start_date": event.start_date,
            "status": event.status.value,
            "location": location,
            "invited": _invited_count(db, event.id),
            "confirmed": (
                db.query(func.count(RSVP.id))
                .filter(RSVP.event_id == event.id, RSVP.status == RSVPStatus.attending)
                .scalar()
            ),
        })

    return {
        "total_events": db.query(func.count(Event.id)).scalar(),
        "active_events": db.query(func.count(Event.id)).filter(*active_filter).scalar(),
        "total_guests": db.query(func.count(Guest.id)).scalar(),
        "confirmed_guests": db.query(func.count(RSVP.id)).filter(RSVP.status == RSVPStatus.attending).scalar(),
        "pending_guests": db.query(func.count(RSVP.id)).filter(RSVP.status == RSVPStatus.pending).scalar(),
        "upcoming_events": upcoming_rows,
    }
