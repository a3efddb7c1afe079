"""Event service — events, their venues and status lifecycle.

Responsibilities:
- Date and recurrence checks that span more than one field on update
- Status transitions (draft → published → completed, cancel from either)
- Single primary venue per event
- Audit entry for every write
"""
import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from rsvp_app.models.event import Event, EventStatus, EventType, EventVenue
from rsvp_app.models.user import RoleName, User
from rsvp_app.services import audit_service
from rsvp_app.services.auth_service import has_permission
from rsvp_app.services.common import as_utc, get_or_404, utcnow

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[EventStatus, set[EventStatus]] = {
    EventStatus.draft: {EventStatus.published, EventStatus.cancelled},
    EventStatus.published: {EventStatus.cancelled, EventStatus.completed},
    EventStatus.cancelled: set(),
    EventStatus.completed: set(),
}


def _is_public(event: Event) -> bool:
    return event.status == EventStatus.published and not event.is_private


def ensure_can_manage_event(user: User, event: Event) -> None:
    """Only the event's creator or an event manager may change it."""
    if event.created_by == user.id or has_permission(user.role_names, RoleName.event_manager.value):
        return
    logger.warning("User %s may not manage event %s", user.id, event.id)
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Only the event organizer or an event manager may modify this event",
    )


def can_view_event(user: Optional[User], event: Event) -> bool:
    """Public events are visible to everyone; hosts also see their own, managers see all."""
    if _is_public(event):
        return True
    if user is None or not has_permission(user.role_names, RoleName.event_host.value):
        return False
    return event.created_by == user.id or has_permission(user.role_names, RoleName.event_manager.value)


def _visible_to(query, user: Optional[User]):
    """Narrow a query joined to Event down to the events ``user`` may see."""
    public = and_(Event.status == EventStatus.published, Event.is_private.is_(False))
    roles = user.role_names if user is not None else []
    if not has_permission(roles, RoleName.event_host.value):
        return query.filter(public)
    if not has_permission(roles, RoleName.event_manager.value):
        return query.filter(or_(public, Event.created_by == user.id))
    return query


def list_events(
    db: Session,
    user: Optional[User],
    status_filter: Optional[EventStatus] = None,
    type_filter: Optional[EventType] = None,
    search: Optional[str] = None,
    upcoming: bool = False,
    mine: bool = False,
):
    """Query for the events ``user`` may see, narrowed by the optional filters."""
    query = _visible_to(db.query(Event), user)
    if mine and user is not None:
        query = query.filter(Event.created_by == user.id)
    if status_filter:
        query = query.filter(Event.status == status_filter)
    if type_filter:
        query = query.filter(Event.type == type_filter)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Event.name.ilike(pattern), Event.description.ilike(pattern)))
    if upcoming:
        query = query.filter(Event.start_date >= utcnow())
    return query.order_by(Event.start_date, Event.id)


def get_event(db: Session, event_id: str) -> Event:
    return get_or_404(db, Event, event_id, "Event")


def get_visible_event(db: Session, event_id: str, user: Optional[User]) -> Event:
    """Events the caller may not see are reported as missing."""
    event = get_event(db, event_id)
    if not can_view_event(user, event):
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _check_dates(event: Event) -> None:
    if as_utc(event.end_date) <= as_utc(event.start_date):
        raise HTTPException(status_code=400, detail="end_date must be after start_date")
    if event.is_recurring and event.recurrence_pattern is None:
        raise HTTPException(status_code=400, detail="recurrence_pattern is required for recurring events")


def _clear_other_primaries(db: Session, event_id: str, keep_id: Optional[str]) -> None:
    query = db.query(EventVenue).filter(EventVenue.event_id == event_id, EventVenue.is_primary.is_(True))
    if keep_id:
        query = query.filter(EventVenue.id != keep_id)
    for venue in query.all():
        venue.is_primary = False


def create_event(db: Session, data: dict[str, Any], actor: User) -> Event:
    """Create an event, plus any venues submitted with it."""
    venues = data.pop("venues", [])
    event = Event(**data, created_by=actor.id, status=EventStatus.draft)
    db.add(event)
    db.flush()

    seen_primary = False
    for venue_data in venues:
        venue = EventVenue(event_id=event.id, **venue_data)
        if venue.is_primary:
            venue.is_primary = not seen_primary
            seen_primary = True
        db.add(venue)

    audit_service.record(db, "create", "event", event.id, actor=actor, new_values=audit_service.snapshot(event))
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by %s", event.name, event.id, actor.id)
    return event


def update_event(db: Session, event: Event, updates: dict[str, Any], actor: User) -> Event:
    ensure_can_manage_event(actor, event)
    if event.status in (EventStatus.cancelled, EventStatus.completed):
        raise HTTPException(status_code=400, detail=f"Cannot edit a {event.status.value} event")

    before = audit_service.snapshot(event)
    for field, value in updates.items():
        setattr(event, field, value)
    _check_dates(event)

    audit_service.record(
        db, "update", "event", event.id, actor=actor, old_values=before, new_values=audit_service.snapshot(event),
    )
    db.commit()
    db.refresh(event)
    logger.info("Updated event %s (%s)", event.id, ", ".join(sorted(updates)) or "no fields")
    return event


def change_status(db: Session, event: Event, new_status: EventStatus, actor: User) -> Event:
    ensure_can_manage_event(actor, event)
    if new_status not in ALLOWED_TRANSITIONS[event.status]:
        logger.warning("Rejected status change %s -> %s on event %s", event.status.value, new_status.value, event.id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot change event status from {event.status.value} to {new_status.value}",
        )
    old = event.status
    event.status = new_status
    audit_service.record(
        db, "status_change", "event", event.id, actor=actor,
        old_values={"status": old.value}, new_values={"status": new_status.value},
    )
    db.commit()
    db.refresh(event)
    logger.info("Event %s status %s -> %s", event.id, old.value, new_status.value)
    return event


def delete_event(db: Session, event: Event, actor: User) -> None:
    """Delete an event; venues, guest links, RSVPs, groups, logistics and notifications go with it."""
    ensure_can_manage_event(actor, event)
    before = audit_service.snapshot(event)
    event_id = event.id
    db.delete(event)
    audit_service.record(db, "delete", "event", event_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Deleted event %s", event_id)


def add_venue(db: Session, event: Event, data: dict[str, Any], actor: User) -> EventVenue:
    ensure_can_manage_event(actor, event)
    venue = EventVenue(event_id=event.id, **data)
    db.add(venue)
    db.flush()
    if venue.is_primary:
        _clear_other_primaries(db, event.id, venue.id)
    audit_service.record(db, "create", "event_venue", venue.id, actor=actor, new_values=audit_service.snapshot(venue))
    db.commit()
    db.refresh(venue)
    logger.info("Added venue '%s' to event %s", venue.name, event.id)
    return venue


def update_venue(db: Session, venue: EventVenue, updates: dict[str, Any], actor: User) -> EventVenue:
    ensure_can_manage_event(actor, venue.event)
    before = audit_service.snapshot(venue)
    for field, value in updates.items():
        setattr(venue, field, value)
    if updates.get("is_primary"):
        _clear_other_primaries(db, venue.event_id, venue.id)
    audit_service.record(
        db, "update", "event_venue", venue.id, actor=actor, old_values=before, new_values=audit_service.snapshot(venue),
    )
    db.commit()
    db.refresh(venue)
    logger.info("Updated venue %s", venue.id)
    return venue


def delete_venue(db: Session, venue: EventVenue, actor: User) -> None:
    ensure_can_manage_event(actor, venue.event)
    before = audit_service.snapshot(venue)
    venue_id = venue.id
    db.delete(venue)
    audit_service.record(db, "delete", "event_venue", venue_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Deleted venue %s", venue_id)


def get_visible_venue(db: Session, venue_id: str, user: Optional[User]) -> EventVenue:
    venue = get_or_404(db, EventVenue, venue_id, "Venue")
    if not can_view_event(user, venue.event):
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


def list_venues(
    db: Session,
    user: Optional[User],
    search: Optional[str] = None,
    city: Optional[str] = None,
    min_capacity: Optional[int] = None,
):
    """Venues of the events ``user`` may see, matched on name, city and capacity."""
    query = _visible_to(db.query(EventVenue).join(EventVenue.event), user)
    if search:
        query = query.filter(EventVenue.name.ilike(f"%{search}%"))
    if city:
        query = query.filter(EventVenue.city.ilike(f"%{city}%"))
    if min_capacity is not None:
        query = query.filter(EventVenue.capacity >= min_capacity)
    return query.order_by(EventVenue.name, EventVenue.id)


def _place(name: str, city: Optional[str]) -> tuple[str, str]:
    return name.strip().lower(), (city or "").strip().lower()


def available_venues(
    db: Session,
    user: Optional[User],
    start: datetime,
    end: datetime,
    min_capacity: Optional[int] = None,
) -> list[EventVenue]:
    """Known places not booked by a published or completed event overlapping [start, end).

    A place is a venue name within a city; the first matching venue row stands for it.
    """
    start, end = as_utc(start), as_utc(end)
    if end <= start:
        raise HTTPException(status_code=400, detail="end_date must be after start_date")
    booked_rows = (
        db.query(EventVenue.name, EventVenue.city)
        .join(EventVenue.event)
        .filter(
            Event.status.in_([EventStatus.published, EventStatus.completed]),
            Event.start_date < end,
            Event.end_date > start,
        )
        .all()
    )
    booked = {_place(name, city) for name, city in booked_rows}

    available, seen = [], set()
    for venue in list_venues(db, user, min_capacity=min_capacity):
        place = _place(venue.name, venue.city)
        if place in booked or place in seen:
            continue
        seen.add(place)
        available.append(venue)
    logger.debug("%d venues free between %s and %s", len(available), start, end)
    return available
