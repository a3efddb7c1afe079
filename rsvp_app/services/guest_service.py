"""Guest service — guest records, the per-event guest list and guest groups.

The per-event guest list (EventGuest) follows one lifecycle:
invited → invitation sent → confirmed → checked in → checked out.
Each step requires the previous one.
"""
import logging
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy import Text, or_, type_coerce
from sqlalchemy.orm import Session

from rsvp_app.models.event import Event
from rsvp_app.models.guest import EventGuest, Guest, GuestGroup, InvitationMethod
from rsvp_app.models.rsvp import RSVP
from rsvp_app.models.user import User
from rsvp_app.services import audit_service
from rsvp_app.services.common import get_or_404, utcnow
from rsvp_app.services.event_service import ensure_can_manage_event
from rsvp_app.services.rsvp_service import new_rsvp_token

logger = logging.getLogger(__name__)


# --- guests ---------------------------------------------------------------

def list_guests(db: Session, search: Optional[str] = None, is_vip: Optional[bool] = None, tag: Optional[str] = None):
    query = db.query(Guest)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Guest.first_name.ilike(pattern),
            Guest.last_name.ilike(pattern),
            Guest.email.ilike(pattern),
            Guest.phone.ilike(pattern),
        ))
    if is_vip is not None:
        query = query.filter(Guest.is_vip.is_(is_vip))
    if tag:
        # tags are JSON text; match the quoted element
        query = query.filter(type_coerce(Guest.tags, Text).like(f'%"{tag}"%'))
    return query.order_by(Guest.last_name, Guest.first_name, Guest.id)


def get_guest(db: Session, guest_id: str) -> Guest:
    return get_or_404(db, Guest, guest_id, "Guest")


def create_guest(db: Session, data: dict[str, Any], actor: User) -> Guest:
    guest = Guest(**data)
    db.add(guest)
    db.flush()
    audit_service.record(db, "create", "guest", guest.id, actor=actor, new_values=audit_service.snapshot(guest))
    db.commit()
    db.refresh(guest)
    logger.info("Created guest %s (%s)", guest.full_name, guest.id)
    return guest


def update_guest(db: Session, guest: Guest, updates: dict[str, Any], actor: User) -> Guest:
    before = audit_service.snapshot(guest)
    for field, value in updates.items():
        setattr(guest, field, value)
    audit_service.record(
        db, "update", "guest", guest.id, actor=actor, old_values=before, new_values=audit_service.snapshot(guest),
    )
    db.commit()
    db.refresh(guest)
    logger.info("Updated guest %s", guest.id)
    return guest


def delete_guest(db: Session, guest: Guest, actor: User) -> None:
    before = audit_service.snapshot(guest)
    guest_id = guest.id
    db.delete(guest)
    audit_service.record(db, "delete", "guest", guest_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Deleted guest %s", guest_id)


def guest_events(db: Session, guest: Guest) -> list[dict]:
    rows = (
        db.query(EventGuest, Event)
        .join(Event, Event.id == EventGuest.event_id)
        .filter(EventGuest.guest_id == guest.id)
        .order_by(Event.start_date)
        .all()
    )
    return [
        {
            "event_id": event.id,
            "event_name": event.name,
            "start_date": event.start_date,
            "is_confirmed": link.is_confirmed,
            "check_in_time": link.check_in_time,
        }
        for link, event in rows
    ]


# --- event guest list -----------------------------------------------------

def list_event_guests(db: Session, event: Event, confirmed: Optional[bool] = None, checked_in: Optional[bool] = None):
    query = db.query(EventGuest).filter(EventGuest.event_id == event.id)
    if confirmed is not None:
        query = query.filter(EventGuest.is_confirmed.is_(confirmed))
    if checked_in is True:
        query = query.filter(EventGuest.check_in_time.isnot(None))
    elif checked_in is False:
        query = query.filter(EventGuest.check_in_time.is_(None))
    return query.order_by(EventGuest.created_at, EventGuest.id)


def get_event_guest(db: Session, event_id: str, guest_id: str) -> EventGuest:
    link = db.query(EventGuest).filter(EventGuest.event_id == event_id, EventGuest.guest_id == guest_id).first()
    if link is None:
        raise HTTPException(status_code=404, detail="Guest is not on this event's guest list")
    return link


def invite_guest(db: Session, event: Event, guest_id: str, actor: User, **fields) -> EventGuest:
    """Put a guest on the event's list and open a pending RSVP for them."""
    ensure_can_manage_event(actor, event)
    guest = get_guest(db, guest_id)
    existing = db.query(EventGuest).filter(EventGuest.event_id == event.id, EventGuest.guest_id == guest.id).first()
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Guest is already invited to this event")

    link = EventGuest(event_id=event.id, guest_id=guest.id, **fields)
    db.add(link)
    rsvp = db.query(RSVP).filter(RSVP.event_id == event.id, RSVP.guest_id == guest.id).first()
    if rsvp is None:
        db.add(RSVP(event_id=event.id, guest_id=guest.id, token=new_rsvp_token()))
    db.flush()
    audit_service.record(db, "invite", "event_guest", link.id, actor=actor, new_values=audit_service.snapshot(link))
    db.commit()
    db.refresh(link)
    logger.info("Invited guest %s to event %s", guest.id, event.id)
    return link


def remove_guest(db: Session, event: Event, guest_id: str, actor: User) -> None:
    """Take a guest off the list. Their RSVP, if any, is kept."""
    ensure_can_manage_event(actor, event)
    link = get_event_guest(db, event.id, guest_id)
    before = audit_service.snapshot(link)
    link_id = link.id
    db.delete(link)
    audit_service.record(db, "remove", "event_guest", link_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Removed guest %s from event %s", guest_id, event.id)


def _transition(db: Session, link: EventGuest, action: str, actor: User, **changes) -> EventGuest:
    before = audit_service.snapshot(link)
    for field, value in changes.items():
        setattr(link, field, value)
    audit_service.record(
        db, action, "event_guest", link.id, actor=actor, old_values=before, new_values=audit_service.snapshot(link),
    )
    db.commit()
    db.refresh(link)
    logger.info("Event guest %s: %s", link.id, action)
    return link


def mark_invitation_sent(db: Session, event: Event, guest_id: str, method: InvitationMethod, actor: User) -> EventGuest:
    ensure_can_manage_event(actor, event)
    link = get_event_guest(db, event.id, guest_id)
    return _transition(
        db, link, "invitation_sent", actor,
        invitation_sent=True, invitation_sent_at=utcnow(), invitation_method=method,
    )


def confirm_guest(db: Session, event: Event, guest_id: str, actor: User) -> EventGuest:
    ensure_can_manage_event(actor, event)
    link = get_event_guest(db, event.id, guest_id)
    if not link.invitation_sent:
        raise HTTPException(status_code=400, detail="Invitation has not been sent to this guest")
    if link.is_confirmed:
        raise HTTPException(status_code=400, detail="Guest is already confirmed")
    return _transition(db, link, "confirm", actor, is_confirmed=True, confirmed_at=utcnow())


def check_in(db: Session, event: Event, guest_id: str, actor: User) -> EventGuest:
    link = get_event_guest(db, event.id, guest_id)
    if not link.is_confirmed:
        raise HTTPException(status_code=400, detail="Guest must be confirmed before check-in")
    if link.check_in_time is not None:
        raise HTTPException(status_code=400, detail="Guest is already checked in")
    return _transition(db, link, "check_in", actor, check_in_time=utcnow())


def check_out(db: Session, event: Event, guest_id: str, actor: User) -> EventGuest:
    link = get_event_guest(db, event.id, guest_id)
    if link.check_in_time is None:
        raise HTTPException(status_code=400, detail="Guest has not checked in")
    if link.check_out_time is not None:
        raise HTTPException(status_code=400, detail="Guest is already checked out")
    return _transition(db, link, "check_out", actor, check_out_time=utcnow())


def update_seating(db: Session, event: Event, guest_id: str, seating: dict[str, Any], actor: User) -> EventGuest:
    ensure_can_manage_event(actor, event)
    link = get_event_guest(db, event.id, guest_id)
    return _transition(db, link, "seating", actor, **seating)


# --- guest groups ---------------------------------------------------------

def list_groups(db: Session, event_id: Optional[str] = None, is_active: Optional[bool] = None):
    query = db.query(GuestGroup)
    if event_id:
        query = query.filter(GuestGroup.event_id == event_id)
    if is_active is not None:
        query = query.filter(GuestGroup.is_active.is_(is_active))
    return query.order_by(GuestGroup.name, GuestGroup.id)


def get_group(db: Session, group_id: str) -> GuestGroup:
    return get_or_404(db, GuestGroup, group_id, "Guest group")


def load_guests(db: Session, guest_ids: list[str]) -> list[Guest]:
    unique_ids = list(dict.fromkeys(guest_ids))
    guests = db.query(Guest).filter(Guest.id.in_(unique_ids)).all() if unique_ids else []
    missing = set(unique_ids) - {g.id for g in guests}
    if missing:
        raise HTTPException(status_code=404, detail=f"Guest not found: {', '.join(sorted(missing))}")
    return guests


def create_group(db: Session, data: dict[str, Any], actor: User) -> GuestGroup:
    event = get_or_404(db, Event, data["event_id"], "Event")
    ensure_can_manage_event(actor, event)
    guest_ids = data.pop("guest_ids", [])
    group = GuestGroup(**data)
    group.members = load_guests(db, guest_ids)
    db.add(group)
    db.flush()
    audit_service.record(
        db, "create", "guest_group", group.id, actor=actor,
        new_values={**audit_service.snapshot(group), "member_ids": [g.id for g in group.members]},
    )
    db.commit()
    db.refresh(group)
    logger.info("Created guest group '%s' (%s) for event %s", group.name, group.id, group.event_id)
    return group


def update_group(db: Session, group: GuestGroup, updates: dict[str, Any], actor: User) -> GuestGroup:
    ensure_can_manage_event(actor, group.event)
    before = audit_service.snapshot(group)
    for field, value in updates.items():
        setattr(group, field, value)
    audit_service.record(
        db, "update", "guest_group", group.id, actor=actor, old_values=before, new_values=audit_service.snapshot(group),
    )
    db.commit()
    db.refresh(group)
    logger.info("Updated guest group %s", group.id)
    return group


def delete_group(db: Session, group: GuestGroup, actor: User) -> None:
    ensure_can_manage_event(actor, group.event)
    before = audit_service.snapshot(group)
    group_id = group.id
    db.delete(group)
    audit_service.record(db, "delete", "guest_group", group_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Deleted guest group %s", group_id)


def add_members(db: Session, group: GuestGroup, guest_ids: list[str], actor: User) -> GuestGroup:
    ensure_can_manage_event(actor, group.event)
    current = {g.id for g in group.members}
    added = [g for g in load_guests(db, guest_ids) if g.id not in current]
    group.members.extend(added)
    audit_service.record(
        db, "add_members", "guest_group", group.id, actor=actor, new_values={"guest_ids": [g.id for g in added]},
    )
    db.commit()
    db.refresh(group)
    logger.info("Added %d guests to group %s", len(added), group.id)
    return group


def remove_member(db: Session, group: GuestGroup, guest_id: str, actor: User) -> GuestGroup:
    ensure_can_manage_event(actor, group.event)
    member = next((g for g in group.members if g.id == guest_id), None)
    if member is None:
        raise HTTPException(status_code=404, detail="Guest is not a member of this group")
    group.members.remove(member)
    audit_service.record(
        db, "remove_member", "guest_group", group.id, actor=actor, old_values={"guest_id": guest_id},
    )
    db.commit()
    db.refresh(group)
    logger.info("Removed guest %s from group %s", guest_id, group.id)
    return group
