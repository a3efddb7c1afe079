"""RSVP service — staff-managed RSVPs, plus-ones and token-based guest responses."""
import logging
import secrets
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.models.event import Event, EventStatus
from rsvp_app.models.guest import EventGuest, Guest
from rsvp_app.models.rsvp import RSVP, RSVPPlusOne, RSVPStatus
from rsvp_app.models.user import User
from rsvp_app.services import audit_service
from rsvp_app.services.common import get_or_404, utcnow
from rsvp_app.services.event_service import ensure_can_manage_event

logger = logging.getLogger(__name__)


def new_rsvp_token() -> str:
    return secrets.token_urlsafe(settings.RSVP_TOKEN_BYTES)


def list_event_rsvps(db: Session, event: Event, status_filter: Optional[RSVPStatus] = None):
    query = db.query(RSVP).filter(RSVP.event_id == event.id)
    if status_filter:
        query = query.filter(RSVP.status == status_filter)
    return query.order_by(RSVP.created_at, RSVP.id)


def get_rsvp(db: Session, rsvp_id: str) -> RSVP:
    return get_or_404(db, RSVP, rsvp_id, "RSVP")


def get_by_token(db: Session, token: str) -> RSVP:
    rsvp = db.query(RSVP).filter(RSVP.token == token).first()
    if rsvp is None:
        raise HTTPException(status_code=404, detail="RSVP not found")
    return rsvp


def _check_plus_ones(rsvp_status: RSVPStatus, number_of_guests: int, plus_ones: list) -> None:
    """Attending plus-ones must fit the party size; only enforced while the guest is attending."""
    if rsvp_status != RSVPStatus.attending:
        return
    attending = sum(1 for p in plus_ones if _attr(p, "is_attending", True))
    if attending > number_of_guests - 1:
        raise HTTPException(
            status_code=400,
            detail=f"{attending} attending plus-ones exceed the party size of {number_of_guests}",
        )


def _attr(obj, name: str, default=None):
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _check_capacity(db: Session, event: Event, rsvp_id: Optional[str], new_status: RSVPStatus, headcount: int) -> None:
    """409 if accepting this RSVP would take the event past max_attendees."""
    if not event.max_attendees or new_status != RSVPStatus.attending:
        return
    query = db.query(func.coalesce(func.sum(RSVP.number_of_guests), 0)).filter(
        RSVP.event_id == event.id, RSVP.status == RSVPStatus.attending,
    )
    if rsvp_id:
        query = query.filter(RSVP.id != rsvp_id)
    taken = query.scalar()
    if taken + headcount > event.max_attendees:
        logger.warning("Event %s is full (%d/%d), rejected %d more", event.id, taken, event.max_attendees, headcount)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Event is full")


def _apply_response_date(rsvp: RSVP, new_status: Optional[RSVPStatus]) -> None:
    if new_status is not None and new_status != RSVPStatus.pending and new_status != rsvp.status:
        rsvp.response_date = utcnow()


def create_rsvp(db: Session, event: Event, data: dict[str, Any], actor: User) -> RSVP:
    """Record an RSVP on a guest's behalf. Puts the guest on the guest list if needed."""
    ensure_can_manage_event(actor, event)
    guest = get_or_404(db, Guest, data["guest_id"], "Guest")
    if db.query(RSVP).filter(RSVP.event_id == event.id, RSVP.guest_id == guest.id).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Guest already has an RSVP for this event")

    plus_ones = data.pop("plus_ones", [])
    _check_plus_ones(data["status"], data["number_of_guests"], plus_ones)
    _check_capacity(db, event, None, data["status"], data["number_of_guests"])

    rsvp = RSVP(event_id=event.id, token=new_rsvp_token(), **data)
    if rsvp.status != RSVPStatus.pending:
        rsvp.response_date = utcnow()
    rsvp.plus_ones = [RSVPPlusOne(**p) for p in plus_ones]
    db.add(rsvp)
    if not db.query(EventGuest).filter(EventGuest.event_id == event.id, EventGuest.guest_id == guest.id).first():
        db.add(EventGuest(event_id=event.id, guest_id=guest.id))
    db.flush()
    audit_service.record(db, "create", "rsvp", rsvp.id, actor=actor, new_values=audit_service.snapshot(rsvp))
    db.commit()
    db.refresh(rsvp)
    logger.info("Created RSVP %s (%s) for guest %s on event %s", rsvp.id, rsvp.status.value, guest.id, event.id)
    return rsvp


def update_rsvp(db: Session, rsvp: RSVP, updates: dict[str, Any], actor: User) -> RSVP:
    ensure_can_manage_event(actor, rsvp.event)
    new_status = updates.get("status", rsvp.status)
    headcount = updates.get("number_of_guests", rsvp.number_of_guests)
    _check_plus_ones(new_status, headcount, rsvp.plus_ones)
    _check_capacity(db, rsvp.event, rsvp.id, new_status, headcount)

    before = audit_service.snapshot(rsvp)
    _apply_response_date(rsvp, updates.get("status"))
    for field, value in updates.items():
        setattr(rsvp, field, value)
    audit_service.record(
        db, "update", "rsvp", rsvp.id, actor=actor, old_values=before, new_values=audit_service.snapshot(rsvp),
    )
    db.commit()
    db.refresh(rsvp)
    logger.info("Updated RSVP %s", rsvp.id)
    return rsvp


def delete_rsvp(db: Session, rsvp: RSVP, actor: User) -> None:
    ensure_can_manage_event(actor, rsvp.event)
    before = audit_service.snapshot(rsvp)
    rsvp_id = rsvp.id
    db.delete(rsvp)
    audit_service.record(db, "delete", "rsvp", rsvp_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Deleted RSVP %s", rsvp_id)


def add_plus_one(db: Session, rsvp: RSVP, data: dict[str, Any], actor: User) -> RSVPPlusOne:
    ensure_can_manage_event(actor, rsvp.event)
    _check_plus_ones(rsvp.status, rsvp.number_of_guests, list(rsvp.plus_ones) + [data])
    plus_one = RSVPPlusOne(rsvp_id=rsvp.id, **data)
    db.add(plus_one)
    db.flush()
    audit_service.record(
        db, "create", "rsvp_plus_one", plus_one.id, actor=actor, new_values=audit_service.snapshot(plus_one),
    )
    db.commit()
    db.refresh(plus_one)
    logger.info("Added plus-one %s to RSVP %s", plus_one.id, rsvp.id)
    return plus_one


def delete_plus_one(db: Session, rsvp: RSVP, plus_one_id: str, actor: User) -> None:
    ensure_can_manage_event(actor, rsvp.event)
    plus_one = next((p for p in rsvp.plus_ones if p.id == plus_one_id), None)
    if plus_one is None:
        raise HTTPException(status_code=404, detail="Plus-one not found")
    before = audit_service.snapshot(plus_one)
    rsvp.plus_ones.remove(plus_one)
    audit_service.record(db, "delete", "rsvp_plus_one", plus_one_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Removed plus-one %s from RSVP %s", plus_one_id, rsvp.id)


# --- public responses -----------------------------------------------------

def public_view(rsvp: RSVP) -> dict[str, Any]:
    event = rsvp.event
    venue = event.primary_venue
    return {
        "event_name": event.name,
        "event_start": event.start_date,
        "event_end": event.end_date,
        "event_timezone": event.timezone,
        "venue_name": venue.name if venue else None,
        "guest_first_name": rsvp.guest.first_name,
        "status": rsvp.status,
        "number_of_guests": rsvp.number_of_guests,
        "dietary_restrictions": rsvp.dietary_restrictions,
        "special_requirements": rsvp.special_requirements,
        "message": rsvp.message,
        "plus_ones": rsvp.plus_ones,
    }


def get_for_response(db: Session, token: str) -> RSVP:
    """Look up an RSVP by token; the event must be open for responses."""
    rsvp = get_by_token(db, token)
    if rsvp.event.status != EventStatus.published:
        raise HTTPException(status_code=400, detail="This event is not accepting responses")
    return rsvp


def respond(db: Session, token: str, data: dict[str, Any]) -> RSVP:
    """Apply a guest's own response submitted through their RSVP link."""
    rsvp = get_for_response(db, token)
    if data["status"] == RSVPStatus.pending:
        raise HTTPException(status_code=400, detail="Respond with attending, not_attending or maybe")

    plus_ones = data.pop("plus_ones", None)
    party = plus_ones if plus_ones is not None else rsvp.plus_ones
    _check_plus_ones(data["status"], data["number_of_guests"], party)
    _check_capacity(db, rsvp.event, rsvp.id, data["status"], data["number_of_guests"])

    before = audit_service.snapshot(rsvp)
    for field, value in data.items():
        setattr(rsvp, field, value)
    if plus_ones is not None:
        rsvp.plus_ones = [RSVPPlusOne(**p) for p in plus_ones]
    ctx = audit_service.request_context.get()
    rsvp.response_date = utcnow()
    rsvp.ip_address = ctx.get("ip_address")
    rsvp.user_agent = ctx.get("user_agent")
    audit_service.record(
        db, "respond", "rsvp", rsvp.id, old_values=before, new_values=audit_service.snapshot(rsvp),
    )
    db.commit()
    db.refresh(rsvp)
    logger.info("Guest %s responded %s to event %s", rsvp.guest_id, rsvp.status.value, rsvp.event_id)
    return rsvp
