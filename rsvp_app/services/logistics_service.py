"""Logistics service — accommodation, transport and other arrangements per event.

Guests are booked onto an item through LogisticsAssignment rows. An item's
capacity, when set, caps the number of assigned guests.
"""
import logging
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from rsvp_app.models.event import Event
from rsvp_app.models.logistics import LogisticsAssignment, LogisticsItem, LogisticsStatus, LogisticsType
from rsvp_app.models.user import User
from rsvp_app.services import audit_service
from rsvp_app.services.common import as_utc, get_or_404, utcnow
from rsvp_app.services.event_service import ensure_can_manage_event
from rsvp_app.services.guest_service import load_guests

logger = logging.getLogger(__name__)


def list_items(
    db: Session,
    event_id: Optional[str] = None,
    type_filter: Optional[LogisticsType] = None,
    status_filter: Optional[LogisticsStatus] = None,
):
    query = db.query(LogisticsItem)
    if event_id:
        query = query.filter(LogisticsItem.event_id == event_id)
    if type_filter:
        query = query.filter(LogisticsItem.type == type_filter)
    if status_filter:
        query = query.filter(LogisticsItem.status == status_filter)
    return query.order_by(LogisticsItem.created_at.desc(), LogisticsItem.id)


def get_item(db: Session, item_id: str) -> LogisticsItem:
    return get_or_404(db, LogisticsItem, item_id, "Logistics item")


def _check_dates(item: LogisticsItem) -> None:
    if item.start_date and item.end_date and as_utc(item.end_date) < as_utc(item.start_date):
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")


def _check_capacity(item: LogisticsItem, total: int) -> None:
    if item.capacity and total > item.capacity:
        logger.warning("Logistics item %s over capacity (%d > %d)", item.id, total, item.capacity)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Assigning {total} guests would exceed the capacity of {item.capacity}",
        )


def _assigned_ids(item: LogisticsItem) -> list[str]:
    return [a.guest_id for a in item.assignments]


def create_item(db: Session, data: dict[str, Any], actor: User) -> LogisticsItem:
    event = get_or_404(db, Event, data["event_id"], "Event")
    ensure_can_manage_event(actor, event)
    guests = load_guests(db, data.pop("guest_ids", []))

    item = LogisticsItem(**data, created_by=actor.id)
    _check_capacity(item, len(guests))
    item.assignments = [LogisticsAssignment(guest_id=g.id) for g in guests]
    db.add(item)
    db.flush()
    audit_service.record(
        db, "create", "logistics_item", item.id, actor=actor,
        new_values={**audit_service.snapshot(item), "guest_ids": _assigned_ids(item)},
    )
    db.commit()
    db.refresh(item)
    logger.info("Created %s item '%s' (%s) for event %s", item.type.value, item.name, item.id, event.id)
    return item


def update_item(db: Session, item: LogisticsItem, updates: dict[str, Any], actor: User) -> LogisticsItem:
    ensure_can_manage_event(actor, item.event)
    guest_ids = updates.pop("guest_ids", None)
    before = {**audit_service.snapshot(item), "guest_ids": _assigned_ids(item)}

    for field, value in updates.items():
        setattr(item, field, value)
    item.updated_by = actor.id
    _check_dates(item)

    if guest_ids is not None:
        guests = load_guests(db, guest_ids)
        _check_capacity(item, len(guests))
        kept = {a.guest_id: a for a in item.assignments}
        item.assignments = [kept.get(g.id) or LogisticsAssignment(guest_id=g.id) for g in guests]
    else:
        _check_capacity(item, len(item.assignments))

    audit_service.record(
        db, "update", "logistics_item", item.id, actor=actor, old_values=before,
        new_values={**audit_service.snapshot(item), "guest_ids": _assigned_ids(item)},
    )
    db.commit()
    db.refresh(item)
    logger.info("Updated logistics item %s (%s)", item.id, ", ".join(sorted(updates)) or "guests")
    return item


def delete_item(db: Session, item: LogisticsItem, actor: User) -> None:
    ensure_can_manage_event(actor, item.event)
    before = audit_service.snapshot(item)
    item_id = item.id
    db.delete(item)
    audit_service.record(db, "delete", "logistics_item", item_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Deleted logistics item %s", item_id)


def assign_guests(db: Session, item: LogisticsItem, guest_ids: list[str], actor: User) -> LogisticsItem:
    """Book guests onto an item. Guests already on it are left as they are."""
    ensure_can_manage_event(actor, item.event)
    current = set(_assigned_ids(item))
    added = [g for g in load_guests(db, guest_ids) if g.id not in current]
    _check_capacity(item, len(current) + len(added))
    item.assignments.extend(LogisticsAssignment(guest_id=g.id) for g in added)
    audit_service.record(
        db, "assign_guests", "logistics_item", item.id, actor=actor, new_values={"guest_ids": [g.id for g in added]},
    )
    db.commit()
    db.refresh(item)
    logger.info("Assigned %d guests to logistics item %s", len(added), item.id)
    return item


def remove_guests(db: Session, item: LogisticsItem, guest_ids: list[str], actor: User) -> LogisticsItem:
    ensure_can_manage_event(actor, item.event)
    wanted = set(guest_ids)
    removed = [a for a in item.assignments if a.guest_id in wanted]
    if not removed:
        raise HTTPException(status_code=404, detail="None of these guests are assigned to this item")
    for assignment in removed:
        item.assignments.remove(assignment)
    audit_service.record(
        db, "remove_guests", "logistics_item", item.id, actor=actor,
        old_values={"guest_ids": [a.guest_id for a in removed]},
    )
    db.commit()
    db.refresh(item)
    logger.info("Removed %d guests from logistics item %s", len(removed), item.id)
    return item


def check_guests(db: Session, item: LogisticsItem, guest_ids: list[str], action: str, actor: User) -> LogisticsItem:
    """Check guests in or out of an item, booking any that were not assigned yet."""
    if item.status == LogisticsStatus.cancelled:
        raise HTTPException(status_code=400, detail="Cannot check guests in or out of a cancelled item")
    by_guest = {a.guest_id: a for a in item.assignments}
    guests = load_guests(db, guest_ids)
    new = [g for g in guests if g.id not in by_guest]
    _check_capacity(item, len(by_guest) + len(new))
    for guest in new:
        assignment = LogisticsAssignment(guest_id=guest.id)
        item.assignments.append(assignment)
        by_guest[guest.id] = assignment

    now = utcnow()
    for guest in guests:
        assignment = by_guest[guest.id]
        if action == "checkout":
            assignment.checked_out, assignment.checked_out_at, assignment.checked_out_by = True, now, actor.id
        else:
            assignment.checked_in, assignment.checked_in_at, assignment.checked_in_by = True, now, actor.id

    audit_service.record(
        db, action, "logistics_item", item.id, actor=actor, new_values={"guest_ids": [g.id for g in guests]},
    )
    db.commit()
    db.refresh(item)
    logger.info("%s %d guests on logistics item %s", action, len(guests), item.id)
    return item
