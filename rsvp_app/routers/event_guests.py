"""Event guest list API routes — invitations, confirmation, seating and check-in."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import require_role
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.common import Page
from rsvp_app.schemas.guest import EventGuestInvite, EventGuestOut, InvitationSend, SeatingUpdate
from rsvp_app.services import event_service, guest_service
from rsvp_app.services.common import paginate

logger = logging.getLogger(__name__)
router = APIRouter()

host = require_role(RoleName.event_host)
front_desk = require_role(RoleName.hospitality)


@router.get("/{event_id}/guests", response_model=Page[EventGuestOut])
def list_event_guests(
    event_id: str,
    confirmed: Optional[bool] = Query(None),
    checked_in: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(front_desk),
):
    event = event_service.get_event(db, event_id)
    return paginate(guest_service.list_event_guests(db, event, confirmed, checked_in), page, limit)


@router.post("/{event_id}/guests", response_model=EventGuestOut, status_code=status.HTTP_201_CREATED)
def invite_guest(event_id: str, payload: EventGuestInvite, db: Session = Depends(get_db), actor: User = Depends(host)):
    """Add a guest to the event's list; a pending RSVP with a fresh token is opened for them."""
    event = event_service.get_event(db, event_id)
    fields = payload.model_dump(exclude={"guest_id"})
    return guest_service.invite_guest(db, event, payload.guest_id, actor, **fields)


@router.delete("/{event_id}/guests/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_guest(event_id: str, guest_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    event = event_service.get_event(db, event_id)
    guest_service.remove_guest(db, event, guest_id, actor)


@router.post("/{event_id}/guests/{guest_id}/invitation", response_model=EventGuestOut)
def mark_invitation_sent(
    event_id: str,
    guest_id: str,
    payload: InvitationSend,
    db: Session = Depends(get_db),
    actor: User = Depends(host),
):
    """Record that the invitation went out and how."""
    event = event_service.get_event(db, event_id)
    return guest_service.mark_invitation_sent(db, event, guest_id, payload.method, actor)


@router.post("/{event_id}/guests/{guest_id}/confirm", response_model=EventGuestOut)
def confirm_guest(event_id: str, guest_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    event = event_service.get_event(db, event_id)
    return guest_service.confirm_guest(db, event, guest_id, actor)


@router.post("/{event_id}/guests/{guest_id}/check-in", response_model=EventGuestOut)
def check_in(event_id: str, guest_id: str, db: Session = Depends(get_db), actor: User = Depends(front_desk)):
    event = event_service.get_event(db, event_id)
    return guest_service.check_in(db, event, guest_id, actor)


@router.post("/{event_id}/guests/{guest_id}/check-out", response_model=EventGuestOut)
def check_out(event_id: str, guest_id: str, db: Session = Depends(get_db), actor: User = Depends(front_desk)):
    event = event_service.get_event(db, event_id)
    return guest_service.check_out(db, event, guest_id, actor)


@router.patch("/{event_id}/guests/{guest_id}/seating", response_model=EventGuestOut)
def update_seating(
    event_id: str,
    guest_id: str,
    payload: SeatingUpdate,
    db: Session = Depends(get_db),
    actor: User = Depends(host),
):
    event = event_service.get_event(db, event_id)
    return guest_service.update_seating(db, event, guest_id, payload.model_dump(exclude_unset=True), actor)
