"""Guest API routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import require_role
from rsvp_app.models.rsvp import RSVP
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.common import Page
from rsvp_app.schemas.guest import GuestCreate, GuestEventOut, GuestOut, GuestUpdate
from rsvp_app.schemas.rsvp import RSVPOut
from rsvp_app.services import guest_service
from rsvp_app.services.common import paginate

logger = logging.getLogger(__name__)
router = APIRouter()

host = require_role(RoleName.event_host)


@router.post("/", response_model=GuestOut, status_code=status.HTTP_201_CREATED)
def create_guest(payload: GuestCreate, db: Session = Depends(get_db), actor: User = Depends(host)):
    return guest_service.create_guest(db, payload.model_dump(), actor)


@router.get("/", response_model=Page[GuestOut])
def list_guests(
    search: Optional[str] = Query(None),
    is_vip: Optional[bool] = Query(None),
    tag: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(host),
):
    """List guests, filtered by name/email/phone search, VIP flag or tag."""
    return paginate(guest_service.list_guests(db, search, is_vip, tag), page, limit)


@router.get("/{guest_id}", response_model=GuestOut)
def get_guest(guest_id: str, db: Session = Depends(get_db), _: User = Depends(host)):
    return guest_service.get_guest(db, guest_id)


@router.put("/{guest_id}", response_model=GuestOut)
def update_guest(guest_id: str, payload: GuestUpdate, db: Session = Depends(get_db), actor: User = Depends(host)):
    guest = guest_service.get_guest(db, guest_id)
    return guest_service.update_guest(db, guest, payload.model_dump(exclude_unset=True), actor)


@router.delete("/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_guest(guest_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    """Delete a guest and their guest-list entries, RSVPs and group memberships."""
    guest = guest_service.get_guest(db, guest_id)
    guest_service.delete_guest(db, guest, actor)


@router.get("/{guest_id}/rsvps", response_model=list[RSVPOut])
def guest_rsvps(guest_id: str, db: Session = Depends(get_db), _: User = Depends(host)):
    guest = guest_service.get_guest(db, guest_id)
    return db.query(RSVP).filter(RSVP.guest_id == guest.id).order_by(RSVP.created_at).all()


@router.get("/{guest_id}/events", response_model=list[GuestEventOut])
def guest_events(guest_id: str, db: Session = Depends(get_db), _: User = Depends(host)):
    guest = guest_service.get_guest(db, guest_id)
    return guest_service.guest_events(db, guest)
