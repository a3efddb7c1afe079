"""RSVP API routes.

``event_router`` serves the per-event collection under /api/events; ``router``
serves single RSVPs, plus-ones and the public token endpoints under /api/rsvps.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import require_role
from rsvp_app.models.rsvp import RSVPStatus
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.common import Page
from rsvp_app.schemas.rsvp import PlusOneCreate, PlusOneOut, RSVPCreate, RSVPOut, RSVPPublicOut, RSVPRespond, RSVPUpdate
from rsvp_app.services import event_service, rsvp_service
from rsvp_app.services.common import paginate

logger = logging.getLogger(__name__)
router = APIRouter()
event_router = APIRouter()

host = require_role(RoleName.event_host)


@event_router.get("/{event_id}/rsvps", response_model=Page[RSVPOut])
def list_event_rsvps(
    event_id: str,
    status_filter: Optional[RSVPStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(host),
):
    event = event_service.get_event(db, event_id)
    return paginate(rsvp_service.list_event_rsvps(db, event, status_filter), page, limit)


@event_router.post("/{event_id}/rsvps", response_model=RSVPOut, status_code=status.HTTP_201_CREATED)
def create_rsvp(event_id: str, payload: RSVPCreate, db: Session = Depends(get_db), actor: User = Depends(host)):
    """Record an RSVP on a guest's behalf (one per guest per event)."""
    event = event_service.get_event(db, event_id)
    return rsvp_service.create_rsvp(db, event, payload.model_dump(), actor)


# --- public, token-authenticated ------------------------------------------

@router.get("/respond/{token}", response_model=RSVPPublicOut)
def view_invitation(token: str, db: Session = Depends(get_db)):
    """What a guest sees when opening their RSVP link. No login required."""
    return rsvp_service.public_view(rsvp_service.get_for_response(db, token))


@router.post("/respond/{token}", response_model=RSVPPublicOut)
def respond(token: str, payload: RSVPRespond, db: Session = Depends(get_db)):
    rsvp = rsvp_service.respond(db, token, payload.model_dump(exclude_unset=True) | {
        "status": payload.status,
        "number_of_guests": payload.number_of_guests,
    })
    return rsvp_service.public_view(rsvp)


# --- staff ----------------------------------------------------------------

@router.get("/{rsvp_id}", response_model=RSVPOut)
def get_rsvp(rsvp_id: str, db: Session = Depends(get_db), _: User = Depends(host)):
    return rsvp_service.get_rsvp(db, rsvp_id)


@router.put("/{rsvp_id}", response_model=RSVPOut)
def update_rsvp(rsvp_id: str, payload: RSVPUpdate, db: Session = Depends(get_db), actor: User = Depends(host)):
    rsvp = rsvp_service.get_rsvp(db, rsvp_id)
    return rsvp_service.update_rsvp(db, rsvp, payload.model_dump(exclude_unset=True), actor)


@router.delete("/{rsvp_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rsvp(rsvp_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    rsvp = rsvp_service.get_rsvp(db, rsvp_id)
    rsvp_service.delete_rsvp(db, rsvp, actor)


@router.post("/{rsvp_id}/plus-ones", response_model=PlusOneOut, status_code=status.HTTP_201_CREATED)
def add_plus_one(rsvp_id: str, payload: PlusOneCreate, db: Session = Depends(get_db), actor: User = Depends(host)):
    rsvp = rsvp_service.get_rsvp(db, rsvp_id)
    return rsvp_service.add_plus_one(db, rsvp, payload.model_dump(), actor)


@router.delete("/{rsvp_id}/plus-ones/{plus_one_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plus_one(rsvp_id: str, plus_one_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    rsvp = rsvp_service.get_rsvp(db, rsvp_id)
    rsvp_service.delete_plus_one(db, rsvp, plus_one_id, actor)
