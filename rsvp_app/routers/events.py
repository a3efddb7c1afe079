"""Event API routes — listing, lifecycle and status changes for events."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import get_current_user, get_optional_user, require_role
from rsvp_app.models.event import EventStatus, EventType
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.common import Page
from rsvp_app.schemas.event import EventCreate, EventOut, EventStatusUpdate, EventUpdate, VenueCreate, VenueOut
from rsvp_app.services import event_service
from rsvp_app.services.common import paginate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    actor: User = Depends(require_role(RoleName.event_host)),
):
    """Create a draft event, optionally with its venues."""
    return event_service.create_event(db, payload.model_dump(), actor)


@router.get("/", response_model=Page[EventOut])
def list_events(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    type_filter: Optional[EventType] = Query(None, alias="type"),
    search: Optional[str] = Query(None),
    upcoming: bool = Query(False),
    mine: bool = Query(False, description="Only events created by the caller"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    """List events. Anonymous callers only see published, public events."""
    query = event_service.list_events(db, user, status_filter, type_filter, search, upcoming, mine)
    return paginate(query, page, limit)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db), user: Optional[User] = Depends(get_optional_user)):
    return event_service.get_visible_event(db, event_id, user)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    actor: User = Depends(get_current_user),
):
    """Update an event (organizer or event manager)."""
    event = event_service.get_event(db, event_id)
    return event_service.update_event(db, event, payload.model_dump(exclude_unset=True), actor)


@router.post("/{event_id}/status", response_model=EventOut)
def change_status(
    event_id: str,
    payload: EventStatusUpdate,
    db: Session = Depends(get_db),
    actor: User = Depends(get_current_user),
):
    event = event_service.get_event(db, event_id)
    return event_service.change_status(db, event, payload.status, actor)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, db: Session = Depends(get_db), actor: User = Depends(get_current_user)):
    """Delete an event together with its venues, guest list, RSVPs, groups, logistics and notifications."""
    event = event_service.get_event(db, event_id)
    event_service.delete_event(db, event, actor)


@router.get("/{event_id}/venues", response_model=list[VenueOut])
def list_venues(event_id: str, db: Session = Depends(get_db), user: Optional[User] = Depends(get_optional_user)):
    return event_service.get_visible_event(db, event_id, user).venues


@router.post("/{event_id}/venues", response_model=VenueOut, status_code=status.HTTP_201_CREATED)
def add_venue(
    event_id: str,
    payload: VenueCreate,
    db: Session = Depends(get_db),
    actor: User = Depends(get_current_user),
):
    """Add a venue. Marking it primary clears the flag on the event's other venues."""
    event = event_service.get_event(db, event_id)
    return event_service.add_venue(db, event, payload.model_dump(), actor)
