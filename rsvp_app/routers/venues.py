"""Venue API routes — search, availability and single-venue edits; creation lives under /api/events/{id}/venues."""
import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import get_current_user, get_optional_user
from rsvp_app.models.event import EventVenue
from rsvp_app.models.user import User
from rsvp_app.schemas.common import Page
from rsvp_app.schemas.event import VenueOut, VenueUpdate
from rsvp_app.services import event_service
from rsvp_app.services.common import get_or_404, paginate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Page[VenueOut])
def list_venues(
    search: Optional[str] = Query(None, description="Match on venue name"),
    city: Optional[str] = Query(None),
    capacity: Optional[int] = Query(None, ge=0, description="Minimum capacity"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    """Venues of the events the caller can see."""
    return paginate(event_service.list_venues(db, user, search, city, capacity), page, limit)


@router.get("/available", response_model=list[VenueOut])
def available_venues(
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    capacity: Optional[int] = Query(None, ge=0, description="Minimum capacity"),
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    """Places not taken by a published or completed event during the window."""
    return event_service.available_venues(db, user, start_date, end_date, capacity)


@router.get("/{venue_id}", response_model=VenueOut)
def get_venue(venue_id: str, db: Session = Depends(get_db), user: Optional[User] = Depends(get_optional_user)):
    return event_service.get_visible_venue(db, venue_id, user)


@router.put("/{venue_id}", response_model=VenueOut)
def update_venue(venue_id: str, payload: VenueUpdate, db: Session = Depends(get_db), actor: User = Depends(get_current_user)):
    venue = get_or_404(db, EventVenue, venue_id, "Venue")
    return event_service.update_venue(db, venue, payload.model_dump(exclude_unset=True), actor)


@router.delete("/{venue_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_venue(venue_id: str, db: Session = Depends(get_db), actor: User = Depends(get_current_user)):
    venue = get_or_404(db, EventVenue, venue_id, "Venue")
    event_service.delete_venue(db, venue, actor)
