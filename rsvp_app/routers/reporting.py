"""Reporting and dashboard API routes."""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rsvp_app.database import get_db
from rsvp_app.dependencies import get_current_user, require_role
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.reporting import AttendanceStats, DashboardStats, Demographics, EventComparisonRow, RSVPStats
from rsvp_app.services import reporting_service

logger = logging.getLogger(__name__)
router = APIRouter()
dashboard_router = APIRouter()

host = require_role(RoleName.event_host)


@router.get("/events/compare", response_model=list[EventComparisonRow])
def compare_events(
    event_ids: list[str] = Query(..., description="Repeat the parameter once per event"),
    db: Session = Depends(get_db),
    _: User = Depends(host),
):
    return reporting_service.compare_events(db, event_ids)


@router.get("/events/{event_id}/rsvp-stats", response_model=RSVPStats)
def rsvp_stats(event_id: str, db: Session = Depends(get_db), _: User = Depends(host)):
    return reporting_service.rsvp_stats(db, event_id)


@router.get("/events/{event_id}/attendance", response_model=AttendanceStats)
def attendance(event_id: str, db: Session = Depends(get_db), _: User = Depends(host)):
    return reporting_service.attendance(db, event_id)


@router.get("/events/{event_id}/demographics", response_model=Demographics)
def demographics(event_id: str, db: Session = Depends(get_db), _: User = Depends(host)):
    """Gender, age, location and dietary breakdown of attending guests."""
    return reporting_service.demographics(db, event_id)


@dashboard_router.get("/stats", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return reporting_service.dashboard(db)
