"""Logistics API routes — accommodation, transport and other event arrangements."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import require_role
from rsvp_app.models.logistics import LogisticsStatus, LogisticsType
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.common import Page
from rsvp_app.schemas.logistics import (
    LogisticsCheckIn, LogisticsGuestIds, LogisticsItemCreate, LogisticsItemOut, LogisticsItemUpdate,
)
from rsvp_app.services import logistics_service
from rsvp_app.services.common import paginate

logger = logging.getLogger(__name__)
router = APIRouter()

host = require_role(RoleName.event_host)
staff = require_role(RoleName.hospitality)


@router.get("/", response_model=Page[LogisticsItemOut])
def list_items(
    event_id: Optional[str] = Query(None),
    type_filter: Optional[LogisticsType] = Query(None, alias="type"),
    status_filter: Optional[LogisticsStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(staff),
):
    """List logistics items, newest first."""
    return paginate(logistics_service.list_items(db, event_id, type_filter, status_filter), page, limit)


@router.post("/", response_model=LogisticsItemOut, status_code=status.HTTP_201_CREATED)
def create_item(payload: LogisticsItemCreate, db: Session = Depends(get_db), actor: User = Depends(host)):
    return logistics_service.create_item(db, payload.model_dump(), actor)


@router.get("/{item_id}", response_model=LogisticsItemOut)
def get_item(item_id: str, db: Session = Depends(get_db), _: User = Depends(staff)):
    return logistics_service.get_item(db, item_id)


@router.put("/{item_id}", response_model=LogisticsItemOut)
def update_item(
    item_id: str, payload: LogisticsItemUpdate, db: Session = Depends(get_db), actor: User = Depends(host),
):
    item = logistics_service.get_item(db, item_id)
    return logistics_service.update_item(db, item, payload.model_dump(exclude_unset=True), actor)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    item = logistics_service.get_item(db, item_id)
    logistics_service.delete_item(db, item, actor)


@router.post("/{item_id}/assign", response_model=LogisticsItemOut)
def assign_guests(
    item_id: str, payload: LogisticsGuestIds, db: Session = Depends(get_db), actor: User = Depends(host),
):
    """Book guests onto the item, within its capacity."""
    item = logistics_service.get_item(db, item_id)
    return logistics_service.assign_guests(db, item, payload.guest_ids, actor)


@router.post("/{item_id}/remove", response_model=LogisticsItemOut)
def remove_guests(
    item_id: str, payload: LogisticsGuestIds, db: Session = Depends(get_db), actor: User = Depends(host),
):
    item = logistics_service.get_item(db, item_id)
    return logistics_service.remove_guests(db, item, payload.guest_ids, actor)


@router.post("/{item_id}/checkin", response_model=LogisticsItemOut)
def check_guests(
    item_id: str, payload: LogisticsCheckIn, db: Session = Depends(get_db), actor: User = Depends(staff),
):
    """Check guests in or out; guests not yet assigned are booked first."""
    item = logistics_service.get_item(db, item_id)
    return logistics_service.check_guests(db, item, payload.guest_ids, payload.action.value, actor)
