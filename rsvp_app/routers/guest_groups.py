"""Guest group API routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import require_role
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.common import Page
from rsvp_app.schemas.guest import GroupMembersAdd, GuestGroupCreate, GuestGroupOut, GuestGroupUpdate
from rsvp_app.services import guest_service
from rsvp_app.services.common import paginate

logger = logging.getLogger(__name__)
router = APIRouter()

host = require_role(RoleName.event_host)


@router.post("/", response_model=GuestGroupOut, status_code=status.HTTP_201_CREATED)
def create_group(payload: GuestGroupCreate, db: Session = Depends(get_db), actor: User = Depends(host)):
    """Create a group on an event, optionally seeded with members."""
    return guest_service.create_group(db, payload.model_dump(), actor)


@router.get("/", response_model=Page[GuestGroupOut])
def list_groups(
    event_id: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(host),
):
    return paginate(guest_service.list_groups(db, event_id, is_active), page, limit)


@router.get("/{group_id}", response_model=GuestGroupOut)
def get_group(group_id: str, db: Session = Depends(get_db), _: User = Depends(host)):
    return guest_service.get_group(db, group_id)


@router.put("/{group_id}", response_model=GuestGroupOut)
def update_group(group_id: str, payload: GuestGroupUpdate, db: Session = Depends(get_db), actor: User = Depends(host)):
    group = guest_service.get_group(db, group_id)
    return guest_service.update_group(db, group, payload.model_dump(exclude_unset=True), actor)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(group_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    group = guest_service.get_group(db, group_id)
    guest_service.delete_group(db, group, actor)


@router.post("/{group_id}/members", response_model=GuestGroupOut)
def add_members(group_id: str, payload: GroupMembersAdd, db: Session = Depends(get_db), actor: User = Depends(host)):
    group = guest_service.get_group(db, group_id)
    return guest_service.add_members(db, group, payload.guest_ids, actor)


@router.delete("/{group_id}/members/{guest_id}", response_model=GuestGroupOut)
def remove_member(group_id: str, guest_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    group = guest_service.get_group(db, group_id)
    return guest_service.remove_member(db, group, guest_id, actor)
