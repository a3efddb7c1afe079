"""Audit log API routes (admin only). Entries are read-only apart from the bulk purge."""
import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import require_role
from rsvp_app.models.audit_log import AuditLog
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.audit_log import AuditLogOut, PurgeResult
from rsvp_app.schemas.common import Page
from rsvp_app.services import audit_service
from rsvp_app.services.common import get_or_404, paginate

logger = logging.getLogger(__name__)
router = APIRouter()

admin_only = require_role(RoleName.admin)


@router.get("/", response_model=Page[AuditLogOut])
def list_logs(
    action: Optional[str] = Query(None),
    entity_type: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(admin_only),
):
    query = audit_service.list_logs(db, action=action, entity_type=entity_type, user_id=user_id, start=start, end=end)
    return paginate(query, page, limit)


@router.get("/export")
def export_logs(
    action: Optional[str] = Query(None),
    entity_type: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    _: User = Depends(admin_only),
):
    """Download the filtered log as CSV."""
    query = audit_service.list_logs(db, action=action, entity_type=entity_type, user_id=user_id, start=start, end=end)
    return Response(
        content=audit_service.export_csv(query.all()),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="audit_logs.csv"'},
    )


@router.get("/user/{user_id}", response_model=Page[AuditLogOut])
def logs_for_user(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(admin_only),
):
    return paginate(audit_service.list_logs(db, user_id=user_id), page, limit)


@router.get("/event/{event_id}", response_model=Page[AuditLogOut])
def logs_for_event(
    event_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(admin_only),
):
    return paginate(audit_service.list_logs(db, entity_type="event", entity_id=event_id), page, limit)


@router.delete("/older-than/{days}", response_model=PurgeResult)
def purge_logs(days: int = Path(..., ge=1), db: Session = Depends(get_db), actor: User = Depends(admin_only)):
    """Permanently remove entries older than ``days`` days."""
    deleted, cutoff = audit_service.purge_older_than(db, days, actor)
    return {"deleted": deleted, "cutoff": cutoff}


@router.get("/{log_id}", response_model=AuditLogOut)
def get_log(log_id: str, db: Session = Depends(get_db), _: User = Depends(admin_only)):
    return get_or_404(db, AuditLog, log_id, "Audit log entry")
