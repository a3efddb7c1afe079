"""Notification API routes — templates, drafts, recipients and sending."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import require_role
from rsvp_app.models.notification import Channel, NotificationStatus
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.common import Page
from rsvp_app.schemas.notification import (
    NotificationCreate, NotificationOut, NotificationUpdate, RecipientOut, RecipientsAdd, RecipientStatusUpdate,
    RenderedMessage, TemplateCreate, TemplateOut, TemplatePreviewRequest, TemplateUpdate,
)
from rsvp_app.services import notification_service
from rsvp_app.services.common import paginate

logger = logging.getLogger(__name__)
router = APIRouter()

host = require_role(RoleName.event_host)


# --- templates ------------------------------------------------------------

@router.get("/templates", response_model=Page[TemplateOut])
def list_templates(
    type_filter: Optional[Channel] = Query(None, alias="type"),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(host),
):
    return paginate(notification_service.list_templates(db, type_filter, is_active), page, limit)


@router.post("/templates", response_model=TemplateOut, status_code=status.HTTP_201_CREATED)
def create_template(payload: TemplateCreate, db: Session = Depends(get_db), actor: User = Depends(host)):
    return notification_service.create_template(db, payload.model_dump(), actor)


@router.get("/templates/{template_id}", response_model=TemplateOut)
def get_template(template_id: str, db: Session = Depends(get_db), _: User = Depends(host)):
    return notification_service.get_template(db, template_id)


@router.put("/templates/{template_id}", response_model=TemplateOut)
def update_template(template_id: str, payload: TemplateUpdate, db: Session = Depends(get_db), actor: User = Depends(host)):
    template = notification_service.get_template(db, template_id)
    return notification_service.update_template(db, template, payload.model_dump(exclude_unset=True), actor)


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(template_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    template = notification_service.get_template(db, template_id)
    notification_service.delete_template(db, template, actor)


@router.post("/templates/{template_id}/preview", response_model=RenderedMessage)
def preview_template(
    template_id: str,
    payload: TemplatePreviewRequest,
    db: Session = Depends(get_db),
    _: User = Depends(host),
):
    """Render a template against a real event/guest pair, plus any extra variables."""
    template = notification_service.get_template(db, template_id)
    return notification_service.preview_template(db, template, payload.event_id, payload.guest_id, payload.context)


# --- notifications --------------------------------------------------------

@router.get("/", response_model=Page[NotificationOut])
def list_notifications(
    event_id: Optional[str] = Query(None),
    status_filter: Optional[NotificationStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(host),
):
    return paginate(notification_service.list_notifications(db, event_id, status_filter), page, limit)


@router.post("/", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
def create_notification(payload: NotificationCreate, db: Session = Depends(get_db), actor: User = Depends(host)):
    """Create a draft, or a scheduled notification when scheduled_at is given."""
    return notification_service.create_notification(db, payload.model_dump(), actor)


@router.get("/{notification_id}", response_model=NotificationOut)
def get_notification(notification_id: str, db: Session = Depends(get_db), _: User = Depends(host)):
    return notification_service.get_notification(db, notification_id)


@router.put("/{notification_id}", response_model=NotificationOut)
def update_notification(
    notification_id: str,
    payload: NotificationUpdate,
    db: Session = Depends(get_db),
    actor: User = Depends(host),
):
    notification = notification_service.get_notification(db, notification_id)
    return notification_service.update_notification(db, notification, payload.model_dump(exclude_unset=True), actor)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(notification_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    notification = notification_service.get_notification(db, notification_id)
    notification_service.delete_notification(db, notification, actor)


@router.post("/{notification_id}/recipients", response_model=NotificationOut)
def add_recipients(notification_id: str, payload: RecipientsAdd, db: Session = Depends(get_db), actor: User = Depends(host)):
    notification = notification_service.get_notification(db, notification_id)
    return notification_service.add_recipients(db, notification, payload.guest_ids, payload.all_event_guests, actor)


@router.post("/{notification_id}/send", response_model=NotificationOut)
def send_notification(notification_id: str, db: Session = Depends(get_db), actor: User = Depends(host)):
    notification = notification_service.get_notification(db, notification_id)
    return notification_service.send_notification(db, notification, actor)


@router.put("/{notification_id}/recipients/{recipient_id}/status", response_model=RecipientOut)
def update_recipient_status(
    notification_id: str,
    recipient_id: str,
    payload: RecipientStatusUpdate,
    db: Session = Depends(get_db),
    actor: User = Depends(host),
):
    """Record a delivery receipt (delivered, read or failed) for one recipient."""
    notification = notification_service.get_notification(db, notification_id)
    return notification_service.update_recipient_status(
        db, notification, recipient_id, payload.status, payload.error_message, actor,
    )
