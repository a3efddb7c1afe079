"""System settings API routes (admin only)."""
import logging
from typing import Any
from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from rsvp_app.database import get_db
from rsvp_app.dependencies import require_role
from rsvp_app.models.notification import Channel
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.notification import TemplateOut
from rsvp_app.schemas.setting import EmailTemplateUpdate, SettingOut
from rsvp_app.services import notification_service, settings_service

logger = logging.getLogger(__name__)
router = APIRouter()

admin_only = require_role(RoleName.admin)


@router.get("/")
def get_settings(db: Session = Depends(get_db), _: User = Depends(admin_only)) -> dict[str, dict[str, Any]]:
    return settings_service.get_all(db)


@router.put("/")
def update_settings(
    changes: dict[str, dict[str, Any]] = Body(...),
    db: Session = Depends(get_db),
    actor: User = Depends(admin_only),
) -> dict[str, dict[str, Any]]:
    """Merge the given sections into the stored settings; unknown sections or fields are rejected."""
    return settings_service.update(db, changes, actor)


@router.post("/reset")
def reset_settings(db: Session = Depends(get_db), actor: User = Depends(admin_only)) -> dict[str, dict[str, Any]]:
    return settings_service.reset(db, actor)


@router.get("/email-templates", response_model=list[TemplateOut])
def list_email_templates(db: Session = Depends(get_db), _: User = Depends(admin_only)):
    return notification_service.list_templates(db, type_filter=Channel.email).all()


@router.put("/email-templates/{template_id}", response_model=TemplateOut)
def update_email_template(
    template_id: str,
    payload: EmailTemplateUpdate,
    db: Session = Depends(get_db),
    actor: User = Depends(admin_only),
):
    template = notification_service.get_template(db, template_id)
    if template.type != Channel.email:
        raise HTTPException(status_code=404, detail="Email template not found")
    return notification_service.update_template(db, template, payload.model_dump(exclude_unset=True), actor)


@router.get("/{key}", response_model=SettingOut)
def get_setting(key: str, db: Session = Depends(get_db), _: User = Depends(admin_only)):
    return {"key": key, "value": settings_service.get_value(db, key)}
