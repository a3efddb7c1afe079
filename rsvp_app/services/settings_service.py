"""System settings — sectioned key/value store with built-in defaults.

Each section is one AppSetting row whose JSON value is merged over the
defaults below, so a fresh database reads back the defaults without any
rows present.
"""
import copy
import logging
from typing import Any

from fastapi import HTTPException
from sqlalchemy import delete
from sqlalchemy.orm import Session

from rsvp_app.models.setting import AppSetting
from rsvp_app.models.user import User
from rsvp_app.services import audit_service

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, dict[str, Any]] = {
    "general": {
        "site_name": "RSVP Event App",
        "time_zone": "UTC",
        "date_format": "MM/DD/YYYY",
        "time_format": "12h",
        "max_upload_size_mb": 5,
        "logo_url": "",
    },
    "email": {
        "smtp_host": "",
        "smtp_port": 587,
        "smtp_username": "",
        "from_email": "",
        "from_name": "RSVP Event App",
        "use_smtp": False,
    },
    "notifications": {
        "send_event_reminders": True,
        "reminder_days_before_event": 1,
        "send_rsvp_confirmations": True,
        "allow_guest_emails": True,
        "notify_admins_on_new_rsvp": True,
    },
    "security": {
        "allow_user_registration": True,
    },
    "backup": {
        "auto_backup_enabled": False,
        "backup_frequency": "daily",
        "backup_time": "02:00",
        "retention_period_days": 30,
    },
}


def _check_key(key: str) -> None:
    if key not in DEFAULTS:
        raise HTTPException(status_code=404, detail=f"Unknown setting {key!r}")


def get_value(db: Session, key: str) -> dict[str, Any]:
    _check_key(key)
    value = copy.deepcopy(DEFAULTS[key])
    row = db.get(AppSetting, key)
    if row is not None and row.value:
        value.update(row.value)
    return value


def get_all(db: Session) -> dict[str, dict[str, Any]]:
    return {key: get_value(db, key) for key in DEFAULTS}


def update(db: Session, changes: dict[str, dict[str, Any]], actor: User) -> dict[str, dict[str, Any]]:
    """Merge ``changes`` into the stored sections. Only known fields are accepted."""
    for key, values in changes.items():
        if key not in DEFAULTS:
            raise HTTPException(status_code=400, detail=f"Unknown settings section {key!r}")
        if not isinstance(values, dict):
            raise HTTPException(status_code=400, detail=f"Settings section {key!r} must be an object")
        unknown = set(values) - set(DEFAULTS[key])
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown fields in {key!r}: {', '.join(sorted(unknown))}")

    old = get_all(db)
    for key, values in changes.items():
        row = db.get(AppSetting, key)
        if row is None:
            row = AppSetting(key=key, value={})
            db.add(row)
        row.value = {**(row.value or {}), **values}
    audit_service.record(
        db, "update", "settings", None, actor=actor,
        old_values={k: old[k] for k in changes}, new_values=changes,
    )
    db.commit()
    logger.info("Updated settings sections %s", ", ".join(sorted(changes)))
    return get_all(db)


def reset(db: Session, actor: User) -> dict[str, dict[str, Any]]:
    db.execute(delete(AppSetting))
    audit_service.record(db, "reset", "settings", None, actor=actor)
    db.commit()
    logger.warning("Settings reset to defaults by %s", actor.id)
    return get_all(db)
