"""Audit trail — one AuditLog row per write, added to the caller's transaction.

The HTTP middleware stores the client address and user agent in
``request_context`` so services don't have to thread the request through.
"""
import csv
import enum
import io
import json
import logging
from contextvars import ContextVar
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from sqlalchemy import delete, inspect
from sqlalchemy.orm import Session

from rsvp_app.models.audit_log import AuditLog
from rsvp_app.models.user import User
from rsvp_app.services.common import utcnow

logger = logging.getLogger(__name__)

request_context: ContextVar[dict] = ContextVar("request_context", default={})

EXPORT_COLUMNS = (
    "id", "created_at", "user_id", "action", "entity_type", "entity_id", "ip_address", "user_agent",
    "old_values", "new_values",
)

# Never copied into a snapshot.
_SECRET_FIELDS = {"password_hash", "reset_password_token", "token"}


def _json_safe(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def snapshot(obj, exclude: Iterable[str] = ()) -> dict[str, Any]:
    """Serialize the column values of an ORM object to a JSON-safe dict."""
    skip = _SECRET_FIELDS | set(exclude)
    mapper = inspect(obj).mapper
    return {
        attr.key: _json_safe(getattr(obj, attr.key))
        for attr in mapper.column_attrs
        if attr.key not in skip
    }


def record(
    db: Session,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    actor: Optional[User] = None,
    old_values: Optional[dict] = None,
    new_values: Optional[dict] = None,
    extra: Optional[dict] = None,
) -> AuditLog:
    """Add an audit entry to the session. The caller commits."""
    ctx = request_context.get()
    entry = AuditLog(
        user_id=actor.id if actor is not None else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        old_values=old_values,
        new_values=new_values,
        ip_address=ctx.get("ip_address"),
        user_agent=ctx.get("user_agent"),
        extra=extra,
    )
    db.add(entry)
    return entry


def list_logs(
    db: Session,
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    user_id: Optional[str] = None,
    entity_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
):
    """Query for audit entries, newest first."""
    query = db.query(AuditLog)
    if action:
        query = query.filter(AuditLog.action == action)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    if entity_id:
        query = query.filter(AuditLog.entity_id == entity_id)
    if start:
        query = query.filter(AuditLog.created_at >= start)
    if end:
        query = query.filter(AuditLog.created_at <= end)
    return query.order_by(AuditLog.created_at.desc(), AuditLog.id)


def purge_older_than(db: Session, days: int, actor: User) -> tuple[int, datetime]:
    """Bulk-delete entries older than ``days`` days.

    This is the only way audit rows leave the table. It runs as a Core
    statement, so the mapper-level immutability guards don't apply.
    """
    cutoff = utcnow() - timedelta(days=days)
    result = db.execute(delete(AuditLog).where(AuditLog.created_at < cutoff.replace(tzinfo=None)))
    deleted = result.rowcount or 0
    record(
        db, "purge", "audit_log", None, actor=actor,
        extra={"days": days, "cutoff": cutoff.isoformat(), "deleted": deleted},
    )
    db.commit()
    logger.warning("Purged %d audit log entries older than %s (by %s)", deleted, cutoff.isoformat(), actor.id)
    return deleted, cutoff


def export_csv(entries: Iterable[AuditLog]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for entry in entries:
        row = []
        for column in EXPORT_COLUMNS:
            value = getattr(entry, column)
            if value is None:
                value = ""
            elif isinstance(value, (dict, list)):
                value = json.dumps(value, sort_keys=True)
            row.append(_json_safe(value))
        writer.writerow(row)
    return buffer.getvalue()
