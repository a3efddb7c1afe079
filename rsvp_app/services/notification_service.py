"""Notification service — templates, recipients and dispatch.

Message bodies are Jinja2 templates rendered in a sandbox with ``guest``,
``event`` and ``rsvp`` in scope. Dispatch goes through a per-channel backend;
the bundled one only logs, so a real transport can be swapped in with
``set_backend``.
"""
import logging
from typing import Any, Optional, Protocol

from fastapi import HTTPException, status
from jinja2 import TemplateError
from jinja2.sandbox import SandboxedEnvironment
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.models.event import Event
from rsvp_app.models.guest import EventGuest, Guest
from rsvp_app.models.notification import (
    Channel, DeliveryStatus, Notification, NotificationRecipient, NotificationStatus, NotificationTemplate,
)
from rsvp_app.models.rsvp import RSVP
from rsvp_app.models.user import User
from rsvp_app.services import audit_service
from rsvp_app.services.common import get_or_404, utcnow
from rsvp_app.services.event_service import ensure_can_manage_event

logger = logging.getLogger(__name__)

_env = SandboxedEnvironment(autoescape=False)

EDITABLE_STATUSES = (NotificationStatus.draft, NotificationStatus.scheduled)

RECIPIENT_TRANSITIONS: dict[DeliveryStatus, set[DeliveryStatus]] = {
    DeliveryStatus.pending: {DeliveryStatus.sending, DeliveryStatus.failed},
    DeliveryStatus.sending: {DeliveryStatus.sent, DeliveryStatus.failed},
    DeliveryStatus.sent: {DeliveryStatus.delivered, DeliveryStatus.failed},
    DeliveryStatus.delivered: {DeliveryStatus.read},
    DeliveryStatus.read: set(),
    DeliveryStatus.failed: set(),
}


class ChannelBackend(Protocol):
    def send(self, address: str, subject: str, content: str) -> dict[str, Any]:
        ...


class LoggingBackend:
    """Writes the rendered message to the log instead of delivering it."""

    def __init__(self, channel: Channel):
        self.channel = channel

    def send(self, address: str, subject: str, content: str) -> dict[str, Any]:
        logger.info("[%s] to=%s subject=%r\n%s", self.channel.value, address, subject, content)
        return {"backend": "logging"}


_backends: dict[Channel, ChannelBackend] = {channel: LoggingBackend(channel) for channel in Channel}


def set_backend(channel: Channel, backend: ChannelBackend) -> None:
    _backends[channel] = backend


def get_backend(channel: Channel) -> ChannelBackend:
    return _backends[channel]


# --- rendering ------------------------------------------------------------

def render(source: str, context: dict[str, Any]) -> str:
    try:
        return _env.from_string(source).render(**context)
    except TemplateError as exc:
        raise HTTPException(status_code=400, detail=f"Template error: {exc}")


def build_context(db: Session, event: Optional[Event], guest: Optional[Guest]) -> dict[str, Any]:
    context: dict[str, Any] = {"guest": {}, "event": {}, "rsvp": {}}
    if guest is not None:
        context["guest"] = {
            "id": guest.id,
            "first_name": guest.first_name,
            "last_name": guest.last_name or "",
            "full_name": guest.full_name,
            "email": guest.email,
            "phone": guest.phone,
        }
    if event is not None:
        venue = event.primary_venue
        context["event"] = {
            "id": event.id,
            "name": event.name,
            "description": event.description or "",
            "start_date": event.start_date,
            "end_date": event.end_date,
            "timezone": event.timezone,
            "venue": venue.name if venue else "",
            "city": venue.city if venue else "",
        }
    if event is not None and guest is not None:
        rsvp = db.query(RSVP).filter(RSVP.event_id == event.id, RSVP.guest_id == guest.id).first()
        if rsvp is not None:
            context["rsvp"] = {
                "status": rsvp.status.value,
                "link": f"{settings.FRONTEND_URL.rstrip('/')}/rsvp/{rsvp.token}",
            }
    return context


def resolve_address(guest: Guest, channel: Channel) -> Optional[str]:
    if channel == Channel.email:
        return guest.email
    if channel in (Channel.sms, Channel.whatsapp):
        return guest.phone
    return guest.id


# --- templates ------------------------------------------------------------

def list_templates(db: Session, type_filter: Optional[Channel] = None, is_active: Optional[bool] = None):
    query = db.query(NotificationTemplate)
    if type_filter:
        query = query.filter(NotificationTemplate.type == type_filter)
    if is_active is not None:
        query = query.filter(NotificationTemplate.is_active.is_(is_active))
    return query.order_by(NotificationTemplate.name)


def get_template(db: Session, template_id: str) -> NotificationTemplate:
    return get_or_404(db, NotificationTemplate, template_id, "Notification template")


def _ensure_template_name_free(db: Session, name: str, exclude_id: Optional[str] = None) -> None:
    query = db.query(NotificationTemplate).filter(NotificationTemplate.name == name)
    if exclude_id:
        query = query.filter(NotificationTemplate.id != exclude_id)
    if query.first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A template with this name already exists")


def _check_syntax(*sources: Optional[str]) -> None:
    for source in sources:
        if source is None:
            continue
        try:
            _env.parse(source)
        except TemplateError as exc:
            raise HTTPException(status_code=400, detail=f"Template error: {exc}")


def create_template(db: Session, data: dict[str, Any], actor: User) -> NotificationTemplate:
    _ensure_template_name_free(db, data["name"])
    _check_syntax(data["subject"], data["content"])
    template = NotificationTemplate(**data, created_by=actor.id)
    db.add(template)
    db.flush()
    audit_service.record(
        db, "create", "notification_template", template.id, actor=actor, new_values=audit_service.snapshot(template),
    )
    db.commit()
    db.refresh(template)
    logger.info("Created notification template '%s' (%s)", template.name, template.id)
    return template


def update_template(db: Session, template: NotificationTemplate, updates: dict[str, Any], actor: User) -> NotificationTemplate:
    if updates.get("name"):
        _ensure_template_name_free(db, updates["name"], exclude_id=template.id)
    _check_syntax(updates.get("subject"), updates.get("content"))
    before = audit_service.snapshot(template)
    for field, value in updates.items():
        setattr(template, field, value)
    audit_service.record(
        db, "update", "notification_template", template.id, actor=actor,
        old_values=before, new_values=audit_service.snapshot(template),
    )
    db.commit()
    db.refresh(template)
    logger.info("Updated notification template %s", template.id)
    return template


def delete_template(db: Session, template: NotificationTemplate, actor: User) -> None:
    before = audit_service.snapshot(template)
    template_id = template.id
    db.delete(template)
    audit_service.record(db, "delete", "notification_template", template_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Deleted notification template %s", template_id)


def preview_template(
    db: Session, template: NotificationTemplate, event_id: Optional[str], guest_id: Optional[str], extra: dict[str, Any],
) -> dict[str, str]:
    event = get_or_404(db, Event, event_id, "Event") if event_id else None
    guest = get_or_404(db, Guest, guest_id, "Guest") if guest_id else None
    context = {**build_context(db, event, guest), **extra}
    return {"subject": render(template.subject, context), "content": render(template.content, context)}


# --- notifications --------------------------------------------------------

def list_notifications(db: Session, event_id: Optional[str] = None, status_filter: Optional[NotificationStatus] = None):
    query = db.query(Notification)
    if event_id:
        query = query.filter(Notification.event_id == event_id)
    if status_filter:
        query = query.filter(Notification.status == status_filter)
    return query.order_by(Notification.created_at.desc(), Notification.id)


def get_notification(db: Session, notification_id: str) -> Notification:
    return get_or_404(db, Notification, notification_id, "Notification")


def _ensure_editable(notification: Notification) -> None:
    if notification.status not in EDITABLE_STATUSES:
        raise HTTPException(
            status_code=400, detail=f"Notification is {notification.status.value} and can no longer be changed",
        )


def _ensure_event_access(notification: Notification, actor: User) -> None:
    if notification.event is not None:
        ensure_can_manage_event(actor, notification.event)


def create_notification(db: Session, data: dict[str, Any], actor: User) -> Notification:
    if data.get("event_id"):
        ensure_can_manage_event(actor, get_or_404(db, Event, data["event_id"], "Event"))
    if data.get("template_id"):
        template = get_template(db, data["template_id"])
        data["subject"] = data.get("subject") or template.subject
        data["content"] = data.get("content") or template.content
    if not data.get("subject") or not data.get("content"):
        raise HTTPException(status_code=400, detail="subject and content are required without a template")
    _check_syntax(data["subject"], data["content"])

    notification = Notification(**data, created_by=actor.id)
    notification.status = NotificationStatus.scheduled if data.get("scheduled_at") else NotificationStatus.draft
    db.add(notification)
    db.flush()
    audit_service.record(
        db, "create", "notification", notification.id, actor=actor, new_values=audit_service.snapshot(notification),
    )
    db.commit()
    db.refresh(notification)
    logger.info("Created notification %s (%s)", notification.id, notification.status.value)
    return notification


def update_notification(db: Session, notification: Notification, updates: dict[str, Any], actor: User) -> Notification:
    _ensure_event_access(notification, actor)
    _ensure_editable(notification)
    _check_syntax(updates.get("subject"), updates.get("content"))
    before = audit_service.snapshot(notification)
    for field, value in updates.items():
        setattr(notification, field, value)
    if "scheduled_at" in updates:
        notification.status = NotificationStatus.scheduled if updates["scheduled_at"] else NotificationStatus.draft
    audit_service.record(
        db, "update", "notification", notification.id, actor=actor,
        old_values=before, new_values=audit_service.snapshot(notification),
    )
    db.commit()
    db.refresh(notification)
    logger.info("Updated notification %s", notification.id)
    return notification


def delete_notification(db: Session, notification: Notification, actor: User) -> None:
    _ensure_event_access(notification, actor)
    before = audit_service.snapshot(notification)
    notification_id = notification.id
    db.delete(notification)
    audit_service.record(db, "delete", "notification", notification_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Deleted notification %s", notification_id)


def add_recipients(
    db: Session, notification: Notification, guest_ids: list[str], all_event_guests: bool, actor: User,
) -> Notification:
    """Attach guests as recipients. Guests already on the notification are skipped."""
    _ensure_event_access(notification, actor)
    _ensure_editable(notification)
    ids = list(dict.fromkeys(guest_ids))
    if all_event_guests:
        if notification.event_id is None:
            raise HTTPException(status_code=400, detail="Notification is not linked to an event")
        rows = db.query(EventGuest.guest_id).filter(EventGuest.event_id == notification.event_id).all()
        ids.extend(gid for (gid,) in rows if gid not in ids)
    if not ids:
        raise HTTPException(status_code=400, detail="No guests given")

    guests = {g.id: g for g in db.query(Guest).filter(Guest.id.in_(ids)).all()}
    missing = [gid for gid in ids if gid not in guests]
    if missing:
        raise HTTPException(status_code=404, detail=f"Guest not found: {', '.join(sorted(missing))}")

    existing = {r.guest_id for r in notification.recipients}
    added = 0
    for guest_id in ids:
        if guest_id in existing:
            continue
        address = resolve_address(guests[guest_id], notification.channel)
        recipient = NotificationRecipient(
            guest_id=guest_id,
            channel=notification.channel,
            recipient_address=address or "",
        )
        if not address:
            recipient.status = DeliveryStatus.failed
            recipient.error_message = f"Guest has no {notification.channel.value} address"
        notification.recipients.append(recipient)
        added += 1

    audit_service.record(
        db, "add_recipients", "notification", notification.id, actor=actor, new_values={"added": added},
    )
    db.commit()
    db.refresh(notification)
    logger.info("Added %d recipients to notification %s", added, notification.id)
    return notification


def send_notification(db: Session, notification: Notification, actor: User) -> Notification:
    """Dispatch every pending recipient and settle the notification as sent or failed."""
    _ensure_event_access(notification, actor)
    _ensure_editable(notification)
    if not notification.recipients:
        raise HTTPException(status_code=400, detail="Notification has no recipients")

    notification.status = NotificationStatus.sending
    db.flush()
    backend = get_backend(notification.channel)
    event = notification.event
    sent = 0
    for recipient in notification.recipients:
        if recipient.status == DeliveryStatus.sent:
            sent += 1
            continue
        if recipient.status != DeliveryStatus.pending:
            continue
        recipient.status = DeliveryStatus.sending
        context = build_context(db, event, recipient.guest)
        try:
            subject = render(notification.subject, context)
            content = render(notification.content, context)
            metadata = backend.send(recipient.recipient_address, subject, content)
        except Exception as exc:
            logger.exception("Delivery to %s failed for notification %s", recipient.recipient_address, notification.id)
            recipient.status = DeliveryStatus.failed
            recipient.error_message = getattr(exc, "detail", None) or str(exc)
            continue
        recipient.status = DeliveryStatus.sent
        recipient.sent_at = utcnow()
        recipient.delivery_metadata = metadata
        sent += 1

    notification.status = NotificationStatus.sent if sent else NotificationStatus.failed
    notification.sent_at = utcnow()
    audit_service.record(
        db, "send", "notification", notification.id, actor=actor,
        new_values={"status": notification.status.value, "sent": sent, "recipients": len(notification.recipients)},
    )
    db.commit()
    db.refresh(notification)
    logger.info(
        "Notification %s %s (%d of %d recipients)",
        notification.id, notification.status.value, sent, len(notification.recipients),
    )
    return notification


def update_recipient_status(
    db: Session,
    notification: Notification,
    recipient_id: str,
    new_status: DeliveryStatus,
    error_message: Optional[str],
    actor: User,
) -> NotificationRecipient:
    recipient = next((r for r in notification.recipients if r.id == recipient_id), None)
    if recipient is None:
        raise HTTPException(status_code=404, detail="Recipient not found")
    if new_status not in RECIPIENT_TRANSITIONS[recipient.status]:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change recipient status from {recipient.status.value} to {new_status.value}",
        )
    old = recipient.status
    now = utcnow()
    recipient.status = new_status
    if new_status == DeliveryStatus.sent:
        recipient.sent_at = now
    elif new_status == DeliveryStatus.delivered:
        recipient.delivered_at = now
    elif new_status == DeliveryStatus.read:
        recipient.read_at = now
    elif new_status == DeliveryStatus.failed:
        recipient.error_message = error_message or recipient.error_message
    audit_service.record(
        db, "recipient_status", "notification_recipient", recipient.id, actor=actor,
        old_values={"status": old.value}, new_values={"status": new_status.value},
    )
    db.commit()
    db.refresh(recipient)
    logger.info("Recipient %s status %s -> %s", recipient.id, old.value, new_status.value)
    return recipient
