"""Notification, NotificationTemplate and NotificationRecipient ORM models."""
import enum
import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Text, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship

from rsvp_app.database import Base, TimestampMixin


class Channel(str, enum.Enum):
    email = "email"
    sms = "sms"
    whatsapp = "whatsapp"
    push = "push"


class NotificationStatus(str, enum.Enum):
    draft = "draft"
    scheduled = "scheduled"
    sending = "sending"
    sent = "sent"
    failed = "failed"


class DeliveryStatus(str, enum.Enum):
    pending = "pending"
    sending = "sending"
    sent = "sent"
    delivered = "delivered"
    read = "read"
    failed = "failed"


class NotificationTemplate(TimestampMixin, Base):
    __tablename__ = "notification_templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(150), nullable=False, unique=True)
    subject = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    type = Column(SAEnum(Channel), nullable=False, index=True)
    variables = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    notifications = relationship("Notification", back_populates="template")


class Notification(TimestampMixin, Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=True, index=True)
    template_id = Column(String(36), ForeignKey("notification_templates.id", ondelete="SET NULL"), nullable=True)
    subject = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    channel = Column(SAEnum(Channel), nullable=False, default=Channel.email)
    status = Column(SAEnum(NotificationStatus), nullable=False, default=NotificationStatus.draft, index=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True, index=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    event = relationship("Event", back_populates="notifications")
    template = relationship("NotificationTemplate", back_populates="notifications")
    recipients = relationship(
        "NotificationRecipient", back_populates="notification", cascade="all, delete-orphan",
        passive_deletes=True, lazy="selectin",
    )


class NotificationRecipient(TimestampMixin, Base):
    __tablename__ = "notification_recipients"
    __table_args__ = (
        UniqueConstraint("notification_id", "guest_id", name="uq_notification_recipients_notification_guest"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    notification_id = Column(String(36), ForeignKey("notifications.id", ondelete="CASCADE"), nullable=False, index=True)
    guest_id = Column(String(36), ForeignKey("guests.id", ondelete="CASCADE"), nullable=False, index=True)
    channel = Column(SAEnum(Channel), nullable=False, index=True)
    recipient_address = Column(String(255), nullable=False)
    status = Column(SAEnum(DeliveryStatus), nullable=False, default=DeliveryStatus.pending, index=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    error_message = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    delivery_metadata = Column("metadata", JSON, nullable=True)

    notification = relationship("Notification", back_populates="recipients")
    guest = relationship("Guest")
