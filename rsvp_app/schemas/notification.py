"""Pydantic schemas for notification templates, notifications and recipients."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field

from rsvp_app.models.notification import Channel, DeliveryStatus, NotificationStatus
from rsvp_app.schemas.common import PartialUpdate, UTCDateTime


class TemplateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    subject: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    type: Channel = Channel.email
    variables: Optional[list[str]] = None
    is_active: bool = True


class TemplateUpdate(PartialUpdate):
    not_null = ("name", "subject", "content", "type", "is_active")

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    type: Optional[Channel] = None
    variables: Optional[list[str]] = None
    is_active: Optional[bool] = None


class TemplateOut(BaseModel):
    id: str
    name: str
    subject: str
    content: str
    type: Channel
    variables: Optional[list[str]] = None
    is_active: bool
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TemplatePreviewRequest(BaseModel):
    event_id: Optional[str] = None
    guest_id: Optional[str] = None
    context: dict[str, Any] = {}


class RenderedMessage(BaseModel):
    subject: str
    content: str


class NotificationCreate(BaseModel):
    """Subject and content fall back to the template's when omitted."""

    event_id: Optional[str] = None
    template_id: Optional[str] = None
    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    channel: Channel = Channel.email
    scheduled_at: Optional[UTCDateTime] = None


class NotificationUpdate(PartialUpdate):
    not_null = ("subject", "content", "channel")

    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    channel: Optional[Channel] = None
    scheduled_at: Optional[UTCDateTime] = None


class RecipientsAdd(BaseModel):
    guest_ids: list[str] = []
    # Adds every guest linked to the notification's event.
    all_event_guests: bool = False


class RecipientStatusUpdate(BaseModel):
    status: DeliveryStatus
    error_message: Optional[str] = None


class RecipientOut(BaseModel):
    id: str
    notification_id: str
    guest_id: str
    channel: Channel
    recipient_address: str
    status: DeliveryStatus
    sent_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    error_message: Optional[str] = None
    delivery_metadata: Optional[dict[str, Any]] = None

    model_config = {"from_attributes": True}


class NotificationOut(BaseModel):
    id: str
    event_id: Optional[str] = None
    template_id: Optional[str] = None
    subject: str
    content: str
    channel: Channel
    status: NotificationStatus
    scheduled_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    created_by: str
    recipients: list[RecipientOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
