"""Pydantic schemas for Events and Venues."""
from __future__ import annotations
from datetime import datetime
from typing import Annotated, Optional
import pytz
from pydantic import AfterValidator, BaseModel, Field, model_validator

from rsvp_app.models.event import EventStatus, EventType, RecurrencePattern
from rsvp_app.schemas.common import PartialUpdate, UTCDateTime


def _check_timezone(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in pytz.all_timezones_set:
        raise ValueError(f"Unknown timezone {value!r}")
    return value


TimezoneName = Annotated[str, AfterValidator(_check_timezone)]


class VenueCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    is_primary: bool = False
    capacity: Optional[int] = Field(None, ge=0)
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    notes: Optional[str] = None
    image_url: Optional[str] = None


class VenueUpdate(PartialUpdate):
    not_null = ("name", "is_primary")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    is_primary: Optional[bool] = None
    capacity: Optional[int] = Field(None, ge=0)
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    notes: Optional[str] = None
    image_url: Optional[str] = None


class VenueOut(VenueCreate):
    id: str
    event_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    type: EventType = EventType.wedding
    start_date: UTCDateTime
    end_date: UTCDateTime
    timezone: TimezoneName = "UTC"
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    is_private: bool = False
    cover_image: Optional[str] = None
    venues: list[VenueCreate] = []

    @model_validator(mode="after")
    def _check_dates_and_recurrence(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        if self.is_recurring and self.recurrence_pattern is None:
            raise ValueError("recurrence_pattern is required for recurring events")
        return self


class EventUpdate(PartialUpdate):
    """Partial update. Status changes go through the status endpoint."""

    not_null = ("name", "type", "start_date", "end_date", "timezone", "is_recurring", "is_private")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[EventType] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    timezone: Optional[TimezoneName] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    is_private: Optional[bool] = None
    cover_image: Optional[str] = None


class EventStatusUpdate(BaseModel):
    status: EventStatus


class EventOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    type: EventType
    start_date: datetime
    end_date: datetime
    timezone: str
    status: EventStatus
    is_recurring: bool
    recurrence_pattern: Optional[RecurrencePattern] = None
    max_attendees: Optional[int] = None
    is_private: bool
    cover_image: Optional[str] = None
    created_by: str
    venues: list[VenueOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
