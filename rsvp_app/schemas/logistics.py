"""Pydantic schemas for logistics items and guest assignments."""
from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, model_validator

from rsvp_app.models.logistics import LogisticsStatus, LogisticsType
from rsvp_app.schemas.common import PartialUpdate, UTCDateTime
from rsvp_app.schemas.guest import GuestOut


class LogisticsItemCreate(BaseModel):
    event_id: str
    type: LogisticsType
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    capacity: Optional[int] = Field(None, ge=1)
    status: LogisticsStatus = LogisticsStatus.pending
    provider: Optional[str] = Field(None, max_length=255)
    contact_info: dict[str, Any] = {}
    cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    extra: dict[str, Any] = {}
    guest_ids: list[str] = []

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class LogisticsItemUpdate(PartialUpdate):
    """Partial update. ``guest_ids``, when given, replaces the assigned guests."""

    not_null = ("type", "name", "status", "contact_info", "extra", "guest_ids")

    type: Optional[LogisticsType] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    capacity: Optional[int] = Field(None, ge=1)
    status: Optional[LogisticsStatus] = None
    provider: Optional[str] = Field(None, max_length=255)
    contact_info: Optional[dict[str, Any]] = None
    cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    extra: Optional[dict[str, Any]] = None
    guest_ids: Optional[list[str]] = None


class LogisticsGuestIds(BaseModel):
    guest_ids: list[str] = Field(min_length=1)


class CheckAction(str, Enum):
    checkin = "checkin"
    checkout = "checkout"


class LogisticsCheckIn(BaseModel):
    guest_ids: list[str] = Field(min_length=1)
    action: CheckAction = CheckAction.checkin


class LogisticsAssignmentOut(BaseModel):
    guest_id: str
    checked_in: bool
    checked_in_at: Optional[datetime] = None
    checked_in_by: Optional[str] = None
    checked_out: bool
    checked_out_at: Optional[datetime] = None
    checked_out_by: Optional[str] = None
    guest: GuestOut

    model_config = {"from_attributes": True}


class LogisticsItemOut(BaseModel):
    id: str
    event_id: str
    type: LogisticsType
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    capacity: Optional[int] = None
    status: LogisticsStatus
    provider: Optional[str] = None
    contact_info: dict[str, Any] = {}
    cost: Optional[float] = None
    notes: Optional[str] = None
    extra: dict[str, Any] = {}
    created_by: str
    updated_by: Optional[str] = None
    assignments: list[LogisticsAssignmentOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
