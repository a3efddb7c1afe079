"""Pydantic schemas for RSVPs and plus-ones."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from rsvp_app.models.rsvp import RSVPStatus
from rsvp_app.schemas.common import PartialUpdate
from rsvp_app.schemas.guest import GuestOut


class PlusOneCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    dietary_restrictions: Optional[str] = None
    special_requirements: Optional[str] = None
    is_attending: bool = True


class PlusOneOut(BaseModel):
    id: str
    rsvp_id: str
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    dietary_restrictions: Optional[str] = None
    special_requirements: Optional[str] = None
    is_attending: bool

    model_config = {"from_attributes": True}


class RSVPCreate(BaseModel):
    guest_id: str
    status: RSVPStatus = RSVPStatus.pending
    number_of_guests: int = Field(1, ge=1)
    dietary_restrictions: Optional[str] = None
    special_requirements: Optional[str] = None
    message: Optional[str] = None
    plus_ones: list[PlusOneCreate] = []


class RSVPUpdate(PartialUpdate):
    not_null = ("status", "number_of_guests")

    status: Optional[RSVPStatus] = None
    number_of_guests: Optional[int] = Field(None, ge=1)
    dietary_restrictions: Optional[str] = None
    special_requirements: Optional[str] = None
    message: Optional[str] = None


class RSVPRespond(BaseModel):
    """Body a guest submits through their RSVP link. Plus-ones, when given, replace the stored list."""

    status: RSVPStatus
    number_of_guests: int = Field(1, ge=1)
    dietary_restrictions: Optional[str] = None
    special_requirements: Optional[str] = None
    message: Optional[str] = None
    plus_ones: Optional[list[PlusOneCreate]] = None


class RSVPOut(BaseModel):
    id: str
    event_id: str
    guest_id: str
    token: str
    status: RSVPStatus
    response_date: Optional[datetime] = None
    number_of_guests: int
    dietary_restrictions: Optional[str] = None
    special_requirements: Optional[str] = None
    message: Optional[str] = None
    guest: GuestOut
    plus_ones: list[PlusOneOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RSVPPublicOut(BaseModel):
    """What an unauthenticated guest sees when opening their RSVP link."""

    event_name: str
    event_start: datetime
    event_end: datetime
    event_timezone: str
    venue_name: Optional[str] = None
    guest_first_name: str
    status: RSVPStatus
    number_of_guests: int
    dietary_restrictions: Optional[str] = None
    special_requirements: Optional[str] = None
    message: Optional[str] = None
    plus_ones: list[PlusOneOut] = []
