"""Pydantic schemas for Guests, event guest links and guest groups."""
from __future__ import annotations
from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field

from rsvp_app.models.guest import Gender, InvitationMethod
from rsvp_app.schemas.common import PartialUpdate


class GuestCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    is_vip: bool = False
    notes: Optional[str] = None
    tags: list[str] = []
    custom_fields: dict[str, Any] = {}


class GuestUpdate(PartialUpdate):
    not_null = ("first_name", "is_vip", "tags", "custom_fields")

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    is_vip: Optional[bool] = None
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    custom_fields: Optional[dict[str, Any]] = None


class GuestOut(BaseModel):
    id: str
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    is_vip: bool
    notes: Optional[str] = None
    tags: list[str] = []
    custom_fields: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventGuestInvite(BaseModel):
    guest_id: str
    notes: Optional[str] = None
    table_number: Optional[str] = None
    seat_number: Optional[str] = None


class InvitationSend(BaseModel):
    method: InvitationMethod = InvitationMethod.email


class SeatingUpdate(BaseModel):
    table_number: Optional[str] = None
    seat_number: Optional[str] = None


class EventGuestOut(BaseModel):
    id: str
    event_id: str
    guest_id: str
    invitation_sent: bool
    invitation_sent_at: Optional[datetime] = None
    invitation_method: Optional[InvitationMethod] = None
    is_confirmed: bool
    confirmed_at: Optional[datetime] = None
    notes: Optional[str] = None
    table_number: Optional[str] = None
    seat_number: Optional[str] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    guest: GuestOut

    model_config = {"from_attributes": True}


class GuestEventOut(BaseModel):
    """One event a guest is linked to, seen from the guest side."""

    event_id: str
    event_name: str
    start_date: datetime
    is_confirmed: bool
    check_in_time: Optional[datetime] = None


class GuestGroupCreate(BaseModel):
    event_id: str
    name: str = Field(min_length=1, max_length=150)
    description: Optional[str] = None
    is_active: bool = True
    guest_ids: list[str] = []


class GuestGroupUpdate(PartialUpdate):
    not_null = ("name", "is_active")

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class GroupMembersAdd(BaseModel):
    guest_ids: list[str] = Field(min_length=1)


class GuestGroupOut(BaseModel):
    id: str
    event_id: str
    name: str
    description: Optional[str] = None
    is_active: bool
    members: list[GuestOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
