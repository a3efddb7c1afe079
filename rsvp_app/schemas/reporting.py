"""Pydantic schemas for reporting and dashboard responses."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class RSVPStats(BaseModel):
    event_id: str
    event_name: str
    total_invited: int
    attending: int
    not_attending: int
    maybe: int
    pending: int
    plus_ones: int
    expected_attendees: int
    total_responded: int
    response_rate: float


class GroupAttendance(BaseModel):
    group_id: str
    group_name: str
    total_assigned: int
    checked_in: int
    check_in_rate: float


class AttendanceStats(BaseModel):
    event_id: str
    event_name: str
    total_expected: int
    total_attended: int
    checked_out: int
    attendance_rate: float
    by_group: list[GroupAttendance] = []


class Demographics(BaseModel):
    event_id: str
    total_guests: int
    gender: dict[str, int]
    age_groups: dict[str, int]
    locations: dict[str, int]
    dietary_preferences: dict[str, int]


class EventComparisonRow(BaseModel):
    event_id: str
    event_name: str
    start_date: datetime
    total_invited: int
    attending: int
    not_attending: int
    maybe: int
    pending: int
    response_rate: float
    checked_in: int
    attendance_rate: float


class UpcomingEvent(BaseModel):
    id: str
    name: str
    start_date: datetime
    status: str
    location: Optional[str] = None
    invited: int
    confirmed: int


class DashboardStats(BaseModel):
    total_events: int
    active_events: int
    total_guests: int
    confirmed_guests: int
    pending_guests: int
    upcoming_events: list[UpcomingEvent] = []
