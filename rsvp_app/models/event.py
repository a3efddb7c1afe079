"""Event and EventVenue ORM models."""
import enum
import uuid

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, Enum as SAEnum
from sqlalchemy.orm import relationship

from rsvp_app.database import Base, TimestampMixin


class EventType(str, enum.Enum):
    wedding = "wedding"
    corporate = "corporate"
    birthday = "birthday"
    other = "other"


class EventStatus(str, enum.Enum):
    draft = "draft"
    published = "published"
    cancelled = "cancelled"
    completed = "completed"


class RecurrencePattern(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


class Event(TimestampMixin, Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(SAEnum(EventType), nullable=False, default=EventType.wedding, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.draft, index=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_pattern = Column(SAEnum(RecurrencePattern), nullable=True)
    max_attendees = Column(Integer, nullable=True)
    is_private = Column(Boolean, nullable=False, default=False)
    cover_image = Column(String(500), nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    organizer = relationship("User", back_populates="events")
    venues = relationship(
        "EventVenue", back_populates="event", cascade="all, delete-orphan", passive_deletes=True,
        order_by="desc(EventVenue.is_primary)",
    )
    guest_list = relationship("EventGuest", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)
    rsvps = relationship("RSVP", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)
    guest_groups = relationship("GuestGroup", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)
    notifications = relationship("Notification", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)
    logistics_items = relationship(
        "LogisticsItem", back_populates="event", cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def primary_venue(self):
        for venue in self.venues:
            if venue.is_primary:
                return venue
        return self.venues[0] if self.venues else None


class EventVenue(TimestampMixin, Base):
    __tablename__ = "event_venues"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False, index=True)
    capacity = Column(Integer, nullable=True)
    contact_name = Column(String(150), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    contact_email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)

    event = relationship("Event", back_populates="venues")
