"""RSVP and RSVPPlusOne ORM models."""
import enum
import uuid

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.orm import relationship

from rsvp_app.database import Base, TimestampMixin


class RSVPStatus(str, enum.Enum):
    pending = "pending"
    attending = "attending"
    not_attending = "not_attending"
    maybe = "maybe"


class RSVP(TimestampMixin, Base):
    __tablename__ = "rsvps"
    __table_args__ = (
        UniqueConstraint("event_id", "guest_id", name="uq_rsvps_event_guest"),
        CheckConstraint("number_of_guests >= 1", name="ck_rsvps_number_of_guests"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    guest_id = Column(String(36), ForeignKey("guests.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(64), nullable=False, unique=True)
    status = Column(SAEnum(RSVPStatus), nullable=False, default=RSVPStatus.pending, index=True)
    response_date = Column(DateTime(timezone=True), nullable=True)
    number_of_guests = Column(Integer, nullable=False, default=1)
    dietary_restrictions = Column(Text, nullable=True)
    special_requirements = Column(Text, nullable=True)
    message = Column(Text, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)

    event = relationship("Event", back_populates="rsvps")
    guest = relationship("Guest", back_populates="rsvps", lazy="joined")
    plus_ones = relationship(
        "RSVPPlusOne", back_populates="rsvp", cascade="all, delete-orphan", passive_deletes=True, lazy="selectin",
    )


class RSVPPlusOne(TimestampMixin, Base):
    __tablename__ = "rsvp_plus_ones"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    rsvp_id = Column(String(36), ForeignKey("rsvps.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    dietary_restrictions = Column(Text, nullable=True)
    special_requirements = Column(Text, nullable=True)
    is_attending = Column(Boolean, nullable=False, default=True)

    rsvp = relationship("RSVP", back_populates="plus_ones")
