"""Guest, EventGuest and GuestGroup ORM models."""
import enum
import uuid

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, String, Table, Text, UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.orm import relationship

from rsvp_app.database import Base, TimestampMixin
from rsvp_app.models.types import JSONEncodedText


class Gender(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"
    prefer_not_to_say = "prefer_not_to_say"


class InvitationMethod(str, enum.Enum):
    email = "email"
    sms = "sms"
    whatsapp = "whatsapp"
    postal = "postal"
    other = "other"


guest_group_members = Table(
    "guest_group_members",
    Base.metadata,
    Column("group_id", String(36), ForeignKey("guest_groups.id", ondelete="CASCADE"), primary_key=True),
    Column("guest_id", String(36), ForeignKey("guests.id", ondelete="CASCADE"), primary_key=True),
)


class Guest(TimestampMixin, Base):
    __tablename__ = "guests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True, index=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(SAEnum(Gender), nullable=True)
    is_vip = Column(Boolean, nullable=False, default=False, index=True)
    notes = Column(Text, nullable=True)
    tags = Column(JSONEncodedText(list), nullable=False, default=list)
    custom_fields = Column(JSONEncodedText(dict), nullable=False, default=dict)

    invitations = relationship("EventGuest", back_populates="guest", cascade="all, delete-orphan", passive_deletes=True)
    rsvps = relationship("RSVP", back_populates="guest", cascade="all, delete-orphan", passive_deletes=True)
    groups = relationship("GuestGroup", secondary=guest_group_members, back_populates="members")
    logistics_assignments = relationship(
        "LogisticsAssignment", back_populates="guest", cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class EventGuest(TimestampMixin, Base):
    """Invitation and check-in lifecycle of one guest on one event."""

    __tablename__ = "event_guests"
    __table_args__ = (UniqueConstraint("event_id", "guest_id", name="uq_event_guests_event_guest"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    guest_id = Column(String(36), ForeignKey("guests.id", ondelete="CASCADE"), nullable=False)
    invitation_sent = Column(Boolean, nullable=False, default=False, index=True)
    invitation_sent_at = Column(DateTime(timezone=True), nullable=True)
    invitation_method = Column(SAEnum(InvitationMethod), nullable=True)
    is_confirmed = Column(Boolean, nullable=False, default=False, index=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    table_number = Column(String(20), nullable=True)
    seat_number = Column(String(20), nullable=True)
    check_in_time = Column(DateTime(timezone=True), nullable=True)
    check_out_time = Column(DateTime(timezone=True), nullable=True)

    event = relationship("Event", back_populates="guest_list")
    guest = relationship("Guest", back_populates="invitations", lazy="joined")


class GuestGroup(TimestampMixin, Base):
    __tablename__ = "guest_groups"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(150), nullable=False, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    event = relationship("Event", back_populates="guest_groups")
    members = relationship("Guest", secondary=guest_group_members, back_populates="groups", lazy="selectin")
