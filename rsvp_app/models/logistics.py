"""LogisticsItem and LogisticsAssignment ORM models."""
import enum
import uuid

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import relationship

from rsvp_app.database import Base, TimestampMixin
from rsvp_app.models.types import JSONEncodedText


class LogisticsType(str, enum.Enum):
    accommodation = "accommodation"
    transportation = "transportation"
    equipment = "equipment"
    catering = "catering"
    venue = "venue"
    other = "other"


class LogisticsStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class LogisticsItem(TimestampMixin, Base):
    """A room block, shuttle, equipment rental or similar arrangement for an event."""

    __tablename__ = "logistics_items"
    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity >= 1", name="ck_logistics_items_capacity"),
        CheckConstraint("cost IS NULL OR cost >= 0", name="ck_logistics_items_cost"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SAEnum(LogisticsType), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    capacity = Column(Integer, nullable=True)
    status = Column(SAEnum(LogisticsStatus), nullable=False, default=LogisticsStatus.pending, index=True)
    provider = Column(String(255), nullable=True)
    contact_info = Column(JSONEncodedText(dict), nullable=False, default=dict)
    cost = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    extra = Column(JSONEncodedText(dict), nullable=False, default=dict)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    updated_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    event = relationship("Event", back_populates="logistics_items")
    assignments = relationship(
        "LogisticsAssignment",
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="LogisticsAssignment.created_at",
    )


class LogisticsAssignment(TimestampMixin, Base):
    """One guest booked onto a logistics item, with pick-up / drop-off style check-in."""

    __tablename__ = "logistics_assignments"
    __table_args__ = (UniqueConstraint("item_id", "guest_id", name="uq_logistics_assignments_item_guest"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    item_id = Column(String(36), ForeignKey("logistics_items.id", ondelete="CASCADE"), nullable=False, index=True)
    guest_id = Column(String(36), ForeignKey("guests.id", ondelete="CASCADE"), nullable=False, index=True)
    checked_in = Column(Boolean, nullable=False, default=False)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    checked_in_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    checked_out = Column(Boolean, nullable=False, default=False)
    checked_out_at = Column(DateTime(timezone=True), nullable=True)
    checked_out_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    item = relationship("LogisticsItem", back_populates="assignments")
    guest = relationship("Guest", back_populates="logistics_assignments", lazy="joined")
