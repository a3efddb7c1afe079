"""AuditLog ORM model — append-only record of who changed what.

Rows are written by ``audit_service.record`` in the same transaction as the
change they describe. The mapper refuses to flush an UPDATE or DELETE for an
AuditLog instance; old rows can only be purged in bulk by an admin, which goes
through a Core ``delete()`` statement rather than the session.
"""
import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text, event
from sqlalchemy.sql import func

from rsvp_app.database import Base


class AuditLogImmutableError(Exception):
    """Raised when something tries to modify or delete a written audit entry."""


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(50), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False, index=True)
    entity_id = Column(String(36), nullable=True, index=True)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    extra = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


@event.listens_for(AuditLog, "before_update")
def _refuse_update(mapper, connection, target):
    raise AuditLogImmutableError("Audit log entries cannot be modified")


@event.listens_for(AuditLog, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise AuditLogImmutableError("Audit log entries cannot be deleted")
