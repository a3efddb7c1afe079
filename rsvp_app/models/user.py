"""User and Role ORM models."""
import enum
import uuid

import bcrypt
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Table, Enum as SAEnum
from sqlalchemy.orm import relationship

from rsvp_app.database import Base, TimestampMixin


class RoleName(str, enum.Enum):
    admin = "admin"
    event_manager = "event_manager"
    event_host = "event_host"
    guest = "guest"
    hospitality = "hospitality"
    vendor = "vendor"


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", String(36), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(TimestampMixin, Base):
    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(SAEnum(RoleName), nullable=False, unique=True)
    description = Column(String(255), nullable=True)
    permissions = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)

    users = relationship("User", secondary=user_roles, back_populates="roles")


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    profile_image = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    reset_password_token = Column(String(64), nullable=True, index=True)
    reset_password_expire = Column(DateTime(timezone=True), nullable=True)

    roles = relationship("Role", secondary=user_roles, back_populates="users", lazy="selectin")
    events = relationship("Event", back_populates="organizer")

    @property
    def password(self):
        raise AttributeError("password is write-only; use check_password()")

    @password.setter
    def password(self, plaintext: str) -> None:
        self.password_hash = bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    def check_password(self, plaintext: str) -> bool:
        if not self.password_hash:
            return False
        return bcrypt.checkpw(plaintext.encode("utf-8"), self.password_hash.encode("utf-8"))

    @property
    def role_names(self) -> list[str]:
        return [role.name.value for role in self.roles]
