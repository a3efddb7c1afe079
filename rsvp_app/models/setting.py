"""AppSetting ORM model — key/value store behind /api/settings."""
from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.sql import func

from rsvp_app.database import Base


class AppSetting(Base):
    __tablename__ = "app_settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
