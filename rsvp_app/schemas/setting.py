"""Pydantic schemas for system settings."""
from __future__ import annotations
from typing import Any, Optional
from pydantic import BaseModel, Field

from rsvp_app.schemas.common import PartialUpdate


class SettingOut(BaseModel):
    key: str
    value: Any = None


class EmailTemplateUpdate(PartialUpdate):
    not_null = ("subject", "content", "is_active")

    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None
