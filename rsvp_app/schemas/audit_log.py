"""Pydantic schemas for audit log entries."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel


class AuditLogOut(BaseModel):
    id: str
    user_id: Optional[str] = None
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    extra: Optional[dict[str, Any]] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PurgeResult(BaseModel):
    deleted: int
    cutoff: datetime
