"""Pydantic schemas for Users and Roles."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from rsvp_app.models.user import RoleName
from rsvp_app.schemas.common import PartialUpdate


class RoleOut(BaseModel):
    id: str
    name: RoleName
    description: Optional[str] = None
    is_active: bool

    model_config = {"from_attributes": True}


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
    roles: list[RoleName] = [RoleName.guest]


class UserUpdate(PartialUpdate):
    not_null = ("username", "email", "password", "is_active")

    username: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=72)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    is_active: Optional[bool] = None


class UserRolesUpdate(BaseModel):
    roles: list[RoleName] = Field(min_length=1)


class UserOut(BaseModel):
    id: str
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    roles: list[RoleOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
