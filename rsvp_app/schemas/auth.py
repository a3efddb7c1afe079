"""Pydantic schemas for registration, login and password management."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from rsvp_app.schemas.common import PartialUpdate
from rsvp_app.schemas.user import UserOut


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class ProfileUpdate(PartialUpdate):
    not_null = ("email",)

    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=72)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ForgotPasswordOut(BaseModel):
    message: str
    # Only populated outside production, where no mail transport is configured.
    reset_token: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    password: str = Field(min_length=8, max_length=72)
