"""Authentication API routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import get_current_user
from rsvp_app.models.user import User
from rsvp_app.schemas.auth import (
    ForgotPasswordOut, ForgotPasswordRequest, LoginRequest, PasswordChange, ProfileUpdate, RegisterRequest,
    ResetPasswordRequest, TokenOut,
)
from rsvp_app.schemas.common import Message
from rsvp_app.schemas.user import UserOut
from rsvp_app.services import audit_service, auth_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _token_response(user: User) -> dict:
    return {"access_token": auth_service.create_access_token(user.id), "token_type": "bearer", "user": user}


@router.post("/register", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account with the guest role and return a session token."""
    user = auth_service.register(db, **payload.model_dump())
    return _token_response(user)


@router.post("/login", response_model=TokenOut)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, payload.email, payload.password)
    return _token_response(user)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user


@router.put("/me", response_model=UserOut)
def update_me(payload: ProfileUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Update the caller's own profile. Roles and activation are admin-only."""
    updates = payload.model_dump(exclude_unset=True)
    if updates.get("email"):
        updates["email"] = updates["email"].lower()
        auth_service.ensure_unique_identity(db, None, updates["email"], exclude_id=user.id)
    before = audit_service.snapshot(user)
    for field, value in updates.items():
        setattr(user, field, value)
    audit_service.record(
        db, "update_profile", "user", user.id, actor=user, old_values=before, new_values=audit_service.snapshot(user),
    )
    db.commit()
    db.refresh(user)
    logger.info("User %s updated their profile", user.id)
    return user


@router.put("/password", response_model=Message)
def change_password(payload: PasswordChange, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    auth_service.change_password(db, user, payload.current_password, payload.new_password)
    return {"message": "Password updated"}


@router.post("/forgot-password", response_model=ForgotPasswordOut)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """Issue a one-time reset token.

    No mail transport ships with the API, so outside production the raw token
    is returned to the caller. In production the caller only gets a
    confirmation message.
    """
    raw = auth_service.start_password_reset(db, payload.email)
    if settings.is_production:
        logger.info("Password reset token issued for %s", payload.email)
        return {"message": "Password reset instructions have been sent"}
    return {"message": "Password reset token created", "reset_token": raw}


@router.put("/reset-password/{token}", response_model=TokenOut)
def reset_password(token: str, payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = auth_service.finish_password_reset(db, token, payload.password)
    return _token_response(user)
