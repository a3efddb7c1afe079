"""Authentication, JWT sessions, password reset and role checks."""
import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Iterable, Optional

import jwt
from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.models.user import Role, RoleName, User
from rsvp_app.services import audit_service, settings_service
from rsvp_app.services.common import as_utc, utcnow

logger = logging.getLogger(__name__)

# Lowest to highest. vendor sits outside the ladder.
ROLE_HIERARCHY = (
    RoleName.guest.value,
    RoleName.hospitality.value,
    RoleName.event_host.value,
    RoleName.event_manager.value,
    RoleName.admin.value,
)

ROLE_DESCRIPTIONS = {
    RoleName.admin: "Full access to every resource and system setting",
    RoleName.event_manager: "Manages all events, guests and notifications",
    RoleName.event_host: "Creates and runs their own events",
    RoleName.guest: "Basic account",
    RoleName.hospitality: "Checks guests in and out at the venue",
    RoleName.vendor: "External supplier with limited access",
}


def has_permission(user_roles: Iterable[str], required: str) -> bool:
    """True if any of ``user_roles`` satisfies ``required``.

    admin satisfies everything. Inside the hierarchy a role satisfies any
    requirement at or below its own rank. Roles outside the hierarchy only
    satisfy an exact match, and an unknown requirement only admin.
    """
    roles = {getattr(r, "value", r) for r in user_roles}
    required = getattr(required, "value", required)
    if RoleName.admin.value in roles:
        return True
    if required in roles:
        return True
    if required not in ROLE_HIERARCHY:
        return False
    needed_rank = ROLE_HIERARCHY.index(required)
    return any(r in ROLE_HIERARCHY and ROLE_HIERARCHY.index(r) >= needed_rank for r in roles)


def get_roles(db: Session, names: Iterable[RoleName]) -> list[Role]:
    """Load Role rows by name, creating any that don't exist yet."""
    roles = []
    for name in dict.fromkeys(RoleName(n) for n in names):
        role = db.query(Role).filter(Role.name == name).first()
        if role is None:
            role = Role(name=name, description=ROLE_DESCRIPTIONS[name], permissions={})
            db.add(role)
            db.flush()
            logger.info("Created role %s", name.value)
        roles.append(role)
    return roles


def create_access_token(user_id: str) -> str:
    now = utcnow()
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the user id carried by a valid token; 401 otherwise."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return subject


def ensure_unique_identity(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[str] = None) -> None:
    """409 if another user already holds the username or email."""
    clauses = []
    if username:
        clauses.append(User.username == username)
    if email:
        clauses.append(User.email == email)
    if not clauses:
        return
    query = db.query(User).filter(or_(*clauses))
    if exclude_id:
        query = query.filter(User.id != exclude_id)
    existing = query.first()
    if existing is None:
        return
    field = "Username" if username and existing.username == username else "Email"
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{field} is already registered")


def register(db: Session, username: str, email: str, password: str, **profile) -> User:
    """Create a self-registered account with the guest role."""
    if not settings_service.get_value(db, "security")["allow_user_registration"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Registration is disabled")
    email = email.lower()
    ensure_unique_identity(db, username, email)
    user = User(username=username, email=email, **profile)
    user.password = password
    user.roles = get_roles(db, [RoleName.guest])
    user.last_login = utcnow()
    db.add(user)
    db.flush()
    audit_service.record(db, "register", "user", user.id, actor=user, new_values=audit_service.snapshot(user))
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.username, user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.lower()).first()
    if user is None or not user.check_password(password):
        logger.warning("Failed login for %s", email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        logger.warning("Login refused for deactivated user %s", user.id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is deactivated")
    user.last_login = utcnow()
    audit_service.record(db, "login", "user", user.id, actor=user)
    db.commit()
    db.refresh(user)
    logger.info("User %s logged in", user.id)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not user.check_password(current_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")
    user.password = new_password
    audit_service.record(db, "password_change", "user", user.id, actor=user)
    db.commit()
    logger.info("User %s changed their password", user.id)


def _hash_reset_token(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def start_password_reset(db: Session, email: str) -> str:
    """Store a hashed one-time token on the user and return the raw token."""
    user = db.query(User).filter(User.email == email.lower()).first()
    if user is None:
        raise HTTPException(status_code=404, detail="There is no user with that email")
    raw = secrets.token_hex(20)
    user.reset_password_token = _hash_reset_token(raw)
    user.reset_password_expire = utcnow() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    audit_service.record(db, "password_reset_request", "user", user.id, actor=user)
    db.commit()
    logger.info("Password reset requested for user %s", user.id)
    return raw


def finish_password_reset(db: Session, raw_token: str, new_password: str) -> User:
    hashed = _hash_reset_token(raw_token)
    user = db.query(User).filter(User.reset_password_token == hashed).first()
    if user is None or as_utc(user.reset_password_expire) is None or as_utc(user.reset_password_expire) < utcnow():
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")
    user.password = new_password
    user.reset_password_token = None
    user.reset_password_expire = None
    audit_service.record(db, "password_reset", "user", user.id, actor=user)
    db.commit()
    db.refresh(user)
    logger.info("Password reset completed for user %s", user.id)
    return user
