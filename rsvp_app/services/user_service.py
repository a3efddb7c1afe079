"""Admin user management."""
import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from rsvp_app.models.user import Role, RoleName, User
from rsvp_app.services import audit_service
from rsvp_app.services.auth_service import ensure_unique_identity, get_roles
from rsvp_app.services.common import get_or_404

logger = logging.getLogger(__name__)


def list_users(db: Session, search: Optional[str] = None, role: Optional[RoleName] = None, is_active: Optional[bool] = None):
    query = db.query(User)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            User.username.ilike(pattern),
            User.email.ilike(pattern),
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
        ))
    if role:
        query = query.filter(User.roles.any(Role.name == role))
    if is_active is not None:
        query = query.filter(User.is_active.is_(is_active))
    return query.order_by(User.username)


def get_user(db: Session, user_id: str) -> User:
    return get_or_404(db, User, user_id, "User")


def create_user(db: Session, data: dict[str, Any], actor: User) -> User:
    role_names = data.pop("roles")
    password = data.pop("password")
    data["email"] = data["email"].lower()
    ensure_unique_identity(db, data["username"], data["email"])
    user = User(**data)
    user.password = password
    user.roles = get_roles(db, role_names)
    db.add(user)
    db.flush()
    audit_service.record(
        db, "create", "user", user.id, actor=actor,
        new_values={**audit_service.snapshot(user), "roles": user.role_names},
    )
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s) with roles %s", user.username, user.id, ", ".join(user.role_names))
    return user


def update_user(db: Session, user: User, updates: dict[str, Any], actor: User) -> User:
    """Partial update. A new password is hashed; it never reaches the audit snapshot."""
    if "email" in updates and updates["email"]:
        updates["email"] = updates["email"].lower()
    ensure_unique_identity(db, updates.get("username"), updates.get("email"), exclude_id=user.id)
    if updates.get("is_active") is False and user.id == actor.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    before = audit_service.snapshot(user)
    password = updates.pop("password", None)
    for field, value in updates.items():
        setattr(user, field, value)
    if password:
        user.password = password
    new_values = audit_service.snapshot(user)
    if password:
        new_values["password_changed"] = True
    audit_service.record(db, "update", "user", user.id, actor=actor, old_values=before, new_values=new_values)
    db.commit()
    db.refresh(user)
    logger.info("Updated user %s", user.id)
    return user


def toggle_active(db: Session, user: User, actor: User) -> User:
    if user.id == actor.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
    user.is_active = not user.is_active
    audit_service.record(
        db, "toggle_active", "user", user.id, actor=actor,
        old_values={"is_active": not user.is_active}, new_values={"is_active": user.is_active},
    )
    db.commit()
    db.refresh(user)
    logger.info("User %s is now %s", user.id, "active" if user.is_active else "inactive")
    return user


def set_roles(db: Session, user: User, role_names: list[RoleName], actor: User) -> User:
    if user.id == actor.id and RoleName.admin not in role_names:
        raise HTTPException(status_code=400, detail="You cannot remove your own admin role")
    before = user.role_names
    user.roles = get_roles(db, role_names)
    audit_service.record(
        db, "set_roles", "user", user.id, actor=actor,
        old_values={"roles": before}, new_values={"roles": user.role_names},
    )
    db.commit()
    db.refresh(user)
    logger.info("User %s roles: %s", user.id, ", ".join(user.role_names))
    return user


def delete_user(db: Session, user: User, actor: User) -> None:
    if user.id == actor.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    before = audit_service.snapshot(user)
    user_id = user.id
    db.delete(user)
    audit_service.record(db, "delete", "user", user_id, actor=actor, old_values=before)
    db.commit()
    logger.info("Deleted user %s", user_id)


def list_roles(db: Session) -> list[Role]:
    """All fixed roles, creating rows for any not seeded yet."""
    roles = get_roles(db, list(RoleName))
    db.commit()
    return roles
