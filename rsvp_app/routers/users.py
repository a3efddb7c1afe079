"""User administration API routes (admin only)."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rsvp_app.config import settings
from rsvp_app.database import get_db
from rsvp_app.dependencies import require_role
from rsvp_app.models.user import RoleName, User
from rsvp_app.schemas.common import Page
from rsvp_app.schemas.user import RoleOut, UserCreate, UserOut, UserRolesUpdate, UserUpdate
from rsvp_app.services import user_service
from rsvp_app.services.common import paginate

logger = logging.getLogger(__name__)
router = APIRouter()

admin_only = require_role(RoleName.admin)


@router.get("/roles", response_model=list[RoleOut])
def list_roles(db: Session = Depends(get_db), _: User = Depends(admin_only)):
    return user_service.list_roles(db)


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db), actor: User = Depends(admin_only)):
    """Create a user with an explicit set of roles."""
    return user_service.create_user(db, payload.model_dump(), actor)


@router.get("/", response_model=Page[UserOut])
def list_users(
    search: Optional[str] = Query(None),
    role: Optional[RoleName] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: User = Depends(admin_only),
):
    return paginate(user_service.list_users(db, search, role, is_active), page, limit)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db), _: User = Depends(admin_only)):
    return user_service.get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db), actor: User = Depends(admin_only)):
    """Partial update, including password and activation."""
    user = user_service.get_user(db, user_id)
    return user_service.update_user(db, user, payload.model_dump(exclude_unset=True), actor)


@router.put("/{user_id}/toggle-active", response_model=UserOut)
def toggle_active(user_id: str, db: Session = Depends(get_db), actor: User = Depends(admin_only)):
    user = user_service.get_user(db, user_id)
    return user_service.toggle_active(db, user, actor)


@router.put("/{user_id}/roles", response_model=UserOut)
def set_roles(user_id: str, payload: UserRolesUpdate, db: Session = Depends(get_db), actor: User = Depends(admin_only)):
    user = user_service.get_user(db, user_id)
    return user_service.set_roles(db, user, payload.roles, actor)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, db: Session = Depends(get_db), actor: User = Depends(admin_only)):
    user = user_service.get_user(db, user_id)
    user_service.delete_user(db, user, actor)
