"""FastAPI dependencies for authentication and role checks."""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from rsvp_app.database import get_db
from rsvp_app.models.user import RoleName, User
from rsvp_app.services.auth_service import decode_access_token, has_permission

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _user_from_credentials(db: Session, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[User]:
    if credentials is None:
        return None
    user = db.get(User, decode_access_token(credentials.credentials))
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    user = _user_from_credentials(db, credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous requests get None instead of 401."""
    return _user_from_credentials(db, credentials)


def require_role(role: RoleName):
    """Dependency factory: the caller must hold ``role`` or something above it."""

    def _checker(user: User = Depends(get_current_user)) -> User:
        if not has_permission(user.role_names, role.value):
            logger.warning("User %s denied: requires role %s", user.id, role.value)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role {role.value}",
            )
        return user

    return _checker
