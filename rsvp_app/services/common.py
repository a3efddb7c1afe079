"""Small helpers shared by the service modules."""
from datetime import datetime, timezone
from typing import Optional, TypeVar

from fastapi import HTTPException
from sqlalchemy.orm import Query, Session

from rsvp_app.config import settings

ModelT = TypeVar("ModelT")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC so they compare with aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_or_404(db: Session, model: type[ModelT], object_id: str, label: str) -> ModelT:
    obj = db.get(model, object_id)
    if obj is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return obj


def paginate(query: Query, page: int, limit: int) -> dict:
    """Apply page/limit to a query and wrap the result in the list envelope."""
    limit = max(1, min(limit, settings.MAX_PAGE_SIZE))
    page = max(1, page)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return {"total": total, "page": page, "limit": limit, "items": items}
