"""Shared response envelopes and field types."""
from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, model_validator

T = TypeVar("T")


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# SQLite keeps wall-clock values only, so everything is stored as UTC.
UTCDateTime = Annotated[datetime, AfterValidator(_to_utc)]


class Page(BaseModel, Generic[T]):
    """One page of a list endpoint."""

    total: int
    page: int
    limit: int
    items: list[T]


class Message(BaseModel):
    message: str


class PartialUpdate(BaseModel):
    """Body of a partial update. Fields named in ``not_null`` may be left out but not set to null."""

    not_null: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def _reject_cleared_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            cleared = [name for name in cls.not_null if name in data and data[name] is None]
            if cleared:
                raise ValueError(f"{', '.join(cleared)} cannot be null")
        return data
