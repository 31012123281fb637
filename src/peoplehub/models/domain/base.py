"""Shared building blocks for domain entities."""

from datetime import datetime, timezone
from typing import ClassVar
from uuid import UUID

from pydantic import BaseModel

from peoplehub.exceptions import EntityDeletedError, ValidationError


def utcnow() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


def require_text(
    value: str | None,
    field: str,
    label: str,
    min_length: int = 1,
    max_length: int | None = None,
) -> None:
    """Validate the length of a text attribute.

    The lower bound is checked on the stripped value, the upper bound on the
    raw value.

    Raises:
        ValidationError: If the value is missing or outside the bounds
    """
    if value is None or len(value.strip()) < min_length:
        if min_length <= 1:
            raise ValidationError(f"{label} cannot be empty", field=field)
        raise ValidationError(f"{label} must be at least {min_length} characters", field=field)
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{label} cannot exceed {max_length} characters", field=field)


class SoftDeletableEntity(BaseModel):
    """Base for entities tombstoned through ``deleted_at``."""

    entity_name: ClassVar[str] = "Entity"

    id: UUID
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def _ensure_not_deleted(self, action: str) -> None:
        if self.is_deleted():
            raise EntityDeletedError(self.entity_name, self.id, action)

    def _touch(self) -> None:
        self.updated_at = utcnow()

    def _mark_deleted(self) -> None:
        now = utcnow()
        self.deleted_at = now
        self.updated_at = now
