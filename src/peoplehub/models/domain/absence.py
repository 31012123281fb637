"""Absence request domain model."""

from datetime import date
from enum import StrEnum
from typing import Any, ClassVar
from uuid import UUID, uuid4

from peoplehub.exceptions import AbsenceStatusError
from peoplehub.models.domain.base import SoftDeletableEntity, require_text, utcnow
from peoplehub.models.domain.date_range import DateRange, check_bounds

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500


class AbsenceStatus(StrEnum):
    """Absence request status. APPROVED and REJECTED are terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Statuses that hold the calendar for overlap purposes
BLOCKING_STATUSES = frozenset({AbsenceStatus.PENDING, AbsenceStatus.APPROVED})


def _validate_reason(reason: str | None) -> None:
    require_text(
        reason,
        "reason",
        "Absence reason",
        min_length=REASON_MIN_LENGTH,
        max_length=REASON_MAX_LENGTH,
    )


class AbsenceRequest(SoftDeletableEntity):
    """Claim on a contiguous inclusive date range for one user."""

    entity_name: ClassVar[str] = "Absence request"

    organization_id: UUID
    user_id: UUID
    start_date: date
    end_date: date
    reason: str
    status: AbsenceStatus = AbsenceStatus.PENDING

    @classmethod
    def create(
        cls,
        organization_id: UUID,
        user_id: UUID,
        date_range: DateRange,
        reason: str,
        id: UUID | None = None,
    ) -> "AbsenceRequest":
        """Create a new pending absence request.

        Raises:
            InvalidDateRangeError: If the range is inverted or too long
            ValidationError: If the reason length is out of bounds
        """
        check_bounds(date_range.start, date_range.end)
        _validate_reason(reason)
        now = utcnow()
        return cls(
            id=id or uuid4(),
            organization_id=organization_id,
            user_id=user_id,
            start_date=date_range.start,
            end_date=date_range.end,
            reason=reason,
            status=AbsenceStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def reconstitute(cls, data: dict[str, Any]) -> "AbsenceRequest":
        """Rebuild an absence request from storage without validation."""
        values = dict(data)
        values["status"] = AbsenceStatus(values["status"])
        return cls.model_construct(**values)

    @property
    def date_range(self) -> DateRange:
        return DateRange.model_construct(start=self.start_date, end=self.end_date)

    def is_pending(self) -> bool:
        return self.status == AbsenceStatus.PENDING

    def is_approved(self) -> bool:
        return self.status == AbsenceStatus.APPROVED

    def is_rejected(self) -> bool:
        return self.status == AbsenceStatus.REJECTED

    def blocks_calendar(self) -> bool:
        """Live and pending or approved."""
        return not self.is_deleted() and self.status in BLOCKING_STATUSES

    def overlaps_with(self, other: "AbsenceRequest") -> bool:
        """Check whether another request for the same user collides with this one."""
        if self.user_id != other.user_id:
            return False
        if self.id == other.id:
            return False
        if not other.blocks_calendar():
            return False
        return self.date_range.overlaps(other.date_range)

    def _transition(self, action: str, target: AbsenceStatus) -> None:
        self._ensure_not_deleted(action)
        if self.status != AbsenceStatus.PENDING:
            raise AbsenceStatusError(action, self.status)
        self.status = target
        self._touch()

    def approve(self) -> None:
        self._transition("approve", AbsenceStatus.APPROVED)

    def reject(self) -> None:
        self._transition("reject", AbsenceStatus.REJECTED)

    def reschedule(self, date_range: DateRange, reason: str | None = None) -> None:
        """Change the dates (and optionally the reason) of a pending request."""
        self._ensure_not_deleted("edit")
        if not self.is_pending():
            raise AbsenceStatusError("edit", self.status)
        check_bounds(date_range.start, date_range.end)
        if reason is not None:
            _validate_reason(reason)
            self.reason = reason
        self.start_date = date_range.start
        self.end_date = date_range.end
        self._touch()

    def soft_delete(self) -> None:
        self._ensure_not_deleted("delete")
        if not self.is_pending():
            raise AbsenceStatusError("delete", self.status)
        self._mark_deleted()

    def working_days(self) -> int:
        return self.date_range.working_days()

    def total_days(self) -> int:
        return self.date_range.duration_in_days()

    def to_object(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "user_id": self.user_id,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "reason": self.reason,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }
