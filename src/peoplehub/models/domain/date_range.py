"""Inclusive calendar date range value object."""

from datetime import date, timedelta

from pydantic import BaseModel, ConfigDict, model_validator

from peoplehub.exceptions import InvalidDateRangeError

MAX_DURATION_DAYS = 365


def check_bounds(start: date, end: date) -> None:
    """Raise ``InvalidDateRangeError`` unless ``start..end`` is a valid range."""
    if end < start:
        raise InvalidDateRangeError("end date must be on or after start date")
    if (end - start).days + 1 > MAX_DURATION_DAYS:
        raise InvalidDateRangeError(f"date range cannot exceed {MAX_DURATION_DAYS} days")


class DateRange(BaseModel):
    """Immutable inclusive range of calendar days."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @classmethod
    def create(cls, start: date, end: date) -> "DateRange":
        """Create a validated date range.

        Raises:
            InvalidDateRangeError: If end precedes start or the range is too long
        """
        return cls(start=start, end=end)

    @model_validator(mode="after")
    def validate_bounds(self) -> "DateRange":
        check_bounds(self.start, self.end)
        return self

    def overlaps(self, other: "DateRange") -> bool:
        """Check whether two inclusive ranges share at least one day."""
        return self.start <= other.end and other.start <= self.end

    def includes(self, day: date) -> bool:
        return self.start <= day <= self.end

    def is_in_past(self, today: date) -> bool:
        return self.start < today

    def duration_in_days(self) -> int:
        """Number of calendar days, both ends included."""
        return (self.end - self.start).days + 1

    def working_days(self) -> int:
        """Number of Monday-to-Friday days in the range."""
        count = 0
        current = self.start
        while current <= self.end:
            if current.weekday() < 5:
                count += 1
            current += timedelta(days=1)
        return count

    def __str__(self) -> str:
        return f"{self.start.isoformat()} to {self.end.isoformat()}"
