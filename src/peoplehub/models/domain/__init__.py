"""Domain models package."""

from peoplehub.models.domain.absence import AbsenceRequest, AbsenceStatus
from peoplehub.models.domain.actor import Actor
from peoplehub.models.domain.date_range import DateRange
from peoplehub.models.domain.email import Email
from peoplehub.models.domain.feedback import Feedback
from peoplehub.models.domain.role import Role
from peoplehub.models.domain.user import User

__all__ = [
    "AbsenceRequest",
    "AbsenceStatus",
    "Actor",
    "DateRange",
    "Email",
    "Feedback",
    "Role",
    "User",
]
