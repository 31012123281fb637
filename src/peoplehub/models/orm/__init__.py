"""SQLAlchemy ORM models package."""

from peoplehub.models.orm.absence_request import AbsenceRequestORM
from peoplehub.models.orm.base import Base
from peoplehub.models.orm.feedback import FeedbackORM
from peoplehub.models.orm.user import UserORM

__all__ = [
    "Base",
    "UserORM",
    "FeedbackORM",
    "AbsenceRequestORM",
]
