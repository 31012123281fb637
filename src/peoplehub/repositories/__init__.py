"""Repositories package."""

from peoplehub.repositories.absence_repository import AbsenceRepository
from peoplehub.repositories.base import BaseRepository
from peoplehub.repositories.feedback_repository import FeedbackRepository
from peoplehub.repositories.unit_of_work import SqlAlchemyUnitOfWork
from peoplehub.repositories.user_repository import UserRepository

__all__ = [
    "AbsenceRepository",
    "BaseRepository",
    "FeedbackRepository",
    "SqlAlchemyUnitOfWork",
    "UserRepository",
]
