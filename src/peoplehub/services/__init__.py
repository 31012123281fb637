"""Application services."""

from peoplehub.services.absence_service import AbsenceService, AbsenceStatistics
from peoplehub.services.feedback_service import FeedbackService
from peoplehub.services.notification_service import LoggingNotifier, WebhookNotifier
from peoplehub.services.user_service import UserService

__all__ = [
    "AbsenceService",
    "AbsenceStatistics",
    "FeedbackService",
    "LoggingNotifier",
    "UserService",
    "WebhookNotifier",
]
