"""Abstract ports the core depends on.

Persistence, transactions, identity, notifications and feedback polishing
are consumed through these protocols only. Adapters live in
``peoplehub.repositories``, ``peoplehub.database`` and
``peoplehub.services.notification_service``.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import date
from enum import StrEnum
from typing import Any, Protocol, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

from peoplehub.exceptions import DomainError, IdentityUnavailableError
from peoplehub.models.domain.absence import AbsenceRequest, AbsenceStatus
from peoplehub.models.domain.actor import Actor
from peoplehub.models.domain.date_range import DateRange
from peoplehub.models.domain.feedback import Feedback
from peoplehub.models.domain.user import User

logger = logging.getLogger(__name__)

R = TypeVar("R")


# =============================================================================
# Persistence
# =============================================================================


class AbsenceRepositoryPort(Protocol):
    async def get(self, absence_id: UUID) -> AbsenceRequest | None: ...

    async def find_overlapping(
        self,
        user_id: UUID,
        date_range: DateRange,
        exclude_id: UUID | None = None,
    ) -> list[AbsenceRequest]:
        """Live PENDING/APPROVED requests of the user whose range overlaps."""
        ...

    async def list_for_user(self, user_id: UUID) -> list[AbsenceRequest]: ...

    async def list_all(
        self,
        organization_id: UUID,
        status: AbsenceStatus | None = None,
        offset: int = 0,
        limit: int = 100,
    ) -> list[AbsenceRequest]: ...

    async def insert(self, absence: AbsenceRequest) -> None: ...

    async def update(self, absence: AbsenceRequest) -> None: ...


class UserRepositoryPort(Protocol):
    async def get(self, user_id: UUID) -> User | None: ...

    async def insert(self, user: User) -> None: ...

    async def update(self, user: User) -> None: ...


class FeedbackRepositoryPort(Protocol):
    async def get(self, feedback_id: UUID) -> Feedback | None: ...

    async def list_for_receiver(self, user_id: UUID) -> list[Feedback]: ...

    async def list_from_giver(self, user_id: UUID) -> list[Feedback]: ...

    async def insert(self, feedback: Feedback) -> None: ...

    async def update(self, feedback: Feedback) -> None: ...


class UnitOfWork(Protocol):
    """Repositories bound to one transaction."""

    absences: AbsenceRepositoryPort
    users: UserRepositoryPort
    feedback: FeedbackRepositoryPort


class TransactionManager(Protocol):
    """Runs a unit of work in a transaction, committing on success.

    ``run_serializable`` runs under SERIALIZABLE isolation and raises
    ``SerializationConflict`` or ``TransactionTimeout`` when the attempt is
    aborted by the database; other exceptions propagate after rollback.
    """

    async def run(self, fn: Callable[[UnitOfWork], Awaitable[R]]) -> R: ...

    async def run_serializable(self, fn: Callable[[UnitOfWork], Awaitable[R]]) -> R: ...


# =============================================================================
# Identity
# =============================================================================


class IdentityProvider(Protocol):
    async def current_actor(self) -> Actor: ...


async def resolve_actor(provider: IdentityProvider) -> Actor:
    """Resolve the calling actor.

    Raises:
        IdentityUnavailableError: If the provider fails for any reason other
            than a domain error
    """
    try:
        return await provider.current_actor()
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Identity provider failed: {type(e).__name__}")
        raise IdentityUnavailableError(type(e).__name__) from e


# =============================================================================
# Notifications
# =============================================================================


class NotificationType(StrEnum):
    """Events delivered through the notification port."""

    ABSENCE_REQUESTED = "absence_requested"
    ABSENCE_RESCHEDULED = "absence_rescheduled"
    ABSENCE_APPROVED = "absence_approved"
    ABSENCE_REJECTED = "absence_rejected"
    ABSENCE_CANCELLED = "absence_cancelled"
    FEEDBACK_RECEIVED = "feedback_received"


class NotificationEvent(BaseModel):
    """Event emitted after a committed mutation.

    ``subject_id`` is the absence request or feedback the event is about and
    ``user_id`` the user it concerns. Dates are set for absence events only.
    """

    type: NotificationType
    subject_id: UUID
    user_id: UUID
    actor_id: UUID
    organization_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class Notifier(Protocol):
    async def notify(self, event: NotificationEvent) -> None: ...


# =============================================================================
# Feedback polishing
# =============================================================================


class FeedbackPolisher(Protocol):
    async def polish(self, content: str) -> str:
        """Return a rewritten, more constructive version of the content."""
        ...
