"""Absence booking service.

Creating or rescheduling a request runs the overlap check and the write in
one serializable transaction, so two requests submitted concurrently from
different processes can never both commit overlapping ranges for the same
user. Transactions aborted by the database are re-run a bounded number of
times before the caller gets a ``ConcurrentBookingError``.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import date
from typing import TypeVar
from uuid import UUID

from pydantic import BaseModel

from peoplehub.config import get_settings
from peoplehub.exceptions import (
    AbsenceDateConflictError,
    AbsenceNotFoundError,
    AbsenceSelfApprovalError,
    InvalidDateRangeError,
    UserNotFoundError,
)
from peoplehub.models.domain.absence import AbsenceRequest, AbsenceStatus
from peoplehub.models.domain.actor import Actor
from peoplehub.models.domain.date_range import DateRange
from peoplehub.ports import (
    NotificationEvent,
    NotificationType,
    Notifier,
    TransactionManager,
    UnitOfWork,
)
from peoplehub.security import permissions
from peoplehub.security.permissions import assert_permission
from peoplehub.services.notification_service import notify_safely
from peoplehub.utils.retry import retry_transaction

logger = logging.getLogger(__name__)

R = TypeVar("R")


class AbsenceStatistics(BaseModel):
    """Per-user absence counts."""

    user_id: UUID
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    approved_working_days: int = 0
    pending_working_days: int = 0


class AbsenceService:
    """Service for booking and reviewing absence requests."""

    def __init__(
        self,
        transactions: TransactionManager,
        notifier: Notifier | None = None,
        max_attempts: int | None = None,
        retry_base_delay: float | None = None,
        today: Callable[[], date] = date.today,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the service.

        Args:
            transactions: Transaction manager running units of work
            notifier: Receives events after commit (optional)
            max_attempts: Attempts per booking transaction, defaults to settings
            retry_base_delay: First retry delay in seconds, defaults to settings
            today: Clock returning the current date
            sleep: Sleep used between retries
        """
        if max_attempts is None or retry_base_delay is None:
            settings = get_settings()
            if max_attempts is None:
                max_attempts = settings.booking_max_attempts
            if retry_base_delay is None:
                retry_base_delay = settings.booking_retry_base_delay

        self.transactions = transactions
        self.notifier = notifier
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self.today = today
        self.sleep = sleep

    async def _run_booking(self, fn: Callable[[UnitOfWork], Awaitable[R]]) -> R:
        """Run a unit of work serializably with bounded retry."""
        return await retry_transaction(
            lambda: self.transactions.run_serializable(fn),
            max_attempts=self.max_attempts,
            base_delay=self.retry_base_delay,
            sleep=self.sleep,
        )

    def _validated_range(self, start_date: date, end_date: date) -> DateRange:
        date_range = DateRange.create(start_date, end_date)
        if date_range.is_in_past(self.today()):
            raise InvalidDateRangeError("start date cannot be in the past")
        return date_range

    async def _notify(self, event_type: NotificationType, absence: AbsenceRequest, actor: Actor) -> None:
        await notify_safely(
            self.notifier,
            NotificationEvent(
                type=event_type,
                subject_id=absence.id,
                user_id=absence.user_id,
                actor_id=actor.id,
                organization_id=absence.organization_id,
                start_date=absence.start_date,
                end_date=absence.end_date,
                data={"status": absence.status.value},
            ),
        )

    @staticmethod
    async def _ensure_no_conflict(
        uow: UnitOfWork,
        user_id: UUID,
        date_range: DateRange,
        exclude_id: UUID | None = None,
    ) -> None:
        conflicts = await uow.absences.find_overlapping(user_id, date_range, exclude_id=exclude_id)
        if conflicts:
            conflict = conflicts[0]
            raise AbsenceDateConflictError(conflict.id, conflict.start_date, conflict.end_date)

    @staticmethod
    async def _load(uow: UnitOfWork, absence_id: UUID) -> AbsenceRequest:
        absence = await uow.absences.get(absence_id)
        if absence is None:
            raise AbsenceNotFoundError(absence_id)
        return absence

    async def create_absence(
        self,
        actor: Actor,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> AbsenceRequest:
        """Book a new pending absence for the actor.

        Args:
            actor: Requesting user
            start_date: First day off
            end_date: Last day off (inclusive)
            reason: Reason for the absence

        Returns:
            Created absence request

        Raises:
            InvalidDateRangeError: If the range is invalid or starts in the past
            ValidationError: If the reason length is out of bounds
            UserNotFoundError: If the actor has no live user record
            AbsenceDateConflictError: If the range overlaps a live request
            ConcurrentBookingError: If the transaction kept being aborted
        """
        assert_permission(permissions.absence.create(actor), "create absence")
        date_range = self._validated_range(start_date, end_date)

        async def book(uow: UnitOfWork) -> AbsenceRequest:
            user = await uow.users.get(actor.id)
            if user is None or user.is_deleted():
                raise UserNotFoundError(actor.id)

            absence = AbsenceRequest.create(user.organization_id, user.id, date_range, reason)
            await self._ensure_no_conflict(uow, user.id, date_range)
            await uow.absences.insert(absence)
            return absence

        absence = await self._run_booking(book)
        logger.info(f"Absence {absence.id} requested by user {actor.id} for {date_range}")
        await self._notify(NotificationType.ABSENCE_REQUESTED, absence, actor)
        return absence

    async def reschedule_absence(
        self,
        actor: Actor,
        absence_id: UUID,
        start_date: date,
        end_date: date,
        reason: str | None = None,
    ) -> AbsenceRequest:
        """Move a pending absence to new dates.

        Raises:
            AbsenceNotFoundError: If the request does not exist
            PermissionDeniedError: If the actor may not edit it
            EntityDeletedError: If the request is deleted
            AbsenceDateConflictError: If the new range overlaps another live request
            ConcurrentBookingError: If the transaction kept being aborted
        """
        date_range = self._validated_range(start_date, end_date)

        async def move(uow: UnitOfWork) -> AbsenceRequest:
            absence = await self._load(uow, absence_id)
            assert_permission(permissions.absence.edit(actor, absence), "edit absence")

            absence.reschedule(date_range, reason)
            await self._ensure_no_conflict(uow, absence.user_id, date_range, exclude_id=absence.id)
            await uow.absences.update(absence)
            return absence

        absence = await self._run_booking(move)
        logger.info(f"Absence {absence.id} rescheduled by user {actor.id} to {date_range}")
        await self._notify(NotificationType.ABSENCE_RESCHEDULED, absence, actor)
        return absence

    async def _review(
        self,
        actor: Actor,
        absence_id: UUID,
        target: AbsenceStatus,
    ) -> AbsenceRequest:
        action = "approve absence" if target == AbsenceStatus.APPROVED else "reject absence"
        assert_permission(permissions.absence.approve(actor), action)

        async def review(uow: UnitOfWork) -> AbsenceRequest:
            absence = await self._load(uow, absence_id)
            assert_permission(permissions.absence.view(actor, absence), action)
            if absence.user_id == actor.id:
                raise AbsenceSelfApprovalError()

            if target == AbsenceStatus.APPROVED:
                absence.approve()
            else:
                absence.reject()
            await uow.absences.update(absence)
            return absence

        absence = await self._run_booking(review)
        logger.info(f"Absence {absence.id} {absence.status.value.lower()} by user {actor.id}")
        event_type = (
            NotificationType.ABSENCE_APPROVED
            if target == AbsenceStatus.APPROVED
            else NotificationType.ABSENCE_REJECTED
        )
        await self._notify(event_type, absence, actor)
        return absence

    async def approve_absence(self, actor: Actor, absence_id: UUID) -> AbsenceRequest:
        """Approve a pending absence.

        Raises:
            PermissionDeniedError: If the actor is not a manager
            AbsenceSelfApprovalError: If the actor owns the request
            AbsenceStatusError: If the request is no longer pending
            EntityDeletedError: If the request is deleted
        """
        return await self._review(actor, absence_id, AbsenceStatus.APPROVED)

    async def reject_absence(self, actor: Actor, absence_id: UUID) -> AbsenceRequest:
        """Reject a pending absence. Same rules as approval."""
        return await self._review(actor, absence_id, AbsenceStatus.REJECTED)

    async def delete_absence(self, actor: Actor, absence_id: UUID) -> AbsenceRequest:
        """Soft-delete a pending absence, freeing its dates."""

        async def cancel(uow: UnitOfWork) -> AbsenceRequest:
            absence = await self._load(uow, absence_id)
            assert_permission(permissions.absence.delete(actor, absence), "delete absence")
            absence.soft_delete()
            await uow.absences.update(absence)
            return absence

        absence = await self._run_booking(cancel)
        logger.info(f"Absence {absence.id} deleted by user {actor.id}")
        await self._notify(NotificationType.ABSENCE_CANCELLED, absence, actor)
        return absence

    async def get_absence(self, actor: Actor, absence_id: UUID) -> AbsenceRequest:
        """Get a live absence the actor may view.

        Raises:
            AbsenceNotFoundError: If missing or deleted
            PermissionDeniedError: If the actor may not view it
        """

        async def fetch(uow: UnitOfWork) -> AbsenceRequest | None:
            return await uow.absences.get(absence_id)

        absence = await self.transactions.run(fetch)
        if absence is None or absence.is_deleted():
            raise AbsenceNotFoundError(absence_id)
        assert_permission(permissions.absence.view(actor, absence), "view absence")
        return absence

    async def list_for_user(self, actor: Actor, user_id: UUID) -> list[AbsenceRequest]:
        """List a user's live absences."""
        assert_permission(permissions.absence.view_for_user(actor, user_id), "view absences")

        async def fetch(uow: UnitOfWork) -> list[AbsenceRequest]:
            return await uow.absences.list_for_user(user_id)

        absences = await self.transactions.run(fetch)
        return [absence for absence in absences if permissions.absence.view(actor, absence)]

    async def list_all(
        self,
        actor: Actor,
        status: AbsenceStatus | None = None,
        offset: int = 0,
        limit: int = 100,
    ) -> list[AbsenceRequest]:
        """List live absences of the actor's organization (managers only)."""
        assert_permission(permissions.absence.view_all(actor), "view all absences")

        async def fetch(uow: UnitOfWork) -> list[AbsenceRequest]:
            return await uow.absences.list_all(
                organization_id=actor.organization_id,
                status=status,
                offset=offset,
                limit=limit,
            )

        return await self.transactions.run(fetch)

    async def get_statistics(self, actor: Actor, user_id: UUID) -> AbsenceStatistics:
        """Count a user's live absences per status and sum their working days."""
        absences = await self.list_for_user(actor, user_id)

        stats = AbsenceStatistics(user_id=user_id, total=len(absences))
        for absence in absences:
            if absence.is_pending():
                stats.pending += 1
                stats.pending_working_days += absence.working_days()
            elif absence.is_approved():
                stats.approved += 1
                stats.approved_working_days += absence.working_days()
            elif absence.is_rejected():
                stats.rejected += 1
        return stats

    async def check_overlap(
        self,
        user_id: UUID,
        date_range: DateRange,
        exclude_id: UUID | None = None,
    ) -> list[AbsenceRequest]:
        """Find live requests that would conflict with a range.

        Advisory only: a booking re-checks inside its own transaction.
        """

        async def fetch(uow: UnitOfWork) -> list[AbsenceRequest]:
            return await uow.absences.find_overlapping(user_id, date_range, exclude_id=exclude_id)

        return await self.transactions.run(fetch)
