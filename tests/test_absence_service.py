"""Absence booking service tests."""

import asyncio
from datetime import date, timedelta
from uuid import uuid4

import pytest

from fakes import TODAY, FailingNotifier, no_sleep
from peoplehub.exceptions import (
    AbsenceDateConflictError,
    AbsenceNotFoundError,
    AbsenceSelfApprovalError,
    AbsenceStatusError,
    ConcurrentBookingError,
    EntityDeletedError,
    InvalidDateRangeError,
    PermissionDeniedError,
    SerializationConflict,
    TransactionTimeout,
    UserNotFoundError,
    ValidationError,
)
from peoplehub.models.domain import AbsenceStatus, DateRange
from peoplehub.ports import NotificationType
from peoplehub.services.absence_service import AbsenceService

REASON = "Family vacation abroad"


def jan(day: int) -> date:
    return date(2031, 1, day)


def mar(day: int) -> date:
    return date(2031, 3, day)


class TestCreateAbsence:
    """Booking rules for a single request."""

    async def test_creates_pending_request(self, absence_service, employee_actor, store, notifier) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        assert absence.status == AbsenceStatus.PENDING
        assert absence.user_id == employee_actor.id
        assert absence.organization_id == employee_actor.organization_id
        assert store.tables["absences"][absence.id].status == AbsenceStatus.PENDING
        assert [e.type for e in notifier.events] == [NotificationType.ABSENCE_REQUESTED]

    async def test_overlap_conflict_references_first_request(self, absence_service, employee_actor) -> None:
        first = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        with pytest.raises(AbsenceDateConflictError) as exc_info:
            await absence_service.create_absence(employee_actor, jan(12), jan(13), REASON)

        assert exc_info.value.conflicting_absence_id == first.id
        assert exc_info.value.details["conflicting_absence_id"] == str(first.id)

    async def test_adjacent_ranges_both_succeed(self, absence_service, employee_actor, store) -> None:
        await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        await absence_service.create_absence(employee_actor, jan(16), jan(20), REASON)

        assert len(store.live_absences(employee_actor.id)) == 2

    async def test_same_day_boundary_conflicts(self, absence_service, employee_actor) -> None:
        await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        with pytest.raises(AbsenceDateConflictError):
            await absence_service.create_absence(employee_actor, jan(15), jan(20), REASON)

    async def test_other_users_do_not_conflict(self, absence_service, employee_actor, coworker_actor) -> None:
        await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        assert await absence_service.create_absence(coworker_actor, jan(10), jan(15), REASON)

    async def test_rejected_request_frees_dates(
        self, absence_service, employee_actor, manager_actor
    ) -> None:
        first = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        await absence_service.reject_absence(manager_actor, first.id)

        assert await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

    async def test_start_in_past_rejected(self, absence_service, employee_actor) -> None:
        yesterday = TODAY - timedelta(days=1)

        with pytest.raises(InvalidDateRangeError):
            await absence_service.create_absence(employee_actor, yesterday, TODAY, REASON)

    async def test_invalid_range_rejected(self, absence_service, employee_actor) -> None:
        with pytest.raises(InvalidDateRangeError):
            await absence_service.create_absence(employee_actor, jan(15), jan(10), REASON)

    async def test_reason_validated(self, absence_service, employee_actor, store) -> None:
        with pytest.raises(ValidationError):
            await absence_service.create_absence(employee_actor, jan(10), jan(15), "short")
        assert store.live_absences(employee_actor.id) == []

    async def test_deleted_user_cannot_book(self, absence_service, employee_actor, store) -> None:
        store.tables["users"][employee_actor.id].soft_delete()

        with pytest.raises(UserNotFoundError):
            await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)


class TestConcurrentBooking:
    """Only the database decides which of several racing requests wins."""

    @pytest.mark.parametrize("concurrency", [2, 5, 8])
    async def test_overlapping_requests_exactly_one_wins(
        self, absence_service, employee_actor, store, concurrency
    ) -> None:
        results = await asyncio.gather(
            *(
                absence_service.create_absence(employee_actor, mar(1), mar(5), REASON)
                for _ in range(concurrency)
            ),
            return_exceptions=True,
        )

        created = [r for r in results if not isinstance(r, BaseException)]
        conflicts = [r for r in results if isinstance(r, AbsenceDateConflictError)]
        assert len(created) == 1
        assert len(conflicts) == concurrency - 1
        assert all(c.conflicting_absence_id == created[0].id for c in conflicts)
        assert len(store.live_absences(employee_actor.id)) == 1

    async def test_partially_overlapping_requests(self, absence_service, employee_actor, store) -> None:
        ranges = [(mar(1), mar(5)), (mar(3), mar(8)), (mar(5), mar(6))]

        results = await asyncio.gather(
            *(absence_service.create_absence(employee_actor, s, e, REASON) for s, e in ranges),
            return_exceptions=True,
        )

        assert sum(not isinstance(r, BaseException) for r in results) == 1
        assert all(
            isinstance(r, AbsenceDateConflictError) for r in results if isinstance(r, BaseException)
        )

    async def test_disjoint_requests_all_succeed(self, absence_service, employee_actor, store) -> None:
        starts = [mar(1) + timedelta(days=7 * i) for i in range(6)]

        results = await asyncio.gather(
            *(
                absence_service.create_absence(employee_actor, start, start + timedelta(days=2), REASON)
                for start in starts
            ),
            return_exceptions=True,
        )

        assert not [r for r in results if isinstance(r, BaseException)]
        stored = store.live_absences(employee_actor.id)
        assert len(stored) == 6
        for a in stored:
            for b in stored:
                assert a.id == b.id or not a.date_range.overlaps(b.date_range)


class TestRetryPolicy:
    """Serialization failures and timeouts are retried a bounded number of times."""

    async def test_transient_failures_are_retried(self, absence_service, employee_actor, transactions) -> None:
        transactions.inject_failures(SerializationConflict(), TransactionTimeout())

        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        assert absence.status == AbsenceStatus.PENDING
        assert transactions.serializable_attempts == 3

    async def test_exhausted_retries_surface_as_conflict(
        self, absence_service, employee_actor, transactions, store, notifier
    ) -> None:
        transactions.inject_failures(*(SerializationConflict() for _ in range(3)))

        with pytest.raises(ConcurrentBookingError):
            await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        assert transactions.serializable_attempts == 3
        assert store.live_absences(employee_actor.id) == []
        assert notifier.events == []

    async def test_business_conflict_not_retried(self, absence_service, employee_actor, transactions) -> None:
        await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        transactions.serializable_attempts = 0

        with pytest.raises(AbsenceDateConflictError):
            await absence_service.create_absence(employee_actor, jan(11), jan(12), REASON)
        assert transactions.serializable_attempts == 1

    async def test_max_attempts_configurable(self, transactions, employee_actor) -> None:
        service = AbsenceService(
            transactions, max_attempts=1, retry_base_delay=0, today=lambda: TODAY, sleep=no_sleep
        )
        transactions.inject_failures(SerializationConflict())

        with pytest.raises(ConcurrentBookingError):
            await service.create_absence(employee_actor, jan(10), jan(15), REASON)
        assert transactions.serializable_attempts == 1


class TestReview:
    """Approval and rejection."""

    async def test_manager_approves(self, absence_service, employee_actor, manager_actor, notifier) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        approved = await absence_service.approve_absence(manager_actor, absence.id)

        assert approved.status == AbsenceStatus.APPROVED
        assert notifier.events[-1].type == NotificationType.ABSENCE_APPROVED
        assert notifier.events[-1].actor_id == manager_actor.id

    async def test_employee_cannot_approve(self, absence_service, employee_actor, coworker_actor) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        with pytest.raises(PermissionDeniedError):
            await absence_service.approve_absence(coworker_actor, absence.id)

    async def test_manager_cannot_approve_own_request(self, absence_service, manager_actor) -> None:
        absence = await absence_service.create_absence(manager_actor, jan(10), jan(15), REASON)

        with pytest.raises(AbsenceSelfApprovalError):
            await absence_service.approve_absence(manager_actor, absence.id)
        with pytest.raises(AbsenceSelfApprovalError):
            await absence_service.reject_absence(manager_actor, absence.id)

    async def test_cannot_review_twice(self, absence_service, employee_actor, manager_actor) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        await absence_service.approve_absence(manager_actor, absence.id)

        with pytest.raises(AbsenceStatusError):
            await absence_service.reject_absence(manager_actor, absence.id)

    async def test_cannot_approve_deleted(self, absence_service, employee_actor, manager_actor) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        await absence_service.delete_absence(employee_actor, absence.id)

        with pytest.raises(EntityDeletedError):
            await absence_service.approve_absence(manager_actor, absence.id)

    async def test_other_organization_cannot_approve(
        self, absence_service, employee_actor, outsider_actor
    ) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        with pytest.raises(PermissionDeniedError):
            await absence_service.approve_absence(outsider_actor, absence.id)

    async def test_unknown_absence(self, absence_service, manager_actor) -> None:
        with pytest.raises(AbsenceNotFoundError):
            await absence_service.approve_absence(manager_actor, uuid4())

    async def test_concurrent_approve_and_delete(
        self, absence_service, employee_actor, manager_actor, store
    ) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        results = await asyncio.gather(
            absence_service.approve_absence(manager_actor, absence.id),
            absence_service.delete_absence(employee_actor, absence.id),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        assert len(failures) == 1
        stored = store.tables["absences"][absence.id]
        assert stored.is_approved() != stored.is_deleted()


class TestRescheduleAndDelete:
    async def test_reschedule_moves_dates(self, absence_service, employee_actor) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        moved = await absence_service.reschedule_absence(employee_actor, absence.id, jan(12), jan(18))

        assert (moved.start_date, moved.end_date) == (jan(12), jan(18))

    async def test_reschedule_into_other_request_conflicts(
        self, absence_service, employee_actor, store
    ) -> None:
        first = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        second = await absence_service.create_absence(employee_actor, jan(20), jan(25), REASON)

        with pytest.raises(AbsenceDateConflictError) as exc_info:
            await absence_service.reschedule_absence(employee_actor, second.id, jan(14), jan(21))

        assert exc_info.value.conflicting_absence_id == first.id
        assert store.tables["absences"][second.id].start_date == jan(20)

    async def test_reschedule_by_other_employee_denied(
        self, absence_service, employee_actor, coworker_actor
    ) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        with pytest.raises(PermissionDeniedError):
            await absence_service.reschedule_absence(coworker_actor, absence.id, jan(12), jan(18))

    async def test_delete_frees_dates(self, absence_service, employee_actor, store, notifier) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        await absence_service.delete_absence(employee_actor, absence.id)

        assert store.tables["absences"][absence.id].is_deleted()
        assert notifier.events[-1].type == NotificationType.ABSENCE_CANCELLED
        assert await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

    async def test_approved_cannot_be_deleted(self, absence_service, employee_actor, manager_actor) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        await absence_service.approve_absence(manager_actor, absence.id)

        with pytest.raises(PermissionDeniedError):
            await absence_service.delete_absence(employee_actor, absence.id)


class TestQueries:
    async def test_get_absence(self, absence_service, employee_actor, manager_actor, coworker_actor) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        assert (await absence_service.get_absence(manager_actor, absence.id)).id == absence.id
        with pytest.raises(PermissionDeniedError):
            await absence_service.get_absence(coworker_actor, absence.id)

    async def test_deleted_absence_not_found(self, absence_service, employee_actor) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        await absence_service.delete_absence(employee_actor, absence.id)

        with pytest.raises(AbsenceNotFoundError):
            await absence_service.get_absence(employee_actor, absence.id)

    async def test_list_for_user(self, absence_service, employee_actor, coworker_actor, manager_actor) -> None:
        await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        await absence_service.create_absence(employee_actor, jan(20), jan(21), REASON)

        assert len(await absence_service.list_for_user(employee_actor, employee_actor.id)) == 2
        assert len(await absence_service.list_for_user(manager_actor, employee_actor.id)) == 2
        with pytest.raises(PermissionDeniedError):
            await absence_service.list_for_user(coworker_actor, employee_actor.id)

    async def test_list_all_is_scoped_to_organization(
        self, absence_service, employee_actor, coworker_actor, manager_actor, outsider_actor
    ) -> None:
        await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        await absence_service.create_absence(coworker_actor, jan(10), jan(15), REASON)
        await absence_service.create_absence(outsider_actor, jan(10), jan(15), REASON)

        assert len(await absence_service.list_all(manager_actor)) == 2
        assert len(await absence_service.list_all(manager_actor, status=AbsenceStatus.APPROVED)) == 0
        with pytest.raises(PermissionDeniedError):
            await absence_service.list_all(employee_actor)

    async def test_list_all_hides_other_tenants_from_managers(
        self, absence_service, employee_actor, outsider_actor
    ) -> None:
        await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        assert await absence_service.list_all(outsider_actor) == []

    async def test_statistics(self, absence_service, employee_actor, manager_actor) -> None:
        # 2031-01-06 is a Monday
        first = await absence_service.create_absence(employee_actor, jan(6), jan(10), REASON)
        await absence_service.create_absence(employee_actor, jan(13), jan(14), REASON)
        rejected = await absence_service.create_absence(employee_actor, jan(20), jan(21), REASON)
        await absence_service.approve_absence(manager_actor, first.id)
        await absence_service.reject_absence(manager_actor, rejected.id)

        stats = await absence_service.get_statistics(manager_actor, employee_actor.id)

        assert (stats.total, stats.pending, stats.approved, stats.rejected) == (3, 1, 1, 1)
        assert stats.approved_working_days == 5
        assert stats.pending_working_days == 2

    async def test_check_overlap(self, absence_service, employee_actor) -> None:
        absence = await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        candidate = DateRange.create(jan(15), jan(16))

        assert [a.id for a in await absence_service.check_overlap(employee_actor.id, candidate)] == [absence.id]
        assert await absence_service.check_overlap(employee_actor.id, candidate, exclude_id=absence.id) == []


class TestNotifications:
    async def test_notifier_failure_does_not_undo_booking(self, transactions, employee_actor, store) -> None:
        notifier = FailingNotifier()
        service = AbsenceService(
            transactions,
            notifier=notifier,
            max_attempts=3,
            retry_base_delay=0,
            today=lambda: TODAY,
            sleep=no_sleep,
        )

        absence = await service.create_absence(employee_actor, jan(10), jan(15), REASON)

        assert notifier.calls == 1
        assert store.tables["absences"][absence.id].status == AbsenceStatus.PENDING

    async def test_no_notification_on_failure(self, absence_service, employee_actor, notifier) -> None:
        await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)

        with pytest.raises(AbsenceDateConflictError):
            await absence_service.create_absence(employee_actor, jan(10), jan(15), REASON)
        assert len(notifier.events) == 1
