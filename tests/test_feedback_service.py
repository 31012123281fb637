"""Feedback service tests."""

from uuid import uuid4

import pytest

from fakes import FailingNotifier, FakePolisher
from peoplehub.exceptions import (
    EntityDeletedError,
    ExternalServiceError,
    FeedbackNotFoundError,
    FeedbackSelfError,
    PermissionDeniedError,
    UserNotFoundError,
    ValidationError,
)
from peoplehub.ports import NotificationType
from peoplehub.services.feedback_service import FeedbackService

CONTENT = "Thanks for the thorough code review"


@pytest.fixture
def polisher():
    return FakePolisher()


@pytest.fixture
def feedback_service(transactions, polisher, notifier):
    return FeedbackService(transactions, polisher=polisher, notifier=notifier)


@pytest.fixture
async def given(feedback_service, employee_actor, coworker):
    return await feedback_service.give_feedback(employee_actor, coworker.id, CONTENT)


class TestGiveFeedback:
    async def test_give(self, feedback_service, employee_actor, coworker, store) -> None:
        feedback = await feedback_service.give_feedback(employee_actor, coworker.id, CONTENT)

        assert feedback.giver_id == employee_actor.id
        assert feedback.organization_id == coworker.organization_id
        assert feedback.id in store.tables["feedback"]

    async def test_self_feedback(self, feedback_service, employee_actor) -> None:
        with pytest.raises(FeedbackSelfError):
            await feedback_service.give_feedback(employee_actor, employee_actor.id, CONTENT)

    async def test_short_content(self, feedback_service, employee_actor, coworker) -> None:
        with pytest.raises(ValidationError):
            await feedback_service.give_feedback(employee_actor, coworker.id, "Short")

    async def test_unknown_receiver(self, feedback_service, employee_actor) -> None:
        with pytest.raises(UserNotFoundError):
            await feedback_service.give_feedback(employee_actor, uuid4(), CONTENT)

    async def test_receiver_in_other_organization(self, feedback_service, employee_actor, outsider) -> None:
        with pytest.raises(PermissionDeniedError):
            await feedback_service.give_feedback(employee_actor, outsider.id, CONTENT)


class TestFeedbackNotifications:
    async def test_receiver_is_notified(self, feedback_service, employee_actor, coworker, notifier) -> None:
        feedback = await feedback_service.give_feedback(employee_actor, coworker.id, CONTENT)

        assert len(notifier.events) == 1
        event = notifier.events[0]
        assert event.type == NotificationType.FEEDBACK_RECEIVED
        assert event.subject_id == feedback.id
        assert event.user_id == coworker.id
        assert event.actor_id == employee_actor.id
        assert event.organization_id == coworker.organization_id
        assert event.start_date is None

    async def test_no_event_when_give_fails(self, feedback_service, employee_actor, notifier) -> None:
        with pytest.raises(FeedbackSelfError):
            await feedback_service.give_feedback(employee_actor, employee_actor.id, CONTENT)
        with pytest.raises(UserNotFoundError):
            await feedback_service.give_feedback(employee_actor, uuid4(), CONTENT)

        assert notifier.events == []

    async def test_failing_notifier_keeps_feedback(self, transactions, employee_actor, coworker, store) -> None:
        notifier = FailingNotifier()
        service = FeedbackService(transactions, notifier=notifier)

        feedback = await service.give_feedback(employee_actor, coworker.id, CONTENT)

        assert notifier.calls == 1
        assert feedback.id in store.tables["feedback"]


class TestReadFeedback:
    async def test_participants_and_managers_can_read(
        self, feedback_service, given, employee_actor, coworker_actor, manager_actor
    ) -> None:
        for actor in (employee_actor, coworker_actor, manager_actor):
            assert (await feedback_service.get_feedback(actor, given.id)).id == given.id

    async def test_list_for_user(self, feedback_service, given, coworker_actor, employee_actor) -> None:
        assert [f.id for f in await feedback_service.list_for_user(coworker_actor, coworker_actor.id)] == [given.id]
        assert [f.id for f in await feedback_service.list_given_by_user(employee_actor, employee_actor.id)] == [
            given.id
        ]

    async def test_list_for_other_user_denied(self, feedback_service, given, employee_actor, coworker) -> None:
        with pytest.raises(PermissionDeniedError):
            await feedback_service.list_for_user(employee_actor, coworker.id)

    async def test_missing(self, feedback_service, manager_actor) -> None:
        with pytest.raises(FeedbackNotFoundError):
            await feedback_service.get_feedback(manager_actor, uuid4())


class TestEditFeedback:
    async def test_giver_updates_content(self, feedback_service, given, employee_actor) -> None:
        updated = await feedback_service.update_feedback(employee_actor, given.id, "Updated and still long enough")

        assert updated.content == "Updated and still long enough"

    async def test_receiver_cannot_edit(self, feedback_service, given, coworker_actor) -> None:
        with pytest.raises(PermissionDeniedError):
            await feedback_service.update_feedback(coworker_actor, given.id, "Rewritten by receiver")

    async def test_polish(self, feedback_service, given, employee_actor, polisher) -> None:
        polished = await feedback_service.polish_feedback(employee_actor, given.id)

        assert polished.is_polished
        assert polished.display_content == f"Polished: {CONTENT}"
        assert polisher.calls == [CONTENT]

    async def test_polisher_failure(self, transactions, given, employee_actor) -> None:
        service = FeedbackService(transactions, polisher=FakePolisher(error=TimeoutError()))

        with pytest.raises(ExternalServiceError):
            await service.polish_feedback(employee_actor, given.id)

    async def test_polisher_missing(self, transactions, given, employee_actor) -> None:
        with pytest.raises(ExternalServiceError):
            await FeedbackService(transactions).polish_feedback(employee_actor, given.id)


class TestDeletedFeedback:
    """Mutations on deleted feedback fail with a deleted-state error."""

    async def test_mutations_after_delete(self, feedback_service, given, employee_actor, polisher) -> None:
        await feedback_service.delete_feedback(employee_actor, given.id)

        with pytest.raises(EntityDeletedError):
            await feedback_service.polish_feedback(employee_actor, given.id)
        with pytest.raises(EntityDeletedError):
            await feedback_service.update_feedback(employee_actor, given.id, "Updated and still long enough")
        with pytest.raises(EntityDeletedError):
            await feedback_service.delete_feedback(employee_actor, given.id)
        assert polisher.calls == []

    async def test_deleted_not_found(self, feedback_service, given, employee_actor) -> None:
        await feedback_service.delete_feedback(employee_actor, given.id)

        with pytest.raises(FeedbackNotFoundError):
            await feedback_service.get_feedback(employee_actor, given.id)
