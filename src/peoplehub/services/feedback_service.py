"""Feedback service."""

import logging
from uuid import UUID

from peoplehub.exceptions import (
    DomainError,
    EntityDeletedError,
    ExternalServiceError,
    FeedbackNotFoundError,
    UserNotFoundError,
)
from peoplehub.models.domain.actor import Actor
from peoplehub.models.domain.feedback import Feedback
from peoplehub.ports import (
    FeedbackPolisher,
    NotificationEvent,
    NotificationType,
    Notifier,
    TransactionManager,
    UnitOfWork,
)
from peoplehub.security import permissions
from peoplehub.security.permissions import assert_permission
from peoplehub.services.notification_service import notify_safely

logger = logging.getLogger(__name__)

POLISHER_SERVICE = "feedback polisher"


async def _load_feedback(uow: UnitOfWork, feedback_id: UUID) -> Feedback:
    feedback = await uow.feedback.get(feedback_id)
    if feedback is None:
        raise FeedbackNotFoundError(feedback_id)
    return feedback


class FeedbackService:
    """Service for giving, reading and maintaining feedback."""

    def __init__(
        self,
        transactions: TransactionManager,
        polisher: FeedbackPolisher | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.transactions = transactions
        self.polisher = polisher
        self.notifier = notifier

    async def give_feedback(self, actor: Actor, receiver_id: UUID, content: str) -> Feedback:
        """Give feedback to another user.

        Args:
            actor: Giver
            receiver_id: Receiving user
            content: Feedback text

        Returns:
            Created feedback

        Raises:
            UserNotFoundError: If the receiver does not exist or is deleted
            FeedbackSelfError: If the actor is the receiver
            ValidationError: If the content length is out of bounds
            PermissionDeniedError: If the receiver belongs to another organization
        """

        async def give(uow: UnitOfWork) -> Feedback:
            receiver = await uow.users.get(receiver_id)
            if receiver is None or receiver.is_deleted():
                raise UserNotFoundError(receiver_id)

            feedback = Feedback.create(receiver.organization_id, actor.id, receiver.id, content)
            assert_permission(permissions.feedback.give(actor, receiver), "give feedback")
            await uow.feedback.insert(feedback)
            return feedback

        feedback = await self.transactions.run(give)
        logger.info(f"Feedback {feedback.id} given by {actor.id} to {receiver_id}")
        await notify_safely(
            self.notifier,
            NotificationEvent(
                type=NotificationType.FEEDBACK_RECEIVED,
                subject_id=feedback.id,
                user_id=feedback.receiver_id,
                actor_id=actor.id,
                organization_id=feedback.organization_id,
            ),
        )
        return feedback

    async def get_feedback(self, actor: Actor, feedback_id: UUID) -> Feedback:
        """Get live feedback the actor may view.

        Raises:
            FeedbackNotFoundError: If missing or deleted
            PermissionDeniedError: If the actor is not a participant or manager
        """

        async def fetch(uow: UnitOfWork) -> Feedback | None:
            return await uow.feedback.get(feedback_id)

        feedback = await self.transactions.run(fetch)
        if feedback is None or feedback.is_deleted():
            raise FeedbackNotFoundError(feedback_id)
        assert_permission(permissions.feedback.view(actor, feedback), "view feedback")
        return feedback

    async def list_for_user(self, actor: Actor, user_id: UUID) -> list[Feedback]:
        """List live feedback received by a user."""
        assert_permission(permissions.feedback.view_for_user(actor, user_id), "view feedback")

        async def fetch(uow: UnitOfWork) -> list[Feedback]:
            return await uow.feedback.list_for_receiver(user_id)

        items = await self.transactions.run(fetch)
        return [item for item in items if permissions.feedback.view(actor, item)]

    async def list_given_by_user(self, actor: Actor, user_id: UUID) -> list[Feedback]:
        """List live feedback given by a user."""
        assert_permission(permissions.feedback.view_for_user(actor, user_id), "view feedback")

        async def fetch(uow: UnitOfWork) -> list[Feedback]:
            return await uow.feedback.list_from_giver(user_id)

        items = await self.transactions.run(fetch)
        return [item for item in items if permissions.feedback.view(actor, item)]

    async def update_feedback(self, actor: Actor, feedback_id: UUID, content: str) -> Feedback:
        """Replace feedback content, discarding any polished version.

        Raises:
            PermissionDeniedError: If the actor is neither the giver nor a manager
            EntityDeletedError: If the feedback is deleted
        """

        async def update(uow: UnitOfWork) -> Feedback:
            feedback = await _load_feedback(uow, feedback_id)
            assert_permission(permissions.feedback.edit(actor, feedback), "edit feedback")
            feedback.update_content(content)
            await uow.feedback.update(feedback)
            return feedback

        feedback = await self.transactions.run(update)
        logger.info(f"Feedback {feedback_id} updated by {actor.id}")
        return feedback

    async def polish_feedback(self, actor: Actor, feedback_id: UUID) -> Feedback:
        """Rewrite feedback through the polisher and store the result.

        The polisher is called outside any transaction.

        Raises:
            PermissionDeniedError: If the actor is neither the giver nor a manager
            EntityDeletedError: If the feedback is deleted
            ExternalServiceError: If the polisher is missing or fails
        """

        async def fetch(uow: UnitOfWork) -> Feedback:
            return await _load_feedback(uow, feedback_id)

        feedback = await self.transactions.run(fetch)
        assert_permission(permissions.feedback.edit(actor, feedback), "polish feedback")
        if feedback.is_deleted():
            raise EntityDeletedError(Feedback.entity_name, feedback_id, "polish")
        if self.polisher is None:
            raise ExternalServiceError(POLISHER_SERVICE, "not configured")

        try:
            polished_content = await self.polisher.polish(feedback.content)
        except DomainError:
            raise
        except Exception as e:
            logger.error(f"Feedback polishing failed for {feedback_id}: {type(e).__name__}")
            raise ExternalServiceError(POLISHER_SERVICE, type(e).__name__) from e

        async def store(uow: UnitOfWork) -> Feedback:
            current = await _load_feedback(uow, feedback_id)
            current.polish(polished_content)
            await uow.feedback.update(current)
            return current

        feedback = await self.transactions.run(store)
        logger.info(f"Feedback {feedback_id} polished for {actor.id}")
        return feedback

    async def delete_feedback(self, actor: Actor, feedback_id: UUID) -> Feedback:
        """Soft-delete feedback.

        Raises:
            PermissionDeniedError: If the actor is neither the giver nor a manager
            EntityDeletedError: If the feedback is already deleted
        """

        async def delete(uow: UnitOfWork) -> Feedback:
            feedback = await _load_feedback(uow, feedback_id)
            assert_permission(permissions.feedback.delete(actor, feedback), "delete feedback")
            feedback.soft_delete()
            await uow.feedback.update(feedback)
            return feedback

        feedback = await self.transactions.run(delete)
        logger.info(f"Feedback {feedback_id} deleted by {actor.id}")
        return feedback
