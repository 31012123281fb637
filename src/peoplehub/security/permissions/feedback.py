"""Permission predicates for feedback."""

from uuid import UUID

from peoplehub.models.domain.actor import Actor
from peoplehub.security.permissions.targets import (
    FeedbackParticipants,
    FeedbackTarget,
    UserTarget,
    same_tenant,
)


def give(actor: Actor, receiver: UserTarget) -> bool:
    """Anyone may give feedback, except to themselves."""
    if not same_tenant(actor, receiver):
        return False
    return actor.id != receiver.id


def view(actor: Actor, feedback: FeedbackParticipants) -> bool:
    """Giver, receiver and managers may view a piece of feedback."""
    if not same_tenant(actor, feedback):
        return False
    return actor.id in (feedback.giver_id, feedback.receiver_id) or actor.is_manager()


def view_for_user(actor: Actor, user_id: UUID) -> bool:
    return actor.is_manager() or actor.id == user_id


def edit(actor: Actor, feedback: FeedbackTarget) -> bool:
    """The giver and managers may edit feedback."""
    if not same_tenant(actor, feedback):
        return False
    return actor.id == feedback.giver_id or actor.is_manager()


def delete(actor: Actor, feedback: FeedbackTarget) -> bool:
    if not same_tenant(actor, feedback):
        return False
    return actor.id == feedback.giver_id or actor.is_manager()
