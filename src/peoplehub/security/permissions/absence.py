"""Permission predicates for absence requests."""

from uuid import UUID

from peoplehub.models.domain.absence import AbsenceStatus
from peoplehub.models.domain.actor import Actor
from peoplehub.security.permissions.targets import AbsenceOwner, AbsenceTarget, same_tenant


def create(actor: Actor) -> bool:
    """Any authenticated actor may request time off."""
    return True


def view(actor: Actor, absence: AbsenceOwner) -> bool:
    if not same_tenant(actor, absence):
        return False
    return actor.is_manager() or actor.id == absence.user_id


def view_for_user(actor: Actor, user_id: UUID) -> bool:
    return actor.is_manager() or actor.id == user_id


def view_all(actor: Actor) -> bool:
    return actor.is_manager()


def approve(actor: Actor) -> bool:
    """Approve or reject. Self-approval is rejected by the booking engine."""
    return actor.is_manager()


def edit(actor: Actor, absence: AbsenceTarget) -> bool:
    """Owner or manager, and only while the request is pending."""
    if not same_tenant(actor, absence):
        return False
    if absence.status != AbsenceStatus.PENDING:
        return False
    return actor.is_manager() or actor.id == absence.user_id


def delete(actor: Actor, absence: AbsenceTarget) -> bool:
    if not same_tenant(actor, absence):
        return False
    if absence.status != AbsenceStatus.PENDING:
        return False
    return actor.is_manager() or actor.id == absence.user_id
