"""Permission predicates for user profiles."""

from peoplehub.models.domain.actor import Actor
from peoplehub.security.permissions.targets import UserTarget, same_tenant


def view(actor: Actor, target: UserTarget) -> bool:
    """Profiles are visible within the organization; sensitive fields are filtered separately."""
    return same_tenant(actor, target)


def view_sensitive(actor: Actor, target: UserTarget) -> bool:
    """Managers, or the user themselves, may view salary, national id, address and rating."""
    if not same_tenant(actor, target):
        return False
    return actor.is_manager() or actor.id == target.id


def edit(actor: Actor, target: UserTarget) -> bool:
    if not same_tenant(actor, target):
        return False
    return actor.is_manager() or actor.id == target.id


def delete(actor: Actor, target: UserTarget) -> bool:
    """Only managers may delete accounts, and never their own."""
    if not same_tenant(actor, target):
        return False
    return actor.is_manager() and actor.id != target.id


def restore(actor: Actor) -> bool:
    return actor.is_manager()


def update_sensitive(actor: Actor) -> bool:
    return actor.is_manager()
