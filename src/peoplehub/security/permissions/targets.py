"""Minimal target projections accepted by permission predicates.

Entities satisfy these protocols structurally, so callers can pass either a
full entity or a lightweight reference.
"""

from typing import Protocol
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from peoplehub.models.domain.absence import AbsenceStatus
from peoplehub.models.domain.actor import Actor


class UserTarget(Protocol):
    id: UUID


class FeedbackTarget(Protocol):
    giver_id: UUID


class FeedbackParticipants(Protocol):
    giver_id: UUID
    receiver_id: UUID


class AbsenceOwner(Protocol):
    user_id: UUID


class AbsenceTarget(Protocol):
    user_id: UUID
    status: AbsenceStatus


class UserRef(BaseModel):
    """Reference to a user when the full entity is not at hand."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    organization_id: UUID


def same_tenant(actor: Actor, target: object) -> bool:
    """Check that a target belongs to the actor's organization.

    A target that carries no organization is never considered in-tenant.
    """
    target_org = getattr(target, "organization_id", None)
    if target_org is None:
        return False
    return actor.organization_id == target_org
