"""Actor descriptor for authorization checks."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from peoplehub.models.domain.role import Role, is_manager_role


class Actor(BaseModel):
    """Already-verified identity of the caller.

    Contains the minimal user information needed for authorization. The
    organization is required: every tenant check is made against it.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: Role
    email: str
    organization_id: UUID

    def is_manager(self) -> bool:
        return is_manager_role(self.role)
