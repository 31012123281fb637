"""Role domain model."""

from enum import StrEnum
from typing import assert_never


class Role(StrEnum):
    """Organization role of a user."""

    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    COWORKER = "COWORKER"


def is_manager_role(role: Role) -> bool:
    """Check whether a role carries manager privileges.

    Every role is matched explicitly, so adding a member to ``Role`` fails
    type checking here until its privileges are decided.
    """
    match role:
        case Role.MANAGER:
            return True
        case Role.EMPLOYEE | Role.COWORKER:
            return False
        case _:
            assert_never(role)
