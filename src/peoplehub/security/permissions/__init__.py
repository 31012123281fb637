"""Centralized authorization engine.

Every authorization decision is made by the predicates in the ``user``,
``feedback`` and ``absence`` modules. Predicates are pure: they take an
``Actor`` and a minimal target projection and return a boolean.
``assert_permission`` is the single place a denial becomes an error.
"""

from peoplehub.exceptions import PermissionDeniedError
from peoplehub.security.permissions import absence, feedback, user
from peoplehub.security.permissions.targets import UserRef


def assert_permission(allowed: bool, action: str) -> None:
    """Raise if a predicate denied the action.

    Args:
        allowed: Result of a permission predicate
        action: Human-readable description of the attempted action

    Raises:
        PermissionDeniedError: If allowed is False
    """
    if not allowed:
        raise PermissionDeniedError(action)


__all__ = [
    "UserRef",
    "absence",
    "assert_permission",
    "feedback",
    "user",
]
