"""User profile service."""

import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from peoplehub.exceptions import UserNotFoundError
from peoplehub.models.domain.actor import Actor
from peoplehub.models.domain.user import User
from peoplehub.ports import TransactionManager, UnitOfWork
from peoplehub.security import permissions
from peoplehub.security.permissions import assert_permission

logger = logging.getLogger(__name__)


async def _load_user(uow: UnitOfWork, user_id: UUID) -> User:
    user = await uow.users.get(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


class UserService:
    """Service for viewing and maintaining user profiles."""

    def __init__(self, transactions: TransactionManager) -> None:
        self.transactions = transactions

    async def get_user(self, actor: Actor, user_id: UUID) -> dict[str, Any]:
        """Get a user's profile as seen by the actor.

        Sensitive fields are included only when the actor may view them.

        Raises:
            UserNotFoundError: If the user does not exist, is deleted or belongs
                to another organization
        """

        async def fetch(uow: UnitOfWork) -> User | None:
            return await uow.users.get(user_id)

        user = await self.transactions.run(fetch)
        if user is None or user.is_deleted() or not permissions.user.view(actor, user):
            raise UserNotFoundError(user_id)
        return user.to_profile(include_sensitive=permissions.user.view_sensitive(actor, user))

    async def update_profile(
        self,
        actor: Actor,
        user_id: UUID,
        name: str | None = None,
        department: str | None = None,
        title: str | None = None,
        bio: str | None = None,
        avatar: str | None = None,
    ) -> User:
        """Update non-sensitive profile fields.

        Raises:
            PermissionDeniedError: If the actor is neither the user nor a manager
            EntityDeletedError: If the user is deleted
        """

        async def update(uow: UnitOfWork) -> User:
            user = await _load_user(uow, user_id)
            assert_permission(permissions.user.edit(actor, user), "edit user")
            user.update_profile(name=name, department=department, title=title, bio=bio, avatar=avatar)
            await uow.users.update(user)
            return user

        user = await self.transactions.run(update)
        logger.info(f"User {user_id} profile updated by {actor.id}")
        return user

    async def update_sensitive(
        self,
        actor: Actor,
        user_id: UUID,
        salary: Decimal | None = None,
        national_id: str | None = None,
        address: str | None = None,
        performance_rating: int | None = None,
    ) -> User:
        """Update salary, national id, address or performance rating (managers only)."""
        assert_permission(permissions.user.update_sensitive(actor), "update sensitive fields")

        async def update(uow: UnitOfWork) -> User:
            user = await _load_user(uow, user_id)
            assert_permission(permissions.user.view(actor, user), "update sensitive fields")
            user.update_sensitive_fields(
                salary=salary,
                national_id=national_id,
                address=address,
                performance_rating=performance_rating,
            )
            await uow.users.update(user)
            return user

        user = await self.transactions.run(update)
        # Values are deliberately not logged
        logger.info(f"User {user_id} sensitive fields updated by {actor.id}")
        return user

    async def delete_user(self, actor: Actor, user_id: UUID) -> User:
        """Soft-delete a user.

        Raises:
            PermissionDeniedError: If the actor is not a manager or targets themselves
            EntityDeletedError: If the user is already deleted
        """

        async def delete(uow: UnitOfWork) -> User:
            user = await _load_user(uow, user_id)
            assert_permission(permissions.user.delete(actor, user), "delete user")
            user.soft_delete()
            await uow.users.update(user)
            return user

        user = await self.transactions.run(delete)
        logger.info(f"User {user_id} deleted by {actor.id}")
        return user

    async def restore_user(self, actor: Actor, user_id: UUID) -> User:
        """Restore a soft-deleted user.

        Raises:
            PermissionDeniedError: If the actor is not a manager
            EntityNotDeletedError: If the user is not deleted
        """
        assert_permission(permissions.user.restore(actor), "restore user")

        async def restore(uow: UnitOfWork) -> User:
            user = await _load_user(uow, user_id)
            assert_permission(permissions.user.view(actor, user), "restore user")
            user.restore()
            await uow.users.update(user)
            return user

        user = await self.transactions.run(restore)
        logger.info(f"User {user_id} restored by {actor.id}")
        return user
