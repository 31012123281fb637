"""User repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from peoplehub.models.domain.user import User
from peoplehub.models.orm.user import UserORM
from peoplehub.repositories.base import BaseRepository
from peoplehub.security.encryption import EncryptionService, get_encryption_service


class UserRepository(BaseRepository[UserORM, User]):
    """Repository for users. The national id is encrypted at rest."""

    model = UserORM

    def __init__(self, session: AsyncSession, encryption: EncryptionService | None = None) -> None:
        super().__init__(session)
        self._encryption = encryption

    @property
    def encryption(self) -> EncryptionService:
        if self._encryption is None:
            self._encryption = get_encryption_service()
        return self._encryption

    def _to_entity(self, row: UserORM) -> User:
        national_id = None
        if row.national_id_encrypted is not None:
            national_id = self.encryption.decrypt_string(row.national_id_encrypted)
        return User.reconstitute(
            {
                "id": row.id,
                "organization_id": row.organization_id,
                "email": row.email,
                "name": row.name,
                "role": row.role,
                "department": row.department,
                "title": row.title,
                "bio": row.bio,
                "avatar": row.avatar,
                "salary": row.salary,
                "national_id": national_id,
                "address": row.address,
                "performance_rating": row.performance_rating,
                "created_at": row.created_at,
                "updated_at": row.updated_at,
                "deleted_at": row.deleted_at,
            }
        )

    def _to_row_values(self, entity: User) -> dict[str, Any]:
        values = entity.to_object()
        national_id = values.pop("national_id")
        values["role"] = entity.role.value
        values["national_id_encrypted"] = (
            self.encryption.encrypt_string(national_id) if national_id is not None else None
        )
        return values

    async def get_by_email(self, organization_id: UUID, email: str) -> User | None:
        """Get a live user by email within an organization."""
        result = await self.session.execute(
            select(UserORM).where(
                UserORM.organization_id == organization_id,
                UserORM.email == email.strip().lower(),
                UserORM.deleted_at.is_(None),
            )
        )
        row = result.scalar_one_or_none()
        return self._to_entity(row) if row is not None else None

    async def list_by_organization(
        self,
        organization_id: UUID,
        include_deleted: bool = False,
        offset: int = 0,
        limit: int = 100,
    ) -> list[User]:
        """List users of an organization ordered by name."""
        query = select(UserORM).where(UserORM.organization_id == organization_id)
        if not include_deleted:
            query = query.where(UserORM.deleted_at.is_(None))
        return await self._list(query.order_by(UserORM.name).offset(offset).limit(limit))
