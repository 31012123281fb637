"""Base repository mapping ORM rows to domain entities."""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from peoplehub.exceptions import DatabaseError
from peoplehub.models.domain.base import SoftDeletableEntity
from peoplehub.models.orm.base import Base

T = TypeVar("T", bound=Base)
E = TypeVar("E", bound=SoftDeletableEntity)


class BaseRepository(Generic[T, E]):
    """Base repository with common persistence operations.

    Subclasses declare the ORM ``model`` and implement the two mappers.
    """

    model: type[T]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.session = session

    def _to_entity(self, row: T) -> E:
        raise NotImplementedError

    def _to_row_values(self, entity: E) -> dict[str, Any]:
        raise NotImplementedError

    async def _get_row(self, id: UUID) -> T | None:
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get(self, id: UUID) -> E | None:
        """Get an entity by ID, including soft-deleted ones.

        Args:
            id: Entity UUID

        Returns:
            Entity or None if not found
        """
        row = await self._get_row(id)
        return self._to_entity(row) if row is not None else None

    async def count(self) -> int:
        """Count all rows, including soft-deleted ones."""
        result = await self.session.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()

    async def insert(self, entity: E) -> None:
        """Persist a new entity."""
        self.session.add(self.model(**self._to_row_values(entity)))
        await self.session.flush()

    async def update(self, entity: E) -> None:
        """Write an existing entity's state back.

        Raises:
            DatabaseError: If the row no longer exists
        """
        row = await self._get_row(entity.id)
        if row is None:
            raise DatabaseError(f"update {self.model.__tablename__}")

        for key, value in self._to_row_values(entity).items():
            if key != "id":
                setattr(row, key, value)
        await self.session.flush()

    async def _list(self, statement: Any) -> list[E]:
        result = await self.session.execute(statement)
        return [self._to_entity(row) for row in result.scalars().all()]
