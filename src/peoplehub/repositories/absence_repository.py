"""Absence request repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import select

from peoplehub.models.domain.absence import BLOCKING_STATUSES, AbsenceRequest, AbsenceStatus
from peoplehub.models.domain.date_range import DateRange
from peoplehub.models.orm.absence_request import AbsenceRequestORM
from peoplehub.repositories.base import BaseRepository


class AbsenceRepository(BaseRepository[AbsenceRequestORM, AbsenceRequest]):
    """Repository for absence requests."""

    model = AbsenceRequestORM

    def _to_entity(self, row: AbsenceRequestORM) -> AbsenceRequest:
        return AbsenceRequest.reconstitute(
            {
                "id": row.id,
                "organization_id": row.organization_id,
                "user_id": row.user_id,
                "start_date": row.start_date,
                "end_date": row.end_date,
                "reason": row.reason,
                "status": row.status,
                "created_at": row.created_at,
                "updated_at": row.updated_at,
                "deleted_at": row.deleted_at,
            }
        )

    def _to_row_values(self, entity: AbsenceRequest) -> dict[str, Any]:
        values = entity.to_object()
        values["status"] = entity.status.value
        return values

    async def find_overlapping(
        self,
        user_id: UUID,
        date_range: DateRange,
        exclude_id: UUID | None = None,
    ) -> list[AbsenceRequest]:
        """Find live PENDING/APPROVED requests of a user overlapping a range.

        Two inclusive ranges overlap iff each starts on or before the other ends.

        Args:
            user_id: Owner of the requests
            date_range: Range to check
            exclude_id: Request to ignore (the one being rescheduled)

        Returns:
            Conflicting requests ordered by start date
        """
        query = select(AbsenceRequestORM).where(
            AbsenceRequestORM.user_id == user_id,
            AbsenceRequestORM.deleted_at.is_(None),
            AbsenceRequestORM.status.in_([status.value for status in BLOCKING_STATUSES]),
            AbsenceRequestORM.start_date <= date_range.end,
            AbsenceRequestORM.end_date >= date_range.start,
        )
        if exclude_id is not None:
            query = query.where(AbsenceRequestORM.id != exclude_id)
        return await self._list(query.order_by(AbsenceRequestORM.start_date))

    async def list_for_user(self, user_id: UUID) -> list[AbsenceRequest]:
        """Live requests of a user, most recent start first."""
        return await self._list(
            select(AbsenceRequestORM)
            .where(
                AbsenceRequestORM.user_id == user_id,
                AbsenceRequestORM.deleted_at.is_(None),
            )
            .order_by(AbsenceRequestORM.start_date.desc())
        )

    async def list_all(
        self,
        organization_id: UUID,
        status: AbsenceStatus | None = None,
        offset: int = 0,
        limit: int = 100,
    ) -> list[AbsenceRequest]:
        """Live requests of one organization, optionally filtered by status."""
        query = select(AbsenceRequestORM).where(
            AbsenceRequestORM.organization_id == organization_id,
            AbsenceRequestORM.deleted_at.is_(None),
        )
        if status is not None:
            query = query.where(AbsenceRequestORM.status == status.value)
        return await self._list(
            query.order_by(AbsenceRequestORM.start_date.desc()).offset(offset).limit(limit)
        )
