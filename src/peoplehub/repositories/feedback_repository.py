"""Feedback repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import select

from peoplehub.models.domain.feedback import Feedback
from peoplehub.models.orm.feedback import FeedbackORM
from peoplehub.repositories.base import BaseRepository


class FeedbackRepository(BaseRepository[FeedbackORM, Feedback]):
    """Repository for feedback."""

    model = FeedbackORM

    def _to_entity(self, row: FeedbackORM) -> Feedback:
        return Feedback.reconstitute(
            {
                "id": row.id,
                "organization_id": row.organization_id,
                "giver_id": row.giver_id,
                "receiver_id": row.receiver_id,
                "content": row.content,
                "polished_content": row.polished_content,
                "is_polished": row.is_polished,
                "created_at": row.created_at,
                "updated_at": row.updated_at,
                "deleted_at": row.deleted_at,
            }
        )

    def _to_row_values(self, entity: Feedback) -> dict[str, Any]:
        return entity.to_object()

    async def list_for_receiver(self, user_id: UUID) -> list[Feedback]:
        """Live feedback received by a user, newest first."""
        return await self._list(
            select(FeedbackORM)
            .where(FeedbackORM.receiver_id == user_id, FeedbackORM.deleted_at.is_(None))
            .order_by(FeedbackORM.created_at.desc())
        )

    async def list_from_giver(self, user_id: UUID) -> list[Feedback]:
        """Live feedback given by a user, newest first."""
        return await self._list(
            select(FeedbackORM)
            .where(FeedbackORM.giver_id == user_id, FeedbackORM.deleted_at.is_(None))
            .order_by(FeedbackORM.created_at.desc())
        )
