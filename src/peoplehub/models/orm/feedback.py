"""Feedback ORM model."""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from peoplehub.models.orm.base import Base, SoftDeleteMixin, TimestampMixin, UUIDMixin


class FeedbackORM(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """Feedback database model."""

    __tablename__ = "feedback"

    organization_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    giver_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    receiver_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    polished_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_polished: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("idx_feedback_receiver_deleted", "receiver_id", "deleted_at"),
        Index("idx_feedback_giver_deleted", "giver_id", "deleted_at"),
    )
