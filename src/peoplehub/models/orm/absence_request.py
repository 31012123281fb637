"""Absence request ORM model."""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from peoplehub.models.orm.base import Base, SoftDeleteMixin, TimestampMixin, UUIDMixin


class AbsenceRequestORM(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """Absence request database model."""

    __tablename__ = "absence_requests"

    organization_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")

    # Overlap lookups filter on user, status and tombstone, then compare dates
    __table_args__ = (
        Index("idx_absence_user_status_deleted", "user_id", "status", "deleted_at"),
        Index("idx_absence_user_dates", "user_id", "start_date", "end_date"),
        Index("idx_absence_org_status", "organization_id", "status"),
    )
