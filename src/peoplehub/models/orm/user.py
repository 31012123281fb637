"""User ORM model."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Index, Integer, LargeBinary, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from peoplehub.models.orm.base import Base, SoftDeleteMixin, TimestampMixin, UUIDMixin


class UserORM(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """User database model."""

    __tablename__ = "users"

    organization_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="EMPLOYEE")
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(String(500), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Sensitive HR fields
    salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    # AES-256-GCM, see peoplehub.security.encryption
    national_id_encrypted: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    performance_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("idx_users_org_email", "organization_id", "email", unique=True),
        Index("idx_users_org_deleted", "organization_id", "deleted_at"),
    )
