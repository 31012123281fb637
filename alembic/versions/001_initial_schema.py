"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="EMPLOYEE"),
        sa.Column("department", sa.String(255), nullable=True),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("bio", sa.String(500), nullable=True),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("national_id_encrypted", sa.LargeBinary(), nullable=True),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("performance_rating", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('EMPLOYEE', 'MANAGER', 'COWORKER')", name="ck_users_role"),
        sa.CheckConstraint(
            "performance_rating IS NULL OR performance_rating BETWEEN 1 AND 5",
            name="ck_users_performance_rating",
        ),
        sa.CheckConstraint("salary IS NULL OR salary >= 0", name="ck_users_salary"),
    )
    op.create_index("idx_users_org_email", "users", ["organization_id", "email"], unique=True)
    op.create_index("idx_users_org_deleted", "users", ["organization_id", "deleted_at"])

    # Create feedback table
    op.create_table(
        "feedback",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("giver_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("receiver_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("polished_content", sa.Text(), nullable=True),
        sa.Column("is_polished", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["giver_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["receiver_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("giver_id <> receiver_id", name="ck_feedback_not_self"),
    )
    op.create_index("idx_feedback_receiver_deleted", "feedback", ["receiver_id", "deleted_at"])
    op.create_index("idx_feedback_giver_deleted", "feedback", ["giver_id", "deleted_at"])

    # Create absence_requests table
    op.create_table(
        "absence_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(500), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("end_date >= start_date", name="ck_absence_date_order"),
        sa.CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')", name="ck_absence_status"
        ),
    )
    op.create_index(
        "idx_absence_user_status_deleted",
        "absence_requests",
        ["user_id", "status", "deleted_at"],
    )
    op.create_index(
        "idx_absence_user_dates",
        "absence_requests",
        ["user_id", "start_date", "end_date"],
    )
    op.create_index("idx_absence_org_status", "absence_requests", ["organization_id", "status"])


def downgrade() -> None:
    op.drop_index("idx_absence_org_status", table_name="absence_requests")
    op.drop_index("idx_absence_user_dates", table_name="absence_requests")
    op.drop_index("idx_absence_user_status_deleted", table_name="absence_requests")
    op.drop_table("absence_requests")

    op.drop_index("idx_feedback_giver_deleted", table_name="feedback")
    op.drop_index("idx_feedback_receiver_deleted", table_name="feedback")
    op.drop_table("feedback")

    op.drop_index("idx_users_org_deleted", table_name="users")
    op.drop_index("idx_users_org_email", table_name="users")
    op.drop_table("users")
