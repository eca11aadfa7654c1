"""create users and single check-in table

Revision ID: 5f2c1a9d7e41
Revises:
Create Date: 2026-10-19 09:12:04.118230
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "5f2c1a9d7e41"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("manager_id", sa.String(36), nullable=True),
        sa.Column("team_id", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("role IN ('manager','member')", name="ck_users_role"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_manager_id", "users", ["manager_id"])

    # One table for check-ins, assignments and responses (PK/SK composite key).
    op.create_table(
        "checkins",
        sa.Column("pk", sa.String(100), nullable=False),
        sa.Column("sk", sa.String(100), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("pk", "sk"),
    )
    op.create_index("created-by-index", "checkins", ["created_by", "type"])
    op.create_index("user-type-index", "checkins", ["user_id", "type"])


def downgrade() -> None:
    op.drop_index("user-type-index", table_name="checkins")
    op.drop_index("created-by-index", table_name="checkins")
    op.drop_table("checkins")
    op.drop_index("ix_users_manager_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
