"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00.000000

One row per mobile number holding the whole tracker document as JSON.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_data",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mobile", sa.String(32), nullable=False),
        sa.Column("habits", sa.JSON(), nullable=False),
        sa.Column("history", sa.JSON(), nullable=False),
        sa.Column("tasks_by_date", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_data_id", "user_data", ["id"])
    op.create_index("ix_user_data_mobile", "user_data", ["mobile"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_user_data_mobile", table_name="user_data")
    op.drop_index("ix_user_data_id", table_name="user_data")
    op.drop_table("user_data")
