"""initial engagement schema

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2025-07-14 10:12:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1a9c2d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the view catalogue and engagement log tables."""
    op.create_table(
        "tbl_views_available",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("view_name", sa.String(length=255), nullable=False),
        sa.Column(
            "created_date",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.UniqueConstraint("view_name", name="uq_views_available_view_name"),
    )

    op.create_table(
        "tbl_engagement_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("view_id", sa.Integer(), nullable=False),
        sa.Column("duration_seconds", sa.Integer(), nullable=False),
        sa.Column(
            "viewed_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "created_date",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "duration_seconds >= 0 AND duration_seconds <= 86400",
            name="ck_engagement_logs_duration_range",
        ),
        sa.ForeignKeyConstraint(
            ["view_id"],
            ["tbl_views_available.id"],
            name="fk_engagement_logs_view_id",
            ondelete="RESTRICT",
        ),
    )
    op.create_index("ix_tbl_engagement_logs_user_id", "tbl_engagement_logs", ["user_id"])
    op.create_index(
        "ix_engagement_logs_user_viewed_at",
        "tbl_engagement_logs",
        ["user_id", "viewed_at"],
    )


def downgrade() -> None:
    """Drop engagement tables."""
    op.drop_index("ix_engagement_logs_user_viewed_at", table_name="tbl_engagement_logs")
    op.drop_index("ix_tbl_engagement_logs_user_id", table_name="tbl_engagement_logs")
    op.drop_table("tbl_engagement_logs")
    op.drop_table("tbl_views_available")
