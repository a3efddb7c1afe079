"""logistics

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18

Adds logistics_items and logistics_assignments.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "logistics_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column(
            "type",
            sa.Enum(
                "accommodation", "transportation", "equipment", "catering", "venue", "other", name="logisticstype",
            ),
            nullable=False,
            index=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("capacity", sa.Integer, nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "confirmed", "cancelled", "completed", name="logisticsstatus"),
            nullable=False,
            server_default="pending",
            index=True,
        ),
        sa.Column("provider", sa.String(255), nullable=True),
        sa.Column("contact_info", sa.Text, nullable=False, server_default="{}"),
        sa.Column("cost", sa.Float, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("extra", sa.Text, nullable=False, server_default="{}"),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("updated_by", sa.String(36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("capacity IS NULL OR capacity >= 1", name="ck_logistics_items_capacity"),
        sa.CheckConstraint("cost IS NULL OR cost >= 0", name="ck_logistics_items_cost"),
    )

    op.create_table(
        "logistics_assignments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "item_id", sa.String(36), sa.ForeignKey("logistics_items.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("guest_id", sa.String(36), sa.ForeignKey("guests.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("checked_in", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("checked_in_by", sa.String(36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("checked_out", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("checked_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("checked_out_by", sa.String(36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("item_id", "guest_id", name="uq_logistics_assignments_item_guest"),
    )


def downgrade() -> None:
    op.drop_table("logistics_assignments")
    op.drop_table("logistics_items")
