"""gateway tables

Revision ID: 3c1f9a2b7d40
Revises:
Create Date: 2026-10-19 09:12:44.481203

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f9a2b7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create credential, in-app notification and delivery ledger tables."""
    op.create_table(
        "cicd_provider_credentials",
        sa.Column("id", sa.VARCHAR(length=36), nullable=False),
        sa.Column("user_id", sa.VARCHAR(length=64), nullable=False),
        sa.Column("provider", sa.VARCHAR(length=32), nullable=False),
        sa.Column("encrypted_credentials", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "provider", name="uq_cicd_credentials_user_provider"),
    )
    op.create_index(
        "ix_cicd_provider_credentials_user_id",
        "cicd_provider_credentials",
        ["user_id"],
    )

    op.create_table(
        "in_app_notifications",
        sa.Column("id", sa.VARCHAR(length=36), nullable=False),
        sa.Column("user_id", sa.VARCHAR(length=64), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("type", sa.VARCHAR(length=40), nullable=False),
        sa.Column("entity_id", sa.Text(), nullable=True),
        sa.Column("entity_type", sa.VARCHAR(length=40), nullable=True),
        sa.Column("route_to", sa.VARCHAR(length=40), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_in_app_notifications_user_id", "in_app_notifications", ["user_id"])
    op.create_index(
        "ix_in_app_notifications_created_at", "in_app_notifications", ["created_at"]
    )

    op.create_table(
        "notification_deliveries",
        sa.Column("id", sa.VARCHAR(length=36), nullable=False),
        sa.Column("channel", sa.VARCHAR(length=20), nullable=False),
        sa.Column("recipient", sa.Text(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("status", sa.VARCHAR(length=20), nullable=False),
        sa.Column("retry_count", sa.SmallInteger(), nullable=False),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_notification_deliveries_status", "notification_deliveries", ["status"]
    )


def downgrade() -> None:
    """Drop the gateway tables."""
    op.drop_index("ix_notification_deliveries_status", table_name="notification_deliveries")
    op.drop_table("notification_deliveries")
    op.drop_index("ix_in_app_notifications_created_at", table_name="in_app_notifications")
    op.drop_index("ix_in_app_notifications_user_id", table_name="in_app_notifications")
    op.drop_table("in_app_notifications")
    op.drop_index(
        "ix_cicd_provider_credentials_user_id", table_name="cicd_provider_credentials"
    )
    op.drop_table("cicd_provider_credentials")
