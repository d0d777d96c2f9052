"""Initial pass admin schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-01-15 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        sa.Column("admin_pin", sa.String(20), nullable=False),
        sa.Column("staff_pin", sa.String(20), nullable=False),
        _created_at(),
    )

    # Deleting a client removes everything below it through these cascades
    op.create_table(
        "campaigns",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("client_id", sa.String(36), sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("config", postgresql.JSONB(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_campaigns_client_id", "campaigns", ["client_id"])

    op.create_table(
        "passes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("campaign_id", sa.String(36), sa.ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False),
        sa.Column("serial_number", sa.String(100), nullable=False, unique=True),
        sa.Column("current_state", postgresql.JSONB(), nullable=True),
        sa.Column("last_scanned_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_passes_campaign_id", "passes", ["campaign_id"])

    op.create_table(
        "push_requests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("campaign_id", sa.String(36), sa.ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("edited_message", sa.Text(), nullable=True),
        sa.Column("edited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "status IN ('pending', 'scheduled', 'approved', 'rejected')", name="ck_push_requests_status"
        ),
    )
    op.create_index("ix_push_requests_campaign_id", "push_requests", ["campaign_id"])
    op.create_index("idx_push_requests_created", "push_requests", ["created_at"])

    op.create_table(
        "dynamic_routes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "client_id", sa.String(36), sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, unique=True
        ),
        sa.Column("code", sa.String(20), nullable=False, unique=True),
        sa.Column("target_slug", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "automation_rules",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("campaign_id", sa.String(36), sa.ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("rule_type", sa.String(30), nullable=False),
        sa.Column("config", postgresql.JSONB(), nullable=True),
        sa.Column("message_template", sa.Text(), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "rule_type IN ('birthday', 'weekday_schedule', 'inactivity', 'custom')",
            name="ck_automation_rules_rule_type",
        ),
    )
    op.create_index("ix_automation_rules_campaign_id", "automation_rules", ["campaign_id"])

    op.create_table(
        "client_sessions",
        sa.Column("token", sa.String(64), primary_key=True),
        sa.Column("client_id", sa.String(36), sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(10), nullable=False),
        _created_at(),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'staff')", name="ck_client_sessions_role"),
    )
    op.create_index("ix_client_sessions_client_id", "client_sessions", ["client_id"])
    op.create_index("ix_client_sessions_expires_at", "client_sessions", ["expires_at"])


def downgrade() -> None:
    op.drop_table("client_sessions")
    op.drop_table("automation_rules")
    op.drop_table("dynamic_routes")
    op.drop_table("push_requests")
    op.drop_table("passes")
    op.drop_table("campaigns")
    op.drop_table("clients")
