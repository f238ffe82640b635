"""Initial schema — actors, collaboration_requests, status changes, view_events.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "actors",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("display_name", sa.String(200), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "collaboration_requests",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("brand_id", sa.String(64), nullable=False),
        sa.Column("creator_id", sa.String(64), nullable=False),
        sa.Column("active_pair_key", sa.String(140), nullable=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("initial_message", sa.Text, nullable=False),
        sa.Column("campaign_type", sa.String(40), nullable=False),
        sa.Column("budget_min", sa.Float, nullable=False),
        sa.Column("budget_max", sa.Float, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_flexible", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("content_requirements", sa.JSON, nullable=True),
        sa.Column("is_urgent", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("creator_response", sa.JSON, nullable=True),
        sa.Column("brand_response", sa.JSON, nullable=True),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("response_latency_hours", sa.Float, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("active_pair_key", name="uq_collab_active_pair"),
    )
    op.create_index("ix_collab_brand_creator", "collaboration_requests", ["brand_id", "creator_id"])
    op.create_index("ix_collab_status_created", "collaboration_requests", ["status", "created_at"])
    op.create_index("ix_collab_creator_status", "collaboration_requests", ["creator_id", "status"])

    op.create_table(
        "collaboration_status_changes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "request_id", UUID(as_uuid=True),
            sa.ForeignKey("collaboration_requests.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("from_status", sa.String(20), nullable=True),
        sa.Column("to_status", sa.String(20), nullable=False),
        sa.Column("actor_id", sa.String(64), nullable=True),
        sa.Column("actor_role", sa.String(20), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_collaboration_status_changes_request_id",
        "collaboration_status_changes", ["request_id"],
    )

    op.create_table(
        "view_events",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("subject_id", sa.String(64), nullable=False),
        sa.Column("subject_type", sa.String(20), nullable=False),
        sa.Column("viewer_id", sa.String(64), nullable=True),
        sa.Column("viewer_type", sa.String(20), nullable=False, server_default="anonymous"),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("profile_clicked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("contact_clicked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("portfolio_viewed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("collaboration_requested", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_view_subject", "view_events", ["subject_id", "subject_type"])
    op.create_index("ix_view_viewer_subject", "view_events", ["viewer_id", "subject_id"])
    op.create_index("ix_view_events_occurred_at", "view_events", ["occurred_at"])


def downgrade() -> None:
    op.drop_table("view_events")
    op.drop_table("collaboration_status_changes")
    op.drop_table("collaboration_requests")
    op.drop_table("actors")
