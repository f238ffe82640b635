"""CollaborationRequest ORM — the aggregate root of a brand/creator negotiation.

Invariants:
    - id is a UUID primary key generated at creation, immutable
    - brand_id, creator_id immutable after creation
    - active_pair_key == "brand:creator" while status is pending/accepted, NULL otherwise;
      the UNIQUE constraint on it is the duplicate guard
    - status is written only by services/request_store.compare_and_set
    - viewed_at and response_latency_hours are written once, never reverted

Design Decisions:
    - Budget and timeline flattened into columns: aggregations group and sum them in SQL
    - creator_response / brand_response as JSON: negotiation payloads are read whole
    - NULLs are distinct under UNIQUE in both PostgreSQL and SQLite, so any number of
      closed requests may share a pair
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Text, Float, Boolean, DateTime, JSON, Index, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from collabhub.db.base import Base


class CollaborationRequest(Base):
    """A brand's paid collaboration offer to a creator."""
    __tablename__ = "collaboration_requests"
    __table_args__ = (
        UniqueConstraint("active_pair_key", name="uq_collab_active_pair"),
        Index("ix_collab_brand_creator", "brand_id", "creator_id"),
        Index("ix_collab_status_created", "status", "created_at"),
        Index("ix_collab_creator_status", "creator_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    brand_id: Mapped[str] = mapped_column(String(64), nullable=False)
    creator_id: Mapped[str] = mapped_column(String(64), nullable=False)
    active_pair_key: Mapped[str | None] = mapped_column(
        String(140), nullable=True,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    initial_message: Mapped[str] = mapped_column(Text, nullable=False)
    campaign_type: Mapped[str] = mapped_column(String(40), nullable=False)

    budget_min: Mapped[float] = mapped_column(Float, nullable=False)
    budget_max: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD",
    )

    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    is_flexible: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )

    # {"platforms": [...], "content_types": [...], "deliverables": [...], "brand_guidelines": str}
    content_requirements: Mapped[dict | None] = mapped_column(
        JSON, nullable=True,
    )
    is_urgent: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    creator_response: Mapped[dict | None] = mapped_column(
        JSON, nullable=True,
    )
    brand_response: Mapped[dict | None] = mapped_column(
        JSON, nullable=True,
    )

    viewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    response_latency_hours: Mapped[float | None] = mapped_column(
        Float, nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    status_changes: Mapped[list["StatusChange"]] = relationship(
        "StatusChange", back_populates="request",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="StatusChange.occurred_at",
    )
