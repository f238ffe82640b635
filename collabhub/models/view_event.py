"""ViewEvent ORM — append-only log of profile views and interactions.

Invariants:
    - Rows are inserted, never updated or deleted by this service
    - viewer_id is NULL for anonymous viewers
    - One boolean column per InteractionFlag
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from collabhub.db.base import Base


class ViewEvent(Base):
    """A single view of a creator or brand profile."""
    __tablename__ = "view_events"
    __table_args__ = (
        Index("ix_view_subject", "subject_id", "subject_type"),
        Index("ix_view_viewer_subject", "viewer_id", "subject_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    subject_id: Mapped[str] = mapped_column(String(64), nullable=False)
    subject_type: Mapped[str] = mapped_column(String(20), nullable=False)
    viewer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    viewer_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="anonymous",
    )
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    profile_clicked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    contact_clicked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    portfolio_viewed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    collaboration_requested: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
