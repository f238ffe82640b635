"""Actor ORM — read model of the identity service's brand/creator/admin profiles.

Invariants:
    - id is the opaque string issued by the identity collaborator (never generated here)
    - role is one of ActorRole; only active creators are valid request targets

Design Decisions:
    - Kept minimal: the lifecycle only needs existence, role, and is_active
"""

from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from collabhub.db.base import Base


class Actor(Base):
    """Brand, creator, or admin identity known to the marketplace."""
    __tablename__ = "actors"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    display_name: Mapped[str] = mapped_column(
        String(200), nullable=False, default="",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
