"""View Recorder — append-only producer for the ViewEvent log.

Invariants:
    - Only inserts; existing events are never touched
    - Independent of the request lifecycle (no status reads or writes)
    - Anonymous viewers are stored with viewer_id NULL
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.clock import utcnow
from collabhub.core.domain_types import (
    AuthenticatedActor, InteractionFlag, SubjectType, ViewerType,
)
from collabhub.core.errors import DatabaseError, PayloadValidationError
from collabhub.models.view_event import ViewEvent

logger = logging.getLogger(__name__)


class ViewRecorder:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_view(
        self,
        subject_id: str,
        subject_type: SubjectType,
        viewer: AuthenticatedActor | None,
        interactions: list[InteractionFlag],
    ) -> ViewEvent:
        if viewer is not None and viewer.id == subject_id:
            raise PayloadValidationError("Actors cannot record views of themselves", "subject_id")
        flags = set(interactions)
        event = ViewEvent(
            subject_id=subject_id,
            subject_type=subject_type.value,
            viewer_id=viewer.id if viewer else None,
            viewer_type=(
                ViewerType(viewer.role.value).value if viewer else ViewerType.ANONYMOUS.value
            ),
            occurred_at=utcnow(),
            **{f.value: f in flags for f in InteractionFlag},
        )
        self.db.add(event)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to record view of {subject_id}: {e}")
            raise DatabaseError("Could not record view", "record_view")
        return event
