"""Profile Views — ViewEvent producer endpoint.

Invariants:
    - Anonymous callers are allowed (viewer recorded as anonymous)
    - Append-only: there is no update or delete route
"""

from fastapi import APIRouter, Depends, status

from collabhub.api.deps import get_optional_actor, get_view_recorder
from collabhub.core.domain_types import AuthenticatedActor
from collabhub.schemas.view_event import ViewEventCreate
from collabhub.services.view_recorder import ViewRecorder

router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])


@router.post("/{subject_id}/views", status_code=status.HTTP_201_CREATED)
async def record_view(
    subject_id: str,
    body: ViewEventCreate,
    viewer: AuthenticatedActor | None = Depends(get_optional_actor),
    recorder: ViewRecorder = Depends(get_view_recorder),
):
    event = await recorder.record_view(
        subject_id, body.subject_type, viewer, body.interactions,
    )
    return {"id": str(event.id), "recorded_at": event.occurred_at.isoformat()}
