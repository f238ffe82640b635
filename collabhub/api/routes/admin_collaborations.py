"""Admin Collaborations — platform-wide listing, status override, deletion, expiry sweep.

Invariants:
    - Every route requires role=admin
    - Status override follows the state graph; only ownership is bypassed
    - DELETE cascades to the request's status-change log
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from collabhub.api.deps import (
    PageParams, get_engine, pagination, require_roles,
)
from collabhub.core.domain_types import ActorRole, AuthenticatedActor, RequestStatus
from collabhub.schemas.collaboration import (
    CollaborationOut, CollaborationPage, PaginationOut, StatusOverride,
)
from collabhub.services.lifecycle_engine import LifecycleEngine

router = APIRouter(prefix="/api/v1/admin/collaborations", tags=["admin"])
_admin = require_roles(ActorRole.ADMIN)


@router.get("", response_model=CollaborationPage)
async def list_collaborations(
    status_filter: RequestStatus | None = Query(None, alias="status"),
    paging: PageParams = Depends(pagination),
    actor: AuthenticatedActor = Depends(_admin),
    engine: LifecycleEngine = Depends(get_engine),
):
    page = await engine.list_requests(actor, status_filter, paging.page, paging.limit)
    return CollaborationPage(
        items=[CollaborationOut.from_model(r) for r in page.items],
        pagination=PaginationOut.build(page.page, page.limit, page.total),
    )


@router.post("/sweep-expired")
async def sweep_expired(
    now: datetime | None = Query(None),
    actor: AuthenticatedActor = Depends(_admin),
    engine: LifecycleEngine = Depends(get_engine),
):
    """Run one expiry sweep now (same operation the scheduled CLI job runs)."""
    result = await engine.sweep_expired(now)
    return result.to_dict()


@router.get("/{request_id}")
async def get_collaboration(
    request_id: UUID,
    actor: AuthenticatedActor = Depends(_admin),
    engine: LifecycleEngine = Depends(get_engine),
):
    """Request details plus its status-change history."""
    req = await engine.get_request(request_id, actor)
    return {
        "request": CollaborationOut.from_model(req).model_dump(mode="json"),
        "history": [
            {
                "from_status": c.from_status,
                "to_status": c.to_status,
                "actor_id": c.actor_id,
                "actor_role": c.actor_role,
                "occurred_at": c.occurred_at.isoformat(),
            }
            for c in req.status_changes
        ],
    }


@router.put("/{request_id}/status", response_model=CollaborationOut)
async def force_status(
    request_id: UUID,
    body: StatusOverride,
    actor: AuthenticatedActor = Depends(_admin),
    engine: LifecycleEngine = Depends(get_engine),
):
    req = await engine.force_status(request_id, actor, body.status)
    return CollaborationOut.from_model(req)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_collaboration(
    request_id: UUID,
    actor: AuthenticatedActor = Depends(_admin),
    engine: LifecycleEngine = Depends(get_engine),
):
    await engine.delete_request(request_id, actor)
