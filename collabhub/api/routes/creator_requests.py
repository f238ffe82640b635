"""Creator Requests — creator-side lifecycle endpoints.

Invariants:
    - Every route requires role=creator (403 otherwise)
    - The first GET of a request by its creator stamps viewed_at
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from collabhub.api.deps import (
    PageParams, get_engine, get_negotiation, pagination, require_roles,
)
from collabhub.core.domain_types import ActorRole, AuthenticatedActor, RequestStatus
from collabhub.schemas.collaboration import (
    CollaborationOut, CollaborationPage, CreatorResponseIn, PaginationOut,
)
from collabhub.services.lifecycle_engine import LifecycleEngine
from collabhub.services.negotiation import NegotiationService

router = APIRouter(prefix="/api/v1/creator/requests", tags=["creator"])
_creator = require_roles(ActorRole.CREATOR)


@router.get("", response_model=CollaborationPage)
async def list_requests(
    status_filter: RequestStatus | None = Query(None, alias="status"),
    paging: PageParams = Depends(pagination),
    actor: AuthenticatedActor = Depends(_creator),
    engine: LifecycleEngine = Depends(get_engine),
):
    page = await engine.list_requests(actor, status_filter, paging.page, paging.limit)
    return CollaborationPage(
        items=[CollaborationOut.from_model(r) for r in page.items],
        pagination=PaginationOut.build(page.page, page.limit, page.total),
    )


@router.get("/{request_id}", response_model=CollaborationOut)
async def get_request(
    request_id: UUID,
    actor: AuthenticatedActor = Depends(_creator),
    engine: LifecycleEngine = Depends(get_engine),
):
    return CollaborationOut.from_model(await engine.get_request(request_id, actor))


@router.post("/{request_id}/respond", response_model=CollaborationOut)
async def respond_to_request(
    request_id: UUID,
    body: CreatorResponseIn,
    actor: AuthenticatedActor = Depends(_creator),
    negotiation: NegotiationService = Depends(get_negotiation),
):
    """Message the brand, optionally with a counter-offer. Status stays pending."""
    req = await negotiation.creator_respond(request_id, actor, body)
    return CollaborationOut.from_model(req)


@router.post("/{request_id}/accept", response_model=CollaborationOut)
async def accept_request(
    request_id: UUID,
    actor: AuthenticatedActor = Depends(_creator),
    engine: LifecycleEngine = Depends(get_engine),
):
    return CollaborationOut.from_model(await engine.creator_accept(request_id, actor))


@router.post("/{request_id}/reject", response_model=CollaborationOut)
async def reject_request(
    request_id: UUID,
    actor: AuthenticatedActor = Depends(_creator),
    engine: LifecycleEngine = Depends(get_engine),
):
    return CollaborationOut.from_model(await engine.creator_reject(request_id, actor))


@router.post("/{request_id}/complete", response_model=CollaborationOut)
async def complete_request(
    request_id: UUID,
    actor: AuthenticatedActor = Depends(_creator),
    engine: LifecycleEngine = Depends(get_engine),
):
    return CollaborationOut.from_model(await engine.mark_completed(request_id, actor))
