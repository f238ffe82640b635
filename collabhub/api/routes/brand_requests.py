"""Brand Requests — brand-side lifecycle endpoints.

Invariants:
    - Every route requires role=brand (403 otherwise)
    - Ownership of the specific request is checked by the engine
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from collabhub.api.deps import (
    PageParams, get_engine, get_negotiation, pagination, require_roles,
)
from collabhub.core.domain_types import ActorRole, AuthenticatedActor, RequestStatus
from collabhub.schemas.collaboration import (
    BrandResponseIn, CollaborationCreate, CollaborationOut, CollaborationPage,
    CollaborationUpdate, PaginationOut,
)
from collabhub.services.lifecycle_engine import LifecycleEngine
from collabhub.services.negotiation import NegotiationService

router = APIRouter(prefix="/api/v1/brand/requests", tags=["brand"])
_brand = require_roles(ActorRole.BRAND)


@router.post(
    "", response_model=CollaborationOut, status_code=status.HTTP_201_CREATED,
)
async def create_request(
    body: CollaborationCreate,
    actor: AuthenticatedActor = Depends(_brand),
    engine: LifecycleEngine = Depends(get_engine),
):
    """Send a collaboration request to a creator."""
    req = await engine.create_request(actor, body)
    return CollaborationOut.from_model(req)


@router.get("", response_model=CollaborationPage)
async def list_requests(
    status_filter: RequestStatus | None = Query(None, alias="status"),
    paging: PageParams = Depends(pagination),
    actor: AuthenticatedActor = Depends(_brand),
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
    actor: AuthenticatedActor = Depends(_brand),
    engine: LifecycleEngine = Depends(get_engine),
):
    return CollaborationOut.from_model(await engine.get_request(request_id, actor))


@router.patch("/{request_id}", response_model=CollaborationOut)
async def update_request(
    request_id: UUID,
    body: CollaborationUpdate,
    actor: AuthenticatedActor = Depends(_brand),
    engine: LifecycleEngine = Depends(get_engine),
):
    """Edit a request's terms while it is still pending."""
    req = await engine.update_request(request_id, actor, body)
    return CollaborationOut.from_model(req)


@router.post("/{request_id}/cancel", response_model=CollaborationOut)
async def cancel_request(
    request_id: UUID,
    actor: AuthenticatedActor = Depends(_brand),
    engine: LifecycleEngine = Depends(get_engine),
):
    return CollaborationOut.from_model(await engine.brand_cancel(request_id, actor))


@router.post("/{request_id}/complete", response_model=CollaborationOut)
async def complete_request(
    request_id: UUID,
    actor: AuthenticatedActor = Depends(_brand),
    engine: LifecycleEngine = Depends(get_engine),
):
    """Confirm delivery of an accepted collaboration."""
    return CollaborationOut.from_model(await engine.mark_completed(request_id, actor))


@router.post("/{request_id}/respond", response_model=CollaborationOut)
async def respond_to_creator(
    request_id: UUID,
    body: BrandResponseIn,
    actor: AuthenticatedActor = Depends(_brand),
    negotiation: NegotiationService = Depends(get_negotiation),
):
    req = await negotiation.brand_respond(request_id, actor, body)
    return CollaborationOut.from_model(req)
