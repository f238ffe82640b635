"""Negotiation — creator and brand messages attached to a collaboration request.

Invariants:
    - creator_respond is legal only while status = pending; a counter-offer can
      therefore never be written on a request that left pending
    - brand_respond is legal in any non-terminal status (pending, accepted)
    - Neither operation changes `status`; both are CAS-guarded on the status they
      require, so a concurrent close makes them fail with InvalidTransitionError
    - response_latency_hours is set by the first creator response only
    - Each response replaces the previous one from the same side
"""

import logging
from uuid import UUID

from sqlalchemy import func

from collabhub.core import enforce_request as rules
from collabhub.core.clock import ensure_utc, hours_between, utcnow
from collabhub.core.domain_types import (
    ACTIVE_STATUSES, ActorRole, AuthenticatedActor, LifecycleEventType,
    RequestStatus,
)
from collabhub.core.errors import (
    ConcurrencyError, ForbiddenError, InvalidTransitionError,
)
from collabhub.infrastructure.notifications import (
    LifecycleEvent, NotificationPublisher, publish_safely,
)
from collabhub.models.collaboration_request import CollaborationRequest
from collabhub.schemas.collaboration import BrandResponseIn, CreatorResponseIn
from collabhub.services.request_store import RequestStore

logger = logging.getLogger(__name__)


class NegotiationService:
    """Back-and-forth messaging before a binding accept/reject."""

    def __init__(self, store: RequestStore, publisher: NotificationPublisher):
        self.store = store
        self.publisher = publisher

    async def creator_respond(
        self,
        request_id: UUID,
        actor: AuthenticatedActor,
        body: CreatorResponseIn,
    ) -> CollaborationRequest:
        req = await self.store.get(request_id)
        if actor.role != ActorRole.CREATOR or actor.id != req.creator_id:
            raise ForbiddenError("Only the addressed creator may respond")
        if RequestStatus(req.status) != RequestStatus.PENDING:
            raise InvalidTransitionError(req.status, req.status, operation="respond to")
        rules.check_text_fields(message=body.message)

        now = utcnow()
        counter = None
        if body.counter_offer is not None:
            counter = {"budget": body.counter_offer.budget, "timeline": None}
            if body.counter_offer.timeline is not None:
                start = ensure_utc(body.counter_offer.timeline.start_date)
                end = ensure_utc(body.counter_offer.timeline.end_date)
                rules.check_timeline(start, end, field="counter_offer.timeline")
                counter["timeline"] = {
                    "start_date": start.isoformat(), "end_date": end.isoformat(),
                }
        response = {
            "message": body.message,
            "counter_offer": counter,
            "responded_at": now.isoformat(),
        }
        patch = {
            "creator_response": response,
            "response_latency_hours": func.coalesce(
                CollaborationRequest.response_latency_hours,
                hours_between(req.created_at, now),
            ),
        }
        try:
            updated = await self.store.compare_and_set(
                request_id, RequestStatus.PENDING, patch=patch, actor=actor,
            )
        except ConcurrencyError as e:
            raise InvalidTransitionError(
                e.current_status or req.status, RequestStatus.PENDING.value,
                operation="respond to",
            )
        logger.info(
            "Creator responded",
            extra={"request_id": str(request_id), "actor_id": actor.id},
        )
        await self._announce(updated, actor, {
            "from": ActorRole.CREATOR.value,
            "has_counter_offer": counter is not None,
        })
        return updated

    async def brand_respond(
        self,
        request_id: UUID,
        actor: AuthenticatedActor,
        body: BrandResponseIn,
    ) -> CollaborationRequest:
        req = await self.store.get(request_id)
        if actor.role != ActorRole.BRAND or actor.id != req.brand_id:
            raise ForbiddenError("Only the issuing brand may respond")
        if RequestStatus(req.status) not in ACTIVE_STATUSES:
            raise InvalidTransitionError(req.status, req.status, operation="respond to")
        rules.check_text_fields(message=body.message)

        response = {"message": body.message, "responded_at": utcnow().isoformat()}
        try:
            updated = await self.store.compare_and_set(
                request_id, ACTIVE_STATUSES,
                patch={"brand_response": response}, actor=actor,
            )
        except ConcurrencyError as e:
            raise InvalidTransitionError(
                e.current_status or req.status, req.status, operation="respond to",
            )
        logger.info(
            "Brand responded",
            extra={"request_id": str(request_id), "actor_id": actor.id},
        )
        await self._announce(updated, actor, {"from": ActorRole.BRAND.value})
        return updated

    async def _announce(
        self, req: CollaborationRequest, actor: AuthenticatedActor, payload: dict,
    ) -> None:
        await publish_safely(self.publisher, LifecycleEvent(
            type=LifecycleEventType.RESPONSE_RECEIVED,
            request_id=str(req.id),
            brand_id=req.brand_id,
            creator_id=req.creator_id,
            actor_id=actor.id,
            payload=payload,
        ))
