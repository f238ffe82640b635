"""Lifecycle Engine — validates and applies every collaboration request transition.

Invariants:
    - Every status write goes through RequestStore.compare_and_set with the status
      read just before it as `expected`; the engine itself holds no locks
    - Losing a CAS race surfaces as InvalidTransitionError, never a silent no-op
    - Transitions are never retried; the caller decides whether to try again
    - Ownership: accept/reject by the creator, cancel by the brand, complete by
      either party, force-status by admins (who are still bound to the graph)
    - Notifications are published after commit and can never undo a transition
    - sweep_expired isolates per-record failures and is idempotent

Design Decisions:
    - markCompleted accepts either party: brand confirms delivery or creator
      reports it; there is no automatic completion at timeline end
    - Expiry TTL measures inactivity (updated_at), so a brand edit or any
      negotiation message restarts the clock
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import UUID

from collabhub.core import enforce_request as rules
from collabhub.core.clock import ensure_utc, utcnow
from collabhub.core.domain_types import (
    SYSTEM_ACTOR_ID, TRANSITION_EVENTS, ActorRole, AuthenticatedActor,
    LifecycleEventType, RequestStatus,
)
from collabhub.core.errors import (
    CollabError, ConcurrencyError, ForbiddenError, InvalidTransitionError,
    ResourceNotFoundError,
)
from collabhub.core.state_machine import check_transition
from collabhub.infrastructure.notifications import (
    LifecycleEvent, NotificationPublisher, publish_safely,
)
from collabhub.models.collaboration_request import CollaborationRequest
from collabhub.schemas.collaboration import (
    CollaborationCreate, CollaborationUpdate,
)
from collabhub.services.actor_directory import ActorDirectory
from collabhub.services.request_store import Page, RequestStore

logger = logging.getLogger(__name__)

_SYSTEM = AuthenticatedActor(id=SYSTEM_ACTOR_ID, role=ActorRole.ADMIN)


@dataclass
class SweepResult:
    scanned: int = 0
    expired: int = 0
    skipped: int = 0
    failed: int = 0
    failed_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "scanned": self.scanned, "expired": self.expired,
            "skipped": self.skipped, "failed": self.failed,
            "failed_ids": self.failed_ids,
        }


def require_role(actor: AuthenticatedActor, *roles: ActorRole) -> None:
    if actor.role not in roles:
        raise ForbiddenError(
            f"Role '{actor.role.value}' may not perform this action",
        )


def require_party(req: CollaborationRequest, actor: AuthenticatedActor) -> None:
    """Brand or creator of this request, or an admin."""
    if actor.is_admin:
        return
    if actor.id not in (req.brand_id, req.creator_id):
        raise ForbiddenError("Actor is not a party to this request")


class LifecycleEngine:
    """Creation and status transitions for collaboration requests."""

    def __init__(
        self,
        store: RequestStore,
        directory: ActorDirectory,
        publisher: NotificationPublisher,
        ttl_days: int = 30,
        default_currency: str = "USD",
    ):
        self.store = store
        self.directory = directory
        self.publisher = publisher
        self.ttl_days = ttl_days
        self.default_currency = default_currency

    # ─── Creation ────────────────────────────────────────────────

    async def create_request(
        self, brand: AuthenticatedActor, payload: CollaborationCreate,
    ) -> CollaborationRequest:
        require_role(brand, ActorRole.BRAND)
        rules.check_text_fields(
            title=payload.title, description=payload.description,
            initial_message=payload.initial_message,
        )
        rules.check_distinct_parties(brand.id, payload.creator_id)
        campaign_type = rules.check_campaign_type(payload.campaign_type)
        rules.check_budget(payload.budget.min, payload.budget.max)
        currency = rules.check_currency(payload.budget.currency or self.default_currency)
        rules.check_timeline(payload.timeline.start_date, payload.timeline.end_date)

        await self.directory.require(brand.id, ActorRole.BRAND)
        await self.directory.require(payload.creator_id, ActorRole.CREATOR)

        req = CollaborationRequest(
            brand_id=brand.id,
            creator_id=payload.creator_id,
            title=payload.title,
            description=payload.description,
            initial_message=payload.initial_message,
            campaign_type=campaign_type.value,
            budget_min=payload.budget.min,
            budget_max=payload.budget.max,
            currency=currency,
            start_date=ensure_utc(payload.timeline.start_date),
            end_date=ensure_utc(payload.timeline.end_date),
            is_flexible=payload.timeline.is_flexible,
            content_requirements=(
                payload.content_requirements.to_json()
                if payload.content_requirements else None
            ),
            is_urgent=payload.is_urgent,
            tags=[t.strip() for t in payload.tags if t.strip()],
        )
        created = await self.store.create(req, brand)
        logger.info(
            "Collaboration request created",
            extra={
                "request_id": str(created.id), "brand_id": created.brand_id,
                "creator_id": created.creator_id,
            },
        )
        await self._announce(LifecycleEventType.REQUEST_CREATED, created, brand)
        return created

    # ─── Reads ───────────────────────────────────────────────────

    async def get_request(
        self, request_id: UUID, actor: AuthenticatedActor,
    ) -> CollaborationRequest:
        """Fetch one request; the creator's first fetch stamps viewed_at."""
        req = await self.store.get(request_id)
        require_party(req, actor)
        if actor.role == ActorRole.CREATOR and req.viewed_at is None:
            await self.store.stamp_viewed(request_id, utcnow())
            req = await self.store.get(request_id)
        return req

    async def list_requests(
        self,
        actor: AuthenticatedActor,
        status: RequestStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page:
        return await self.store.list_by_actor(actor, status, page, limit)

    # ─── Brand edits ─────────────────────────────────────────────

    async def update_request(
        self,
        request_id: UUID,
        brand: AuthenticatedActor,
        patch: CollaborationUpdate,
    ) -> CollaborationRequest:
        """Edit terms of a pending request; status is untouched."""
        require_role(brand, ActorRole.BRAND)
        req = await self.store.get(request_id)
        if req.brand_id != brand.id:
            raise ForbiddenError("Only the issuing brand may edit this request")
        if RequestStatus(req.status) != RequestStatus.PENDING:
            raise InvalidTransitionError(req.status, req.status, operation="edit")

        values: dict = {}
        if patch.title is not None:
            rules.check_text_fields(title=patch.title)
            values["title"] = patch.title
        if patch.description is not None:
            rules.check_text_fields(description=patch.description)
            values["description"] = patch.description
        if patch.budget is not None:
            rules.check_budget(patch.budget.min, patch.budget.max)
            values["budget_min"] = patch.budget.min
            values["budget_max"] = patch.budget.max
            if patch.budget.currency:
                values["currency"] = rules.check_currency(patch.budget.currency)
        if patch.timeline is not None:
            rules.check_timeline(patch.timeline.start_date, patch.timeline.end_date)
            values["start_date"] = ensure_utc(patch.timeline.start_date)
            values["end_date"] = ensure_utc(patch.timeline.end_date)
            values["is_flexible"] = patch.timeline.is_flexible
        if patch.content_requirements is not None:
            values["content_requirements"] = patch.content_requirements.to_json()
        if patch.is_urgent is not None:
            values["is_urgent"] = patch.is_urgent
        if patch.tags is not None:
            values["tags"] = [t.strip() for t in patch.tags if t.strip()]

        try:
            return await self.store.compare_and_set(
                request_id, RequestStatus.PENDING, patch=values, actor=brand,
            )
        except ConcurrencyError as e:
            raise InvalidTransitionError(
                e.current_status or req.status, RequestStatus.PENDING.value,
                operation="edit",
            )

    # ─── Transitions ─────────────────────────────────────────────

    async def creator_accept(
        self, request_id: UUID, actor: AuthenticatedActor,
    ) -> CollaborationRequest:
        return await self._transition(
            request_id, actor, RequestStatus.ACCEPTED, owners=("creator",),
        )

    async def creator_reject(
        self, request_id: UUID, actor: AuthenticatedActor,
    ) -> CollaborationRequest:
        return await self._transition(
            request_id, actor, RequestStatus.REJECTED, owners=("creator",),
        )

    async def brand_cancel(
        self, request_id: UUID, actor: AuthenticatedActor,
    ) -> CollaborationRequest:
        return await self._transition(
            request_id, actor, RequestStatus.CANCELLED, owners=("brand",),
        )

    async def mark_completed(
        self, request_id: UUID, actor: AuthenticatedActor,
    ) -> CollaborationRequest:
        return await self._transition(
            request_id, actor, RequestStatus.COMPLETED, owners=("brand", "creator"),
        )

    async def force_status(
        self, request_id: UUID, admin: AuthenticatedActor, status: RequestStatus,
    ) -> CollaborationRequest:
        """Admin override of ownership; the state graph still applies."""
        require_role(admin, ActorRole.ADMIN)
        return await self._transition(request_id, admin, status, owners=())

    async def delete_request(
        self, request_id: UUID, admin: AuthenticatedActor,
    ) -> None:
        require_role(admin, ActorRole.ADMIN)
        await self.store.delete(request_id)
        logger.info(
            "Collaboration request deleted by admin",
            extra={"request_id": str(request_id), "actor_id": admin.id},
        )

    async def _transition(
        self,
        request_id: UUID,
        actor: AuthenticatedActor,
        target: RequestStatus,
        owners: tuple[str, ...],
    ) -> CollaborationRequest:
        req = await self.store.get(request_id)
        if owners:
            allowed = {
                "brand": (ActorRole.BRAND, req.brand_id),
                "creator": (ActorRole.CREATOR, req.creator_id),
            }
            if not any(
                actor.role == allowed[o][0] and actor.id == allowed[o][1]
                for o in owners
            ):
                raise ForbiddenError(
                    f"Only the request's {' or '.join(owners)} may do this",
                )
        current = RequestStatus(req.status)
        check_transition(current, target)

        try:
            updated = await self.store.compare_and_set(
                request_id, current, new_status=target, actor=actor,
            )
        except ConcurrencyError as e:
            logger.info(
                "Transition lost a concurrent race",
                extra={
                    "request_id": str(request_id), "from_status": current.value,
                    "to_status": target.value, "actor_id": actor.id,
                },
            )
            raise InvalidTransitionError(
                e.current_status or current.value, target.value,
            )

        logger.info(
            "Collaboration request transitioned",
            extra={
                "request_id": str(request_id), "from_status": current.value,
                "to_status": target.value, "actor_id": actor.id,
            },
        )
        await self._announce(TRANSITION_EVENTS[target], updated, actor)
        return updated

    # ─── Expiry sweep ────────────────────────────────────────────

    async def sweep_expired(self, now: datetime | None = None) -> SweepResult:
        """Expire pending requests idle longer than the TTL, one CAS each."""
        now = ensure_utc(now or utcnow())
        cutoff = now - timedelta(days=self.ttl_days)
        result = SweepResult()
        candidates = await self.store.list_expirable(cutoff)
        result.scanned = len(candidates)

        for request_id in candidates:
            try:
                updated = await self.store.compare_and_set(
                    request_id, RequestStatus.PENDING,
                    new_status=RequestStatus.EXPIRED, actor=_SYSTEM,
                    stale_before=cutoff,
                )
            except (ConcurrencyError, ResourceNotFoundError):
                # closed, edited, or deleted since the scan
                result.skipped += 1
                continue
            except CollabError as e:
                result.failed += 1
                result.failed_ids.append(str(request_id))
                logger.error(
                    f"Expiry failed for request {request_id}: {e.message}",
                    extra={"request_id": str(request_id), "error_code": e.code},
                )
                continue
            result.expired += 1
            await self._announce(LifecycleEventType.REQUEST_EXPIRED, updated, _SYSTEM)

        logger.info(
            f"Expiry sweep finished: {result.expired} expired, "
            f"{result.skipped} skipped, {result.failed} failed",
        )
        return result

    async def _announce(
        self,
        event_type: LifecycleEventType,
        req: CollaborationRequest,
        actor: AuthenticatedActor,
        payload: dict | None = None,
    ) -> None:
        await publish_safely(self.publisher, LifecycleEvent(
            type=event_type,
            request_id=str(req.id),
            brand_id=req.brand_id,
            creator_id=req.creator_id,
            actor_id=actor.id,
            payload=payload or {"status": req.status},
        ))
