"""API Dependencies — authenticated actor, pagination, and service wiring.

Invariants:
    - The actor comes from headers set by the trusted auth gateway; missing or
      unknown role → 401, wrong role for the surface → 403
    - page >= 1 and 1 <= limit <= 100; out-of-range values are rejected (400), never clamped
    - Each request gets fresh service objects over its own DB session
"""

from dataclasses import dataclass

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.config import get_settings
from collabhub.core.domain_types import ActorRole, AuthenticatedActor
from collabhub.core.errors import AuthenticationRequiredError, ForbiddenError
from collabhub.infrastructure.database import get_db
from collabhub.infrastructure.notifications import (
    NotificationPublisher, get_publisher,
)
from collabhub.infrastructure.read_retry import ReadRetryPolicy
from collabhub.services.actor_directory import ActorDirectory
from collabhub.services.engagement_aggregator import EngagementAggregator
from collabhub.services.lifecycle_engine import LifecycleEngine
from collabhub.services.negotiation import NegotiationService
from collabhub.services.request_store import RequestStore
from collabhub.services.view_recorder import ViewRecorder


def _read_actor(request: Request) -> AuthenticatedActor | None:
    settings = get_settings()
    actor_id = request.headers.get(settings.actor_id_header, "").strip()
    role = request.headers.get(settings.actor_role_header, "").strip().lower()
    if not actor_id or not role:
        return None
    try:
        return AuthenticatedActor(id=actor_id, role=ActorRole(role))
    except ValueError:
        raise AuthenticationRequiredError()


async def get_current_actor(request: Request) -> AuthenticatedActor:
    actor = _read_actor(request)
    if actor is None:
        raise AuthenticationRequiredError()
    return actor


async def get_optional_actor(request: Request) -> AuthenticatedActor | None:
    return _read_actor(request)


def require_roles(*roles: ActorRole):
    """Dependency factory: the caller must hold one of `roles`."""
    async def _dependency(
        actor: AuthenticatedActor = Depends(get_current_actor),
    ) -> AuthenticatedActor:
        if actor.role not in roles:
            raise ForbiddenError(
                f"This endpoint requires role: {', '.join(r.value for r in roles)}",
            )
        return actor
    return _dependency


@dataclass
class PageParams:
    page: int
    limit: int


def pagination(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> PageParams:
    return PageParams(page=page, limit=limit)


def _retry_policy() -> ReadRetryPolicy:
    settings = get_settings()
    return ReadRetryPolicy(
        attempts=settings.read_retry_attempts,
        base_delay_ms=settings.read_retry_base_delay_ms,
        max_delay_ms=settings.read_retry_max_delay_ms,
    )


def get_engine(
    db: AsyncSession = Depends(get_db),
    publisher: NotificationPublisher = Depends(get_publisher),
) -> LifecycleEngine:
    settings = get_settings()
    retry = _retry_policy()
    return LifecycleEngine(
        RequestStore(db, retry), ActorDirectory(db, retry), publisher,
        ttl_days=settings.request_ttl_days,
        default_currency=settings.default_currency,
    )


def get_negotiation(
    db: AsyncSession = Depends(get_db),
    publisher: NotificationPublisher = Depends(get_publisher),
) -> NegotiationService:
    return NegotiationService(RequestStore(db, _retry_policy()), publisher)


def get_aggregator(db: AsyncSession = Depends(get_db)) -> EngagementAggregator:
    return EngagementAggregator(db, _retry_policy())


def get_view_recorder(db: AsyncSession = Depends(get_db)) -> ViewRecorder:
    return ViewRecorder(db)
