"""Request Store — persistence, indexing, and compare-and-swap for collaboration requests.

Invariants:
    - create() inserts the row with status=pending and its active_pair_key in ONE commit;
      the UNIQUE constraint makes guard + insert a single atomic unit
    - compare_and_set() is the only writer of `status`: UPDATE ... WHERE status IN expected;
      zero rows matched → ConcurrencyError (never a silent overwrite)
    - Leaving the active set clears active_pair_key in the same UPDATE
    - Every status change appends a StatusChange row in the same transaction
    - Reads go through ReadRetryPolicy; writes are never retried
    - No notifications are sent from here

Design Decisions:
    - Core UPDATE with synchronize_session=False, then re-select with populate_existing:
      the identity map never hides the committed row
    - Write-once fields use COALESCE(column, new) inside the UPDATE
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.clock import utcnow
from collabhub.core.domain_types import (
    ActorRole, AuthenticatedActor, RequestStatus,
)
from collabhub.core.errors import (
    ConcurrencyError, DatabaseError, DuplicateActiveRequestError,
    ResourceNotFoundError,
)
from collabhub.core.state_machine import active_pair_key, is_active
from collabhub.infrastructure.read_retry import ReadRetryPolicy
from collabhub.models.collaboration_request import CollaborationRequest
from collabhub.models.status_change import StatusChange

logger = logging.getLogger(__name__)


@dataclass
class Page:
    items: list[CollaborationRequest]
    total: int
    page: int
    limit: int


class RequestStore:
    """Collaboration request table access over one AsyncSession."""

    def __init__(self, db: AsyncSession, retry: ReadRetryPolicy | None = None):
        self.db = db
        self.retry = retry or ReadRetryPolicy()

    # ─── Writes ──────────────────────────────────────────────────

    async def create(
        self, req: CollaborationRequest, actor: AuthenticatedActor,
    ) -> CollaborationRequest:
        """Insert a new pending request; raises DuplicateActiveRequestError on a live pair."""
        now = utcnow()
        req.status = RequestStatus.PENDING.value
        req.active_pair_key = active_pair_key(req.brand_id, req.creator_id)
        req.created_at = now
        req.updated_at = now
        req.status_changes = [StatusChange(
            from_status=None, to_status=RequestStatus.PENDING.value,
            actor_id=actor.id, actor_role=actor.role.value, occurred_at=now,
        )]
        self.db.add(req)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            existing = await self.find_active(req.brand_id, req.creator_id)
            if existing is None:
                raise ConcurrencyError(
                    "Request creation conflicted with a concurrent write",
                )
            raise DuplicateActiveRequestError(str(existing.id))
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to insert collaboration request: {e}")
            raise DatabaseError("Could not persist request", "create")
        return req

    async def compare_and_set(
        self,
        request_id: UUID,
        expected: RequestStatus | Iterable[RequestStatus],
        new_status: RequestStatus | None = None,
        patch: dict[str, Any] | None = None,
        actor: AuthenticatedActor | None = None,
        stale_before: datetime | None = None,
    ) -> CollaborationRequest:
        """Apply `patch` (and optionally `new_status`) only if status is still `expected`."""
        expected_set = (
            {expected} if isinstance(expected, RequestStatus) else set(expected)
        )
        values: dict[str, Any] = dict(patch or {})
        values["updated_at"] = utcnow()
        if new_status is not None:
            values["status"] = new_status.value
            if not is_active(new_status):
                values["active_pair_key"] = None

        conditions = [
            CollaborationRequest.id == request_id,
            CollaborationRequest.status.in_([s.value for s in expected_set]),
        ]
        if stale_before is not None:
            conditions.append(CollaborationRequest.updated_at < stale_before)

        stmt = (
            update(CollaborationRequest)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount != 1:
                await self.db.rollback()
                current = await self._fetch(request_id)
                if current is None:
                    raise ResourceNotFoundError("CollaborationRequest", str(request_id))
                raise ConcurrencyError(
                    f"Request {request_id} is '{current.status}', expected "
                    f"{sorted(s.value for s in expected_set)}",
                    current_status=current.status,
                )
            if new_status is not None:
                self.db.add(StatusChange(
                    request_id=request_id,
                    from_status=(
                        next(iter(expected_set)).value if len(expected_set) == 1 else None
                    ),
                    to_status=new_status.value,
                    actor_id=actor.id if actor else None,
                    actor_role=(actor.role.value if actor else "system"),
                    occurred_at=values["updated_at"],
                ))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"CAS update failed for {request_id}: {e}")
            raise DatabaseError("Could not update request", "compare_and_set")
        return await self.get(request_id)

    async def stamp_viewed(self, request_id: UUID, when: datetime) -> None:
        """Set viewed_at once; later calls leave the first value."""
        stmt = (
            update(CollaborationRequest)
            .where(
                CollaborationRequest.id == request_id,
                CollaborationRequest.viewed_at.is_(None),
            )
            .values(viewed_at=when)
            .execution_options(synchronize_session=False)
        )
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to stamp viewed_at for {request_id}: {e}")
            raise DatabaseError("Could not update request", "stamp_viewed")

    async def delete(self, request_id: UUID) -> None:
        """Hard delete (admin only) — cascades to the status-change log."""
        req = await self.get(request_id)
        try:
            await self.db.delete(req)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete request {request_id}: {e}")
            raise DatabaseError("Could not delete request", "delete")

    # ─── Reads ───────────────────────────────────────────────────

    async def get(self, request_id: UUID) -> CollaborationRequest:
        req = await self.retry.run(
            self.db, lambda: self._fetch(request_id), "get",
        )
        if req is None:
            raise ResourceNotFoundError("CollaborationRequest", str(request_id))
        return req

    async def find_active(
        self, brand_id: str, creator_id: str,
    ) -> CollaborationRequest | None:
        async def _query():
            result = await self.db.execute(
                select(CollaborationRequest)
                .where(
                    CollaborationRequest.active_pair_key
                    == active_pair_key(brand_id, creator_id),
                )
                .execution_options(populate_existing=True),
            )
            return result.scalar_one_or_none()

        return await self.retry.run(self.db, _query, "find_active")

    async def list_by_actor(
        self,
        actor: AuthenticatedActor,
        status: RequestStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page:
        """Newest-first page of the actor's requests (admins see every request)."""
        conditions = []
        if actor.role == ActorRole.BRAND:
            conditions.append(CollaborationRequest.brand_id == actor.id)
        elif actor.role == ActorRole.CREATOR:
            conditions.append(CollaborationRequest.creator_id == actor.id)
        if status is not None:
            conditions.append(CollaborationRequest.status == status.value)

        async def _query():
            total = await self.db.scalar(
                select(func.count())
                .select_from(CollaborationRequest)
                .where(*conditions),
            )
            result = await self.db.execute(
                select(CollaborationRequest)
                .where(*conditions)
                .order_by(
                    CollaborationRequest.created_at.desc(),
                    CollaborationRequest.id,
                )
                .limit(limit)
                .offset((page - 1) * limit),
            )
            return list(result.scalars().all()), int(total or 0)

        items, total = await self.retry.run(self.db, _query, "list_by_actor")
        return Page(items=items, total=total, page=page, limit=limit)

    async def list_expirable(self, cutoff: datetime) -> list[UUID]:
        """Ids of pending requests untouched since before `cutoff`."""
        async def _query():
            result = await self.db.execute(
                select(CollaborationRequest.id)
                .where(
                    CollaborationRequest.status == RequestStatus.PENDING.value,
                    CollaborationRequest.updated_at < cutoff,
                )
                .order_by(CollaborationRequest.updated_at),
            )
            return list(result.scalars().all())

        return await self.retry.run(self.db, _query, "list_expirable")

    async def _fetch(self, request_id: UUID) -> CollaborationRequest | None:
        result = await self.db.execute(
            select(CollaborationRequest)
            .where(CollaborationRequest.id == request_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()
