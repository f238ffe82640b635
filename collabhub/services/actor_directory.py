"""Actor Directory — resolves brand/creator ids against the actors read model.

Invariants:
    - Unknown or inactive actors raise ResourceNotFoundError (never Forbidden)
    - A valid request target is an active actor with role=creator
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.domain_types import ActorRole
from collabhub.core.errors import ResourceNotFoundError
from collabhub.infrastructure.read_retry import ReadRetryPolicy
from collabhub.models.actor import Actor


class ActorDirectory:
    """Lookups against the identity collaborator's actor records."""

    def __init__(self, db: AsyncSession, retry: ReadRetryPolicy | None = None):
        self.db = db
        self.retry = retry or ReadRetryPolicy()

    async def require(self, actor_id: str, role: ActorRole) -> Actor:
        async def _query():
            result = await self.db.execute(
                select(Actor).where(Actor.id == actor_id, Actor.role == role.value),
            )
            return result.scalar_one_or_none()

        actor = await self.retry.run(self.db, _query, "resolve_actor")
        if actor is None or not actor.is_active:
            raise ResourceNotFoundError(role.value.capitalize(), actor_id)
        return actor
