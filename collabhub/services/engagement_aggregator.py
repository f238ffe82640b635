"""Engagement Aggregator — read-only statistics over requests and the ViewEvent log.

Invariants:
    - Never writes: only SELECTs, so it is safe alongside live traffic and the sweep
    - Revenue (Σ budget.max) and budget min/avg/max count only completed requests
    - Empty scopes produce all-zero results (see core/aggregation.py)
    - Months are bucketed by created_at in UTC, most-recent-first; EXTRACT runs in
      the session time zone, which engine_options pins to UTC on PostgreSQL
    - unique_viewers counts distinct non-null viewer_id (anonymous views excluded)
    - All queries run under ReadRetryPolicy
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, distinct, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.aggregation import (
    BudgetStats, MonthBucket, budget_stats, build_monthly_trend,
    fill_campaign_counts, fill_interaction_counts, fill_status_counts,
)
from collabhub.core.domain_types import (
    ActorRole, AuthenticatedActor, CampaignType, InteractionFlag,
    RequestStatus, SubjectType,
)
from collabhub.infrastructure.read_retry import ReadRetryPolicy
from collabhub.models.collaboration_request import CollaborationRequest
from collabhub.models.view_event import ViewEvent

_COMPLETED = CollaborationRequest.status == RequestStatus.COMPLETED.value


@dataclass(frozen=True)
class AnalyticsScope:
    """Filter narrowing which requests an analytics query considers."""
    actor_id: str | None = None
    actor_role: ActorRole | None = None
    start: datetime | None = None
    end: datetime | None = None
    campaign_type: CampaignType | None = None

    @classmethod
    def for_actor(cls, actor: AuthenticatedActor, **filters) -> "AnalyticsScope":
        """Brands and creators see their own requests; admins see the platform."""
        if actor.is_admin:
            return cls(**filters)
        return cls(actor_id=actor.id, actor_role=actor.role, **filters)

    def conditions(self) -> list:
        conds = []
        if self.actor_id is not None:
            if self.actor_role == ActorRole.CREATOR:
                conds.append(CollaborationRequest.creator_id == self.actor_id)
            else:
                conds.append(CollaborationRequest.brand_id == self.actor_id)
        if self.start is not None:
            conds.append(CollaborationRequest.created_at >= self.start)
        if self.end is not None:
            conds.append(CollaborationRequest.created_at < self.end)
        if self.campaign_type is not None:
            conds.append(CollaborationRequest.campaign_type == self.campaign_type.value)
        return conds


class EngagementAggregator:
    """Grouped counts and sums for dashboards."""

    def __init__(self, db: AsyncSession, retry: ReadRetryPolicy | None = None):
        self.db = db
        self.retry = retry or ReadRetryPolicy()

    async def status_distribution(self, scope: AnalyticsScope) -> dict[str, int]:
        async def _query():
            result = await self.db.execute(
                select(CollaborationRequest.status, func.count())
                .where(*scope.conditions())
                .group_by(CollaborationRequest.status),
            )
            return result.all()

        rows = await self.retry.run(self.db, _query, "status_distribution")
        return fill_status_counts(rows)

    async def campaign_type_breakdown(self, scope: AnalyticsScope) -> dict[str, int]:
        async def _query():
            result = await self.db.execute(
                select(CollaborationRequest.campaign_type, func.count())
                .where(*scope.conditions())
                .group_by(CollaborationRequest.campaign_type),
            )
            return result.all()

        rows = await self.retry.run(self.db, _query, "campaign_type_breakdown")
        return fill_campaign_counts(rows)

    async def monthly_trend(
        self, scope: AnalyticsScope, months: int = 12,
    ) -> list[MonthBucket]:
        if months <= 0:
            return []
        year = extract("year", CollaborationRequest.created_at)
        month = extract("month", CollaborationRequest.created_at)

        async def _query():
            result = await self.db.execute(
                select(
                    year.label("year"),
                    month.label("month"),
                    func.count(),
                    func.sum(case((_COMPLETED, 1), else_=0)),
                    func.sum(case((_COMPLETED, CollaborationRequest.budget_max), else_=0)),
                )
                .where(*scope.conditions())
                .group_by(year, month)
                .order_by(year.desc(), month.desc())
                .limit(months),
            )
            return result.all()

        rows = await self.retry.run(self.db, _query, "monthly_trend")
        return build_monthly_trend(rows, months)

    async def revenue_summary(self, scope: AnalyticsScope) -> BudgetStats:
        async def _query():
            result = await self.db.execute(
                select(
                    func.sum(CollaborationRequest.budget_max),
                    func.avg(CollaborationRequest.budget_max),
                    func.min(CollaborationRequest.budget_min),
                    func.max(CollaborationRequest.budget_max),
                    func.count(),
                )
                .where(_COMPLETED, *scope.conditions()),
            )
            return result.one()

        row = await self.retry.run(self.db, _query, "revenue_summary")
        return budget_stats(*row)

    async def engagement_summary(
        self,
        subject_id: str,
        subject_type: SubjectType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict:
        conds = [ViewEvent.subject_id == subject_id]
        if subject_type is not None:
            conds.append(ViewEvent.subject_type == subject_type.value)
        if start is not None:
            conds.append(ViewEvent.occurred_at >= start)
        if end is not None:
            conds.append(ViewEvent.occurred_at < end)
        flag_columns = [
            func.sum(case((getattr(ViewEvent, f.value).is_(True), 1), else_=0))
            .label(f.value)
            for f in InteractionFlag
        ]

        async def _query():
            result = await self.db.execute(
                select(
                    func.count().label("total_views"),
                    func.count(distinct(ViewEvent.viewer_id)).label("unique_viewers"),
                    *flag_columns,
                ).where(*conds),
            )
            return result.one()._asdict()

        row = await self.retry.run(self.db, _query, "engagement_summary")
        return {
            "subject_id": subject_id,
            "total_views": int(row["total_views"] or 0),
            "unique_viewers": int(row["unique_viewers"] or 0),
            "interactions": fill_interaction_counts(row),
        }

    async def actor_overview(self, actor: AuthenticatedActor) -> dict:
        """Dashboard composite: request counts plus the actor's own profile views."""
        scope = AnalyticsScope.for_actor(actor)
        overview = {"requests": await self.status_distribution(scope)}
        if not actor.is_admin:
            overview["engagement"] = await self.engagement_summary(
                actor.id, SubjectType(actor.role.value),
            )
        return overview
