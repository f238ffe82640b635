"""Analytics — read-only aggregator endpoints, scoped to the calling actor.

Invariants:
    - Brands/creators only ever see their own requests; admins see the platform
    - Engagement summaries: brands/creators only for their own profile; admins for any
    - Empty scopes return zero-filled results with 200
    - months=0 returns an empty trend
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from collabhub.api.deps import get_aggregator, get_current_actor
from collabhub.core.domain_types import AuthenticatedActor, CampaignType, SubjectType
from collabhub.core.errors import ForbiddenError
from collabhub.services.engagement_aggregator import (
    AnalyticsScope, EngagementAggregator,
)

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


def _scope(
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    campaign_type: CampaignType | None = Query(None),
    actor: AuthenticatedActor = Depends(get_current_actor),
) -> AnalyticsScope:
    return AnalyticsScope.for_actor(
        actor, start=start, end=end, campaign_type=campaign_type,
    )


@router.get("/status-distribution")
async def status_distribution(
    scope: AnalyticsScope = Depends(_scope),
    aggregator: EngagementAggregator = Depends(get_aggregator),
):
    return await aggregator.status_distribution(scope)


@router.get("/campaign-types")
async def campaign_types(
    scope: AnalyticsScope = Depends(_scope),
    aggregator: EngagementAggregator = Depends(get_aggregator),
):
    return await aggregator.campaign_type_breakdown(scope)


@router.get("/monthly-trend")
async def monthly_trend(
    months: int = Query(12, ge=0, le=120),
    scope: AnalyticsScope = Depends(_scope),
    aggregator: EngagementAggregator = Depends(get_aggregator),
):
    buckets = await aggregator.monthly_trend(scope, months)
    return {"months": [b.to_dict() for b in buckets]}


@router.get("/revenue")
async def revenue(
    scope: AnalyticsScope = Depends(_scope),
    aggregator: EngagementAggregator = Depends(get_aggregator),
):
    stats = await aggregator.revenue_summary(scope)
    return {
        "total_revenue": stats.total_revenue,
        "avg_budget": stats.avg_budget,
        "min_budget": stats.min_budget,
        "max_budget": stats.max_budget,
        "completed_count": stats.completed_count,
    }


@router.get("/engagement/{subject_id}")
async def engagement(
    subject_id: str,
    subject_type: SubjectType | None = Query(None),
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    actor: AuthenticatedActor = Depends(get_current_actor),
    aggregator: EngagementAggregator = Depends(get_aggregator),
):
    if not actor.is_admin and subject_id != actor.id:
        raise ForbiddenError("Engagement is only visible to the profile owner")
    return await aggregator.engagement_summary(subject_id, subject_type, start, end)


@router.get("/overview")
async def overview(
    actor: AuthenticatedActor = Depends(get_current_actor),
    aggregator: EngagementAggregator = Depends(get_aggregator),
):
    return await aggregator.actor_overview(actor)
