"""Aggregation Folds — shape grouped query rows into analytics results.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - Empty input yields all-zero results, never None, NaN, or an error
    - Status and campaign-type breakdowns always list every enum member
    - Monthly trend is most-recent-first and capped at `months` buckets (0 → empty)
    - Revenue only ever comes from completed requests (the query side filters;
      folds never add revenue for other statuses)

Design Decisions:
    - The store does GROUP BY; these folds only zero-fill, order, and cap, so the
      same shaping applies whether rows come from SQL or an in-process scan
"""

from dataclasses import dataclass, asdict
from typing import Iterable

from collabhub.core.domain_types import CampaignType, InteractionFlag, RequestStatus


@dataclass(frozen=True)
class MonthBucket:
    year: int
    month: int
    count: int
    completed: int
    revenue: float

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def to_dict(self) -> dict:
        return {**asdict(self), "label": self.label}


@dataclass(frozen=True)
class BudgetStats:
    total_revenue: float = 0.0
    avg_budget: float = 0.0
    min_budget: float = 0.0
    max_budget: float = 0.0
    completed_count: int = 0


def fill_status_counts(rows: Iterable[tuple[str, int]]) -> dict[str, int]:
    """Zero-filled count per status plus `total`."""
    counts = {s.value: 0 for s in RequestStatus}
    for status, count in rows:
        counts[RequestStatus(status).value] += int(count)
    counts["total"] = sum(counts[s.value] for s in RequestStatus)
    return counts


def fill_campaign_counts(rows: Iterable[tuple[str, int]]) -> dict[str, int]:
    counts = {c.value: 0 for c in CampaignType}
    for campaign_type, count in rows:
        counts[CampaignType(campaign_type).value] += int(count)
    return counts


def build_monthly_trend(
    rows: Iterable[tuple[int, int, int, int, float | None]], months: int,
) -> list[MonthBucket]:
    """Rows are (year, month, count, completed_count, completed_revenue)."""
    if months <= 0:
        return []
    merged: dict[tuple[int, int], list] = {}
    for year, month, count, completed, revenue in rows:
        key = (int(year), int(month))
        acc = merged.setdefault(key, [0, 0, 0.0])
        acc[0] += int(count or 0)
        acc[1] += int(completed or 0)
        acc[2] += float(revenue or 0.0)
    ordered = sorted(merged.items(), key=lambda kv: kv[0], reverse=True)
    return [
        MonthBucket(year=y, month=m, count=c, completed=done, revenue=rev)
        for (y, m), (c, done, rev) in ordered[:months]
    ]


def budget_stats(
    total: float | None,
    avg: float | None,
    minimum: float | None,
    maximum: float | None,
    count: int | None,
) -> BudgetStats:
    """SQL aggregates over an empty set come back NULL; map them to zero."""
    return BudgetStats(
        total_revenue=float(total or 0.0),
        avg_budget=round(float(avg or 0.0), 2),
        min_budget=float(minimum or 0.0),
        max_budget=float(maximum or 0.0),
        completed_count=int(count or 0),
    )


def fill_interaction_counts(values: dict[str, int | None]) -> dict[str, int]:
    return {f.value: int(values.get(f.value) or 0) for f in InteractionFlag}
