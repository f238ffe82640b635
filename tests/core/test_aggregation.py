"""Aggregation Folds — tests for zero-filling, ordering, and capping.

Tests cover:
    - Empty inputs give all-zero results
    - Monthly trend is newest-first and capped; months=0 gives []
    - NULL SQL aggregates map to zero
"""

from collabhub.core.aggregation import (
    MonthBucket, budget_stats, build_monthly_trend, fill_campaign_counts,
    fill_interaction_counts, fill_status_counts,
)
from collabhub.core.domain_types import CampaignType, RequestStatus


def test_status_counts_zero_filled():
    counts = fill_status_counts([])
    assert counts["total"] == 0
    assert all(counts[s.value] == 0 for s in RequestStatus)


def test_status_counts_total():
    counts = fill_status_counts([("pending", 2), ("completed", 3)])
    assert counts["pending"] == 2
    assert counts["completed"] == 3
    assert counts["rejected"] == 0
    assert counts["total"] == 5


def test_campaign_counts_list_every_type():
    counts = fill_campaign_counts([("one_off", 4)])
    assert set(counts) == {c.value for c in CampaignType}
    assert counts["one_off"] == 4
    assert counts["live_stream"] == 0


def test_monthly_trend_zero_months_is_empty():
    assert build_monthly_trend([(2026, 1, 1, 1, 100.0)], 0) == []


def test_monthly_trend_orders_newest_first_and_caps():
    rows = [
        (2025, 12, 1, 0, 0),
        (2026, 2, 3, 1, 1000.0),
        (2026, 1, 2, 2, 300.0),
    ]
    trend = build_monthly_trend(rows, 2)
    assert [b.label for b in trend] == ["2026-02", "2026-01"]
    assert trend[0] == MonthBucket(2026, 2, 3, 1, 1000.0)


def test_monthly_trend_handles_null_revenue():
    trend = build_monthly_trend([(2026, 5, 1, 0, None)], 12)
    assert trend[0].revenue == 0.0
    assert trend[0].to_dict()["label"] == "2026-05"


def test_budget_stats_from_empty_aggregate():
    stats = budget_stats(None, None, None, None, 0)
    assert stats.total_revenue == 0.0
    assert stats.avg_budget == 0.0
    assert stats.completed_count == 0


def test_budget_stats_rounds_average():
    stats = budget_stats(1000.0, 333.3333, 100.0, 500.0, 3)
    assert stats.avg_budget == 333.33


def test_interaction_counts_default_zero():
    counts = fill_interaction_counts({"contact_clicked": 2, "profile_clicked": None})
    assert counts == {
        "profile_clicked": 0, "contact_clicked": 2,
        "portfolio_viewed": 0, "collaboration_requested": 0,
    }
