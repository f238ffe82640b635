"""End-to-end lifecycle scenario across engine, negotiation, and aggregator.

Brand offers 500–1000 USD, creator counters at 750 and then accepts, brand
confirms delivery, and the month's revenue shows the request's budget.max.
"""

from datetime import datetime, timezone

import pytest

from collabhub.core.errors import DuplicateActiveRequestError
from collabhub.schemas.collaboration import CounterOffer, CreatorResponseIn
from collabhub.services.engagement_aggregator import (
    AnalyticsScope, EngagementAggregator,
)
from tests.services.factories import BRAND, CREATOR, make_payload


async def test_offer_counter_accept_complete(lifecycle, negotiation, test_db):
    req = await lifecycle.create_request(BRAND, make_payload())
    assert req.status == "pending"
    assert (req.budget_min, req.budget_max, req.currency) == (500, 1000, "USD")

    countered = await negotiation.creator_respond(
        req.id, CREATOR,
        CreatorResponseIn(message="750 works for me", counter_offer=CounterOffer(budget=750)),
    )
    assert countered.creator_response["counter_offer"]["budget"] == 750
    assert countered.status == "pending"

    assert (await lifecycle.creator_accept(req.id, CREATOR)).status == "accepted"
    assert (await lifecycle.mark_completed(req.id, BRAND)).status == "completed"

    trend = await EngagementAggregator(test_db).monthly_trend(
        AnalyticsScope.for_actor(BRAND), 12,
    )
    now = datetime.now(timezone.utc)
    assert trend[0].label == f"{now.year:04d}-{now.month:02d}"
    assert trend[0].revenue == 1000.0
    assert trend[0].completed == 1


async def test_second_pending_request_rejected(lifecycle):
    first_id = (await lifecycle.create_request(BRAND, make_payload())).id
    with pytest.raises(DuplicateActiveRequestError) as exc:
        await lifecycle.create_request(BRAND, make_payload(title="Another idea"))
    assert exc.value.conflicting_request_id == str(first_id)
