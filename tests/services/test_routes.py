"""HTTP Routes — status codes, envelopes, and role checks over the FastAPI app.

Invariants:
    - Missing identity → 401; wrong role for the surface → 403
    - Payload and query validation failures → 400 VALIDATION_ERROR
    - Lost transitions → 409 INVALID_TRANSITION; duplicates → 409 with the conflicting id
    - Pagination out of range is rejected, never clamped
"""

from datetime import datetime, timedelta, timezone

import pytest

from tests.services.factories import (
    ADMIN, BRAND, CREATOR, OTHER_BRAND, OTHER_CREATOR, headers, make_body,
)

BRAND_URL = "/api/v1/brand/requests"
CREATOR_URL = "/api/v1/creator/requests"
ADMIN_URL = "/api/v1/admin/collaborations"


async def _create(client, **overrides) -> dict:
    res = await client.post(BRAND_URL, json=make_body(**overrides), headers=headers(BRAND))
    assert res.status_code == 201, res.text
    return res.json()


# ─── health ──────────────────────────────────────────────────────

async def test_health(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


# ─── identity ────────────────────────────────────────────────────

async def test_missing_actor_is_401(client):
    res = await client.post(BRAND_URL, json=make_body())
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


async def test_unknown_role_is_401(client):
    res = await client.get(
        BRAND_URL, headers={"X-Actor-Id": "brand-1", "X-Actor-Role": "superuser"},
    )
    assert res.status_code == 401


async def test_creator_cannot_use_brand_surface(client):
    res = await client.post(BRAND_URL, json=make_body(), headers=headers(CREATOR))
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"


# ─── brand surface ───────────────────────────────────────────────

async def test_create_returns_pending(client, publisher):
    body = await _create(client)
    assert body["status"] == "pending"
    assert body["budget"] == {"min": 500.0, "max": 1000.0, "currency": "USD"}
    assert body["negotiation"] == {"creator_response": None, "brand_response": None}
    assert len(publisher.events) == 1


async def test_create_blank_title_is_400(client):
    res = await client.post(
        BRAND_URL, json=make_body(title="   "), headers=headers(BRAND),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_create_unknown_campaign_type_is_400(client):
    res = await client.post(
        BRAND_URL, json=make_body(campaign_type="billboard"), headers=headers(BRAND),
    )
    assert res.status_code == 400


async def test_create_inverted_budget_is_400(client):
    res = await client.post(
        BRAND_URL,
        json=make_body(budget={"min": 900, "max": 100}),
        headers=headers(BRAND),
    )
    assert res.status_code == 400
    assert res.json()["error"]["details"][0]["field"] == "budget"


async def test_create_unknown_creator_is_404(client):
    res = await client.post(
        BRAND_URL, json=make_body(creator_id="ghost"), headers=headers(BRAND),
    )
    assert res.status_code == 404


async def test_duplicate_is_409_with_conflicting_id(client):
    first = await _create(client)
    res = await client.post(BRAND_URL, json=make_body(), headers=headers(BRAND))
    assert res.status_code == 409
    error = res.json()["error"]
    assert error["code"] == "DUPLICATE_ACTIVE_REQUEST"
    assert error["conflicting_request_id"] == first["id"]


async def test_list_paginates(client):
    await _create(client, creator_id="creator-1")
    await _create(client, creator_id="creator-2")
    res = await client.get(f"{BRAND_URL}?page=1&limit=1", headers=headers(BRAND))
    assert res.status_code == 200
    body = res.json()
    assert len(body["items"]) == 1
    assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}


async def test_list_filters_by_status(client):
    created = await _create(client)
    await _create(client, creator_id="creator-2")
    await client.post(f"{CREATOR_URL}/{created['id']}/accept", headers=headers(CREATOR))
    res = await client.get(f"{BRAND_URL}?status=accepted", headers=headers(BRAND))
    assert [r["id"] for r in res.json()["items"]] == [created["id"]]


@pytest.mark.parametrize("query", ["limit=0", "limit=101", "page=0"])
async def test_pagination_out_of_range_is_400(client, query):
    res = await client.get(f"{BRAND_URL}?{query}", headers=headers(BRAND))
    assert res.status_code == 400


async def test_patch_pending_request(client):
    created = await _create(client)
    res = await client.patch(
        f"{BRAND_URL}/{created['id']}", json={"title": "Summer launch"}, headers=headers(BRAND),
    )
    assert res.status_code == 200
    assert res.json()["title"] == "Summer launch"


async def test_patch_empty_body_is_400(client):
    created = await _create(client)
    res = await client.patch(f"{BRAND_URL}/{created['id']}", json={}, headers=headers(BRAND))
    assert res.status_code == 400


async def test_other_brand_cannot_read(client):
    created = await _create(client)
    res = await client.get(f"{BRAND_URL}/{created['id']}", headers=headers(OTHER_BRAND))
    assert res.status_code == 403


async def test_unknown_request_is_404(client):
    res = await client.get(
        f"{BRAND_URL}/00000000-0000-0000-0000-000000000000", headers=headers(BRAND),
    )
    assert res.status_code == 404
    context = res.json()["error"]["context"]
    assert context == {
        "request_id": "00000000-0000-0000-0000-000000000000", "actor_id": "brand-1",
    }


# ─── creator surface & negotiation ───────────────────────────────

async def test_full_flow_over_http(client):
    created = await _create(client)
    rid = created["id"]

    seen = await client.get(f"{CREATOR_URL}/{rid}", headers=headers(CREATOR))
    assert seen.json()["viewed_at"] is not None

    countered = await client.post(
        f"{CREATOR_URL}/{rid}/respond",
        json={"message": "How about 750?", "counter_offer": {"budget": 750}},
        headers=headers(CREATOR),
    )
    assert countered.status_code == 200
    assert countered.json()["negotiation"]["creator_response"]["counter_offer"]["budget"] == 750
    assert countered.json()["status"] == "pending"

    brand_reply = await client.post(
        f"{BRAND_URL}/{rid}/respond", json={"message": "Deal"}, headers=headers(BRAND),
    )
    assert brand_reply.json()["negotiation"]["brand_response"]["message"] == "Deal"

    accepted = await client.post(f"{CREATOR_URL}/{rid}/accept", headers=headers(CREATOR))
    assert accepted.json()["status"] == "accepted"

    done = await client.post(f"{BRAND_URL}/{rid}/complete", headers=headers(BRAND))
    assert done.json()["status"] == "completed"

    revenue = await client.get("/api/v1/analytics/revenue", headers=headers(BRAND))
    assert revenue.json()["total_revenue"] == 1000.0


async def test_counter_offer_requires_terms(client):
    created = await _create(client)
    res = await client.post(
        f"{CREATOR_URL}/{created['id']}/respond",
        json={"message": "Hmm", "counter_offer": {}},
        headers=headers(CREATOR),
    )
    assert res.status_code == 400


async def test_reject_then_accept_is_409(client):
    created = await _create(client)
    await client.post(f"{CREATOR_URL}/{created['id']}/reject", headers=headers(CREATOR))
    res = await client.post(f"{CREATOR_URL}/{created['id']}/accept", headers=headers(CREATOR))
    assert res.status_code == 409
    error = res.json()["error"]
    assert error["code"] == "INVALID_TRANSITION"
    assert error["current_status"] == "rejected"


async def test_wrong_creator_cannot_accept(client):
    created = await _create(client)
    res = await client.post(
        f"{CREATOR_URL}/{created['id']}/accept", headers=headers(OTHER_CREATOR),
    )
    assert res.status_code == 403


async def test_brand_cancel(client):
    created = await _create(client)
    res = await client.post(f"{BRAND_URL}/{created['id']}/cancel", headers=headers(BRAND))
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"


# ─── admin ───────────────────────────────────────────────────────

async def test_admin_requires_admin_role(client):
    res = await client.get(ADMIN_URL, headers=headers(BRAND))
    assert res.status_code == 403


async def test_admin_force_status_and_history(client):
    created = await _create(client)
    rid = created["id"]
    bad = await client.put(
        f"{ADMIN_URL}/{rid}/status", json={"status": "completed"}, headers=headers(ADMIN),
    )
    assert bad.status_code == 409

    ok = await client.put(
        f"{ADMIN_URL}/{rid}/status", json={"status": "cancelled"}, headers=headers(ADMIN),
    )
    assert ok.json()["status"] == "cancelled"

    detail = await client.get(f"{ADMIN_URL}/{rid}", headers=headers(ADMIN))
    history = detail.json()["history"]
    assert [h["to_status"] for h in history] == ["pending", "cancelled"]
    assert history[-1]["actor_id"] == "admin-1"


async def test_admin_delete(client):
    created = await _create(client)
    res = await client.delete(f"{ADMIN_URL}/{created['id']}", headers=headers(ADMIN))
    assert res.status_code == 204
    missing = await client.get(f"{ADMIN_URL}/{created['id']}", headers=headers(ADMIN))
    assert missing.status_code == 404


async def test_admin_lists_everything(client):
    await _create(client)
    await client.post(
        BRAND_URL, json=make_body(), headers=headers(OTHER_BRAND),
    )
    res = await client.get(ADMIN_URL, headers=headers(ADMIN))
    assert res.json()["pagination"]["total"] == 2


async def test_admin_sweep(client):
    created = await _create(client)
    later = (datetime.now(timezone.utc) + timedelta(days=31)).strftime("%Y-%m-%dT%H:%M:%S")
    res = await client.post(
        f"{ADMIN_URL}/sweep-expired", params={"now": later}, headers=headers(ADMIN),
    )
    assert res.status_code == 200
    assert res.json()["expired"] == 1
    detail = await client.get(f"{BRAND_URL}/{created['id']}", headers=headers(BRAND))
    assert detail.json()["status"] == "expired"


# ─── analytics & views ───────────────────────────────────────────

async def test_analytics_empty_is_zero(client):
    dist = await client.get("/api/v1/analytics/status-distribution", headers=headers(BRAND))
    assert dist.status_code == 200
    assert dist.json()["total"] == 0

    trend = await client.get(
        "/api/v1/analytics/monthly-trend?months=0", headers=headers(BRAND),
    )
    assert trend.json() == {"months": []}


async def test_analytics_campaign_types(client):
    await _create(client, campaign_type="live_stream")
    res = await client.get("/api/v1/analytics/campaign-types", headers=headers(BRAND))
    assert res.json()["live_stream"] == 1


async def test_analytics_requires_identity(client):
    res = await client.get("/api/v1/analytics/overview")
    assert res.status_code == 401


async def test_record_view_and_engagement(client):
    res = await client.post(
        "/api/v1/profiles/creator-1/views",
        json={"subject_type": "creator", "interactions": ["profile_clicked", "contact_clicked"]},
        headers=headers(BRAND),
    )
    assert res.status_code == 201
    anon = await client.post(
        "/api/v1/profiles/creator-1/views", json={"subject_type": "creator"},
    )
    assert anon.status_code == 201

    summary = await client.get(
        "/api/v1/analytics/engagement/creator-1", headers=headers(CREATOR),
    )
    body = summary.json()
    assert body["total_views"] == 2
    assert body["unique_viewers"] == 1
    assert body["interactions"]["contact_clicked"] == 1


async def test_engagement_is_owner_or_admin_only(client):
    await client.post(
        "/api/v1/profiles/creator-1/views",
        json={"subject_type": "creator"}, headers=headers(BRAND),
    )
    other = await client.get(
        "/api/v1/analytics/engagement/creator-1", headers=headers(BRAND),
    )
    assert other.status_code == 403
    assert other.json()["error"]["context"]["actor_id"] == "brand-1"

    admin = await client.get(
        "/api/v1/analytics/engagement/creator-1", headers=headers(ADMIN),
    )
    assert admin.status_code == 200
    assert admin.json()["total_views"] == 1


async def test_self_view_is_400(client):
    res = await client.post(
        "/api/v1/profiles/creator-1/views",
        json={"subject_type": "creator"},
        headers=headers(CREATOR),
    )
    assert res.status_code == 400


async def test_overview(client):
    await _create(client)
    res = await client.get("/api/v1/analytics/overview", headers=headers(CREATOR))
    assert res.json()["requests"]["pending"] == 1
