"""
API Tests for the G-Key service

In-process HTTP tests: session checks, status codes and error bodies of the
G-Key endpoints over the in-memory repository.
"""

import pytest
from datetime import timedelta

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.gkey_service.categories import KEY_CATEGORIES
from microservices.gkey_service.main import app as gkey_app
from tests.contracts.gkey.data_contract import GKeyTestDataFactory, KeyStatus
from tests.fixtures import auth_headers, make_session_token


API = "/api/v1/g-keys"


@pytest.fixture
def factory():
    return GKeyTestDataFactory()


@pytest.fixture
def streamer_id(factory):
    return factory.make_user_id()


@pytest.fixture
def streamer(gkey_tokens, streamer_id):
    return gkey_tokens.headers(user_id=streamer_id, role="streamer")


@pytest.fixture
def admin(gkey_tokens):
    return gkey_tokens.headers(role="admin")


@pytest.fixture
def brand(gkey_tokens):
    return gkey_tokens.headers(role="brand")


async def acquire(client, headers, campaign_id, brand_id, categories=("gaming",)):
    return await client.post(
        f"{API}/acquire",
        json={"campaign_id": campaign_id, "brand_id": brand_id, "categories": list(categories)},
        headers=headers,
    )


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, gkey_client, test_config):
        response = await gkey_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "gkey_service"
        assert data["port"] == test_config.SERVICES["gkey_service"]
        assert data["dependencies"]["postgres"] == "healthy"

    @pytest.mark.asyncio
    async def test_readiness_reports_database(self, gkey_client, gkey_repository):
        gkey_repository.healthy = False

        response = await gkey_client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["ready"] is False
        assert response.json()["checks"]["database"] is False

    @pytest.mark.asyncio
    async def test_liveness(self, gkey_client):
        response = await gkey_client.get("/health/live")
        assert response.json()["alive"] is True


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_missing_token(self, gkey_client):
        response = await gkey_client.get(API)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_signed_with_other_secret(self, gkey_client):
        headers = auth_headers(make_session_token("some-other-secret-0123456789abcdef"))

        response = await gkey_client.get(API, headers=headers)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_service_not_initialized(self, gkey_client, streamer):
        gkey_app.state.service = None

        response = await gkey_client.get(API, headers=streamer)

        assert response.status_code == 503


class TestListing:

    @pytest.mark.asyncio
    async def test_streamer_gets_every_category(self, gkey_client, streamer):
        response = await gkey_client.get(API, headers=streamer)

        assert response.status_code == 200
        keys = response.json()
        assert len(keys) == len(KEY_CATEGORIES)
        assert all(k["status"] == "available" for k in keys)

    @pytest.mark.asyncio
    async def test_brand_gets_empty_list(self, gkey_client, brand):
        response = await gkey_client.get(API, headers=brand)

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_summary(self, gkey_client, streamer, factory):
        await acquire(gkey_client, streamer, factory.make_campaign_id(), factory.make_brand_id())

        response = await gkey_client.get(f"{API}/summary", headers=streamer)

        assert response.status_code == 200
        summary = response.json()
        assert summary["total_keys"] == len(KEY_CATEGORIES)
        assert summary["locked_keys"] == 1
        assert summary["available_keys"] == len(KEY_CATEGORIES) - 1

    @pytest.mark.asyncio
    async def test_summary_for_brand_is_empty(self, gkey_client, brand):
        response = await gkey_client.get(f"{API}/summary", headers=brand)
        assert response.json()["total_keys"] == 0

    @pytest.mark.asyncio
    async def test_initialize(self, gkey_client, streamer):
        response = await gkey_client.post(f"{API}/initialize", headers=streamer)

        assert response.status_code == 201
        assert len(response.json()) == len(KEY_CATEGORIES)

    @pytest.mark.asyncio
    async def test_initialize_requires_hold_capability(self, gkey_client, brand):
        response = await gkey_client.post(f"{API}/initialize", headers=brand)

        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["required"] == "hold_gkeys"
        assert detail["currentRole"] == "brand"

    @pytest.mark.asyncio
    async def test_category_status_and_details(self, gkey_client, gkey_repository, factory, streamer, streamer_id):
        gkey_repository.put(factory.make_cooloff_key(user_id=streamer_id, category="music", hours=5))

        status = await gkey_client.get(f"{API}/category/Music", headers=streamer)
        details = await gkey_client.get(f"{API}/category/music/details", headers=streamer)

        assert status.status_code == 200
        assert status.json()["status"] == "cooloff"
        assert details.json()["cooloff_time_remaining"] == 5 * 3600 * 1000

    @pytest.mark.asyncio
    async def test_category_status_missing(self, gkey_client, streamer):
        response = await gkey_client.get(f"{API}/category/gaming", headers=streamer)

        assert response.status_code == 404
        assert response.json()["code"] == "KEY_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_availability(self, gkey_client, gkey_repository, factory, streamer, streamer_id):
        brand_id = factory.make_brand_id()
        gkey_repository.put(factory.make_cooloff_key(user_id=streamer_id, category="gaming", brand_id=brand_id))

        same = await gkey_client.get(f"{API}/available/gaming", params={"brand_id": brand_id}, headers=streamer)
        other = await gkey_client.get(
            f"{API}/available/gaming", params={"brand_id": factory.make_brand_id()}, headers=streamer,
        )

        assert same.json()["available"] is True
        assert other.json()["available"] is False


class TestAcquire:

    @pytest.mark.asyncio
    async def test_acquire(self, gkey_client, streamer, streamer_id, factory):
        campaign_id = factory.make_campaign_id()

        response = await acquire(gkey_client, streamer, campaign_id, factory.make_brand_id())

        assert response.status_code == 200
        key = response.json()["key"]
        assert key["user_id"] == streamer_id
        assert key["status"] == "locked"
        assert key["locked_with"] == campaign_id

    @pytest.mark.asyncio
    async def test_key_in_use(self, gkey_client, streamer, factory):
        brand_id = factory.make_brand_id()
        await acquire(gkey_client, streamer, factory.make_campaign_id(), brand_id)

        response = await acquire(gkey_client, streamer, factory.make_campaign_id(), brand_id)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "G-Key already in use"
        assert body["code"] == "KEY_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_key_in_cooloff(self, gkey_client, gkey_repository, factory, streamer, streamer_id):
        # Given: gaming cooling off after brand A
        gkey_repository.put(factory.make_cooloff_key(
            user_id=streamer_id, category="gaming", brand_id=factory.make_brand_id(), hours=24,
        ))

        # When: brand B's campaign asks for it
        response = await acquire(gkey_client, streamer, factory.make_campaign_id(), factory.make_brand_id())

        # Then
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "G-Key in cooloff"
        assert body["code"] == "KEY_IN_COOLOFF"
        assert "cooloff_ends_at" in body

    @pytest.mark.asyncio
    async def test_unknown_category(self, gkey_client, streamer, factory):
        response = await acquire(
            gkey_client, streamer, factory.make_campaign_id(), factory.make_brand_id(), categories=["knitting"],
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_CATEGORY"

    @pytest.mark.asyncio
    async def test_blank_categories_rejected(self, gkey_client, streamer, factory):
        response = await acquire(
            gkey_client, streamer, factory.make_campaign_id(), factory.make_brand_id(), categories=[" "],
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_brand_cannot_acquire(self, gkey_client, brand, factory):
        response = await acquire(gkey_client, brand, factory.make_campaign_id(), factory.make_brand_id())
        assert response.status_code == 403


class TestRelease:

    @pytest.mark.asyncio
    async def test_release_own_key(self, gkey_client, gkey_repository, streamer, streamer_id, factory):
        campaign_id = factory.make_campaign_id()
        brand_id = factory.make_brand_id()
        await acquire(gkey_client, streamer, campaign_id, brand_id)

        response = await gkey_client.post(
            f"{API}/release",
            json={"campaign_id": campaign_id, "brand_id": brand_id, "cooloff_hours": 24},
            headers=streamer,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["effective_cooloff_hours"] == 24
        assert body["key"]["status"] == "cooloff"
        assert gkey_repository.stored(streamer_id, "gaming").status == KeyStatus.COOLOFF

    @pytest.mark.asyncio
    async def test_release_for_another_user_needs_manage(self, gkey_client, gkey_tokens, streamer, factory):
        campaign_id = factory.make_campaign_id()
        await acquire(gkey_client, streamer, campaign_id, factory.make_brand_id())
        other = gkey_tokens.headers(role="streamer")

        response = await gkey_client.post(
            f"{API}/release",
            json={"campaign_id": campaign_id, "user_id": "usr_someone_else"},
            headers=other,
        )

        assert response.status_code == 403
        assert response.json()["detail"]["required"] == "manage_gkeys"

    @pytest.mark.asyncio
    async def test_admin_releases_for_streamer(self, gkey_client, admin, streamer, streamer_id, factory):
        campaign_id = factory.make_campaign_id()
        brand_id = factory.make_brand_id()
        await acquire(gkey_client, streamer, campaign_id, brand_id)

        response = await gkey_client.post(
            f"{API}/release",
            json={"campaign_id": campaign_id, "brand_id": brand_id, "user_id": streamer_id, "cooloff_hours": 0},
            headers=admin,
        )

        assert response.status_code == 200
        assert response.json()["key"]["status"] == "available"

    @pytest.mark.asyncio
    async def test_nothing_locked(self, gkey_client, streamer, factory):
        response = await gkey_client.post(
            f"{API}/release", json={"campaign_id": factory.make_campaign_id()}, headers=streamer,
        )

        assert response.status_code == 404
        assert response.json()["code"] == "NO_LOCKED_KEY"

    @pytest.mark.asyncio
    async def test_cooloff_out_of_range(self, gkey_client, streamer, factory):
        response = await gkey_client.post(
            f"{API}/release",
            json={"campaign_id": factory.make_campaign_id(), "cooloff_hours": 9000},
            headers=streamer,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_campaign_release(self, gkey_client, gkey_tokens, admin, factory):
        campaign_id = factory.make_campaign_id()
        brand_id = factory.make_brand_id()
        users = [factory.make_user_id() for _ in range(2)]
        for uid in users:
            await acquire(gkey_client, gkey_tokens.headers(user_id=uid), campaign_id, brand_id)

        response = await gkey_client.post(
            f"{API}/campaigns/{campaign_id}/release",
            json={"brand_id": brand_id, "cooloff_hours": 48},
            headers=admin,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["campaign_id"] == campaign_id
        assert sorted(body["released"]) == sorted(users)
        assert body["failed"] == {}

    @pytest.mark.asyncio
    async def test_campaign_release_requires_manage(self, gkey_client, streamer, factory):
        response = await gkey_client.post(
            f"{API}/campaigns/{factory.make_campaign_id()}/release", json={}, headers=streamer,
        )
        assert response.status_code == 403


class TestAdmin:

    @pytest.mark.asyncio
    async def test_update_cooloffs(self, gkey_client, gkey_repository, gkey_clock, admin, factory):
        gkey_repository.put(factory.make_cooloff_key(
            hours=1, released_at=gkey_clock.current - timedelta(hours=3),
        ))

        response = await gkey_client.post(f"{API}/update-cooloffs", headers=admin)

        assert response.status_code == 200
        assert response.json() == {"updated": 1, "message": "Updated 1 expired cooloffs"}

    @pytest.mark.asyncio
    async def test_update_cooloffs_requires_manage(self, gkey_client, streamer):
        response = await gkey_client.post(f"{API}/update-cooloffs", headers=streamer)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_force_unlock(self, gkey_client, admin, streamer, streamer_id, factory):
        await acquire(gkey_client, streamer, factory.make_campaign_id(), factory.make_brand_id())

        response = await gkey_client.post(
            f"{API}/force-unlock/gaming", params={"user_id": streamer_id}, headers=admin,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "available"
        assert response.json()["locked_with"] is None

    @pytest.mark.asyncio
    async def test_debug_categories(self, gkey_client, streamer):
        response = await gkey_client.get(f"{API}/debug/categories", headers=streamer)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == len(KEY_CATEGORIES)
        assert {c["value"] for c in body["categories"]} == {c.category for c in KEY_CATEGORIES}
        assert body["default_cooloff_hours"] == 720
        assert {"hours": 24, "label": "1 Day", "duration": "1 day"}.items() <= body["cooloff_options"][0].items()

    @pytest.mark.asyncio
    async def test_debug_key_status(self, gkey_client, gkey_repository, gkey_clock, streamer, streamer_id, factory):
        gkey_repository.put(factory.make_cooloff_key(
            user_id=streamer_id, category="music", hours=2, released_at=gkey_clock.current - timedelta(hours=1),
        ))

        response = await gkey_client.get(f"{API}/debug/music", headers=streamer)

        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == streamer_id
        assert body["status"] == "cooloff"
        assert body["cooloff_analysis"] == {
            "has_expired": False,
            "time_until_expiry": 3600 * 1000,
            "minutes_until_expiry": 60,
        }

    @pytest.mark.asyncio
    async def test_debug_key_status_not_found(self, gkey_client, streamer):
        response = await gkey_client.get(f"{API}/debug/gaming", headers=streamer)
        assert response.status_code == 404
