"""
Unit Tests for G-Key request and response models
"""

import pytest
from pydantic import ValidationError

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.gkey_service.models import ErrorResponse, KeysSummary
from tests.contracts.gkey.data_contract import (
    AcquireKeyRequest,
    CampaignReleaseRequest,
    GKey,
    GKeyTestDataFactory,
    KeyStatus,
    ReleaseKeyRequest,
)


pytestmark = pytest.mark.unit


class TestAcquireKeyRequest:

    def test_blank_categories_dropped(self):
        request = AcquireKeyRequest(campaign_id="cmp_1", brand_id="brd_1", categories=["gaming", " ", ""])
        assert request.categories == ["gaming"]

    def test_only_blank_categories_rejected(self):
        with pytest.raises(ValidationError):
            AcquireKeyRequest(campaign_id="cmp_1", brand_id="brd_1", categories=["", "  "])

    def test_empty_list_rejected(self):
        with pytest.raises(ValidationError):
            AcquireKeyRequest(campaign_id="cmp_1", brand_id="brd_1", categories=[])

    def test_campaign_required(self):
        with pytest.raises(ValidationError):
            AcquireKeyRequest(campaign_id="", brand_id="brd_1", categories=["gaming"])

    def test_factory_defaults(self):
        request = GKeyTestDataFactory.make_acquire_request()
        assert request.categories == ["gaming"]
        assert request.campaign_id.startswith("cmp_")
        assert request.brand_id.startswith("brd_")


class TestReleaseKeyRequest:

    def test_defaults(self):
        request = GKeyTestDataFactory.make_release_request(campaign_id="cmp_1")
        assert request.cooloff_hours is None
        assert request.brand_id is None
        assert request.user_id is None

    @pytest.mark.parametrize("hours", [-1, 8761])
    def test_cooloff_range(self, hours):
        with pytest.raises(ValidationError):
            ReleaseKeyRequest(campaign_id="cmp_1", cooloff_hours=hours)

    def test_campaign_release_defaults_to_no_users(self):
        assert CampaignReleaseRequest().user_ids == []
        assert GKeyTestDataFactory.make_campaign_release_request(brand_id="brd_1").cooloff_hours is None


class TestGKey:

    def test_defaults(self):
        key = GKey(key_id="gk_1", user_id="usr_1", category="gaming")
        assert key.status == KeyStatus.AVAILABLE
        assert key.usage_count == 0
        assert key.locked_with is None

    def test_negative_usage_rejected(self):
        with pytest.raises(ValidationError):
            GKey(key_id="gk_1", user_id="usr_1", category="gaming", usage_count=-1)

    def test_status_serializes_as_string(self):
        key = GKey(key_id="gk_1", user_id="usr_1", category="gaming", status=KeyStatus.COOLOFF)
        assert key.model_dump(mode="json")["status"] == "cooloff"


class TestResponses:

    def test_empty_summary(self):
        summary = KeysSummary()
        assert summary.total_keys == 0
        assert summary.keys == []

    def test_error_response_omits_empty_fields(self):
        body = ErrorResponse(error="Not found", code="KEY_NOT_FOUND", message="missing")
        assert "cooloff_ends_at" not in body.model_dump(exclude_none=True)
