"""
Component Test Fixtures for G-Key Service

Service wired to the in-memory repository and a controllable clock.
"""

import pytest

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.gkey_service.gkey_service import GKeyService
from tests.component.mocks import FakeClock, MockGKeyRepository
from tests.contracts.gkey.data_contract import GKeyTestDataFactory


# ====================
# Fixtures
# ====================


@pytest.fixture
def factory():
    """Provide test data factory"""
    return GKeyTestDataFactory()


@pytest.fixture
def mock_repository():
    return MockGKeyRepository()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(mock_repository, clock):
    return GKeyService(repository=mock_repository, clock=clock)


@pytest.fixture
def user_id(factory):
    return factory.make_user_id()


@pytest.fixture
def brand_a(factory):
    return factory.make_brand_id()


@pytest.fixture
def brand_b(factory):
    return factory.make_brand_id()
