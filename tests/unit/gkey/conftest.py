"""
Unit Test Fixtures for G-Key Service

Uses GKeyTestDataFactory from the data contract.
"""

import pytest

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from tests.contracts.gkey.data_contract import GKeyTestDataFactory
from tests.fixtures import FIXED_NOW


@pytest.fixture
def factory():
    """Provide test data factory"""
    return GKeyTestDataFactory()


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def brand_a(factory):
    return factory.make_brand_id()


@pytest.fixture
def brand_b(factory):
    return factory.make_brand_id()
