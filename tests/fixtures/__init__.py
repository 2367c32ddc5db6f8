"""
Shared Test Fixtures

Centralized factories and generators used across all test layers.

Structure:
    - common.py: Base ID generators, timestamps
    - generators.py: Random data generators
    - gkey_fixtures.py: fixed clock and session tokens
"""

# Common utilities
from .common import (
    make_user_id,
    make_campaign_id,
    make_brand_id,
)

# Random generators
from .generators import (
    random_user_ids,
    random_categories,
    random_cooloff_hours,
)

# G-Key fixtures
from .gkey_fixtures import (
    FIXED_NOW,
    make_session_token,
    auth_headers,
)

__all__ = [
    "make_user_id",
    "make_campaign_id",
    "make_brand_id",
    "random_user_ids",
    "random_categories",
    "random_cooloff_hours",
    "FIXED_NOW",
    "make_session_token",
    "auth_headers",
]
