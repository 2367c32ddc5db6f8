"""
Common/Shared Fixtures

Base factories and generators used across multiple services.
"""
import uuid


def make_user_id() -> str:
    """Generate a unique user ID"""
    return f"usr_test_{uuid.uuid4().hex[:12]}"


def make_campaign_id() -> str:
    """Generate a unique campaign ID"""
    return f"cmp_test_{uuid.uuid4().hex[:12]}"


def make_brand_id() -> str:
    """Generate a unique brand ID"""
    return f"brd_test_{uuid.uuid4().hex[:12]}"
