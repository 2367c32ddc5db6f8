"""
G-Key Service Protocols

Defines interfaces for dependency injection and testing.
Exceptions live here so callers can catch them without importing I/O code.
"""

from datetime import datetime
from typing import List, Optional, Protocol, runtime_checkable

from .models import GKey, KeyReleaseUpdate


# ====================
# Exceptions
# ====================


class GKeyServiceError(Exception):
    """Base exception for G-Key service errors"""
    code = "GKEY_ERROR"


class KeyNotFoundError(GKeyServiceError):
    """No key exists for the user/category"""
    code = "KEY_NOT_FOUND"

    def __init__(self, user_id: str, category: str):
        self.user_id = user_id
        self.category = category
        super().__init__(f"No G-Key found for category '{category}'")


class KeyUnavailableError(GKeyServiceError):
    """Key is locked by another campaign"""
    code = "KEY_UNAVAILABLE"

    def __init__(self, category: str, locked_with: Optional[str] = None):
        self.category = category
        self.locked_with = locked_with
        super().__init__(
            f"Your {category} G-Key is already in use by another campaign. "
            f"Finish or leave that campaign before joining a new one."
        )


class KeyInCooloffError(GKeyServiceError):
    """Key is cooling off after a campaign from a different brand"""
    code = "KEY_IN_COOLOFF"

    def __init__(self, category: str, cooloff_ends_at: Optional[datetime] = None):
        self.category = category
        self.cooloff_ends_at = cooloff_ends_at
        until = f" until {cooloff_ends_at.isoformat()}" if cooloff_ends_at else ""
        super().__init__(
            f"Your {category} G-Key is in cooloff with another brand{until}. "
            f"Only campaigns from the same brand can use it before then."
        )


class NoLockedKeyError(GKeyServiceError):
    """No key is locked with the campaign"""
    code = "NO_LOCKED_KEY"

    def __init__(self, user_id: str, campaign_id: str):
        self.user_id = user_id
        self.campaign_id = campaign_id
        super().__init__(f"No G-Key is locked with campaign {campaign_id}")


class InvalidCategoryError(GKeyServiceError):
    """Category is empty or not in the catalogue"""
    code = "INVALID_CATEGORY"


class InvalidCooloffError(GKeyServiceError):
    """Cooloff hours outside the allowed range"""
    code = "INVALID_COOLOFF"


class ConcurrentModificationError(GKeyServiceError):
    """Conditional write kept losing to concurrent updates"""
    code = "CONCURRENT_MODIFICATION"


# ====================
# Repository Protocol
# ====================


@runtime_checkable
class GKeyRepositoryProtocol(Protocol):
    """Persistence for G-Keys. Writes that change status are conditional."""

    async def initialize(self) -> None:
        ...

    async def close(self) -> None:
        ...

    async def health_check(self) -> bool:
        ...

    async def ensure_keys(self, user_id: str, categories: List[str]) -> int:
        """Create missing keys; returns how many were inserted"""
        ...

    async def get_key(self, user_id: str, category: str) -> Optional[GKey]:
        ...

    async def list_user_keys(self, user_id: str) -> List[GKey]:
        ...

    async def find_locked_key(
        self, user_id: str, campaign_id: str, category: Optional[str] = None
    ) -> Optional[GKey]:
        ...

    async def list_keys_locked_with(self, campaign_id: str) -> List[GKey]:
        ...

    async def try_lock(
        self, user_id: str, category: str, campaign_id: str, brand_id: Optional[str], now: datetime
    ) -> Optional[GKey]:
        """Atomically lock an acquirable key; None if it was not acquirable"""
        ...

    async def apply_release(self, expected: GKey, update: KeyReleaseUpdate, now: datetime) -> Optional[GKey]:
        """Write a release only if the key still matches ``expected``; None on conflict"""
        ...

    async def expire_cooloffs(self, now: datetime, user_id: Optional[str] = None) -> int:
        ...

    async def force_unlock(self, user_id: str, category: str, now: datetime) -> Optional[GKey]:
        ...

    async def normalize_categories(self) -> int:
        ...


__all__ = [
    "GKeyServiceError",
    "KeyNotFoundError",
    "KeyUnavailableError",
    "KeyInCooloffError",
    "NoLockedKeyError",
    "InvalidCategoryError",
    "InvalidCooloffError",
    "ConcurrentModificationError",
    "GKeyRepositoryProtocol",
]
