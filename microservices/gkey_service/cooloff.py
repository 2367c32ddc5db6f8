"""
G-Key Cooloff Rules

Pure functions for the key state machine:

    available --acquire--> locked --release--> cooloff --expiry--> available
                                   \\--release (0h)--> available

A key in cooloff can still be acquired by the brand that caused the
cooloff (same-brand exception) or by anyone once the cooloff has ended.
Nothing here performs I/O; the repository applies the results with
conditional writes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .categories import DEFAULT_COOLOFF_HOURS, MAX_COOLOFF_HOURS
from .models import GKey, KeyReleaseUpdate, KeyStatus
from .protocols import InvalidCooloffError

BLOCKED_LOCKED = "locked"
BLOCKED_COOLOFF = "cooloff"


@dataclass(frozen=True)
class CooloffDecision:
    effective_hours: int
    last_brand_id: Optional[str]
    last_brand_cooloff_hours: int


def validate_cooloff_hours(hours: Optional[int]) -> int:
    """None means the platform default; otherwise 0..MAX_COOLOFF_HOURS"""
    if hours is None:
        return DEFAULT_COOLOFF_HOURS
    if isinstance(hours, bool) or not isinstance(hours, int):
        raise InvalidCooloffError(f"Cooloff hours must be an integer, got {hours!r}")
    if hours < 0 or hours > MAX_COOLOFF_HOURS:
        raise InvalidCooloffError(
            f"Cooloff hours must be between 0 and {MAX_COOLOFF_HOURS}, got {hours}"
        )
    return hours


def is_same_brand(key: GKey, brand_id: Optional[str]) -> bool:
    return brand_id is not None and key.last_brand_id == brand_id


def is_cooloff_expired(key: GKey, now: datetime) -> bool:
    return (
        key.status == KeyStatus.COOLOFF
        and key.cooloff_ends_at is not None
        and now >= key.cooloff_ends_at
    )


def can_acquire(key: GKey, brand_id: Optional[str], now: datetime) -> bool:
    if key.status == KeyStatus.AVAILABLE:
        return True
    if key.status == KeyStatus.COOLOFF:
        return is_same_brand(key, brand_id) or is_cooloff_expired(key, now)
    return False


def blocking_reason(key: GKey, campaign_id: str, brand_id: Optional[str], now: datetime) -> Optional[str]:
    """Why ``key`` cannot be locked for the campaign, or None if it can (or already is)"""
    if key.status == KeyStatus.LOCKED:
        return None if key.locked_with == campaign_id else BLOCKED_LOCKED
    if can_acquire(key, brand_id, now):
        return None
    return BLOCKED_COOLOFF


def resolve_effective_cooloff(key: GKey, brand_id: Optional[str], cooloff_hours: int) -> CooloffDecision:
    """
    Same brand as last time: keep the highest cooloff seen for that brand.
    Different (or unknown) brand: the new brand and its cooloff replace the old.
    """
    if is_same_brand(key, brand_id):
        effective = max(key.last_brand_cooloff_hours or 0, cooloff_hours)
        return CooloffDecision(effective, key.last_brand_id, effective)
    return CooloffDecision(cooloff_hours, brand_id, cooloff_hours)


def plan_release(
    key: GKey,
    brand_id: Optional[str],
    cooloff_hours: Optional[int],
    now: datetime,
) -> KeyReleaseUpdate:
    """Field values for releasing a locked key"""
    hours = validate_cooloff_hours(cooloff_hours)
    decision = resolve_effective_cooloff(key, brand_id, hours)

    if decision.effective_hours > 0:
        status = KeyStatus.COOLOFF
        ends_at = now + timedelta(hours=decision.effective_hours)
    else:
        status = KeyStatus.AVAILABLE
        ends_at = None

    return KeyReleaseUpdate(
        status=status,
        cooloff_ends_at=ends_at,
        last_used=now,
        usage_count=key.usage_count + 1,
        last_brand_id=decision.last_brand_id,
        last_brand_cooloff_hours=decision.last_brand_cooloff_hours,
        effective_cooloff_hours=decision.effective_hours,
    )


def cooloff_remaining_ms(key: GKey, now: datetime) -> Optional[int]:
    if key.status != KeyStatus.COOLOFF or key.cooloff_ends_at is None:
        return None
    return max(0, int((key.cooloff_ends_at - now).total_seconds() * 1000))


def cooloff_elapsed_ms(key: GKey, now: datetime) -> Optional[int]:
    if key.status != KeyStatus.COOLOFF or key.last_used is None:
        return None
    return max(0, int((now - key.last_used).total_seconds() * 1000))


def format_remaining(milliseconds: Optional[int]) -> str:
    """Human-readable duration, e.g. '2d 3h', '5 hours', '12 minutes'"""
    if not milliseconds or milliseconds <= 0:
        return "0 minutes"

    minutes = milliseconds // 1000 // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        remaining_hours = hours % 24
        if remaining_hours:
            return f"{days}d {remaining_hours}h"
        return f"{days} day{'' if days == 1 else 's'}"

    if hours > 0:
        remaining_minutes = minutes % 60
        if remaining_minutes:
            return f"{hours}h {remaining_minutes}m"
        return f"{hours} hour{'' if hours == 1 else 's'}"

    if minutes > 0:
        return f"{minutes} minute{'' if minutes == 1 else 's'}"

    return "< 1 minute"
