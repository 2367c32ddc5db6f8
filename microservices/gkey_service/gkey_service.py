"""
G-Key Service - Business logic layer

Owns the key lifecycle: seeding, listing with lazy cooloff expiry,
acquisition for campaigns, brand-aware release, sweeps and admin unlocks.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from . import cooloff
from .categories import (
    COOLOFF_OPTIONS,
    DEFAULT_COOLOFF_HOURS,
    all_categories,
    category_names,
    cooloff_option_label,
    get_category_info,
    get_default_cooloff_hours,
    is_known_category,
    normalize_category,
)
from .models import (
    CampaignReleaseResponse,
    CategoryListResponse,
    CooloffAnalysis,
    GKey,
    KeyStatus,
    KeyDebugStatus,
    KeyStatusDetail,
    KeysSummary,
    KeyView,
    ReleaseKeyResponse,
)
from .protocols import (
    ConcurrentModificationError,
    GKeyRepositoryProtocol,
    InvalidCategoryError,
    KeyInCooloffError,
    KeyNotFoundError,
    KeyUnavailableError,
    NoLockedKeyError,
)

logger = logging.getLogger(__name__)

MAX_WRITE_ATTEMPTS = 3


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GKeyService:
    """
    G-Key business operations.

    Args:
        repository: persistence implementing GKeyRepositoryProtocol
        clock: returns the current UTC time (injectable for tests)
    """

    def __init__(
        self,
        repository: GKeyRepositoryProtocol,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    # ====================
    # Helpers
    # ====================

    @staticmethod
    def _normalize(category: str) -> str:
        try:
            return normalize_category(category)
        except ValueError as e:
            raise InvalidCategoryError(str(e)) from e

    @staticmethod
    def _normalize_many(categories: Iterable[str]) -> List[str]:
        seen: List[str] = []
        for raw in categories or []:
            try:
                normalized = normalize_category(raw)
            except ValueError:
                continue
            if normalized not in seen:
                seen.append(normalized)
        return seen

    # ====================
    # Listing
    # ====================

    async def initialize_keys(self, user_id: str) -> List[GKey]:
        """Seed one key per catalogue category"""
        created = await self.repository.ensure_keys(user_id, category_names())
        logger.info(f"Initialized G-Keys for user {user_id} ({created} new)")
        return await self.repository.list_user_keys(user_id)

    async def get_user_keys(self, user_id: str) -> List[GKey]:
        """All keys of a user, with ended cooloffs expired and missing categories added"""
        await self.repository.expire_cooloffs(self.now(), user_id=user_id)
        keys = await self.repository.list_user_keys(user_id)

        existing = {key.category for key in keys}
        missing = [name for name in category_names() if name not in existing]
        if missing:
            logger.info(f"Adding {len(missing)} missing G-Key categories for user {user_id}")
            await self.repository.ensure_keys(user_id, missing)
            keys = await self.repository.list_user_keys(user_id)

        return sorted(keys, key=lambda k: k.category)

    async def get_key_status(self, user_id: str, category: str) -> GKey:
        normalized = self._normalize(category)
        await self.repository.expire_cooloffs(self.now(), user_id=user_id)
        key = await self.repository.get_key(user_id, normalized)
        if key is None:
            raise KeyNotFoundError(user_id, normalized)
        return key

    async def get_key_status_details(self, user_id: str, category: str) -> KeyStatusDetail:
        key = await self.get_key_status(user_id, category)
        return KeyStatusDetail(
            category=key.category,
            status=key.status,
            last_brand_id=key.last_brand_id,
            last_brand_cooloff_hours=key.last_brand_cooloff_hours,
            cooloff_ends_at=key.cooloff_ends_at,
            cooloff_time_remaining=cooloff.cooloff_remaining_ms(key, self.now()),
            locked_with=key.locked_with,
        )

    async def debug_key_status(self, user_id: str, category: str) -> KeyDebugStatus:
        """Stored state of a key as is, without expiring its cooloff first"""
        normalized = self._normalize(category)
        key = await self.repository.get_key(user_id, normalized)
        if key is None:
            raise KeyNotFoundError(user_id, normalized)

        analysis = None
        if key.status == KeyStatus.COOLOFF and key.cooloff_ends_at is not None:
            now = self.now()
            until_ms = int((key.cooloff_ends_at - now).total_seconds() * 1000)
            analysis = CooloffAnalysis(
                has_expired=now > key.cooloff_ends_at,
                time_until_expiry=until_ms,
                minutes_until_expiry=math.floor(until_ms / 60000 + 0.5),
            )

        brand_hours = key.last_brand_cooloff_hours
        return KeyDebugStatus(
            user_id=user_id,
            category=key.category,
            status=key.status,
            locked_with=key.locked_with,
            locked_at=key.locked_at,
            cooloff_ends_at=key.cooloff_ends_at,
            last_brand_id=key.last_brand_id,
            last_brand_cooloff_hours=brand_hours,
            last_brand_cooloff_label=cooloff_option_label(brand_hours) if brand_hours is not None else None,
            last_used=key.last_used,
            usage_count=key.usage_count,
            category_default_cooloff_hours=get_default_cooloff_hours(key.category),
            cooloff_analysis=analysis,
        )

    async def has_available_key(self, user_id: str, category: str, brand_id: Optional[str] = None) -> bool:
        """Whether a campaign from ``brand_id`` could lock this category right now"""
        normalized = self._normalize(category)
        key = await self.repository.get_key(user_id, normalized)
        if key is None:
            # Created on demand as available when the streamer joins
            return is_known_category(normalized)
        return cooloff.can_acquire(key, brand_id, self.now())

    async def get_keys_summary(self, user_id: str) -> KeysSummary:
        keys = await self.get_user_keys(user_id)
        now = self.now()

        views = []
        for key in keys:
            remaining = cooloff.cooloff_remaining_ms(key, now)
            elapsed = cooloff.cooloff_elapsed_ms(key, now)
            info = get_category_info(key.category)
            views.append(KeyView(
                key=key,
                completion_count=key.usage_count,
                cooloff_time_remaining=remaining,
                cooloff_time_formatted=cooloff.format_remaining(remaining) if remaining is not None else None,
                cooloff_time_elapsed=elapsed,
                cooloff_time_elapsed_formatted=cooloff.format_remaining(elapsed) if elapsed is not None else None,
                category_display_name=info.display_name if info else None,
            ))

        return KeysSummary(
            total_keys=len(keys),
            available_keys=sum(1 for k in keys if k.status == KeyStatus.AVAILABLE),
            locked_keys=sum(1 for k in keys if k.status == KeyStatus.LOCKED),
            cooloff_keys=sum(1 for k in keys if k.status == KeyStatus.COOLOFF),
            keys=views,
        )

    def list_categories(self) -> CategoryListResponse:
        categories = [c.to_info() for c in all_categories()]
        return CategoryListResponse(
            categories=categories,
            total=len(categories),
            cooloff_options=[o.to_info() for o in COOLOFF_OPTIONS],
            default_cooloff_hours=DEFAULT_COOLOFF_HOURS,
        )

    # ====================
    # Acquire
    # ====================

    async def acquire_key(
        self,
        user_id: str,
        categories: List[str],
        campaign_id: str,
        brand_id: Optional[str],
    ) -> GKey:
        """
        Lock one of the user's keys for a campaign.

        Categories are tried in order and matched case-insensitively. A key
        already locked with this campaign is returned as is.

        Raises:
            InvalidCategoryError: no usable category
            KeyInCooloffError: every matching key is cooling off for another brand
            KeyUnavailableError: a matching key is locked by another campaign
        """
        candidates = self._normalize_many(categories)
        if not candidates:
            raise InvalidCategoryError("Campaign has no categories defined")

        held = await self.repository.find_locked_key(user_id, campaign_id)
        if held is not None:
            logger.info(f"User {user_id} already holds {held.category} G-Key for campaign {campaign_id}")
            return held

        known = [c for c in candidates if is_known_category(c)]
        if known:
            await self.repository.ensure_keys(user_id, known)

        for _ in range(MAX_WRITE_ATTEMPTS):
            now = self.now()
            for category in candidates:
                locked = await self.repository.try_lock(user_id, category, campaign_id, brand_id, now)
                if locked is not None:
                    return locked

            keys = [await self.repository.get_key(user_id, c) for c in candidates]
            keys = [k for k in keys if k is not None]
            if not keys:
                raise InvalidCategoryError(
                    f"No G-Key categories match campaign categories: {', '.join(candidates)}"
                )

            for key in keys:
                if key.status == KeyStatus.LOCKED and key.locked_with == campaign_id:
                    return key

            self._raise_blocked(keys, campaign_id, brand_id, now)
            # A key became acquirable between the lock attempt and the re-read

        raise ConcurrentModificationError(
            f"Could not lock a G-Key for campaign {campaign_id} after {MAX_WRITE_ATTEMPTS} attempts"
        )

    @staticmethod
    def _raise_blocked(keys: List[GKey], campaign_id: str, brand_id: Optional[str], now: datetime) -> None:
        blocked = []
        for key in keys:
            reason = cooloff.blocking_reason(key, campaign_id, brand_id, now)
            if reason is None:
                return
            blocked.append((key, reason))

        locked = [key for key, reason in blocked if reason == cooloff.BLOCKED_LOCKED]
        if locked:
            logger.info(f"G-Key {locked[0].category} is locked with campaign {locked[0].locked_with}")
            raise KeyUnavailableError(locked[0].category, locked[0].locked_with)

        cooling = sorted(
            (key for key, _ in blocked),
            key=lambda k: k.cooloff_ends_at or now,
        )
        first = cooling[0]
        logger.info(f"G-Key {first.category} in cooloff with brand {first.last_brand_id} until {first.cooloff_ends_at}")
        raise KeyInCooloffError(first.category, first.cooloff_ends_at)

    # ====================
    # Release
    # ====================

    async def release_key(
        self,
        user_id: str,
        campaign_id: str,
        brand_id: Optional[str],
        cooloff_hours: Optional[int] = None,
        category: Optional[str] = None,
    ) -> ReleaseKeyResponse:
        """
        Release the key locked with a campaign into cooloff.

        Same brand as the previous release keeps the higher of the two
        cooloffs; a different brand starts over with this campaign's cooloff.
        """
        hours = cooloff.validate_cooloff_hours(cooloff_hours)
        normalized = self._normalize(category) if category else None

        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            key = await self.repository.find_locked_key(user_id, campaign_id, normalized)
            if key is None:
                raise NoLockedKeyError(user_id, campaign_id)

            now = self.now()
            update = cooloff.plan_release(key, brand_id, hours, now)
            released = await self.repository.apply_release(key, update, now)
            if released is not None:
                logger.info(
                    f"G-Key {released.category} for user {user_id} set to {released.status.value} "
                    f"for {update.effective_cooloff_hours} hours (brand: {brand_id})"
                )
                return ReleaseKeyResponse(key=released, effective_cooloff_hours=update.effective_cooloff_hours)

            logger.warning(f"Release of G-Key {key.key_id} lost a concurrent update (attempt {attempt})")

        raise ConcurrentModificationError(
            f"Could not release G-Key for campaign {campaign_id} after {MAX_WRITE_ATTEMPTS} attempts"
        )

    async def release_campaign_keys(
        self,
        campaign_id: str,
        user_ids: Optional[List[str]],
        brand_id: Optional[str],
        cooloff_hours: Optional[int] = None,
    ) -> CampaignReleaseResponse:
        """
        Release every participant's key when a campaign completes.

        Each participant is released independently; failures are reported
        per user instead of aborting the batch.
        """
        cooloff.validate_cooloff_hours(cooloff_hours)

        if not user_ids:
            user_ids = [key.user_id for key in await self.repository.list_keys_locked_with(campaign_id)]

        unique_users = list(dict.fromkeys(user_ids))
        results = await asyncio.gather(
            *(self.release_key(uid, campaign_id, brand_id, cooloff_hours) for uid in unique_users),
            return_exceptions=True,
        )

        response = CampaignReleaseResponse(campaign_id=campaign_id)
        failed: Dict[str, str] = {}
        for uid, result in zip(unique_users, results):
            if isinstance(result, BaseException):
                logger.error(f"Failed to release G-Key for user {uid} in campaign {campaign_id}: {result}")
                failed[uid] = str(result)
            else:
                response.released.append(uid)
        response.failed = failed

        logger.info(
            f"Campaign {campaign_id}: released {len(response.released)} G-Keys, {len(failed)} failed"
        )
        return response

    # ====================
    # Maintenance
    # ====================

    async def expire_cooloffs(self, now: Optional[datetime] = None) -> int:
        """Move every ended cooloff back to available"""
        updated = await self.repository.expire_cooloffs(now or self.now())
        if updated:
            logger.info(f"Expired {updated} G-Key cooloffs")
        return updated

    async def force_unlock(self, user_id: str, category: str) -> GKey:
        normalized = self._normalize(category)
        key = await self.repository.force_unlock(user_id, normalized, self.now())
        if key is None:
            raise KeyNotFoundError(user_id, normalized)
        logger.warning(f"Force-unlocked G-Key {normalized} for user {user_id}")
        return key

    async def normalize_stored_categories(self) -> int:
        fixed = await self.repository.normalize_categories()
        logger.info(f"Normalized {fixed} stored G-Key categories")
        return fixed
