"""
G-Key Service Data Repository

Data access layer - PostgreSQL (Async)

Every write that changes a key's status is a single conditional UPDATE, so
two concurrent joins cannot both lock the same key.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from core.postgres_client import PostgresClient, rows_affected

from .models import GKey, KeyReleaseUpdate, KeyStatus

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def make_key_id() -> str:
    return f"gk_{uuid.uuid4().hex[:16]}"


class GKeyRepository:
    """G-Key data repository - PostgreSQL (Async)"""

    def __init__(self, db: PostgresClient, apply_migrations: bool = False):
        self.db = db
        self.apply_migrations = apply_migrations
        self.schema = "gkey"
        self.keys_table = "g_keys"

    @property
    def table(self) -> str:
        return f"{self.schema}.{self.keys_table}"

    async def initialize(self):
        """Initialize database connection"""
        if self.apply_migrations:
            for script in sorted(MIGRATIONS_DIR.glob("*.sql")):
                logger.info(f"Applying migration {script.name}")
                async with self.db:
                    await self.db.execute_script(script.read_text())
        logger.info("G-Key repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("G-Key repository database connection closed")

    async def health_check(self) -> bool:
        """Check repository health"""
        return await self.db.health_check()

    # ====================
    # Reads
    # ====================

    async def get_key(self, user_id: str, category: str) -> Optional[GKey]:
        """Get one key by owner and normalized category"""
        query = f'''
            SELECT * FROM {self.table}
            WHERE user_id = $1 AND category = $2
        '''
        async with self.db:
            result = await self.db.query_row(query, params=[user_id, category])
        return self._row_to_gkey(result) if result else None

    async def list_user_keys(self, user_id: str) -> List[GKey]:
        """All keys of a user ordered by category"""
        query = f'''
            SELECT * FROM {self.table}
            WHERE user_id = $1
            ORDER BY category ASC
        '''
        async with self.db:
            results = await self.db.query(query, params=[user_id])
        return [self._row_to_gkey(row) for row in results]

    async def find_locked_key(
        self, user_id: str, campaign_id: str, category: Optional[str] = None
    ) -> Optional[GKey]:
        """The user's key locked with a campaign"""
        params = [user_id, campaign_id]
        category_clause = ""
        if category:
            params.append(category)
            category_clause = "AND category = $3"

        query = f'''
            SELECT * FROM {self.table}
            WHERE user_id = $1 AND locked_with = $2 AND status = 'locked'
            {category_clause}
            ORDER BY locked_at ASC
            LIMIT 1
        '''
        async with self.db:
            result = await self.db.query_row(query, params=params)
        return self._row_to_gkey(result) if result else None

    async def list_keys_locked_with(self, campaign_id: str) -> List[GKey]:
        query = f'''
            SELECT * FROM {self.table}
            WHERE locked_with = $1 AND status = 'locked'
            ORDER BY user_id ASC
        '''
        async with self.db:
            results = await self.db.query(query, params=[campaign_id])
        return [self._row_to_gkey(row) for row in results]

    # ====================
    # Writes
    # ====================

    async def ensure_keys(self, user_id: str, categories: List[str]) -> int:
        """Insert a fresh key for each category the user does not have yet"""
        if not categories:
            return 0

        try:
            key_ids = [make_key_id() for _ in categories]
            query = f'''
                INSERT INTO {self.table} (key_id, user_id, category, status, usage_count)
                SELECT k.key_id, $1, k.category, 'available', 0
                FROM unnest($2::text[], $3::text[]) AS k(key_id, category)
                ON CONFLICT (user_id, category) DO NOTHING
            '''
            async with self.db:
                status_tag = await self.db.execute(query, params=[user_id, key_ids, list(categories)])

            inserted = rows_affected(status_tag)
            if inserted:
                logger.info(f"Created {inserted} G-Keys for user {user_id}")
            return inserted

        except Exception as e:
            logger.error(f"Error creating G-Keys for user {user_id}: {e}", exc_info=True)
            raise

    async def try_lock(
        self,
        user_id: str,
        category: str,
        campaign_id: str,
        brand_id: Optional[str],
        now: datetime,
    ) -> Optional[GKey]:
        """
        Lock the key if it is acquirable right now.

        Acquirable: available; or in cooloff and either the cooloff was caused
        by ``brand_id`` or it has already ended. Returns None otherwise.
        """
        query = f'''
            UPDATE {self.table}
            SET status = 'locked',
                locked_with = $3,
                locked_at = $5,
                cooloff_ends_at = NULL,
                updated_at = $5
            WHERE user_id = $1
              AND category = $2
              AND (
                    status = 'available'
                 OR (status = 'cooloff'
                     AND (($4::text IS NOT NULL AND last_brand_id = $4::text)
                          OR cooloff_ends_at <= $5))
              )
            RETURNING *
        '''
        async with self.db:
            result = await self.db.query_row(
                query, params=[user_id, category, campaign_id, brand_id, now]
            )

        if result:
            logger.info(f"Locked G-Key {category} for user {user_id} with campaign {campaign_id}")
            return self._row_to_gkey(result)
        return None

    async def apply_release(self, expected: GKey, update: KeyReleaseUpdate, now: datetime) -> Optional[GKey]:
        """
        Write a planned release.

        Only succeeds if the key is still locked with the same campaign and
        its brand fields and usage count are unchanged since ``expected`` was read.
        """
        query = f'''
            UPDATE {self.table}
            SET status = $3,
                cooloff_ends_at = $4,
                last_used = $5,
                usage_count = $6,
                last_brand_id = $7,
                last_brand_cooloff_hours = $8,
                locked_with = NULL,
                locked_at = NULL,
                updated_at = $9
            WHERE key_id = $1
              AND status = 'locked'
              AND locked_with = $2
              AND usage_count = $10
              AND last_brand_id IS NOT DISTINCT FROM $11::text
              AND last_brand_cooloff_hours IS NOT DISTINCT FROM $12::integer
            RETURNING *
        '''
        params = [
            expected.key_id,
            expected.locked_with,
            update.status.value,
            update.cooloff_ends_at,
            update.last_used,
            update.usage_count,
            update.last_brand_id,
            update.last_brand_cooloff_hours,
            now,
            expected.usage_count,
            expected.last_brand_id,
            expected.last_brand_cooloff_hours,
        ]
        async with self.db:
            result = await self.db.query_row(query, params=params)
        return self._row_to_gkey(result) if result else None

    async def expire_cooloffs(self, now: datetime, user_id: Optional[str] = None) -> int:
        """Move every ended cooloff back to available; returns the number moved"""
        params: list = [now]
        user_clause = ""
        if user_id:
            params.append(user_id)
            user_clause = "AND user_id = $2"

        query = f'''
            UPDATE {self.table}
            SET status = 'available',
                cooloff_ends_at = NULL,
                updated_at = $1
            WHERE status = 'cooloff'
              AND cooloff_ends_at <= $1
              {user_clause}
        '''
        async with self.db:
            status_tag = await self.db.execute(query, params=params)
        return rows_affected(status_tag)

    async def force_unlock(self, user_id: str, category: str, now: datetime) -> Optional[GKey]:
        """Reset a key to available regardless of its state"""
        query = f'''
            UPDATE {self.table}
            SET status = 'available',
                locked_with = NULL,
                locked_at = NULL,
                cooloff_ends_at = NULL,
                updated_at = $3
            WHERE user_id = $1 AND category = $2
            RETURNING *
        '''
        async with self.db:
            result = await self.db.query_row(query, params=[user_id, category, now])
        return self._row_to_gkey(result) if result else None

    async def normalize_categories(self) -> int:
        """
        Lower-case stored categories that drifted in case or whitespace.

        Rows whose normalized category already exists for the same user are
        left alone for manual review.
        """
        query = f'''
            UPDATE {self.table} AS g
            SET category = LOWER(TRIM(g.category)),
                updated_at = NOW()
            WHERE g.category <> LOWER(TRIM(g.category))
              AND NOT EXISTS (
                  SELECT 1 FROM {self.table} AS k
                  WHERE k.user_id = g.user_id
                    AND k.category = LOWER(TRIM(g.category))
              )
        '''
        async with self.db:
            status_tag = await self.db.execute(query)
        return rows_affected(status_tag)

    # ====================
    # Helpers
    # ====================

    def _row_to_gkey(self, row: dict) -> GKey:
        return GKey(
            key_id=row["key_id"],
            user_id=row["user_id"],
            category=row["category"],
            status=KeyStatus(row["status"]),
            usage_count=row.get("usage_count") or 0,
            last_used=row.get("last_used"),
            cooloff_ends_at=row.get("cooloff_ends_at"),
            locked_with=row.get("locked_with"),
            locked_at=row.get("locked_at"),
            last_brand_id=row.get("last_brand_id"),
            last_brand_cooloff_hours=row.get("last_brand_cooloff_hours"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
