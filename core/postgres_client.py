"""
PostgreSQL Client for the Marketplace Services

asyncpg pool wrapper exposing the query/query_row/execute surface the
repositories use. Each service constructs its own client and hands it to
its repository; there is no module-level instance.

Usage:
    from core.postgres_client import PostgresClient

    db = PostgresClient.from_config("gkey_service")

    async with db:
        rows = await db.query("SELECT * FROM gkey.g_keys WHERE user_id = $1", [user_id])
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import asyncpg

from core.config import InfraConfig
from core.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class PostgresClient:
    """asyncpg connection pool with dict-returning helpers"""

    def __init__(
        self,
        service_name: str,
        host: str = "localhost",
        port: int = 5432,
        database: str = "postgres",
        username: str = "postgres",
        password: str = "",
        min_size: int = 1,
        max_size: int = 10,
    ):
        self.service_name = service_name
        self.host = host
        self.port = port
        self.database = database
        self.username = username
        self.password = password
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None
        self._pool_lock = asyncio.Lock()

        logger.info(f"PostgreSQL client initialized for {service_name}: {self.host}:{self.port}/{self.database}")

    @classmethod
    def from_config(
        cls,
        service_name: str,
        config: Optional[ConfigManager] = None,
        infra: Optional[InfraConfig] = None,
    ) -> "PostgresClient":
        """Build a client from ConfigManager host discovery and InfraConfig credentials"""
        config = config or ConfigManager(service_name)
        infra = infra or config.settings.infrastructure

        host, port = config.discover_service(
            service_name="postgres_service",
            default_host=infra.postgres_host,
            default_port=infra.postgres_port,
            env_host_key="POSTGRES_HOST",
            env_port_key="POSTGRES_PORT",
        )

        return cls(
            service_name=service_name,
            host=host,
            port=port,
            database=infra.postgres_db,
            username=infra.postgres_user,
            password=infra.postgres_password,
            min_size=infra.postgres_pool_min,
            max_size=infra.postgres_pool_max,
        )

    async def connect(self) -> None:
        """Create the pool if it does not exist yet; concurrent callers share one pool"""
        if self._pool is not None:
            return
        async with self._pool_lock:
            if self._pool is None:
                self._pool = await asyncpg.create_pool(
                    host=self.host,
                    port=self.port,
                    database=self.database,
                    user=self.username,
                    password=self.password,
                    min_size=self.min_size,
                    max_size=self.max_size,
                )
                logger.info(f"PostgreSQL pool ready for {self.service_name}")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # The pool outlives a single unit of work; close() releases it
        return None

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return all rows"""
        await self.connect()
        async with self._pool.acquire() as conn:
            records = await conn.fetch(sql, *(params or []))
        return [dict(record) for record in records]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return a single row"""
        await self.connect()
        async with self._pool.acquire() as conn:
            record = await conn.fetchrow(sql, *(params or []))
        return dict(record) if record is not None else None

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> str:
        """Execute a statement and return its status tag (e.g. 'UPDATE 3')"""
        await self.connect()
        async with self._pool.acquire() as conn:
            return await conn.execute(sql, *(params or []))

    async def execute_script(self, sql: str) -> None:
        """Run a multi-statement script (migrations)"""
        await self.connect()
        async with self._pool.acquire() as conn:
            await conn.execute(sql)

    async def health_check(self) -> bool:
        try:
            row = await self.query_row("SELECT 1 AS healthy")
            return row is not None
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"PostgreSQL health check failed for {self.service_name}: {e}")
            return False

    async def close(self):
        """Close the pool"""
        async with self._pool_lock:
            if self._pool is not None:
                await self._pool.close()
                self._pool = None
                logger.info(f"PostgreSQL pool closed for {self.service_name}")


def rows_affected(status_tag: str) -> int:
    """Parse the row count out of an asyncpg status tag"""
    try:
        return int(status_tag.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


__all__ = ["PostgresClient", "rows_affected"]
