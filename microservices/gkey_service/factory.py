"""
G-Key Service Factory

Builds the repository, service and sweeper with their dependencies.
"""

import logging
from typing import Optional

from core.config_manager import ConfigManager
from core.postgres_client import PostgresClient

from .gkey_service import GKeyService
from .protocols import GKeyRepositoryProtocol
from .sweeper import CooloffSweeper

logger = logging.getLogger(__name__)

SERVICE_NAME = "gkey_service"


class GKeyServiceFactory:
    """Factory for creating G-Key service components"""

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        repository: Optional[GKeyRepositoryProtocol] = None,
    ):
        self.config = config or ConfigManager(SERVICE_NAME)
        self._repository: Optional[GKeyRepositoryProtocol] = repository
        self._service: Optional[GKeyService] = None
        self._sweeper: Optional[CooloffSweeper] = None

    async def initialize(self) -> None:
        """Initialize all components"""
        logger.info("Initializing G-Key Service components...")
        settings = self.config.settings

        if self._repository is None:
            from .gkey_repository import GKeyRepository

            db = PostgresClient.from_config(SERVICE_NAME, self.config)
            self._repository = GKeyRepository(
                db,
                apply_migrations=settings.infrastructure.postgres_apply_migrations,
            )
        await self._repository.initialize()

        self._service = GKeyService(repository=self._repository)

        if settings.services.gkey_sweeper_enabled:
            self._sweeper = CooloffSweeper(
                self._service,
                interval_seconds=settings.services.gkey_sweep_interval_minutes * 60,
            )
            self._sweeper.start()
        else:
            logger.info("Cooloff sweeper disabled; relying on expiry at read time")

        logger.info("G-Key Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing G-Key Service components...")

        if self._sweeper:
            await self._sweeper.stop()

        if self._repository:
            await self._repository.close()

        logger.info("G-Key Service components closed")

    @property
    def repository(self) -> GKeyRepositoryProtocol:
        if not self._repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._repository

    @property
    def service(self) -> GKeyService:
        if not self._service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._service

    @property
    def sweeper(self) -> Optional[CooloffSweeper]:
        return self._sweeper


__all__ = ["GKeyServiceFactory", "SERVICE_NAME"]
