"""
Cooloff Sweeper

Background task that expires ended cooloffs on a fixed interval, so keys
become available even when nobody reads them.
"""

import asyncio
import logging
from typing import Optional

from .gkey_service import GKeyService

logger = logging.getLogger(__name__)


class CooloffSweeper:
    """Runs GKeyService.expire_cooloffs every ``interval_seconds``"""

    def __init__(self, service: GKeyService, interval_seconds: float = 15 * 60):
        if interval_seconds <= 0:
            raise ValueError("Sweep interval must be positive")
        self.service = service
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """One sweep; errors are logged and reported as 0 updates"""
        self.runs += 1
        try:
            return await self.service.expire_cooloffs()
        except Exception as e:
            logger.error(f"Cooloff sweep failed: {e}", exc_info=True)
            return 0

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="gkey-cooloff-sweeper")
        logger.info(f"Cooloff sweeper started (every {self.interval_seconds:.0f}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Cooloff sweeper stopped")
