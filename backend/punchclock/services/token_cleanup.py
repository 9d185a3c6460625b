import os
import asyncio
import logging
from typing import Optional
from punchclock.db import get_store
from punchclock.services.hours_service import utcnow
from punchclock.utils.logger import EventTypes, log_error, log_event

logger = logging.getLogger(__name__)


class TokenCleanupService:
    """Background sweep that clears expired password setup tokens.

    Runs one sweep on start, then one every ``interval_hours``.
    """

    def __init__(self, interval_hours: float = 24):
        self.interval_seconds = interval_hours * 3600
        self._task: Optional[asyncio.Task] = None
        self._stopped: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        if self.is_running:
            return
        self._stopped = asyncio.Event()
        self._task = asyncio.create_task(self._sweep_forever())
        logger.info("Reset token sweep scheduled every %.1f hours", self.interval_seconds / 3600)

    async def stop(self):
        if not self.is_running:
            return
        self._stopped.set()
        await self._task
        self._task = None
        logger.info("Reset token sweep stopped")

    async def run_once(self) -> int:
        cleared = await get_store().clear_expired_reset_tokens(utcnow())
        await log_event(EventTypes.TOKEN_CLEANUP_COMPLETED, {"cleared": cleared})
        return cleared

    async def _sweep_forever(self):
        while not self._stopped.is_set():
            try:
                await self.run_once()
            except Exception as e:
                log_error("Reset token sweep failed", e)
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass


token_cleanup_service = TokenCleanupService(float(os.getenv("TOKEN_CLEANUP_INTERVAL_HOURS", "24")))


async def start_token_cleanup():
    await token_cleanup_service.start()


async def stop_token_cleanup():
    await token_cleanup_service.stop()
