"""
Background task that refreshes the release cache on a fixed interval.
"""

import asyncio
import logging
from typing import Optional

from release_tracker.services.release_cache import ReleaseCache

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Runs ``cache.refresh`` forever: refresh, sleep ``interval``, repeat."""

    def __init__(self, cache: ReleaseCache, interval: float, timeout: Optional[float]):
        self.cache = cache
        self.interval = interval
        self.timeout = timeout
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the refresh loop in the running event loop."""
        if self.running:
            return
        logger.info(
            f"Starting release refresh every {self.interval}s "
            f"(timeout {self.timeout}s per refresh)"
        )
        self._task = asyncio.create_task(self._run(), name="release-refresh")

    async def stop(self) -> None:
        """Cancel the refresh loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Release refresh stopped")

    async def run_once(self) -> None:
        """Run a single bounded refresh cycle."""
        try:
            await self.cache.refresh(timeout=self.timeout)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error refreshing release cache: {e}", exc_info=True)

    async def _run(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval)
