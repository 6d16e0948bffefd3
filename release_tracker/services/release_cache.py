"""
In-memory release snapshot cache.

A refresh cycle fetches every configured repository concurrently, collects
whatever succeeded before the cycle deadline and publishes the result as a
new immutable Snapshot. Readers always get the last published snapshot and
are never blocked by a refresh in progress.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from release_tracker.models import EMPTY_SNAPSHOT, MalformedRepoSpec, ReleaseRecord, Snapshot
from release_tracker.services.release_fetcher import ReleaseFetcher, utcnow

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_THRESHOLD = 3


@dataclass(frozen=True)
class CacheHealth:
    """Refresh bookkeeping exposed to the health endpoints."""
    refresh_count: int = 0
    last_refresh_at: Optional[datetime] = None
    last_cycle_failures: Tuple[str, ...] = ()
    failure_streaks: Dict[str, int] = field(default_factory=dict)
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD

    @property
    def degraded_repositories(self) -> List[str]:
        """Repositories that failed in at least ``failure_threshold`` consecutive cycles."""
        return sorted(
            spec for spec, streak in self.failure_streaks.items()
            if streak >= self.failure_threshold
        )

    @property
    def is_degraded(self) -> bool:
        return bool(self.degraded_repositories)


class ReleaseCache:
    """Owns the current release Snapshot and recomputes it on refresh."""

    def __init__(
        self,
        repositories: Sequence[str],
        fetcher: ReleaseFetcher,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repositories = tuple(repositories)
        self.fetcher = fetcher
        self.clock = clock
        self._snapshot = EMPTY_SNAPSHOT
        self._health = CacheHealth(failure_threshold=failure_threshold)
        self._refresh_lock = asyncio.Lock()

    def get(self) -> Snapshot:
        """Return the last published snapshot (empty before the first refresh)."""
        return self._snapshot

    def health(self) -> CacheHealth:
        return self._health

    @property
    def refreshing(self) -> bool:
        return self._refresh_lock.locked()

    async def refresh(self, timeout: Optional[float] = None) -> Snapshot:
        """
        Run one refresh cycle and publish its snapshot.

        Every configured repository is fetched in its own task. Failures are
        logged and the repository is left out of this cycle's snapshot. When
        ``timeout`` expires, fetches still in flight are cancelled and the
        records collected so far are published.

        Concurrent calls are serialized; readers keep seeing the previous
        snapshot until the new one is published.

        Args:
            timeout: Seconds bounding the whole cycle, None for no bound

        Returns:
            Snapshot: The newly published snapshot
        """
        async with self._refresh_lock:
            logger.info(f"Refreshing release cache for {len(self.repositories)} repositories...")

            tasks = {
                asyncio.create_task(self.fetcher.fetch(spec), name=f"fetch-release:{spec}"): spec
                for spec in self.repositories
            }
            releases: List[ReleaseRecord] = []
            failed: List[str] = []

            try:
                pending = set()
                if tasks:
                    done, pending = await asyncio.wait(tasks, timeout=timeout)
                    for task in done:
                        spec = tasks[task]
                        error = task.exception()
                        if error is None:
                            releases.append(task.result())
                        elif isinstance(error, MalformedRepoSpec):
                            logger.error(f"Skipping misconfigured repository: {error}")
                            failed.append(spec)
                        else:
                            logger.error(f"Error fetching release for {spec}: {error}")
                            failed.append(spec)

                if pending:
                    logger.warning(
                        f"Release cache refresh timed out after {timeout}s, "
                        f"dropping {len(pending)} of {len(tasks)} repositories: "
                        f"{', '.join(sorted(tasks[task] for task in pending))}"
                    )
                    failed.extend(tasks[task] for task in pending)
            finally:
                await self._drain(tasks)

            releases.sort(key=lambda record: (record.repo.full_name, record.repo.branch))
            snapshot = Snapshot(releases=tuple(releases), fetched_at=self.clock())
            self._snapshot = snapshot
            self._health = self._next_health(failed, snapshot.fetched_at)

            logger.info(
                f"Release cache refreshed: {len(releases)} of {len(tasks)} repositories, "
                f"{len(failed)} failed"
            )
            return snapshot

    async def _drain(self, tasks) -> None:
        """Cancel unfinished fetches and wait for them, so none outlive the cycle."""
        unfinished = [task for task in tasks if not task.done()]
        for task in unfinished:
            task.cancel()
        if unfinished:
            await asyncio.gather(*unfinished, return_exceptions=True)

    def _next_health(self, failed: Sequence[str], refreshed_at: datetime) -> CacheHealth:
        previous = self._health
        streaks = {
            spec: previous.failure_streaks.get(spec, 0) + 1 if spec in failed else 0
            for spec in self.repositories
        }
        return CacheHealth(
            refresh_count=previous.refresh_count + 1,
            last_refresh_at=refreshed_at,
            last_cycle_failures=tuple(sorted(failed)),
            failure_streaks=streaks,
            failure_threshold=previous.failure_threshold,
        )
