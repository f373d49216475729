"""Expiry and orphan reconciliation for the recording catalog."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from tabrecorder.recordings.catalog import CatalogStore

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 60 * 60


@dataclass
class CleanupStats:
    """Statistics from a retention sweep."""

    expired_deleted: int = 0
    orphans_deleted: int = 0
    orphan_scan_skipped: bool = False
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def total(self) -> int:
        """Number of recordings and directories removed by the sweep."""
        return self.expired_deleted + self.orphans_deleted

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "expired_deleted": self.expired_deleted,
            "orphans_deleted": self.orphans_deleted,
            "orphan_scan_skipped": self.orphan_scan_skipped,
            "total": self.total,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


class RetentionScheduler:
    """Periodically deletes expired recordings and unindexed artifact directories."""

    def __init__(
        self,
        catalog: CatalogStore,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        sweep_on_startup: bool = True,
    ) -> None:
        """Initialize the scheduler.

        Args:
            catalog: Catalog to reconcile
            interval_seconds: Delay between scheduled sweeps
            sweep_on_startup: Run one sweep as soon as the scheduler starts
        """
        self.catalog = catalog
        self.interval_seconds = interval_seconds
        self.sweep_on_startup = sweep_on_startup
        self._task: asyncio.Task | None = None

    def sweep(self, now: datetime | None = None) -> CleanupStats:
        """Run one expiry and orphan reconciliation pass.

        Orphan directories are only considered when the index was read
        successfully on this pass. A missing or corrupt index must never
        cause artifacts to be deleted.

        Args:
            now: Reference time; defaults to the current UTC time

        Returns:
            CleanupStats for the pass
        """
        now = now or datetime.now(UTC)
        stats = CleanupStats(started_at=datetime.now(UTC))

        result = self.catalog.load()
        expired = [r.id for r in result.index.recordings if r.is_expired(now)]
        for recording_id in expired:
            if self.catalog.delete(recording_id):
                stats.expired_deleted += 1

        if result.loaded_from_disk:
            stats.orphans_deleted = self._delete_orphans()
        else:
            stats.orphan_scan_skipped = True
            logger.warning("Recordings index not loaded from disk; skipping orphan scan")

        stats.completed_at = datetime.now(UTC)
        if stats.total:
            logger.info(
                "Retention sweep removed %d expired recording(s) and %d orphan(s)",
                stats.expired_deleted,
                stats.orphans_deleted,
            )
        return stats

    def _delete_orphans(self) -> int:
        # Re-read so entries created or deleted since the first load are respected
        current = self.catalog.load()
        if not current.loaded_from_disk:
            logger.warning("Recordings index unreadable on re-read; skipping orphan scan")
            return 0

        keep = current.index.ids() | self.catalog.pending_ids()
        deleted = 0
        for name in self.catalog.file_manager.list_subdirectories(self.catalog.recordings_dir):
            if name in keep:
                continue
            if self.catalog.remove_artifacts(name):
                logger.info("Removed orphan recording directory %s", name)
                deleted += 1
        return deleted

    async def start(self) -> None:
        """Start the background sweep loop; a no-op if already running."""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._run(), name="retention-sweep")
        logger.info("Retention scheduler started (interval %ss)", self.interval_seconds)

    async def stop(self) -> None:
        """Stop the background sweep loop. Safe to call when not running."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Retention scheduler stopped")

    async def run_once(self) -> CleanupStats | None:
        """Run a sweep off the event loop, logging and swallowing any failure."""
        try:
            return await asyncio.to_thread(self.sweep)
        except Exception:
            logger.exception("Retention sweep failed; will retry on the next tick")
            return None

    async def _run(self) -> None:
        if self.sweep_on_startup:
            await self.run_once()
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.run_once()
