import asyncio
import logging
import os
import time
from contextlib import suppress
from typing import List, Optional
import aiofiles.os
from downloader.infra.storage import DownloadsStore

logger = logging.getLogger(__name__)

class RetentionSweeper:
    """
    Periodically delete stored files older than max_age_seconds.

    Each sweep is best effort: a failure on one entry is logged and the
    remaining entries are still processed. There is no coordination with
    downloads in progress.
    """

    def __init__(self, store: DownloadsStore, interval_seconds: float = 3600, max_age_seconds: float = 3600):
        self.store = store
        self.interval_seconds = interval_seconds
        self.max_age_seconds = max_age_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self, now: Optional[float] = None) -> List[str]:
        """Delete expired entries, returning the names removed"""
        cutoff = (time.time() if now is None else now) - self.max_age_seconds
        removed: List[str] = []

        try:
            names = await aiofiles.os.listdir(self.store.directory)
        except OSError as e:
            logger.error(f"Cleanup error: {e}")
            return removed

        for name in names:
            path = os.path.join(self.store.directory, name)
            try:
                stats = await aiofiles.os.stat(path)
            except OSError as e:
                logger.error(f"File stat error: {e}")
                continue

            if stats.st_mtime >= cutoff:
                continue

            try:
                await aiofiles.os.remove(path)
            except OSError as e:
                logger.error(f"File deletion error: {e}")
                continue

            removed.append(name)

        if removed:
            logger.info(f"Cleanup removed {len(removed)} expired file(s)")
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.sweep_once()
            except Exception:
                logger.exception("Unexpected cleanup failure")

    def start(self) -> None:
        """Start the background loop; the first sweep runs after one interval"""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.debug(f"Cleanup scheduled every {self.interval_seconds}s for {self.store.directory}")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
