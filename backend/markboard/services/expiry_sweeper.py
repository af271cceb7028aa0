"""
Recurring background sweep that deletes expired marks and announces them.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from markboard.core.async_utils import run_in_background
from markboard.services.mark_store import MarkStore
from markboard.services.websocket_manager import ConnectionManager
from markboard.utils import utcnow

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """
    Owns the sweep schedule.

    ``start()`` launches one asyncio task that calls ``tick()`` every
    ``interval`` seconds until ``stop()`` cancels it. Ticks never overlap:
    a tick requested while another is running is skipped.
    """

    def __init__(
        self,
        store: MarkStore,
        broadcaster: ConnectionManager,
        interval: float = 10.0,
        timeout: float = 30.0,
    ):
        self.store = store
        self.broadcaster = broadcaster
        self.interval = interval
        self.timeout = timeout
        self._task: Optional[asyncio.Task] = None
        self._pending: Optional[asyncio.Future] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            logger.debug("Expiry sweeper already running")
            return
        self._task = asyncio.create_task(self._run(), name="expiry-sweeper")
        logger.info(f"Expiry sweeper started, interval={self.interval}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Expiry sweeper stopped")

    async def tick(self, now: Optional[datetime] = None) -> List[str]:
        """Run one sweep and return the ids that were deleted."""
        if self._lock.locked() or (self._pending is not None and not self._pending.done()):
            logger.warning("Previous sweep still running, skipping tick")
            return []

        async with self._lock:
            now = now or utcnow()
            self._pending = asyncio.ensure_future(
                asyncio.to_thread(self.store.delete_expired, now)
            )
            # On timeout the delete keeps running in its thread and later
            # ticks are skipped until it finishes
            try:
                deleted_ids = await asyncio.wait_for(
                    asyncio.shield(self._pending), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                self._pending.add_done_callback(self._announce_late)
                raise
            await self._announce(deleted_ids)
            return deleted_ids

    async def _announce(self, deleted_ids: List[str]) -> None:
        for mark_id in deleted_ids:
            try:
                await self.broadcaster.publish_expired(mark_id)
            except Exception as e:
                logger.error(f"Failed to broadcast expiry of mark {mark_id}: {e}")

    def _announce_late(self, future: asyncio.Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error(f"Timed-out expiry sweep failed: {exc}", exc_info=exc)
            return
        deleted_ids = future.result()
        if deleted_ids:
            logger.info(f"Late sweep finished, announcing {len(deleted_ids)} expired mark(s)")
            run_in_background(self._announce(deleted_ids), name="expiry-late-announce")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.tick()
            except asyncio.TimeoutError:
                logger.error(f"Expiry sweep timed out after {self.timeout}s")
            except Exception as e:
                logger.error(f"Expiry sweep failed: {e}", exc_info=True)
