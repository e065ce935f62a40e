"""
Reaper - periodic eviction of old terminal batches.

Runs BatchController.cleanup() every ``interval`` seconds as an independent
asyncio task, decoupled from result delivery.
"""

import asyncio
from typing import Optional

from config.logging_config import get_logger

from .controller import BatchController

logger = get_logger(__name__)


class Reaper:
    """
    Periodic cleanup task.

    Usage:
        reaper = Reaper(controller)
        reaper.start()              # inside a running event loop
        ...
        await reaper.stop()
    """

    def __init__(self, controller: BatchController, interval: Optional[float] = None):
        self.controller = controller
        self.interval = interval or controller.config.cleanup_interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._is_running = False
        self._sweeping = False
        self.sweep_count = 0

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self):
        """Start the periodic sweep on the running event loop."""
        if self._is_running:
            return

        self._is_running = True
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Reaper started (interval {self.interval}s)")

    async def stop(self):
        """Stop the periodic sweep and wait for the task to exit."""
        self._is_running = False
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.debug("Reaper stopped")

    def sweep(self) -> int:
        """Run one cleanup pass; skipped if a pass is already running."""
        if self._sweeping:
            logger.debug("Previous sweep still running, skipping")
            return 0

        self._sweeping = True
        try:
            evicted = self.controller.cleanup()
        finally:
            self._sweeping = False

        self.sweep_count += 1
        return evicted

    async def _run(self):
        """Main sweep loop"""
        while self._is_running:
            await asyncio.sleep(self.interval)
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Batch cleanup sweep failed: {e}")
