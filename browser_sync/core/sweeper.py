"""
Background presence sweep
"""
import asyncio
import logging
from typing import List, Optional

from .coordinator import SyncCoordinator


class PresenceSweeper:
    """
    Periodically evicts stale browsers from the coordinator.

    Runs independently of request handling. A failing pass is logged and
    retried on the next tick; it never stops the loop.
    """

    def __init__(self, coordinator: SyncCoordinator, interval_ms: Optional[int] = None):
        self.coordinator = coordinator
        self.interval_ms = interval_ms or coordinator.config.sweep_interval_ms
        self.logger = logging.getLogger("PresenceSweeper")
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> List[str]:
        """Run a single sweep pass, swallowing and logging any failure"""
        try:
            return self.coordinator.sweep()
        except Exception as e:
            self.logger.error(f"Error in presence sweep: {e}", exc_info=True)
            return []

    async def run(self):
        """Sweep forever at the configured interval"""
        while True:
            await asyncio.sleep(self.interval_ms / 1000.0)
            self.run_once()

    def start(self) -> asyncio.Task:
        """Start the sweep loop on the running event loop"""
        if not self.running:
            self.logger.info(f"Starting presence sweep every {self.interval_ms}ms")
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self):
        """Cancel the sweep loop and wait for it to finish"""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.logger.info("Presence sweep stopped")
