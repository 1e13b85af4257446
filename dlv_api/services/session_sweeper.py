import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class SessionSweeper:
    """Background task that periodically runs an eviction callback."""

    def __init__(self, sweep: Callable[[], int], interval_minutes: int, enabled: bool = True):
        self.sweep = sweep
        self.interval_seconds = max(interval_minutes, 1) * 60
        self.enabled = enabled
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None

    async def start(self) -> None:
        if not self.enabled:
            logger.info("Session sweeping disabled by configuration.")
            return
        if self._task and not self._task.done():
            return
        logger.info("Sweeping stale sessions every %s minutes", self.interval_seconds / 60)
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if not self._task:
            return
        self._stop_event.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                self._sweep_once()

    def _sweep_once(self) -> None:
        try:
            evicted = self.sweep()
            if evicted:
                logger.info("Evicted %s stale sessions", evicted)
        except Exception:
            logger.exception("Session sweep failed")
