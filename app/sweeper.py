"""Background eviction of expired rate-limit windows."""
import asyncio
import logging
import time

from app.window_store import WindowStore

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 300


class ExpirySweeper:
    """Periodically calls ``store.sweep_expired``. Best-effort: a missed cycle only costs memory."""

    def __init__(self, store: WindowStore, interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        removed = await self.store.sweep_expired(time.time())
        if removed:
            logger.debug("Swept %d expired rate limit windows", removed)
        return removed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except Exception:
                logger.exception("Sweep iteration failed")

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        # Surface silent task death; cancellation on shutdown is expected
        self._task.add_done_callback(
            lambda t: logger.error("Sweeper task terminated: %s", t.exception())
            if not t.cancelled() and t.exception() else None
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
