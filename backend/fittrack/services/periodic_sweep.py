"""Background sweeps that bound the size of the in-memory security stores."""

import asyncio
from collections.abc import Callable

from fittrack.core.logging import get_logger

logger = get_logger("periodic_sweep")


class PeriodicSweep:
    """Run ``sweep`` every ``interval_seconds`` until stopped.

    ``sweep`` is a synchronous callable returning how many entries it
    removed. Tests call :meth:`run_now` instead of waiting on the timer.
    """

    def __init__(self, name: str, sweep: Callable[[], int], interval_seconds: float) -> None:
        self.name = name
        self._sweep = sweep
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            logger.warning(f"Sweep '{self.name}' is already running")
            return

        self._task = asyncio.create_task(self._loop(), name=f"sweep:{self.name}")
        logger.info(f"Sweep '{self.name}' started (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(f"Sweep '{self.name}' stopped")

    def run_now(self) -> int:
        """Run one sweep synchronously and return the number of entries removed."""
        removed = self._sweep()
        if removed > 0:
            logger.debug(f"Sweep '{self.name}': removed {removed} entries")
        return removed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.run_now()
            except Exception:
                logger.exception(f"Error in sweep '{self.name}'")
