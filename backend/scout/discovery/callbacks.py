"""Background pump that keeps the matchmaking client's callbacks flowing."""

import asyncio
import contextlib
import logging

from scout.matchmaking.client import MatchmakingClient

CALLBACK_INTERVAL = 0.1  # seconds between run_callbacks calls

logger = logging.getLogger(__name__)


class CallbackDriver:
    """Periodically invoke `run_callbacks` on the matchmaking client.

    The client only completes asynchronous requests from inside
    `run_callbacks`, so this task must run for as long as requests can be
    outstanding. It never ends on its own; `stop` cancels it.
    """

    def __init__(self, client: MatchmakingClient, *, interval: float = CALLBACK_INTERVAL) -> None:
        self._client = client
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._ticks = 0

    @property
    def ticks(self) -> int:
        """Number of completed run_callbacks calls."""
        return self._ticks

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the pump task if it is not already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._pump(), name="matchmaking-callbacks")
        logger.debug("callback driver started, interval %.3fs", self._interval)

    async def stop(self) -> None:
        """Cancel the pump task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("callback driver stopped after %d ticks", self._ticks)

    async def _pump(self) -> None:
        while True:
            self._client.run_callbacks()
            self._ticks += 1
            await asyncio.sleep(self._interval)
