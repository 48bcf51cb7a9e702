"""Fetch, compare and report lobby snapshots, once or on an interval."""

from __future__ import annotations

import asyncio
import contextlib
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from scout.discovery.bridge import REQUEST_TIMEOUT, RequestBridge
from scout.discovery.diff import DiffPolicy, diff_snapshots
from scout.discovery.fetcher import fetch_snapshot
from scout.exceptions import LobbyListError, RequestTimeoutError

if TYPE_CHECKING:
    from scout.discovery.models import LobbyListFilter, Snapshot
    from scout.matchmaking.client import MatchmakingClient
    from scout.report.sink import ReportSink

logger = structlog.get_logger()

TIMEOUT_NOTICE = "Request timed out."


class PollerPhase(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    COMPARING = "comparing"
    REPORTING = "reporting"
    SLEEPING = "sleeping"
    DONE = "done"


class Poller:
    """Drive fetch -> compare -> report cycles and own the comparison baseline.

    With `interval == 0` a single cycle runs and its result is always shown.
    Otherwise cycles repeat every `interval` seconds until the stop event is
    set; a cycle with nothing new to report shows nothing and keeps the
    previous baseline. Request timeouts and list failures degrade a cycle to
    an empty snapshot instead of ending the loop.
    """

    def __init__(
        self,
        client: MatchmakingClient,
        lobby_filter: LobbyListFilter,
        sink: ReportSink,
        *,
        interval: float = 0,
        request_timeout: float = REQUEST_TIMEOUT,
        diff_policy: DiffPolicy = DiffPolicy.LITERAL,
    ) -> None:
        if interval < 0:
            raise ValueError(f"interval must not be negative, got {interval}")
        self._client = client
        self._bridge = RequestBridge(client)
        self._filter = lobby_filter
        self._sink = sink
        self._interval = interval
        self._request_timeout = request_timeout
        self._diff_policy = diff_policy
        self._phase = PollerPhase.IDLE
        self._baseline: Snapshot | None = None

    @property
    def phase(self) -> PollerPhase:
        return self._phase

    @property
    def baseline(self) -> Snapshot | None:
        """Last reported snapshot, or None before anything was reported."""
        return self._baseline

    @property
    def single_shot(self) -> bool:
        return self._interval == 0

    async def fetch(self) -> Snapshot:
        """Request the lobby list and resolve it into a snapshot."""
        self._phase = PollerPhase.FETCHING
        handle = self._bridge.request(self._filter)
        try:
            lobby_ids = await handle.wait(self._request_timeout)
        except RequestTimeoutError as e:
            logger.warning("lobby list request timed out", timeout=e.timeout)
            self._sink.notice(TIMEOUT_NOTICE)
            return ()
        except LobbyListError as e:
            logger.error("lobby list request failed", error=str(e))
            self._sink.notice(f"Lobby list request failed: {e}")
            return ()
        return fetch_snapshot(self._client, lobby_ids)

    async def poll_once(self) -> Snapshot:
        """Run one cycle and return the reported entries."""
        current = await self.fetch()

        self._phase = PollerPhase.COMPARING
        reported = diff_snapshots(self._baseline, current, self._diff_policy)
        logger.info("poll cycle compared", found=len(current), reported=len(reported))

        if reported:
            self._phase = PollerPhase.REPORTING
            self._sink.show(reported)
            self._baseline = reported
        elif self.single_shot:
            self._phase = PollerPhase.REPORTING
            self._sink.show(reported)
        return reported

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Poll until done: one cycle in single-shot mode, else until `stop` is set."""
        stop = stop or asyncio.Event()
        try:
            while not stop.is_set():
                await self.poll_once()
                if self.single_shot:
                    break
                self._phase = PollerPhase.SLEEPING
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(stop.wait(), timeout=self._interval)
        finally:
            self._phase = PollerPhase.DONE
