"""Bridge the callback-based lobby list request to a bounded await.

Each request owns a one-shot future. The completion callback, fired from
`run_callbacks` on the event loop, resolves it; the Poller awaits it with a
timeout. Only one outstanding request at a time is the intended usage.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from scout.exceptions import LobbyListError, RequestTimeoutError

if TYPE_CHECKING:
    from scout.discovery.models import LobbyId, LobbyListFilter
    from scout.matchmaking.client import MatchmakingClient

logger = structlog.get_logger()

REQUEST_TIMEOUT = 10.0  # seconds


class LobbyListRequest:
    """Single-use receive handle for one lobby list request."""

    def __init__(self, future: asyncio.Future[list[LobbyId]]) -> None:
        self._future = future
        self._consumed = False

    @property
    def done(self) -> bool:
        return self._future.done()

    async def wait(self, timeout: float = REQUEST_TIMEOUT) -> tuple[LobbyId, ...]:
        """Wait up to `timeout` seconds for the ordered lobby ids.

        Raises RequestTimeoutError if nothing arrived in time and
        LobbyListError if the service reported a failure. The handle cannot
        be awaited twice.
        """
        if self._consumed:
            raise RuntimeError("lobby list request was already awaited")
        self._consumed = True

        try:
            lobby_ids = await asyncio.wait_for(self._future, timeout=timeout)
        except TimeoutError:
            raise RequestTimeoutError(timeout=timeout) from None
        return tuple(lobby_ids)

    def deliver(self, result: list[LobbyId] | LobbyListError) -> None:
        """Completion callback handed to the matchmaking client."""
        if self._future.done():
            # Timed out (and cancelled) before the service answered.
            logger.debug("dropping late lobby list result", result=result)
            return
        if isinstance(result, LobbyListError):
            self._future.set_exception(result)
        else:
            self._future.set_result(list(result))


class RequestBridge:
    def __init__(self, client: MatchmakingClient) -> None:
        self._client = client

    def request(self, lobby_filter: LobbyListFilter) -> LobbyListRequest:
        """Submit a lobby list request and return its receive handle."""
        future: asyncio.Future[list[LobbyId]] = asyncio.get_running_loop().create_future()
        handle = LobbyListRequest(future)
        self._client.request_lobby_list(lobby_filter, handle.deliver)
        logger.debug("lobby list request submitted", filters=[f.model_dump() for f in lobby_filter.strings])
        return handle
