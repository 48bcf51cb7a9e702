"""Capability set the discovery engine needs from a matchmaking client."""

from collections.abc import Callable
from typing import Protocol

from scout.discovery.models import LobbyId, LobbyListFilter
from scout.exceptions import LobbyListError

# Receives the ordered lobby ids, or the error the service reported.
LobbyListCallback = Callable[[list[LobbyId] | LobbyListError], None]


class MatchmakingClient(Protocol):
    """Callback-driven matchmaking client.

    Asynchronous results are only delivered from inside `run_callbacks`,
    which must be called periodically (see CallbackDriver). Thread-safety of
    the underlying service is the client's own concern.
    """

    def request_lobby_list(self, lobby_filter: LobbyListFilter, on_complete: LobbyListCallback) -> None:
        """Apply the filter and request the lobby list.

        `on_complete` fires exactly once, from a later `run_callbacks` call.
        """
        ...

    def lobby_data(self, lobby_id: LobbyId, key: str) -> str | None:
        """Return a lobby metadata value, or None if the key is not set."""
        ...

    def lobby_member_limit(self, lobby_id: LobbyId) -> int | None:
        """Return the lobby's member limit, or None if it has none."""
        ...

    def lobby_member_count(self, lobby_id: LobbyId) -> int: ...

    def run_callbacks(self) -> None:
        """Dispatch pending completions to their callbacks."""
        ...

    def shutdown(self) -> None: ...
