"""Typed exceptions for lobby discovery.

Recoverable conditions (a list request timing out or failing) are raised
by the request bridge and handled by the Poller, which degrades the cycle
to an empty snapshot. Client initialisation failure is handled by the CLI,
which exits non-zero.
"""


class ScoutError(Exception):
    """Base exception for lobby discovery failures."""


class ClientInitError(ScoutError):
    """The matchmaking client could not be loaded or initialised."""


class LobbyListError(ScoutError):
    """The matchmaking service reported an error for a lobby list request."""


class RequestTimeoutError(ScoutError):
    """No lobby list arrived within the wait bound.

    Attributes:
        timeout: The bound that expired, in seconds.

    """

    def __init__(self, *, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"lobby list request timed out after {timeout:g}s")
