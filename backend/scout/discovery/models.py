"""Immutable data models shared by the discovery engine and report sinks."""

from pydantic import BaseModel

# Steam id of a lobby. Opaque: used for metadata lookups and as a key.
LobbyId = int

DEFAULT_MAX_PLAYERS = 64


class FilterCriteria(BaseModel, frozen=True):
    """User-supplied lobby search criteria."""

    name_pattern: str = ""
    require_no_password: bool = False
    require_base_version: bool = False


class StringFilter(BaseModel, frozen=True):
    """Include lobbies whose metadata `key` equals `value`."""

    key: str
    value: str


class LobbyListFilter(BaseModel, frozen=True):
    """Ordered predicate set applied to a lobby list request."""

    strings: tuple[StringFilter, ...] = ()


class LobbySummary(BaseModel, frozen=True):
    """One lobby resolved from its matchmaking metadata."""

    name: str = ""
    version: str = ""
    has_password: bool = False
    max_players: int = DEFAULT_MAX_PLAYERS
    current_players: int = 0
    id: LobbyId

    @property
    def players(self) -> str:
        return f"{self.current_players}/{self.max_players}"


# One fetch cycle's lobbies, in the order the service returned them.
Snapshot = tuple[LobbySummary, ...]
