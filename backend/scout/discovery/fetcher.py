"""Resolve lobby ids into lobby summaries via per-lobby metadata reads."""

from collections.abc import Iterable

import structlog

from scout.discovery.models import DEFAULT_MAX_PLAYERS, LobbyId, LobbySummary, Snapshot
from scout.matchmaking.client import MatchmakingClient

logger = structlog.get_logger()

# Value of the `password` lobby key for password-protected lobbies.
PASSWORD_SET = "1"


def resolve_lobby(client: MatchmakingClient, lobby_id: LobbyId) -> LobbySummary:
    """Read one lobby's metadata, substituting defaults for missing fields."""
    max_players = client.lobby_member_limit(lobby_id)
    return LobbySummary(
        name=client.lobby_data(lobby_id, "name") or "",
        version=client.lobby_data(lobby_id, "version") or "",
        has_password=client.lobby_data(lobby_id, "password") == PASSWORD_SET,
        max_players=max_players if max_players is not None else DEFAULT_MAX_PLAYERS,
        current_players=client.lobby_member_count(lobby_id),
        id=lobby_id,
    )


def fetch_snapshot(client: MatchmakingClient, lobby_ids: Iterable[LobbyId]) -> Snapshot:
    """Resolve every lobby, keeping the order the ids were returned in."""
    snapshot = tuple(resolve_lobby(client, lobby_id) for lobby_id in lobby_ids)
    logger.debug("snapshot fetched", count=len(snapshot))
    return snapshot
