from scout.discovery.models import LobbySummary
from scout.tests.mocks.matchmaking import FakeLobby

SERVER_A_ID = 1001


def create_lobby(
    name: str = "Server A",
    *,
    version: str = "0143",
    password: str = "0",
    member_limit: int | None = 8,
    member_count: int = 3,
) -> FakeLobby:
    """Create a FakeLobby with sensible defaults for testing."""
    return FakeLobby(
        data={"name": name, "version": version, "password": password},
        member_limit=member_limit,
        member_count=member_count,
    )


def create_summary(name: str, lobby_id: int = 1) -> LobbySummary:
    return LobbySummary(name=name, version="0143", max_players=8, current_players=1, id=lobby_id)
