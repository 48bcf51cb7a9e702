import pytest

from scout.tests.helpers import SERVER_A_ID, create_lobby
from scout.tests.mocks.matchmaking import FakeLobby, FakeMatchmakingClient
from scout.tests.mocks.report import RecordingSink


@pytest.fixture
def server_a() -> FakeLobby:
    return create_lobby()


@pytest.fixture
def fake_client(server_a) -> FakeMatchmakingClient:
    return FakeMatchmakingClient({SERVER_A_ID: server_a})


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
