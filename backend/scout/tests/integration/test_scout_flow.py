"""End-to-end runs of the CLI against the in-memory matchmaking client."""

import asyncio

import pytest

from scout.cli import main as cli
from scout.discovery.diff import DiffPolicy
from scout.discovery.models import LobbySummary
from scout.exceptions import ClientInitError
from scout.settings import ScoutSettings
from scout.tests.helpers import SERVER_A_ID, create_lobby
from scout.tests.mocks.matchmaking import FakeMatchmakingClient
from scout.tests.mocks.report import RecordingSink


@pytest.fixture(autouse=True)
def _no_log_setup(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda *_args, **_kwargs: None)


@pytest.fixture
def poller_kwargs(monkeypatch) -> dict:
    """Record the keyword arguments run_scout passes to Poller."""
    captured = {}
    real_poller = cli.Poller

    def spy_poller(*args, **kwargs):
        captured.update(kwargs)
        return real_poller(*args, **kwargs)

    monkeypatch.setattr(cli, "Poller", spy_poller)
    return captured


class _StopAfterShows(RecordingSink):
    def __init__(self, stop: asyncio.Event, shows: int) -> None:
        super().__init__()
        self._stop = stop
        self._shows = shows

    def show(self, snapshot) -> None:
        super().show(snapshot)
        if len(self.shown) >= self._shows:
            self._stop.set()


class TestSingleShotRun:
    def test_reports_matching_lobby_and_shuts_down(self, fake_client, sink):
        code = cli.main(["-n", "Server A", "-p", "-v"], client_factory=lambda _settings: fake_client, sink=sink)

        assert code == cli.EXIT_OK
        assert sink.shown == [
            (
                LobbySummary(
                    name="Server A",
                    version="0143",
                    has_password=False,
                    max_players=8,
                    current_players=3,
                    id=SERVER_A_ID,
                ),
            ),
        ]
        assert fake_client.shut_down is True
        assert [(f.key, f.value) for f in fake_client.requests[0].strings] == [
            ("name", "Server A"),
            ("password", "0"),
            ("version", "0143"),
        ]

    def test_filters_out_passworded_lobbies(self, sink):
        client = FakeMatchmakingClient({SERVER_A_ID: create_lobby(password="1")})

        code = cli.main(["-p"], client_factory=lambda _settings: client, sink=sink)

        assert code == cli.EXIT_OK
        assert sink.shown == [()]

    def test_timeout_prints_notice_and_empty_table(self, sink):
        client = FakeMatchmakingClient({SERVER_A_ID: create_lobby()}, respond=False)

        code = cli.main([], client_factory=lambda _settings: client, sink=sink)

        assert code == cli.EXIT_OK
        assert sink.notices == ["Request timed out."]
        assert sink.shown == [()]
        assert client.shut_down is True


class TestInitFailure:
    def test_returns_exit_code_and_reports_error(self, sink, capsys):
        def failing_factory(_settings):
            raise ClientInitError("Steam is not running")

        code = cli.main([], client_factory=failing_factory, sink=sink)

        assert code == cli.EXIT_INIT_FAILED
        assert "error: Steam is not running" in capsys.readouterr().err
        assert sink.shown == []


class TestIntervalRun:
    async def test_reports_new_lobbies_until_stopped(self, fake_client):
        stop = asyncio.Event()
        sink = _StopAfterShows(stop, shows=2)
        settings = ScoutSettings(callback_interval_seconds=0.005, request_timeout_seconds=1.0)
        args = cli.parse_args(["-i", "1"])

        async def add_lobby_later():
            while not sink.shown:
                await asyncio.sleep(0.005)
            fake_client.lobbies[3003] = create_lobby("Server C")

        adder = asyncio.create_task(add_lobby_later())
        await asyncio.wait_for(cli.run_scout(args, settings, fake_client, sink, stop), timeout=5.0)
        await adder

        assert [[lobby.name for lobby in shown] for shown in sink.shown] == [["Server A"], ["Server C"]]
        assert len(fake_client.requests) == 2

    async def test_diff_flag_overrides_settings(self, fake_client, sink, poller_kwargs):
        settings = ScoutSettings(callback_interval_seconds=0.005, diff_policy=DiffPolicy.LITERAL)
        args = cli.parse_args(["--diff", "membership"])

        await cli.run_scout(args, settings, fake_client, sink, asyncio.Event())

        assert poller_kwargs["diff_policy"] is DiffPolicy.MEMBERSHIP
        assert len(sink.shown) == 1

    async def test_settings_policy_used_without_flag(self, fake_client, sink, poller_kwargs):
        settings = ScoutSettings(callback_interval_seconds=0.005, diff_policy=DiffPolicy.MEMBERSHIP)

        await cli.run_scout(cli.parse_args([]), settings, fake_client, sink, asyncio.Event())

        assert poller_kwargs["diff_policy"] is DiffPolicy.MEMBERSHIP
        assert poller_kwargs["request_timeout"] == settings.request_timeout_seconds
