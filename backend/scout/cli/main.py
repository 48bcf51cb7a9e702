"""Command-line entry point: find lobbies once or keep watching for new ones.

Usage: lobby-scout [--name NAME] [-p] [-v] [-i SECONDS] [--diff POLICY]
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
import sys
from collections.abc import Callable, Sequence

import structlog

from scout.discovery.callbacks import CallbackDriver
from scout.discovery.diff import DiffPolicy
from scout.discovery.filters import build_lobby_filter
from scout.discovery.models import FilterCriteria
from scout.discovery.poller import Poller
from scout.exceptions import ClientInitError
from scout.matchmaking.client import MatchmakingClient
from scout.matchmaking.steam import SteamMatchmakingClient
from scout.report.sink import ReportSink, TableReportSink
from scout.settings import ScoutSettings
from shared.build_info import APP_VERSION
from shared.logging import setup_logging

logger = structlog.get_logger()

ClientFactory = Callable[[ScoutSettings], MatchmakingClient]

EXIT_OK = 0
EXIT_INIT_FAILED = 1
EXIT_INTERRUPTED = 130


def _interval(value: str) -> int:
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid interval {value!r}: expected whole seconds") from None
    if seconds < 0:
        raise argparse.ArgumentTypeError(f"invalid interval {value!r}: must not be negative")
    return seconds


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="lobby-scout",
        description="Find Hearts of Iron IV multiplayer lobbies and report new ones.",
    )
    p.add_argument("-n", "--name", default="", help="Only include lobbies with this exact name")
    p.add_argument("-p", "--no-password", action="store_true", help="Only include lobbies without a password")
    p.add_argument("-v", "--vanilla-only", action="store_true", help="Only include lobbies running the unmodded game")
    p.add_argument(
        "-i",
        "--interval",
        type=_interval,
        default=0,
        help="Refresh interval in seconds; 0 (default) searches once",
    )
    p.add_argument(
        "--diff",
        choices=[policy.value for policy in DiffPolicy],
        default=None,
        help="How to decide which lobbies are new between refreshes (default: SCOUT_DIFF_POLICY or literal)",
    )
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return p.parse_args(argv)


def criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    return FilterCriteria(
        name_pattern=args.name,
        require_no_password=args.no_password,
        require_base_version=args.vanilla_only,
    )


def create_steam_client(settings: ScoutSettings) -> MatchmakingClient:
    return SteamMatchmakingClient.init(settings.steam_app_id, settings.steam_api_library)


async def run_scout(
    args: argparse.Namespace,
    settings: ScoutSettings,
    client: MatchmakingClient,
    sink: ReportSink,
    stop: asyncio.Event,
) -> None:
    """Pump client callbacks in the background while the poller runs."""
    lobby_filter = build_lobby_filter(
        criteria_from_args(args),
        base_version_checksum=settings.base_version_checksum,
    )
    diff_policy = DiffPolicy(args.diff) if args.diff else settings.diff_policy
    poller = Poller(
        client,
        lobby_filter,
        sink,
        interval=args.interval,
        request_timeout=settings.request_timeout_seconds,
        diff_policy=diff_policy,
    )
    driver = CallbackDriver(client, interval=settings.callback_interval_seconds)

    logger.info("scout starting", interval=args.interval, diff_policy=diff_policy, filters=len(lobby_filter.strings))
    driver.start()
    try:
        await poller.run(stop)
    finally:
        await driver.stop()


def _install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not supported by Windows event loops; Ctrl+C then raises KeyboardInterrupt.
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)


async def _main_async(
    args: argparse.Namespace,
    settings: ScoutSettings,
    client_factory: ClientFactory,
    sink: ReportSink,
) -> int:
    try:
        client = client_factory(settings)
    except ClientInitError as e:
        logger.error("matchmaking client initialisation failed", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INIT_FAILED

    stop = asyncio.Event()
    _install_signal_handlers(stop)
    try:
        await run_scout(args, settings, client, sink, stop)
    finally:
        client.shutdown()
    return EXIT_OK


def main(
    argv: Sequence[str] | None = None,
    *,
    client_factory: ClientFactory = create_steam_client,
    sink: ReportSink | None = None,
) -> int:
    args = parse_args(argv)
    settings = ScoutSettings()
    setup_logging(settings.log_dir)

    if sink is None:
        sink = TableReportSink(max_name_length=settings.max_name_length)

    try:
        return asyncio.run(_main_async(args, settings, client_factory, sink))
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
