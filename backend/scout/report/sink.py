"""Report sinks: where reported lobby snapshots end up."""

from typing import Protocol

from rich import box
from rich.console import Console
from rich.table import Table

from scout.discovery.models import Snapshot
from scout.report.names import MAX_NAME_LENGTH, format_lobby_name

COLUMNS = ("name", "version", "password", "players", "id")


class ReportSink(Protocol):
    """Receives reported snapshots and short user-facing diagnostics."""

    def show(self, snapshot: Snapshot) -> None: ...

    def notice(self, message: str) -> None: ...


def build_table(snapshot: Snapshot, *, max_name_length: int = MAX_NAME_LENGTH) -> Table:
    """Build the lobby table, one row per lobby in snapshot order."""
    table = Table(box=box.ASCII, show_lines=False, pad_edge=True)
    for column in COLUMNS:
        table.add_column(column, no_wrap=column != "name")

    for lobby in snapshot:
        table.add_row(
            format_lobby_name(lobby.name, max_length=max_name_length),
            lobby.version,
            str(lobby.has_password).lower(),
            lobby.players,
            str(lobby.id),
        )
    return table


class TableReportSink:
    """Print snapshots as a table to the console."""

    def __init__(self, console: Console | None = None, *, max_name_length: int = MAX_NAME_LENGTH) -> None:
        self._console = console or Console()
        self._max_name_length = max_name_length

    def show(self, snapshot: Snapshot) -> None:
        self._console.print(build_table(snapshot, max_name_length=self._max_name_length))

    def notice(self, message: str) -> None:
        self._console.print(message, style="yellow", markup=False, highlight=False)
