from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from timetagger_client.client import Updates, WriteResult
from timetagger_client.domain.models import Record, Setting
from timetagger_client.utils.clock import EPOCH


def format_duration(value: timedelta) -> str:
    """Render a duration as H:MM:SS."""
    total = int(value.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}"


def _format_instant(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _format_server_time(value: datetime) -> str:
    return "never" if value == EPOCH else _format_instant(value)


def record_to_dict(record: Record) -> Dict[str, Any]:
    """JSON-friendly view of a record, including its derived fields."""
    data = record.model_dump(mode="json")
    data["running"] = record.is_running
    data["duration_seconds"] = record.duration_seconds
    data["tags"] = sorted(record.tags)
    data["hidden"] = record.is_hidden
    return data


def setting_to_dict(setting: Setting) -> Dict[str, Any]:
    return setting.model_dump(mode="json")


def dump_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str)


def print_records(records: Sequence[Record], console: Optional[Console] = None) -> None:
    """
    Render records as a rich table, oldest first, with a duration total.
    """
    console = console or Console()

    if not records:
        console.print("[yellow]No records to display.[/yellow]")
        return

    table = Table(
        title="TimeTagger Records",
        box=box.ROUNDED,
        caption="Sorted by start time",
    )
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Start", style="magenta")
    table.add_column("End", style="magenta")
    table.add_column("Duration", justify="right", style="green", no_wrap=True)
    table.add_column("Description")
    table.add_column("Tags", style="blue")

    total = timedelta()
    for record in sorted(records, key=lambda r: r.start):
        duration = record.duration
        total += duration
        end = "[bold green]running[/bold green]" if record.is_running else _format_instant(record.end)
        description = escape(record.description)
        if record.is_hidden:
            description = f"[dim]{description}[/dim]"
        table.add_row(
            escape(record.key),
            _format_instant(record.start),
            end,
            format_duration(duration),
            description,
            escape(" ".join(sorted(record.tags))),
        )

    table.add_section()
    table.add_row("[bold]Total[/bold]", "", "", f"[bold]{format_duration(total)}[/bold]", "", "")
    console.print(table)


def print_settings(settings: Sequence[Setting], console: Optional[Console] = None) -> None:
    console = console or Console()

    if not settings:
        console.print("[yellow]No settings to display.[/yellow]")
        return

    table = Table(title="TimeTagger Settings", box=box.ROUNDED)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")
    table.add_column("Modified", style="magenta")
    table.add_column("Server time", style="magenta")

    for setting in sorted(settings, key=lambda s: s.key):
        table.add_row(
            escape(setting.key),
            escape(json.dumps(setting.value)),
            _format_instant(setting.modified_time),
            _format_server_time(setting.server_time),
        )

    console.print(table)


def print_updates(updates: Updates, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(
        f"Server time: [bold]{_format_instant(updates.server_time)}[/bold] "
        f"({len(updates.records)} records, {len(updates.settings)} settings)"
    )
    if updates.records:
        print_records(updates.records, console=console)
    if updates.settings:
        print_settings(updates.settings, console=console)


def print_write_result(result: WriteResult, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(f"[green]Accepted:[/green] {escape(', '.join(result.accepted)) or '-'}")
    if result.rejected:
        console.print(f"[red]Rejected:[/red] {escape(', '.join(result.rejected))}")
    for error in result.errors:
        console.print(f"[red]Error:[/red] {escape(error)}")


def write_result_to_dict(result: WriteResult) -> Dict[str, List[str]]:
    return {"accepted": result.accepted, "rejected": result.rejected, "errors": result.errors}
