from __future__ import annotations

import sys
from datetime import datetime
from typing import List, NoReturn, Optional

import typer

from timetagger_client.client import TimeTaggerClient
from timetagger_client.config import get_settings
from timetagger_client.errors import TimeTaggerError
from timetagger_client.reporter import (
    dump_json,
    print_records,
    print_settings,
    print_updates,
    print_write_result,
    record_to_dict,
    setting_to_dict,
    write_result_to_dict,
)
from timetagger_client.utils.logging import configure_logging

app = typer.Typer(help="TimeTagger API client CLI.")

_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


def _build_client() -> TimeTaggerClient:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return TimeTaggerClient.from_settings(settings)


def _fail(exc: TimeTaggerError) -> NoReturn:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"URL={settings.timetagger_url} | key={settings.masked_api_key()} | "
        f"timeout={settings.timetagger_timeout}s verify_tls={settings.timetagger_verify_tls} | "
        f"env={settings.app_env} log_level={settings.log_level}"
    )


@app.command()
def records(
    start: Optional[datetime] = typer.Option(
        None, "--start", "-s", formats=_DATE_FORMATS, help="Only records overlapping from this time."
    ),
    end: Optional[datetime] = typer.Option(
        None, "--end", "-e", formats=_DATE_FORMATS, help="Only records overlapping up to this time."
    ),
    include_hidden: bool = typer.Option(
        False, "--include-hidden", help="Also show soft-deleted (HIDDEN) records."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """
    List records in a time range.
    """
    try:
        with _build_client() as client:
            fetched = client.fetch_records(start, end)
    except TimeTaggerError as exc:
        _fail(exc)

    shown = fetched if include_hidden else [r for r in fetched if not r.is_hidden]
    if as_json:
        typer.echo(dump_json([record_to_dict(r) for r in shown]))
    else:
        print_records(shown)


@app.command()
def settings(
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """
    List all settings.
    """
    try:
        with _build_client() as client:
            fetched = client.fetch_settings()
    except TimeTaggerError as exc:
        _fail(exc)

    if as_json:
        typer.echo(dump_json([setting_to_dict(s) for s in fetched]))
    else:
        print_settings(fetched)


@app.command()
def updates(
    since: datetime = typer.Option(
        ..., "--since", formats=_DATE_FORMATS, help="Checkpoint to fetch changes from."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of tables."),
) -> None:
    """
    Show records and settings changed since a checkpoint.
    """
    try:
        with _build_client() as client:
            result = client.fetch_updates_since(since)
    except TimeTaggerError as exc:
        _fail(exc)

    if as_json:
        typer.echo(
            dump_json(
                {
                    "server_time": result.server_time.isoformat(),
                    "records": [record_to_dict(r) for r in result.records],
                    "settings": [setting_to_dict(s) for s in result.settings],
                }
            )
        )
    else:
        print_updates(result)


@app.command()
def delete(
    keys: List[str] = typer.Argument(..., help="Keys of the records to soft-delete."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of text."),
) -> None:
    """
    Soft-delete records by key (marks their description with HIDDEN).
    """
    try:
        with _build_client() as client:
            by_key = {r.key: r for r in client.fetch_records()}
            missing = [key for key in keys if key not in by_key]
            if missing:
                typer.echo(f"Unknown record keys: {', '.join(missing)}", err=True)
                raise typer.Exit(code=1)
            result = client.delete_records([by_key[key] for key in keys])
    except TimeTaggerError as exc:
        _fail(exc)

    if as_json:
        typer.echo(dump_json(write_result_to_dict(result)))
    else:
        print_write_result(result)
    if not result.ok:
        raise typer.Exit(code=1)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
