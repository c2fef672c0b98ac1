from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import click
import typer
import uvicorn

from app.schemas import SnapshotResponse
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_snapshot
from logging_config import configure_logging
from models.readings import ReadingSnapshot
from services.refresher import RefreshController, capture_snapshot, next_due
from services.source import StaticTextSource, build_default_source


@dataclass
class CLIState:
    config: CLIConfig


app = typer.Typer(
    help="Display lm-sensors readings as sections and entries.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _payload(snapshot: ReadingSnapshot) -> Dict[str, Any]:
    return SnapshotResponse.from_snapshot(snapshot).model_dump(mode="json")


def _redraw(snapshot: ReadingSnapshot) -> None:
    click.clear()
    render_snapshot(_payload(snapshot))


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Sensory API base URL (defaults to SENSORY_API_URL env or http://localhost:8000).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Entry point for the CLI."""
    configure_logging("DEBUG" if verbose else None)
    ctx.obj = CLIState(config=load_config(base_url=base_url))


@app.command("show")
def show_command(
    input_file: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        exists=True,
        dir_okay=False,
        readable=True,
        help="Parse a saved sensors dump instead of running the command.",
    ),
) -> None:
    """Read the sensors once and print the result."""
    if input_file is not None:
        source = StaticTextSource(input_file.read_text(encoding="utf-8"))
    else:
        source = build_default_source()
    snapshot = capture_snapshot(source)
    render_snapshot(_payload(snapshot))
    if not snapshot.ok:
        raise typer.Exit(code=1)


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        min=0.0,
        help="Seconds between refreshes (defaults to SENSORY_WATCH_INTERVAL or 0.5).",
    ),
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-n",
        min=1,
        help="Stop after this many refreshes instead of running until interrupted.",
    ),
) -> None:
    """Re-read the sensors on a fixed interval and redraw the whole view."""
    state = _get_state(ctx)
    period = interval if interval is not None else state.config.watch_interval
    controller = RefreshController(source=build_default_source(), interval=period)
    _redraw(controller.current)

    due = time.monotonic()
    try:
        while count is None or controller.ticks < count:
            due = next_due(due, time.monotonic(), controller.interval)
            time.sleep(max(0.0, due - time.monotonic()))
            _redraw(controller.refresh())
    except KeyboardInterrupt:
        raise typer.Exit(code=0)


@app.command("remote")
def remote_command(
    ctx: typer.Context,
    refresh: bool = typer.Option(
        False,
        "--refresh/--no-refresh",
        help="Ask the server to refresh before returning the snapshot.",
    ),
) -> None:
    """Fetch the current snapshot from a running server."""
    state = _get_state(ctx)
    client = ApiClient(state.config)
    ctx.call_on_close(client.close)
    payload = client.refresh_readings() if refresh else client.get_readings()
    render_snapshot(payload)
    if payload.get("status") == "error":
        raise typer.Exit(code=1)


@app.command("serve")
def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on."),
) -> None:
    """Run the HTTP API and refresh loop."""
    uvicorn.run("app.main:app", host=host, port=port, log_config=None)
