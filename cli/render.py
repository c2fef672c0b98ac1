from __future__ import annotations

from typing import Any, Dict

import typer

KEY_WIDTH = 24
VALUE_WIDTH = 14


def echo_heading(name: str, adapter: str) -> None:
    typer.secho(name, fg=typer.colors.CYAN, bold=True, nl=False)
    typer.secho(f"  Adapter: {adapter}", dim=True)


def echo_entry(entry: Dict[str, Any]) -> None:
    key = f"  {entry.get('key', ''):<{KEY_WIDTH}}"
    value = typer.style(f"{entry.get('value', ''):<{VALUE_WIDTH}}", fg=typer.colors.GREEN)
    info = entry.get("additional_info")
    line = f"{key}{value}"
    if info:
        line += typer.style(f"({info})", fg=typer.colors.YELLOW)
    typer.echo(line.rstrip())


def render_snapshot(payload: Dict[str, Any]) -> None:
    """Render a ``/readings`` payload, either its sections or its error."""
    error = payload.get("error")
    if error:
        typer.secho(f"Error: {error.get('message')}", fg=typer.colors.RED, bold=True)
        return

    for index, section in enumerate(payload.get("sections") or []):
        if index:
            typer.echo()
        echo_heading(section.get("name", ""), section.get("adapter", ""))
        for entry in section.get("entries") or []:
            echo_entry(entry)
