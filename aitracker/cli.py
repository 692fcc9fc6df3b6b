"""
AI Project Tracker CLI - Typer Commands

    aitracker serve              run the MCP server over stdio
    aitracker sessions           list recorded project sessions
    aitracker report SESSION_ID  render a session report (text, json or html)
    aitracker config             show or update the saved configuration

stdout belongs to the MCP protocol while serving, so `serve` reports
only through stderr.
"""

import json
import logging
import signal
import sys
import types
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from aitracker import __version__
from aitracker.config import TrackerConfig, get_config_path, load_config, save_config
from aitracker.exceptions import ConfigError, TrackerError
from aitracker.logging import get_config as get_log_config
from aitracker.report import render_html, render_text
from aitracker.server import create_server
from aitracker.tracker import ProjectTracker

logger = logging.getLogger(__name__)
console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="aitracker",
    help="Track AI-assisted project sessions, steps, metrics and insights",
    add_completion=False,
    no_args_is_help=True,
)

SESSION_STATUS_STYLES = {
    "active": "cyan",
    "completed": "green",
    "paused": "yellow",
    "failed": "red",
}

_tracker: ProjectTracker | None = None


def _load_config(db_path: Path | None) -> TrackerConfig:
    config = load_config()
    if db_path is not None:
        config.db_path = db_path.expanduser()
    return config


def _open_tracker(db_path: Path | None) -> ProjectTracker:
    try:
        return ProjectTracker(config=_load_config(db_path))
    except ConfigError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def handle_shutdown(signum: int, frame: types.FrameType | None) -> NoReturn:
    """Close the database on SIGINT/SIGTERM and exit."""
    err_console.print("\n[yellow]Shutting down AI Project Tracker...[/yellow]")
    if _tracker is not None:
        _tracker.close()
    sys.exit(0)


@app.command()
def serve(
    db_path: Path = typer.Option(None, "--db", help="SQLite database path"),
    log_level: str = typer.Option(
        None, "--log-level", help="stderr log level (default: AITRACKER_LOG_LEVEL or WARNING)"
    ),
) -> None:
    """Run the MCP server on stdio."""
    global _tracker

    logging.basicConfig(
        level=(log_level or get_log_config().console_level).upper(),
        stream=sys.stderr,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    _tracker = _open_tracker(db_path)
    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)

    server = create_server(_tracker)
    err_console.print(
        f"[green]AI Project Tracker {__version__}[/green] serving on stdio "
        f"[dim]({_tracker.config.db_path})[/dim]"
    )
    try:
        server.run()
    finally:
        _tracker.close()


@app.command()
def sessions(
    status: str = typer.Option(
        None, "--status", "-s", help="Filter: active, completed, paused, failed"
    ),
    limit: int = typer.Option(None, "--limit", "-n", help="Show at most N sessions"),
    db_path: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """List recorded project sessions, newest first."""
    tracker = _open_tracker(db_path)
    try:
        found = tracker.list_sessions(
            status=status, limit=limit or tracker.config.session_list_limit
        )
    except (TrackerError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    finally:
        tracker.close()

    if not found:
        console.print("[dim]No sessions found[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Session ID", style="cyan")
    table.add_column("Project", style="green")
    table.add_column("Status")
    table.add_column("Steps", justify="right")
    table.add_column("Model", style="dim")
    table.add_column("Started", style="dim")

    for session in found:
        style = SESSION_STATUS_STYLES.get(session.status.value, "")
        table.add_row(
            session.id[:12],
            session.project_name,
            f"[{style}]{session.status.value}[/{style}]",
            str(session.total_steps),
            session.ai_model,
            session.start_time.isoformat()[:16],
        )

    console.print(table)


@app.command()
def report(
    session_id: str = typer.Argument(..., help="Session ID to report on"),
    output_format: str = typer.Option("text", "--format", "-f", help="Format: text, json, html"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the report to a file"),
    db_path: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Render the report for one session."""
    if output_format not in ("text", "json", "html"):
        console.print(f"[bold red]Error:[/bold red] Unsupported format: {output_format}")
        raise typer.Exit(1)

    tracker = _open_tracker(db_path)
    try:
        project_report = tracker.generate_report(session_id)
    except TrackerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    finally:
        tracker.close()

    if output_format == "json":
        rendered = json.dumps(project_report.to_dict(), indent=2)
    elif output_format == "html":
        rendered = render_html(project_report)
    else:
        rendered = render_text(project_report)

    if output is None:
        typer.echo(rendered)
        return

    output.write_text(rendered, encoding="utf-8")
    console.print(f"[green]Report written to[/green] {output}")


@app.command(name="config")
def show_config(
    db_path: Path = typer.Option(None, "--db", help="Store this SQLite database path"),
    model: str = typer.Option(None, "--model", help="Store the default AI model name"),
    confidence: int = typer.Option(None, "--confidence", help="Store the default confidence"),
    limit: int = typer.Option(None, "--limit", help="Store the sessions listing limit"),
) -> None:
    """Show the tracker configuration, or update it when options are given."""
    updates = {
        "db_path": str(db_path.expanduser()) if db_path is not None else None,
        "default_ai_model": model,
        "default_confidence": confidence,
        "session_list_limit": limit,
    }
    updates = {k: v for k, v in updates.items() if v is not None}

    try:
        config = load_config()
        if updates:
            config = TrackerConfig.from_dict({**config.to_dict(), **updates})
            save_config(config)
            console.print(f"[green]Saved configuration to[/green] {get_config_path()}")
    except ConfigError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in config.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)


def run() -> None:
    """Entry point wrapper that invokes the Typer app."""
    app()


if __name__ == "__main__":
    run()
