"""
Defines the command-line interface for the library using Typer.
"""

import asyncio
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from weblab_client import __version__
from weblab_client.core.weblab import WebLab
from weblab_client.exceptions import WebLabError
from weblab_client.models.config import WebLabConfig
from weblab_client.storage.config_manager import ConfigManager
from weblab_client.utils.dates import is_unknown, parse_timestamp

from .formatters import (
    format_error_with_suggestions,
    print_api_submission,
    print_api_submissions_table,
    print_config,
    print_submission,
    print_submissions_table,
)

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("weblab_client")

app = typer.Typer(
    name="weblab",
    help="Read submissions from WebLab and push grades. Use 'weblab <command> --help' for more info.",
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "weblab-client"


CONFIG_FILE = get_config_dir() / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    config_file: Path = typer.Option(
        CONFIG_FILE, "--config", help="Path of the configuration file."
    ),
    cookie: str | None = typer.Option(
        None, "--cookie", envvar="WEBLAB_COOKIE", help="Session cookie for scraping."
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", envvar="WEBLAB_API_KEY", help="API key for the REST API."
    ),
    api_secret: str | None = typer.Option(
        None,
        "--api-secret",
        envvar="WEBLAB_API_SECRET",
        help="API secret. When set, requests are signed.",
    ),
    base_url: str | None = typer.Option(
        None, "--base-url", help="Root URL of the WebLab instance."
    ),
):
    """WebLab client CLI"""
    if version:
        console.print(f"[bold]weblab-client[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose == 1:
        log_level = "INFO"
    elif verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("weblab_client").setLevel(log_level)

    ctx.obj = {
        "config_file": config_file,
        "overrides": {
            "cookie": cookie,
            "api_key": api_key,
            "api_secret": api_secret,
            "base_url": base_url,
        },
    }

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _load_config(ctx: typer.Context) -> WebLabConfig:
    return ConfigManager(ctx.obj["config_file"]).load_config(ctx.obj["overrides"])


def _run(coro_factory) -> None:
    """Runs an async command, rendering library errors as a panel."""
    try:
        asyncio.run(coro_factory())
    except WebLabError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.command()
def init(
    ctx: typer.Context,
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration without asking."
    ),
):
    """Store the credentials given with --cookie/--api-key/--api-secret."""
    config_file: Path = ctx.obj["config_file"]
    if (
        config_file.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    overrides = ctx.obj["overrides"]
    try:
        config = WebLabConfig(
            **{key: value for key, value in overrides.items() if value is not None}
        )
        ConfigManager(config_file).save_new_config(config.model_dump())
    except WebLabError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    except ValueError as e:
        console.print(f"[red]✗ Invalid settings: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[bold green]✓ Configuration saved to '{config_file}'[/bold green]")


@app.command(name="show-config")
def show_config(ctx: typer.Context):
    """Display the stored configuration, hiding credentials."""
    config_file: Path = ctx.obj["config_file"]
    try:
        config_data = ConfigManager(config_file).read_raw()
    except WebLabError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    print_config(config_file, config_data)


@app.command()
def submissions(
    ctx: typer.Context,
    assignment: int = typer.Argument(..., help="WebLab assignment id."),
):
    """List the submissions of an assignment by scraping its submissions page."""

    async def _submissions():
        config = _load_config(ctx)
        async with WebLab.from_config(config) as weblab:
            rows = await weblab.web.get_submissions(assignment)
        print_submissions_table(rows, str(assignment))

    _run(_submissions)


@app.command()
def submission(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Submission page URL."),
):
    """Show the code of one submission by scraping its page."""

    async def _submission():
        config = _load_config(ctx)
        async with WebLab.from_config(config) as weblab:
            result = await weblab.web.get_submission(url)
        print_submission(result)

    _run(_submission)


@app.command(name="api-submissions")
def api_submissions(
    ctx: typer.Context,
    assignment: int = typer.Argument(..., help="WebLab assignment id."),
):
    """List the submissions of an assignment through the REST API."""

    async def _api_submissions():
        config = _load_config(ctx)
        async with WebLab.from_config(config) as weblab:
            result = await weblab.api.get_submissions(assignment)
        if not result.success:
            console.print(f"[red]✗ Request failed (HTTP {result.status}).[/red]")
            raise typer.Exit(code=1)
        print_api_submissions_table(result)

    _run(_api_submissions)


@app.command(name="api-submission")
def api_submission(
    ctx: typer.Context,
    assignment: int = typer.Argument(..., help="WebLab assignment id."),
    student: int = typer.Argument(..., help="WebLab id of the student."),
):
    """Show one submission through the REST API."""

    async def _api_submission():
        config = _load_config(ctx)
        async with WebLab.from_config(config) as weblab:
            result = await weblab.api.get_submission(assignment, student)
        if not result.success:
            console.print(f"[red]✗ Request failed (HTTP {result.status}).[/red]")
            raise typer.Exit(code=1)
        print_api_submission(result)

    _run(_api_submission)


@app.command(name="push-grade")
def push_grade(
    ctx: typer.Context,
    grade: float = typer.Option(..., "--grade", "-g", help="The grade to push."),
    comment: str = typer.Option("", "--comment", "-c", help="Feedback for the student."),
    netid: str | None = typer.Option(None, "--netid", help="Student net-id."),
    student: int | None = typer.Option(None, "--student", help="Student WebLab id."),
    save_date: str | None = typer.Option(
        None,
        "--save-date",
        help="Save time of the graded submission (defaults to now).",
    ),
    keep_last: int = typer.Option(
        -1, "--keep-last", help="Number of earlier comments to keep (-1 keeps all)."
    ),
):
    """Push a grade for one student through the REST API."""
    if (netid is None) == (student is None):
        console.print("[red]✗ Give exactly one of --netid or --student.[/red]")
        raise typer.Exit(code=1)

    saved = datetime.now(timezone.utc)
    if save_date:
        saved = parse_timestamp(save_date)
        if is_unknown(saved):
            console.print(f"[red]✗ Could not parse save date '{save_date}'.[/red]")
            raise typer.Exit(code=1)

    async def _push_grade():
        config = _load_config(ctx)
        async with WebLab.from_config(config) as weblab:
            result = await weblab.api.push_grade(
                grade,
                comment,
                saved,
                netid=netid,
                student=student,
                keep_last_n_comments=keep_last,
            )
        if not result.success:
            console.print(f"[red]✗ Pushing the grade failed (HTTP {result.status}).[/red]")
            raise typer.Exit(code=1)
        console.print(f"[green]✓ Pushed grade {grade} for {netid or student}.[/green]")

    _run(_push_grade)


def main() -> None:
    """Console-script entry point for ``weblab``."""
    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(130)
    except WebLabError as e:
        # Errors raised outside a command body, e.g. while loading config.
        console.print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Unhandled error in weblab command", exc_info=True)
        sys.exit(1)
