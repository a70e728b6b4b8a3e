"""Doctor command for environment diagnostics."""

from __future__ import annotations

import os
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.apod_client import ApodClient
from core.config import DEMO_API_KEY, AppSettings, get_user_env_file, write_user_env_vars
from core.domain.errors import ApodError
from core.domain.models import QueryIntent

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_api(settings: AppSettings) -> tuple[bool, str]:
    try:
        with ApodClient(settings) as client:
            result_set = client.fetch(QueryIntent())
    except ApodError as exc:
        return False, str(exc)
    record = result_set.single
    if record is None:
        return True, f"{len(result_set)} entries"
    return True, f"{record.date}: {record.title}"


def _check_download_dir(path: Path) -> tuple[bool, str]:
    target = path.resolve()
    if not target.exists():
        return True, f"{target} (will be created)"
    if not target.is_dir():
        return False, f"{target} is not a directory"
    if not os.access(target, os.W_OK):
        return False, f"{target} is not writable"
    return True, str(target)


@app.command()
def run(
    offline: bool = typer.Option(False, "--offline", help="Skip the live API request."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="afetch Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.api_key == DEMO_API_KEY:
        table.add_row("API key", "LIMITED", "Using DEMO_KEY -> run `afetch doctor setup-key`")
    else:
        table.add_row("API key", "OK", "Personal key configured")
    table.add_row("Endpoint", "OK", settings.apod_endpoint)
    table.add_row("HTTP timeout", "OK", f"{settings.http_timeout_seconds:g}s")

    ok_dir, detail_dir = _check_download_dir(settings.download_dir)
    table.add_row("Download dir", "OK" if ok_dir else "FAIL", detail_dir)

    # Connectivity (best-effort)
    ok_api = True
    if offline:
        table.add_row("APOD API", "SKIPPED", "--offline")
    else:
        ok_api, detail_api = _check_api(settings)
        table.add_row("APOD API", "OK" if ok_api else "FAIL", detail_api)

    _console.print(table)

    if not ok_api:
        _console.print(
            "\n[yellow]Note:[/yellow] DEMO_KEY is rate limited per IP; a free key from "
            "https://api.nasa.gov avoids most failures."
        )
    if not (ok_api and ok_dir):
        raise typer.Exit(code=1)


@app.command(name="setup-key")
def setup_key() -> None:
    """Interactive API key setup (stores config in the user config .env)."""

    api_key = typer.prompt("NASA API key", hide_input=True, confirmation_prompt=False).strip()
    if not api_key:
        raise typer.BadParameter("api key is required")

    env_path = write_user_env_vars({"AFETCH_API_KEY": api_key})
    _console.print(f"[green]Saved API key to:[/green] {env_path}")


@app.command(name="where")
def where() -> None:
    """Print the location of the per-user .env file."""

    _console.print(str(get_user_env_file()))
