"""CLI `afetch` (Typer).

Responsabilidades de esta capa:
- Validar formato de fechas (YYYY-MM-DD) y traducir flags a un `QueryIntent`.
- Presentar resultados con Rich y persistir imágenes/JSON.
- Convertir `ApodError` en mensajes y códigos de salida.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.apod_client import ApodClient
from adapters.image_store import default_image_filename, save_image
from adapters.json_exporter import dumps_result_set, export_result_set_json
from cli import doctor
from cli.ui_components import NO_ENTRIES_MESSAGE, print_banner, print_result_set
from core.config import DEMO_API_KEY, AppSettings
from core.domain.errors import ApodError, InvalidIntent
from core.domain.models import RequestDescriptor, ResultSet, build_intent
from core.interfaces.source import ApodSource

DATE_FORMATS = ["%Y-%m-%d"]

app = typer.Typer(
    no_args_is_help=True,
    help="Fetch NASA's Astronomy Picture of the Day.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _masked_url(request: RequestDescriptor) -> str:
    params = tuple(
        (name, "***" if name == "api_key" and value != DEMO_API_KEY else value)
        for name, value in request.params
    )
    return request.model_copy(update={"params": params}).full_url


def _as_date(value: datetime | None) -> str | None:
    return value.date().isoformat() if value is not None else None


def _download(
    source: ApodSource,
    result_set: ResultSet,
    *,
    prefer_hd: bool,
    directory: Path,
    dest: Path | None,
    console: Console,
) -> list[Path]:
    single = result_set.single
    if single is not None:
        asset = source.fetch_image(single, prefer_hd)
        output = dest or directory / default_image_filename(single)
        return [save_image(asset=asset, output_path=output)]

    if result_set.is_empty:
        console.print(f"[yellow]{NO_ENTRIES_MESSAGE} Nothing to download.[/yellow]")
        return []

    if dest is not None:
        console.print("[yellow]--dest only applies to single-entry results; using titles as filenames.[/yellow]")

    for record in result_set:
        if not record.is_image:
            console.print(f"[yellow]Skipping {record.date} ({record.media_type}): not an image.[/yellow]")

    saved: list[Path] = []
    for record, asset in source.fetch_images(result_set, prefer_hd, skip_non_images=True):
        output = directory / default_image_filename(record)
        saved.append(save_image(asset=asset, output_path=output))
    return saved


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr."),
) -> None:
    _configure_logging(verbose)


@app.command()
def fetch(
    date: Optional[datetime] = typer.Option(
        None, "--date", "-d", formats=DATE_FORMATS, help="APOD for one date (YYYY-MM-DD)."
    ),
    start_date: Optional[datetime] = typer.Option(
        None, "--start-date", "--sd", formats=DATE_FORMATS, help="Start of a date range (YYYY-MM-DD)."
    ),
    end_date: Optional[datetime] = typer.Option(
        None, "--end-date", "--ed", formats=DATE_FORMATS, help="End of a date range (YYYY-MM-DD)."
    ),
    count: Optional[int] = typer.Option(None, "--count", "-c", help="Number of random entries."),
    thumbs: bool = typer.Option(False, "--thumbs", help="Include video thumbnail URLs."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Overrides AFETCH_API_KEY."),
    download: bool = typer.Option(False, "--download", "--dl", help="Download the image(s)."),
    dest: Optional[Path] = typer.Option(None, "--dest", "--df", help="Target file for a single image."),
    hd: bool = typer.Option(False, "--hd", help="Prefer the HD image URL when available."),
    directory: Optional[Path] = typer.Option(None, "--dir", help="Directory for downloaded images."),
    as_json: bool = typer.Option(False, "--json", help="Print records as JSON."),
    export_json: Optional[Path] = typer.Option(None, "--export-json", help="Write records to a JSON file."),
    show_url: bool = typer.Option(False, "--show-url", help="Print the request URL (API key masked)."),
) -> None:
    """Fetch today's APOD, one date, a date range or a random sample."""

    settings = AppSettings()

    try:
        intent = build_intent(
            date=_as_date(date),
            start_date=_as_date(start_date),
            end_date=_as_date(end_date),
            count=count,
            include_thumbnail=thumbs,
            api_key=api_key,
        )
    except InvalidIntent as exc:
        _err_console.print(f"[red]Invalid query:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    # Con --json, stdout queda reservado para el documento JSON.
    status_console = _err_console if as_json else _console

    try:
        with ApodClient(settings) as source:
            if show_url:
                status_console.print(_masked_url(source.builder.build(intent)), soft_wrap=True)

            result_set = source.fetch(intent)

            if as_json:
                typer.echo(dumps_result_set(result_set))
            else:
                print_banner(_console)
                print_result_set(_console, result_set)

            if export_json is not None:
                path = export_result_set_json(result_set=result_set, output_path=export_json)
                status_console.print(f"[green]JSON written to:[/green] {path}")

            if download:
                saved = _download(
                    source,
                    result_set,
                    prefer_hd=hd or settings.prefer_hd,
                    directory=directory or settings.download_dir,
                    dest=dest,
                    console=status_console,
                )
                for path in saved:
                    status_console.print(f"[green]Saved image:[/green] {path}")
    except ApodError as exc:
        _err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc


def run() -> None:
    app()
