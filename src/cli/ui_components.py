"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar paneles/tablas en `fetch` y `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ApodRecord, ResultSet

NO_ENTRIES_MESSAGE = "No APOD entries returned for this query."


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (se omite en modo `--json`)."""

    title = Text("afetch", style="bold cyan")
    subtitle = Text("Astronomy Picture of the Day • api.nasa.gov", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_record_panel(record: ApodRecord) -> Panel:
    """Panel con título, fecha, explicación y URLs de un registro."""

    body = Text()
    body.append(f"Date: {record.date}\n", style="bold")
    body.append(f"Media: {record.media_type}\n", style="dim")
    if record.copyright:
        body.append(f"© {record.copyright.strip()}\n", style="dim")
    body.append("\n" + record.explanation.strip() + "\n\n")
    body.append(f"URL: {record.url}\n", style="magenta")
    if record.hdurl:
        body.append(f"HD URL: {record.hdurl}\n", style="magenta")
    if record.thumbnail_url:
        body.append(f"Thumbnail: {record.thumbnail_url}\n", style="magenta")

    style = "green" if record.is_image else "yellow"
    return Panel(body, title=Text(record.title, style=f"bold {style}"), border_style=style)


def build_records_table(result_set: ResultSet) -> Table:
    """Resumen tabular de una colección (rango o count)."""

    table = Table(title=f"APOD entries ({len(result_set)})")
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Media", style="green")
    table.add_column("HD", style="magenta")
    for record in result_set:
        table.add_row(record.date, record.title, record.media_type, "yes" if record.hdurl else "no")
    return table


def print_result_set(console: Console, result_set: ResultSet) -> None:
    """Presenta un `ResultSet` distinguiendo cero, uno (objeto) y N registros."""

    single = result_set.single
    if single is not None:
        console.print(build_record_panel(single))
        return

    if result_set.is_empty:
        console.print(f"[yellow]{NO_ENTRIES_MESSAGE}[/yellow]")
        return

    console.print(build_records_table(result_set))
    for record in result_set:
        console.print(build_record_panel(record))
