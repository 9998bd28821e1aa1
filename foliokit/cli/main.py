"""Command-line interface for foliokit."""

import asyncio
import json
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from foliokit import __version__
from foliokit.core.config import ExportServiceConfig
from foliokit.core.model import DataSource, Folio, PageRange
from foliokit.pdf_export.renderers import BrowserPrintRenderer
from foliokit.pdf_export.service import PdfExportService
from foliokit.pdf_import.extractor import ImportOptions, PdfImportService
from foliokit.pdf_import.folios import FolioCreator, ScannedPageMode, get_folio_summary

console = Console()


def _fail(message):
    console.print(f"\n[bold red]✗ Error:[/bold red] {message}")
    sys.exit(1)


def _page_range(ctx, param, value):
    if value is None:
        return None
    try:
        return PageRange.parse(value)
    except ValueError as exc:
        raise click.BadParameter(f"'{value}' is not a page range such as 2-5") from exc


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    Foliokit - import PDFs as folios and export folios to PDF.
    """


@cli.command(name="info")
@click.argument("input_pdf", type=click.Path(exists=True, dir_okay=False))
@click.option("--password", default=None, help="Password for encrypted PDFs")
def show_info(input_pdf, password):
    """
    Display page count and metadata of a PDF.

    Example:

        foliokit info input.pdf
    """
    service = PdfImportService()
    result = service.import_pdf(input_pdf, ImportOptions(extract_text=False, password=password))
    if not result.success:
        _fail(result.error)

    table = Table(title="PDF Information", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("File", os.path.basename(input_pdf))
    table.add_row("Pages", str(result.total_pages))
    for key, value in (result.metadata.to_dict() if result.metadata else {}).items():
        table.add_row(key, str(value))
    console.print(table)


@cli.command(name="import")
@click.argument("input_pdf", type=click.Path(exists=True, dir_okay=False))
@click.option("--pages", callback=_page_range, default=None, help="Page range to import, e.g. 2-4")
@click.option("--render-images", is_flag=True, help="Rasterize every page")
@click.option("--scale", default=1.5, show_default=True, type=float, help="Rasterization scale")
@click.option("--password", default=None, help="Password for encrypted PDFs")
@click.option(
    "--scanned-mode",
    type=click.Choice([mode.value for mode in ScannedPageMode]),
    default=ScannedPageMode.IMAGE.value,
    show_default=True,
    help="How scanned pages become folios",
)
@click.option("--json", "json_path", type=click.Path(dir_okay=False), default=None, help="Write folios as JSON")
def import_command(input_pdf, pages, render_images, scale, password, scanned_mode, json_path):
    """
    Import a PDF and turn its pages into folios.

    Examples:

        foliokit import input.pdf

        foliokit import input.pdf --pages 2-4 --json folios.json
    """
    options = ImportOptions(
        render_as_images=render_images,
        image_scale=scale,
        page_range=pages,
        password=password,
    )
    service = PdfImportService()

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Importing pages", total=None)

        def update_progress(current, total):
            progress.update(task, completed=current, total=total)

        result = service.import_pdf(input_pdf, options, on_progress=update_progress)

    if not result.success:
        _fail(result.error)

    folios = FolioCreator(scanned_page_mode=scanned_mode).create_folios(result.pages)
    summary = get_folio_summary(folios)

    table = Table(title="Import Summary", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Total pages", str(result.total_pages))
    table.add_row("Imported pages", str(len(result.pages)))
    for key, value in summary.items():
        table.add_row(f"Folios ({key})" if key != "total" else "Folios", str(value))
    console.print(table)

    for warning in result.warnings or []:
        console.print(f"[yellow]! {warning}[/yellow]")

    if json_path:
        payload = {
            "totalPages": result.total_pages,
            "metadata": result.metadata.to_dict() if result.metadata else None,
            "folios": [folio.to_dict() for folio in folios],
        }
        Path(json_path).write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        console.print(f"[dim]Folios written to {os.path.abspath(json_path)}[/dim]")


def _load_export_document(path):
    try:
        document = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        _fail(f"Cannot read {path}: {exc}")
    if isinstance(document, list):
        document = {"folios": document}
    if not isinstance(document, dict) or not isinstance(document.get("folios"), list):
        _fail(f"{path} must hold a list of folios or an object with a 'folios' list")
    try:
        folios = [Folio.from_dict(item) for item in document["folios"]]
        sources = [DataSource.from_dict(item) for item in document.get("dataSources", [])]
    except (KeyError, TypeError, ValueError) as exc:
        _fail(f"Invalid folio document: {exc}")
    return document, folios, sources


@cli.command(name="export")
@click.argument("folios_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--api-url", envvar="FOLIOKIT_EXPORT_API_URL", default=None, help="Rendering backend URL")
@click.option("--retries", type=click.IntRange(min=0), default=None, help="Retry count for the submission")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Where to write the PDF")
@click.option("--html-dir", type=click.Path(file_okay=False), default=None, help="Where to write printable HTML")
def export_command(folios_json, api_url, retries, output, html_dir):
    """
    Export folios from a JSON document to PDF.

    Example:

        foliokit export folios.json --api-url http://localhost:8000/api/export-pdf -o out.pdf
    """
    document, folios, sources = _load_export_document(folios_json)

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Exporting", total=100)

        def update_progress(event):
            progress.update(task, completed=event.percentage, description=event.message)

        try:
            config = ExportServiceConfig.from_env(
                api_url=api_url, retry_count=retries, on_progress=update_progress
            )
        except ValueError as exc:
            _fail(exc)
        service = PdfExportService(config, renderer=BrowserPrintRenderer(output_dir=html_dir))
        response = asyncio.run(
            service.export_to_pdf(
                folios,
                document.get("options"),
                document.get("metadata"),
                user_values=document.get("userValues"),
                data_sources=sources,
            )
        )

    if not response.success:
        _fail(response.error)

    if response.data is not None:
        target = Path(output or response.filename or "document.pdf")
        target.write_bytes(response.data)
        console.print(f"\n[bold green]✓ PDF written to {target.resolve()}[/bold green]")
    else:
        console.print(f"\n[bold green]✓ {response.filename} sent to the browser for printing[/bold green]")
    if response.page_count is not None:
        console.print(f"[dim]Pages: {response.page_count}[/dim]")


if __name__ == "__main__":
    cli()
