"""
Console output for the splitter: Rich logging plus run summary tables.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .models import ConfigurationError, InputFormatError

PACKAGE_LOGGER = "verifikat_splitter"


def setup_logging(verbose: bool = False) -> None:
    """
    Route the package's log records to stderr through Rich.

    Args:
        verbose: Also show debug records, e.g. where each voucher group went
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        log_time_format="[%H:%M:%S]",
        markup=False,
        rich_tracebacks=True
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers = [handler]
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    package_logger.propagate = False


def print_summary_table(summary: dict, console: Optional[Console] = None) -> None:
    """
    Print a formatted summary table of the split operation.

    Args:
        summary: Summary dictionary from split_verification_list
        console: Rich console instance (creates new one if None)
    """
    if console is None:
        console = Console()

    table = Table(title="Verification List Split Summary", show_header=True, header_style="bold magenta")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Input File", escape(summary.get('input_file', 'Unknown')))
    table.add_row("Total Input Rows", str(summary.get('total_rows', 0)))
    table.add_row("Voucher Groups", str(summary.get('voucher_groups', 0)))
    table.add_row("Result Units Found", str(summary.get('units_found', 0)))
    table.add_row("Default Unit", escape(summary.get('default_unit', 'Unknown')))
    table.add_row("Files Created", str(summary.get('files_created', 0)))
    table.add_row("Failed Units", escape(", ".join(summary.get('failed_units', []))) or "-")
    table.add_row("Output Format", summary.get('format', 'Unknown'))
    table.add_row("Output Directory", escape(summary.get('output_dir', 'Unknown')))

    console.print()
    console.print(table)


def print_manifest_table(manifest_entries: list, console: Optional[Console] = None) -> None:
    """
    Print one line per written file, grouped by the folder it landed in.

    Args:
        manifest_entries: List of manifest entry dictionaries
        console: Rich console instance (creates new one if None)
    """
    if console is None:
        console = Console()

    if not manifest_entries:
        console.print("[yellow]No files were created.[/yellow]")
        return

    table = Table(title="Files per Result Unit", header_style="bold green")
    table.add_column("Folder", style="blue")
    table.add_column("File", style="white")
    table.add_column("Result Unit", style="cyan")
    table.add_column("Rows", justify="right", style="magenta")

    entries = sorted(manifest_entries, key=lambda e: Path(e['output_path']).parent.name)
    for entry in entries:
        output_path = Path(entry['output_path'])
        table.add_row(
            escape(output_path.parent.name),
            escape(output_path.name),
            escape(entry['unit']),
            str(entry['row_count']),
        )

    console.print()
    console.print(table)


def print_result_message(summary: dict, console: Optional[Console] = None) -> None:
    """
    Print the outcome of a run: where the files went and which units failed.

    Args:
        summary: Summary dictionary from split_verification_list
        console: Rich console instance (creates new one if None)
    """
    if console is None:
        console = Console()

    created = summary.get('files_created', 0)
    units = summary.get('units_found', 0)
    failed = summary.get('failed_units', [])

    console.print()
    if created:
        console.print(
            f"✅ [bold green]Wrote {created} of {units} result units to[/bold green] "
            f"[cyan]{escape(summary.get('output_dir', ''))}[/cyan]"
        )
    if failed:
        console.print(f"⚠️ [bold yellow]No file for:[/bold yellow] {escape(', '.join(failed))}")
    if not created and not failed:
        console.print("⚠️ [bold yellow]The verification list contained no result units.[/bold yellow]")


def print_error_message(error: Exception, console: Optional[Console] = None) -> None:
    """
    Print a fatal error, labelled by what went wrong.

    Args:
        error: The exception that stopped the run
        console: Rich console instance (creates new one if None)
    """
    if console is None:
        console = Console()

    if isinstance(error, InputFormatError):
        label = "Input file rejected"
    elif isinstance(error, ConfigurationError):
        label = "Configuration error"
    else:
        label = "Error"

    console.print()
    console.print(f"❌ [bold red]{label}:[/bold red] {escape(str(error))}", highlight=False)
    if label != "Error":
        console.print("   [dim]The run stopped before any files were written.[/dim]")


def print_step(number: int, total: int, step: str, console: Optional[Console] = None) -> None:
    """Print a numbered progress step, e.g. ``[1/2] Reading ...``."""
    if console is None:
        console = Console()

    console.print(f"[bold blue]{escape(f'[{number}/{total}]')}[/bold blue] {escape(step)}")
