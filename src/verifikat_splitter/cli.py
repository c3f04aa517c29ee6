"""
Command-line interface for the verification list splitter using Typer.
"""

from pathlib import Path
from typing import List, Optional, Annotated

import typer
from rich.console import Console

from . import __version__
from .config import DEFAULT_FORMAT, SUPPORTED_FORMATS, build_config
from .core import default_output_dir, split_verification_list, validate_inputs
from .logging_utils import (
    setup_logging,
    print_summary_table,
    print_manifest_table,
    print_result_message,
    print_error_message,
    print_step
)

app = typer.Typer(
    name="verifikat-split",
    help="Split a Visma verification list CSV file by result unit",
    add_completion=False
)

console = Console()


def _absolute(path: Path) -> Path:
    return path if path.is_absolute() else Path.cwd() / path


@app.command()
def main(
    input_file: Annotated[
        Path,
        typer.Argument(help="Input CSV file to read", dir_okay=False)
    ],
    output_dir: Annotated[
        Optional[Path],
        typer.Argument(help="Output directory, if omitted this will be INPUT-split")
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help=f"Output format, valid values are {' and '.join(SUPPORTED_FORMATS)}")
    ] = DEFAULT_FORMAT,
    default_unit: Annotated[
        Optional[str],
        typer.Option("--default-unit", help="Result unit receiving vouchers without an explicit unit")
    ] = None,
    merge: Annotated[
        Optional[List[str]],
        typer.Option("--merge", help="Extra UNIT=FOLDER mapping, may be repeated")
    ] = None,
    encoding: Annotated[
        str,
        typer.Option("--encoding", help="Text encoding of the input file")
    ] = "utf-8-sig",
    manifest: Annotated[
        Optional[Path],
        typer.Option("--manifest", help="Path for manifest CSV file")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging")
    ] = False,
) -> None:
    """
    Split a single Visma verification list into one file per result unit.

    Vouchers are routed to every result unit their ledger lines are booked on.
    Vouchers without a result unit go to the default unit. For Z this results
    in a file split by committees.

    Examples:

        # xlsx files in ./verifikat.csv-split
        verifikat-split main verifikat.csv

        # csv files in a chosen directory
        verifikat-split main verifikat.csv ./out --format csv

        # Put an extra committee in the board's folder
        verifikat-split main verifikat.csv --merge "Sexmästeriet=Ztyret"
    """
    setup_logging(verbose)

    try:
        # Validate configuration before reading any rows
        config = build_config(output_format, default_unit, merge)

        input_path = _absolute(input_file)
        out_dir = _absolute(output_dir) if output_dir else default_output_dir(input_path)

        print_step(1, 2, "Checking input file and output location", console)
        validate_inputs(input_path, out_dir)

        print_step(2, 2, "Splitting verification list by result unit", console)
        result = split_verification_list(
            input_path=input_path,
            out_dir=out_dir,
            config=config,
            encoding=encoding,
            manifest_path=_absolute(manifest) if manifest else None
        )

        print_summary_table(result, console)

        if result['manifest_entries']:
            print_manifest_table(result['manifest_entries'], console)

        print_result_message(result, console)

        if manifest:
            console.print(f"📋 [bold blue]Manifest:[/bold blue] {manifest}")

    except Exception as e:
        print_error_message(e, console)
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"verifikat-split version {__version__}")


@app.command()
def info() -> None:
    """Show information about the tool."""
    console.print("""
[bold blue]Verifikat Splitter[/bold blue]

Splits a Visma verification list (verifikationslista) by result unit.

[bold]How vouchers are routed:[/bold]
• A voucher and its lines are kept together
• Each voucher goes to every result unit its lines are booked on
• Vouchers without a result unit go to the default unit

[bold]Supported input:[/bold]
• Semicolon separated CSV with 8 columns per row

[bold]Output formats:[/bold]
• xlsx: one sheet per file, fixed column widths
• csv: semicolon separated text

Use --help for detailed usage information.
""")


if __name__ == "__main__":
    app()
