"""
Export utilities for writing each result unit's rows as xlsx or csv.
"""

import io
from pathlib import Path
from typing import Callable, Dict, List, Any, Optional, Sequence, Tuple
import logging

import pandas as pd

from .config import INPUT_DELIMITER, SplitConfig, validate_format
from .io_utils import ensure_out_dir, sanitize_filename
from .models import ExportError, Row, Unit

logger = logging.getLogger(__name__)

SHEET_NAME = "Sheet1"
COLUMN_WIDTHS = [10, 15, 70, 10, 30, 10, 10, 10]

DumpFn = Callable[[Sequence[Row]], Tuple[bytes, str]]


def dump_csv(buffer: Sequence[Row]) -> Tuple[bytes, str]:
    """
    Serialize rows as semicolon joined text, one row per line.

    Fields are written verbatim without re-quoting, matching the input layout.
    """
    text = "".join(INPUT_DELIMITER.join(row) + "\n" for row in buffer)
    return text.encode("utf-8"), "csv"


def dump_xlsx(buffer: Sequence[Row]) -> Tuple[bytes, str]:
    """
    Serialize rows to a single-sheet Excel workbook.

    Every cell is written as text with fixed column widths; no header row or
    index is added.

    Raises:
        ExportError: If the workbook cannot be built
    """
    output = io.BytesIO()

    try:
        df = pd.DataFrame([list(row) for row in buffer], columns=range(len(COLUMN_WIDTHS)), dtype=str)

        with pd.ExcelWriter(
            output,
            engine='xlsxwriter',
            engine_kwargs={'options': {'strings_to_formulas': False, 'strings_to_urls': False}}
        ) as writer:
            df.to_excel(writer, sheet_name=SHEET_NAME, index=False, header=False)

            worksheet = writer.sheets[SHEET_NAME]
            for col_idx, width in enumerate(COLUMN_WIDTHS):
                worksheet.set_column(col_idx, col_idx, width)
    except Exception as e:
        raise ExportError(f"Failed to build workbook: {e}") from e

    return output.getvalue(), "xlsx"


EXPORT_FORMATS: Dict[str, DumpFn] = {
    "xlsx": dump_xlsx,
    "csv": dump_csv,
}


def get_dump_fn(output_format: str) -> DumpFn:
    """Return the serializer for a format, raising ConfigurationError if unknown."""
    return EXPORT_FORMATS[validate_format(output_format)]


def resolve_output_path(unit_name: str, config: SplitConfig, out_dir: Path, ext: str) -> Path:
    """
    Compute where a unit's file goes.

    Mapped units share their folder and are named after the unit; unmapped
    units get their own folder holding the default filename.
    """
    target_dir = config.destination_for(unit_name)
    if target_dir is not None:
        return out_dir / sanitize_filename(target_dir) / f"{sanitize_filename(unit_name)}.{ext}"
    return out_dir / sanitize_filename(unit_name) / f"{config.default_filename}.{ext}"


def export_unit(
    unit: Unit,
    config: SplitConfig,
    out_dir: Path,
    dump: DumpFn,
    claimed: Optional[Dict[Path, str]] = None,
) -> Path:
    """
    Serialize one unit and write it to disk.

    Args:
        unit: Unit to export
        config: Run configuration
        out_dir: Output root directory
        dump: Serializer for the unit's rows
        claimed: Paths already written in this run, mapped to the unit that wrote them

    Returns:
        Path of the written file

    Raises:
        ExportError: If serialization fails, the path belongs to another unit,
            or writing fails
    """
    try:
        data, ext = dump(unit.buffer)
    except ExportError:
        raise
    except Exception as e:
        raise ExportError(f"Failed to serialize {len(unit.buffer)} rows: {e}") from e

    output_path = resolve_output_path(unit.name, config, out_dir, ext)

    if claimed is not None:
        owner = claimed.get(output_path)
        if owner is not None and owner != unit.name:
            raise ExportError(f"{output_path} is already the output of result unit {owner}")

    try:
        ensure_out_dir(output_path.parent)
        output_path.write_bytes(data)
    except OSError as e:
        raise ExportError(f"Failed to write {output_path}: {e}") from e

    if claimed is not None:
        claimed[output_path] = unit.name
    return output_path


def export_units(
    units: Sequence[Unit],
    config: SplitConfig,
    out_dir: Path,
    dump: DumpFn = None,
) -> Tuple[List[Dict[str, Any]], List[str]]:
    """
    Export every unit, continuing past individual failures.

    Two units whose names sanitize to the same file are not allowed to
    overwrite each other; the later one is reported as failed.

    Args:
        units: Partitioned units
        config: Run configuration (destination map and format)
        out_dir: Output root directory
        dump: Serializer override, defaults to the one for config.output_format

    Returns:
        Tuple of (manifest entries for written files, names of failed units)
    """
    dump = dump or get_dump_fn(config.output_format)
    manifest_entries = []
    failed = []
    claimed: Dict[Path, str] = {}

    for unit in units:
        try:
            output_path = export_unit(unit, config, out_dir, dump, claimed)
        except ExportError as e:
            logger.error(f"Failed to export result for {unit.name}: {e}")
            failed.append(unit.name)
            continue

        manifest_entries.append({
            'unit': unit.name,
            'output_path': str(output_path),
            'row_count': unit.row_count,
            'format': config.output_format
        })

        logger.info(f"Exported result for {unit.name} to {output_path}")

    return manifest_entries, failed
