"""
Core orchestration logic for splitting a verification list by result unit.
"""

from pathlib import Path
from typing import Optional, Dict, Any
import logging

from .config import OUTPUT_DIR_SUFFIX, SplitConfig
from .exporters import export_units, get_dump_fn
from .io_utils import read_verification_list, write_manifest_csv
from .models import InputFormatError
from .partition import PartitionEngine, find_default_unit, find_result_units

logger = logging.getLogger(__name__)


def split_verification_list(
    input_path: Path,
    out_dir: Path,
    config: SplitConfig,
    encoding: str = "utf-8-sig",
    manifest_path: Optional[Path] = None
) -> Dict[str, Any]:
    """
    Split a verification list into one file per result unit.

    Args:
        input_path: Path to the semicolon separated input file
        out_dir: Output root directory
        config: Default unit, destination map and output format
        encoding: Text encoding of the input file
        manifest_path: Path for manifest CSV file (None to skip)

    Returns:
        Summary dictionary with results

    Raises:
        ConfigurationError: Unknown format or missing default unit
        InputFormatError: Unreadable input or a row of the wrong width
    """
    logger.info(f"Starting verification list split: {input_path}")

    # Reject bad formats before touching the input
    dump = get_dump_fn(config.output_format)

    rows = read_verification_list(input_path, encoding=encoding)
    logger.info(f"Loaded {len(rows)} rows")

    units = find_result_units(rows)
    logger.info(f"Found {len(units)} result units: {[u.name for u in units]}")

    default_unit = find_default_unit(units, config.default_unit)
    logger.info(f"Default result unit: '{default_unit.name}'")

    engine = PartitionEngine(units, default_unit.name)
    engine.run(rows)
    logger.info(f"Partitioned {engine.groups_committed} voucher groups")

    manifest_entries, failed = export_units(units, config, out_dir, dump)

    if manifest_path and manifest_entries:
        write_manifest_csv(manifest_entries, manifest_path)
        logger.info(f"Wrote manifest to: {manifest_path}")

    return {
        'input_file': str(input_path),
        'output_dir': str(out_dir),
        'format': config.output_format,
        'default_unit': default_unit.name,
        'total_rows': len(rows),
        'voucher_groups': engine.groups_committed,
        'units_found': len(units),
        'files_created': len(manifest_entries),
        'failed_units': failed,
        'manifest_entries': manifest_entries
    }


def default_output_dir(input_path: Path) -> Path:
    """Output directory used when none is given: the input path plus '-split'."""
    return input_path.with_name(input_path.name + OUTPUT_DIR_SUFFIX)


def validate_inputs(input_path: Path, out_dir: Path) -> None:
    """
    Validate input parameters.

    Args:
        input_path: Path to input file
        out_dir: Output directory

    Raises:
        InputFormatError: If the input file is missing
        ValueError: If the output location is unusable
    """
    if not input_path.exists():
        raise InputFormatError(f"Input file does not exist: {input_path}")

    if not input_path.is_file():
        raise InputFormatError(f"Input path is not a file: {input_path}")

    if out_dir.exists() and not out_dir.is_dir():
        raise ValueError(f"Output path exists and is not a directory: {out_dir}")
