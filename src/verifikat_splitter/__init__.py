"""
Verifikat Splitter - CLI tool to split a Visma verification list by result unit.

This package reads a semicolon separated verification list and writes one
xlsx or csv file per result unit (committee), keeping each voucher together
with its ledger lines.
"""

__version__ = "0.1.0"
__author__ = "Verifikat Splitter"
__email__ = "noreply@example.com"

from .core import split_verification_list
from .exporters import dump_csv, dump_xlsx, export_units
from .io_utils import read_verification_list, sanitize_filename
from .models import (
    ConfigurationError,
    ExportError,
    InputFormatError,
    Row,
    RowKind,
    SplitterError,
    Unit,
)
from .partition import (
    PartitionEngine,
    classify_row,
    find_default_unit,
    find_result_units,
    split_by_result_unit,
)

__all__ = [
    "split_verification_list",
    "dump_csv",
    "dump_xlsx",
    "export_units",
    "read_verification_list",
    "sanitize_filename",
    "ConfigurationError",
    "ExportError",
    "InputFormatError",
    "Row",
    "RowKind",
    "SplitterError",
    "Unit",
    "PartitionEngine",
    "classify_row",
    "find_default_unit",
    "find_result_units",
    "split_by_result_unit",
]
