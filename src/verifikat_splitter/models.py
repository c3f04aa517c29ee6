"""
Data model for verification list rows and result units.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Sequence, Tuple

ROW_WIDTH = 8
VOUCHER_COLUMN = 0
OWNER_COLUMN = 5
QUOTE_CHAR = '"'


class SplitterError(Exception):
    """Base class for all errors raised by the splitter."""


class InputFormatError(SplitterError, ValueError):
    """The input file could not be read or a row has the wrong shape."""


class ConfigurationError(SplitterError, ValueError):
    """Invalid run configuration (format, default unit, destination map)."""


class ExportError(SplitterError):
    """A single unit could not be serialized or written."""


class RowKind(Enum):
    OWNERSHIP = "ownership"
    CONTINUATION = "continuation"
    NEW_VOUCHER = "new_voucher"


@dataclass(frozen=True)
class Row:
    """
    One line of the verification list.

    Only two columns carry meaning for splitting: the voucher id (column 0,
    empty on continuation lines) and the owning result unit (column 5).
    Everything else is passed through untouched.
    """

    fields: Tuple[str, ...]

    @classmethod
    def from_fields(cls, values: Sequence[str], line_number: int = 0) -> "Row":
        """
        Build a Row, enforcing the fixed column count.

        Args:
            values: Parsed field values
            line_number: 1-based source line, used in the error message

        Raises:
            InputFormatError: If the row does not have exactly 8 fields
        """
        if len(values) != ROW_WIDTH:
            where = f" on line {line_number}" if line_number else ""
            raise InputFormatError(
                f"Invalid verification list{where}: expected {ROW_WIDTH} fields, got {len(values)}"
            )
        return cls(tuple(str(v) for v in values))

    @property
    def voucher_id(self) -> str:
        return self.fields[VOUCHER_COLUMN]

    @property
    def owning_unit(self) -> str:
        return self.fields[OWNER_COLUMN]

    @property
    def has_owner(self) -> bool:
        """True when column 5 names a unit (non-empty and not a quoted literal)."""
        return is_unit_reference(self.owning_unit)

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __getitem__(self, index):
        return self.fields[index]


@dataclass
class Unit:
    """A result unit (committee) and the rows routed to it."""

    name: str
    buffer: List[Row] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.buffer)


def is_unit_reference(value: str) -> bool:
    # Quoted values are inline literals, never unit names
    return bool(value) and not value.startswith(QUOTE_CHAR)
