"""
Unit discovery and the voucher-group partitioning state machine.

A verification list is a sequence of voucher groups. Each group starts with a
line carrying a voucher id, followed by detail lines whose voucher id is empty.
Ledger lines inside the group name the result unit they are booked on (column
5), so a group's destination is only known once the whole group has been read.
The engine therefore buffers each group and commits it when the next voucher
line arrives, or when the input ends.
"""

import logging
from typing import Dict, Iterable, List, Sequence

from .models import ConfigurationError, Row, RowKind, Unit, is_unit_reference

logger = logging.getLogger(__name__)


def find_result_units(rows: Iterable[Row]) -> List[Unit]:
    """
    Collect one Unit per distinct owning-unit name, sorted by name.

    Empty owners and quoted literals are skipped.
    """
    names = set()
    for row in rows:
        owner = row.owning_unit
        if not is_unit_reference(owner):
            continue
        names.add(owner)

    return [Unit(name=name) for name in sorted(names)]


def find_default_unit(units: Sequence[Unit], default_name: str) -> Unit:
    """
    Look up the configured default unit among the discovered ones.

    Raises:
        ConfigurationError: If no unit with that name was discovered
    """
    for unit in units:
        if unit.name == default_name:
            return unit

    available = ", ".join(u.name for u in units) or "none"
    raise ConfigurationError(
        f"A result unit with the name {default_name} was not found (found: {available})"
    )


def classify_row(row: Row) -> RowKind:
    if row.has_owner:
        return RowKind.OWNERSHIP
    if row.voucher_id == "":
        return RowKind.CONTINUATION
    return RowKind.NEW_VOUCHER


class PartitionEngine:
    """
    Routes voucher groups into unit buffers.

    Units are held in an arena and addressed by index; the set of units touched
    by the group being buffered is a list of those indices.
    """

    def __init__(self, units: Sequence[Unit], default_unit: str):
        self._units: List[Unit] = list(units)
        self._index: Dict[str, int] = {u.name: i for i, u in enumerate(self._units)}
        if default_unit not in self._index:
            # Reuse the lookup for its error message
            find_default_unit(self._units, default_unit)
        self._default_id = self._index[default_unit]
        self._pending: List[Row] = []
        self._active: List[int] = []
        self.groups_committed = 0

    @property
    def units(self) -> List[Unit]:
        return self._units

    @property
    def default_unit(self) -> Unit:
        return self._units[self._default_id]

    def unit_at(self, unit_id: int) -> Unit:
        return self._units[unit_id]

    def feed(self, row: Row) -> RowKind:
        """Process one row and return how it was classified."""
        kind = classify_row(row)

        if kind is RowKind.OWNERSHIP:
            self._activate(row.owning_unit)
            self._pending.append(row)
        elif kind is RowKind.CONTINUATION:
            self._pending.append(row)
        else:
            self.flush()
            self._pending = [row]

        return kind

    def _activate(self, name: str) -> None:
        unit_id = self._index.get(name)
        if unit_id is None:
            logger.debug(f"Ignoring unknown result unit '{name}'")
            return
        if unit_id not in self._active:
            self._active.append(unit_id)

    def flush(self) -> None:
        """Commit the pending group to its active units, or to the default unit."""
        if self._pending:
            targets = self._active or [self._default_id]
            for row in self._pending:
                for unit_id in targets:
                    self.unit_at(unit_id).buffer.append(row)
            self.groups_committed += 1
            logger.debug(
                f"Committed {len(self._pending)} rows to "
                f"{', '.join(self.unit_at(i).name for i in targets)}"
            )

        self._active = []
        self._pending = []

    def run(self, rows: Iterable[Row]) -> List[Unit]:
        """Feed every row, then flush the final group."""
        for row in rows:
            self.feed(row)
        # The last group has no following voucher line to trigger its flush
        self.flush()
        return self._units


def split_by_result_unit(
    rows: Sequence[Row],
    units: Sequence[Unit],
    default_unit: str,
) -> List[Unit]:
    """
    Partition rows into the given units.

    Args:
        rows: All rows of the verification list, in file order
        units: Units from find_result_units (their buffers are appended to)
        default_unit: Name of the unit receiving groups without an owner

    Returns:
        The same units, with populated buffers
    """
    return PartitionEngine(units, default_unit).run(rows)
