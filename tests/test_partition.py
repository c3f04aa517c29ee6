"""
Tests for unit discovery and the voucher-group partitioning state machine.
"""

import pytest
from collections import Counter

from verifikat_splitter.models import ConfigurationError, Row, RowKind, Unit
from verifikat_splitter.partition import (
    PartitionEngine,
    classify_row,
    find_default_unit,
    find_result_units,
    split_by_result_unit,
)


def voucher(number, text="Verifikat"):
    return Row.from_fields([number, "2024-01-05", text, "", "", "", "", ""])


def ledger(account, owner="", debit="", credit=""):
    return Row.from_fields(["", "", "", account, "Konto", owner, debit, credit])


def by_name(units):
    return {u.name: u for u in units}


class TestClassifyRow:
    """Test suite for classify_row function."""

    def test_owner_wins_over_empty_voucher(self):
        assert classify_row(ledger("4010", owner="VB")) is RowKind.OWNERSHIP

    def test_owner_with_voucher_id_is_ownership(self):
        row = Row.from_fields(["7", "", "", "", "", "VB", "", ""])
        assert classify_row(row) is RowKind.OWNERSHIP

    def test_continuation_line(self):
        assert classify_row(ledger("1930")) is RowKind.CONTINUATION

    def test_new_voucher_line(self):
        assert classify_row(voucher("1")) is RowKind.NEW_VOUCHER

    def test_quoted_owner_is_not_ownership(self):
        assert classify_row(ledger("1930", owner='"Note"')) is RowKind.CONTINUATION
        row = Row.from_fields(["3", "", "", "", "", '"Note"', "", ""])
        assert classify_row(row) is RowKind.NEW_VOUCHER


class TestFindResultUnits:
    """Test suite for find_result_units function."""

    def test_distinct_sorted_names(self):
        rows = [
            voucher("1"),
            ledger("4010", owner="ZKK"),
            ledger("4010", owner="VB"),
            voucher("2"),
            ledger("4010", owner="VB"),
            ledger("3010", owner="Ztyret"),
        ]

        units = find_result_units(rows)

        assert [u.name for u in units] == ["VB", "ZKK", "Ztyret"]
        assert all(u.buffer == [] for u in units)

    def test_skips_empty_and_quoted_owners(self):
        rows = [
            voucher("1"),
            ledger("1930"),
            ledger("1930", owner='"Inline text"'),
            ledger("4010", owner="VB"),
        ]

        units = find_result_units(rows)

        assert [u.name for u in units] == ["VB"]

    def test_no_units(self):
        assert find_result_units([voucher("1"), ledger("1930")]) == []


class TestFindDefaultUnit:
    """Test suite for find_default_unit function."""

    def test_found(self):
        units = [Unit("VB"), Unit("Ztyret")]
        assert find_default_unit(units, "Ztyret") is units[1]

    def test_missing_default_is_fatal(self):
        with pytest.raises(ConfigurationError, match="Ztyret was not found"):
            find_default_unit([Unit("VB")], "Ztyret")

    def test_engine_requires_default(self):
        with pytest.raises(ConfigurationError):
            PartitionEngine([Unit("VB")], "Ztyret")


class TestPartitionEngine:
    """Test suite for PartitionEngine routing."""

    def test_single_header_goes_to_default_after_end_of_input(self):
        header = Row.from_fields(["1", "", "h1", "h2", "h3", "", "", ""])
        units = [Unit("VB"), Unit("Ztyret")]

        split_by_result_unit([header], units, "Ztyret")

        assert units[1].buffer == [header]
        assert units[0].buffer == []

    def test_last_voucher_group_is_flushed(self):
        rows = [
            voucher("1"),
            ledger("4010", owner="VB"),
            voucher("2"),
            ledger("4010", owner="ZKK"),
            ledger("1930"),
        ]
        units = find_result_units(rows) + [Unit("Ztyret")]

        split_by_result_unit(rows, units, "Ztyret")

        zkk = by_name(units)["ZKK"]
        assert zkk.buffer == rows[2:]

    def test_ownership_then_continuation_routes_to_owner_only(self):
        rows = [
            voucher("1"),
            ledger("4010", owner="VB", debit="100,00"),
            ledger("1930", credit="100,00"),
            voucher("2"),
        ]
        units = [Unit("VB"), Unit("Ztyret")]

        split_by_result_unit(rows, units, "Ztyret")

        assert units[0].buffer == rows[:3]
        # The trailing voucher has no owner of its own
        assert units[1].buffer == [rows[3]]

    def test_group_without_owner_goes_to_default(self):
        rows = [
            voucher("1"),
            ledger("6570", debit="10,00"),
            ledger("1930", credit="10,00"),
        ]
        units = [Unit("VB"), Unit("Ztyret")]

        split_by_result_unit(rows, units, "Ztyret")

        assert units[1].buffer == rows
        assert units[0].buffer == []

    def test_group_with_two_owners_is_replicated(self):
        rows = [
            voucher("3", "Sittning"),
            ledger("4010", owner="VB", debit="200,00"),
            ledger("4010", owner="ZKK", debit="100,00"),
            ledger("1930", credit="300,00"),
        ]
        units = [Unit("VB"), Unit("ZKK"), Unit("Ztyret")]

        split_by_result_unit(rows, units, "Ztyret")

        vb, zkk, ztyret = units
        assert vb.buffer == rows
        assert zkk.buffer == rows
        assert ztyret.buffer == []

    def test_repeated_owner_does_not_duplicate_rows(self):
        rows = [
            voucher("1"),
            ledger("4010", owner="VB"),
            ledger("4011", owner="VB"),
        ]
        units = [Unit("VB"), Unit("Ztyret")]

        split_by_result_unit(rows, units, "Ztyret")

        assert units[0].buffer == rows

    def test_quoted_owner_never_activates_a_unit(self):
        rows = [
            voucher("1"),
            ledger("1930", owner='"VB"'),
        ]
        units = [Unit("VB"), Unit("Ztyret")]

        split_by_result_unit(rows, units, "Ztyret")

        assert units[0].buffer == []
        assert units[1].buffer == rows

    def test_unknown_owner_is_ignored(self):
        rows = [voucher("1"), ledger("4010", owner="Ghost")]
        units = [Unit("Ztyret")]

        split_by_result_unit(rows, units, "Ztyret")

        assert units[0].buffer == rows

    def test_header_only_reaches_units_of_its_own_group(self):
        # The header is an ordinary voucher line: it goes wherever the rows
        # directly after it are booked, not to every unit.
        header = Row.from_fields(["Ver.nr", "Datum", "Text", "Konto", "Namn", "", "Debet", "Kredit"])
        rows = [
            header,
            voucher("1"),
            ledger("4010", owner="VB"),
        ]
        units = [Unit("VB"), Unit("Ztyret")]

        split_by_result_unit(rows, units, "Ztyret")

        vb, ztyret = units
        assert ztyret.buffer == [header]
        assert header not in vb.buffer

    def test_header_followed_by_owned_lines_goes_to_that_unit(self):
        header = Row.from_fields(["Ver.nr", "Datum", "Text", "Konto", "Namn", "", "Debet", "Kredit"])
        rows = [header, ledger("4010", owner="VB"), voucher("1")]
        units = [Unit("VB"), Unit("Ztyret")]

        split_by_result_unit(rows, units, "Ztyret")

        assert units[0].buffer == rows[:2]
        assert units[1].buffer == [rows[2]]

    def test_feed_returns_kind_and_counts_groups(self):
        units = [Unit("VB"), Unit("Ztyret")]
        engine = PartitionEngine(units, "Ztyret")

        assert engine.feed(voucher("1")) is RowKind.NEW_VOUCHER
        assert engine.feed(ledger("4010", owner="VB")) is RowKind.OWNERSHIP
        assert engine.feed(ledger("1930")) is RowKind.CONTINUATION
        assert engine.feed(voucher("2")) is RowKind.NEW_VOUCHER
        assert engine.groups_committed == 1

        engine.flush()
        assert engine.groups_committed == 2
        assert engine.default_unit.buffer == [voucher("2")]

        # Nothing pending, nothing committed
        engine.flush()
        assert engine.groups_committed == 2

    def test_every_group_replicated_once_per_attributed_unit(self):
        groups = [
            [voucher("1"), ledger("4010", owner="VB"), ledger("1930")],
            [voucher("2"), ledger("6570"), ledger("1930")],
            [voucher("3"), ledger("4010", owner="VB"), ledger("4010", owner="ZKK"), ledger("1930")],
            [voucher("4"), ledger("1930", owner='"x"'), ledger("3010", owner="Ztyret")],
            [voucher("5"), ledger("4010", owner="ZKK")],
        ]
        rows = [row for group in groups for row in group]
        units = find_result_units(rows)

        split_by_result_unit(rows, units, "Ztyret")

        expected = Counter()
        for group in groups:
            owners = {r.owning_unit for r in group if r.has_owner} or {"Ztyret"}
            for owner in owners:
                for row in group:
                    expected[(owner, row)] += 1

        actual = Counter((u.name, row) for u in units for row in u.buffer)
        assert actual == expected
