"""
Unit tests for size expressions.

Tests parsing, unit multipliers, boundary evaluation and entry filtering
of the SizeComparator class.
"""

from unittest.mock import patch
import pytest

from storefinder.comparators.operators import ComparisonOperator
from storefinder.comparators.size import SizeComparator, SizeExpression, KILOBYTE, MEGABYTE, GIGABYTE
from storefinder.exceptions import InvalidExpression, InvalidFilterConfiguration, UnsupportedUnit
from storefinder.models.entry import Entry, EntryKind


def make_file(path, size, last_modified=1_600_000_000):
    return Entry(path=path, kind=EntryKind.FILE, size=size, last_modified=last_modified)


class TestSizeParsing:
    """Test cases for SizeComparator.parse."""

    def setup_method(self):
        self.comparator = SizeComparator()

    def test_plain_bytes(self):
        """Test a byte count without a unit."""
        expression = self.comparator.parse("< 25")
        assert expression == SizeExpression(ComparisonOperator.LT, 25, "< 25")

    def test_without_whitespace(self):
        """Test an expression without whitespace."""
        expression = self.comparator.parse("<25")
        assert expression.operator is ComparisonOperator.LT
        assert expression.threshold == 25

    @pytest.mark.parametrize("raw,threshold", [
        ("> 1k", KILOBYTE),
        ("> 1kb", KILOBYTE),
        ("> 1 kilo", KILOBYTE),
        (">= 1KB", KILOBYTE),
        ("> 3m", 3 * MEGABYTE),
        ("> 3 MB", 3 * MEGABYTE),
        ("> 3 mega", 3 * MEGABYTE),
        ("> 2g", 2 * GIGABYTE),
        ("> 2 gb", 2 * GIGABYTE),
        ("> 2 GiGa", 2 * GIGABYTE),
    ])
    def test_binary_units(self, raw, threshold):
        """Test unit words map to binary multipliers."""
        assert self.comparator.parse(raw).threshold == threshold

    def test_multipliers_are_binary(self):
        """Test multiplier constants."""
        assert KILOBYTE == 1024
        assert MEGABYTE == 1024 * 1024
        assert GIGABYTE == 1024 * 1024 * 1024

    @pytest.mark.parametrize("symbol,operator", [
        (">", ComparisonOperator.GT),
        (">=", ComparisonOperator.GE),
        ("<", ComparisonOperator.LT),
        ("<=", ComparisonOperator.LE),
        ("==", ComparisonOperator.EQ),
        ("!=", ComparisonOperator.NE),
    ])
    def test_operators(self, symbol, operator):
        """Test every comparison operator."""
        assert self.comparator.parse(f"{symbol} 10").operator is operator

    @pytest.mark.parametrize("raw", [
        "foo",
        "invalid size",
        "25",
        "<",
        "< ",
        "< kb",
        "< 1.5k",
        "> 2021-01-01",
        "< 1 k b",
        "after 5",
        "",
    ])
    def test_invalid_expressions(self, raw):
        """Test malformed size expressions raise InvalidExpression."""
        with pytest.raises(InvalidExpression):
            self.comparator.parse(raw)

    def test_unsupported_unit(self):
        """Test an unknown unit raises UnsupportedUnit."""
        with pytest.raises(UnsupportedUnit) as exc_info:
            self.comparator.parse("< 1 tb")
        assert exc_info.value.unit == "tb"
        assert exc_info.value.expression == "< 1 tb"

    def test_unsupported_unit_is_invalid_expression(self):
        """Test UnsupportedUnit is an InvalidExpression."""
        with pytest.raises(InvalidExpression):
            self.comparator.parse("< 10 bytes")

    def test_str(self):
        """Test string representation."""
        assert str(self.comparator.parse(">= 1k")) == "size >= 1024"


class TestSizeEvaluation:
    """Boundary behaviour of size expressions."""

    def setup_method(self):
        self.comparator = SizeComparator()

    def test_equality_is_exact(self):
        """Test equality is an exact byte comparison."""
        expression = self.comparator.parse("== 1024")
        assert self.comparator.evaluate(expression, 1024)
        assert not self.comparator.evaluate(expression, 1023)
        assert not self.comparator.evaluate(expression, 1025)

    def test_less_or_equal_boundary(self):
        """Test the less-or-equal boundary."""
        expression = self.comparator.parse("<= 1024")
        assert self.comparator.evaluate(expression, 1023)
        assert self.comparator.evaluate(expression, 1024)
        assert not self.comparator.evaluate(expression, 1025)

    def test_less_than_one_kilobyte(self):
        """Test the one kilobyte boundary."""
        expression = self.comparator.parse("< 1k")
        assert self.comparator.evaluate(expression, 1023)
        assert not self.comparator.evaluate(expression, 1024)

    def test_greater_boundaries(self):
        """Test the greater-than boundaries."""
        greater = self.comparator.parse("> 10")
        greater_equal = self.comparator.parse(">= 10")
        assert not greater.matches(10)
        assert greater.matches(11)
        assert greater_equal.matches(10)
        assert not greater_equal.matches(9)

    def test_not_equal(self):
        """Test the not-equal operator."""
        expression = self.comparator.parse("!= 0")
        assert not expression.matches(0)
        assert expression.matches(1)


class TestSizeFilter:
    """Test cases for SizeComparator.filter."""

    def setup_method(self):
        self.comparator = SizeComparator()
        self.entries = [
            make_file("small.txt", 5),
            make_file("medium.txt", 1024),
            make_file("large.txt", 6000),
        ]

    def test_filter_keeps_matching_entries(self):
        """Test filtering keeps matching entries."""
        result = self.comparator.filter(self.entries, "< 1KB")
        assert [e.path for e in result] == ["small.txt"]

    def test_filter_returns_new_list(self):
        """Test filtering returns a new list."""
        original = list(self.entries)
        result = self.comparator.filter(self.entries, "> 0")
        assert result == original
        assert result is not self.entries
        assert self.entries == original

    def test_filter_is_idempotent(self):
        """Test filtering twice gives the same result."""
        once = self.comparator.filter(self.entries, ">= 1k")
        twice = self.comparator.filter(once, ">= 1k")
        assert once == twice

    def test_filter_parses_once(self):
        """Test the expression is parsed once per filter call."""
        with patch.object(self.comparator, 'parse', wraps=self.comparator.parse) as parse:
            self.comparator.filter(self.entries, "< 25")
        parse.assert_called_once_with("< 25")

    def test_invalid_expression_fails_before_filtering(self):
        """Test a malformed expression fails before any entry is checked."""
        with patch.object(self.comparator, 'filter_parsed') as filter_parsed:
            with pytest.raises(InvalidExpression):
                self.comparator.filter(self.entries, "about 5")
        filter_parsed.assert_not_called()

    def test_directory_entry_is_rejected(self):
        """Test a directory entry reaching a size filter is rejected."""
        entries = self.entries + [Entry(path="cache", kind=EntryKind.DIRECTORY, last_modified=0)]
        with pytest.raises(InvalidFilterConfiguration):
            self.comparator.filter(entries, "< 25")
