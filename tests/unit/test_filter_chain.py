"""
Unit tests for the filter chain.

Tests each filter step, the fixed evaluation order, fail-fast parsing,
purity, idempotence and independence from configuration order.
"""

from datetime import datetime
import pytest

from storefinder.comparators.date import DateComparator
from storefinder.comparators.size import SizeComparator
from storefinder.exceptions import InvalidExpression, InvalidFilterConfiguration
from storefinder.filters.chain import FilterChain, filter_by_type, filter_only, filter_except
from storefinder.models.entry import Entry, EntryKind
from storefinder.models.query import FinderQuery


FROZEN_NOW = datetime(2024, 3, 31, 12, 0, 0)


def ts(year, month, day):
    return int(datetime(year, month, day).timestamp())


def make_file(path, size, last_modified):
    return Entry(path=path, kind=EntryKind.FILE, size=size, last_modified=last_modified)


def paths(entries):
    return [entry.path for entry in entries]


class TestFilterSteps:
    """Test cases for the individual filter functions."""

    def setup_method(self):
        self.entries = [
            make_file("file1.txt", 9, ts(2022, 1, 1)),
            make_file("file1.php", 24, ts(2022, 1, 1)),
            make_file("notes.TXT", 5, ts(2022, 1, 1)),
            make_file("README", 3, ts(2022, 1, 1)),
            Entry(path="sub", kind=EntryKind.DIRECTORY, last_modified=ts(2022, 1, 1)),
        ]

    def test_type_none_passes_through(self):
        """Test no type restriction returns a copy of every entry."""
        result = filter_by_type(self.entries, None)
        assert result == self.entries
        assert result is not self.entries

    def test_type_files(self):
        """Test the files type filter drops directories."""
        assert "sub" not in paths(filter_by_type(self.entries, EntryKind.FILE))

    def test_type_directories(self):
        """Test the directories type filter keeps only directories."""
        assert paths(filter_by_type(self.entries, EntryKind.DIRECTORY)) == ["sub"]

    def test_only_is_case_sensitive(self):
        """Test the only filter is case-sensitive by default."""
        assert paths(filter_only(self.entries, ["txt"])) == ["file1.txt"]

    def test_only_case_insensitive(self):
        """Test the only filter with case-insensitive matching."""
        assert paths(filter_only(self.entries, ["txt"], case_sensitive=False)) == ["file1.txt", "notes.TXT"]

    def test_only_empty_list_is_skipped(self):
        """Test an empty allow list keeps everything."""
        assert filter_only(self.entries, []) == self.entries

    def test_only_empty_extension_matches_entries_without_one(self):
        """Test an empty extension matches entries without a dot."""
        assert paths(filter_only(self.entries, [""])) == ["README", "sub"]

    def test_except(self):
        """Test the except filter drops listed extensions."""
        assert paths(filter_except(self.entries, ["txt", "php"])) == ["notes.TXT", "README", "sub"]

    def test_except_empty_list_is_skipped(self):
        """Test an empty deny list keeps everything."""
        assert filter_except(self.entries, []) == self.entries

    def test_only_and_except_commute(self):
        """Test only and except give the same result in either order."""
        allowed = ["txt", "php"]
        denied = ["php"]
        first = filter_except(filter_only(self.entries, allowed), denied)
        second = filter_only(filter_except(self.entries, denied), allowed)
        assert first == second == [self.entries[0]]


class TestFilterChain:
    """Test cases for the FilterChain class."""

    def setup_method(self):
        self.entries = [
            make_file("file1.txt", 9, ts(2020, 6, 1)),
            make_file("file2.txt", 9, ts(2021, 6, 1)),
            make_file("file3.txt", 2048, ts(2023, 6, 1)),
            make_file("file1.php", 24, ts(2021, 6, 1)),
            Entry(path="sub", kind=EntryKind.DIRECTORY, last_modified=ts(2023, 1, 1)),
        ]
        self.date_comparator = DateComparator(clock=lambda: FROZEN_NOW)

    def make_chain(self, **query_fields):
        return FilterChain(FinderQuery(**query_fields), date_comparator=self.date_comparator)

    def test_no_filters(self):
        """Test a blank query keeps every entry."""
        assert self.make_chain().apply(self.entries) == self.entries

    def test_full_chain(self):
        """Test every filter step together."""
        chain = self.make_chain(
            entry_type=EntryKind.FILE,
            only_extensions=["txt", "php"],
            except_extensions=["php"],
            date_expressions=["after 2021-01-01"],
            size_expressions=["< 1k"]
        )
        assert paths(chain.apply(self.entries)) == ["file2.txt"]

    def test_date_expressions_are_anded(self):
        """Test every date expression must hold."""
        chain = self.make_chain(date_expressions=["after 2021-01-01", "before 2022-01-01"])
        assert paths(chain.apply(self.entries)) == ["file2.txt", "file1.php"]

    def test_size_expressions_are_anded(self):
        """Test every size expression must hold."""
        chain = self.make_chain(entry_type=EntryKind.FILE, size_expressions=["> 8", "< 10"])
        assert paths(chain.apply(self.entries)) == ["file1.txt", "file2.txt"]

    def test_apply_does_not_mutate_input(self):
        """Test apply leaves its input list untouched."""
        original = list(self.entries)
        self.make_chain(entry_type=EntryKind.FILE, only_extensions=["txt"]).apply(self.entries)
        assert self.entries == original

    def test_apply_is_idempotent(self):
        """Test applying the chain to its own output changes nothing."""
        chain = self.make_chain(
            entry_type=EntryKind.FILE,
            except_extensions=["php"],
            date_expressions=["> 2021-01-01"],
            size_expressions=["<= 2k"]
        )
        once = chain.apply(self.entries)
        assert chain.apply(once) == once

    def test_configuration_order_does_not_matter(self):
        """Test assignment order on the query does not matter."""
        first = FinderQuery()
        first.only_extensions = ["txt", "php"]
        first.except_extensions = ["php"]
        second = FinderQuery()
        second.except_extensions = ["php"]
        second.only_extensions = ["txt", "php"]
        assert FilterChain(first).apply(self.entries) == FilterChain(second).apply(self.entries)

    def test_size_filter_requires_files_only(self):
        """Test a size filter without a type restriction is rejected."""
        with pytest.raises(InvalidFilterConfiguration):
            self.make_chain(size_expressions=["< 25"]).apply(self.entries)

    def test_size_filter_rejected_for_directories(self):
        """Test a size filter on a directories query is rejected."""
        with pytest.raises(InvalidFilterConfiguration):
            self.make_chain(entry_type=EntryKind.DIRECTORY, size_expressions=["< 25"]).apply(self.entries)

    def test_date_filter_on_directories(self):
        """Test date filters apply to directories."""
        chain = self.make_chain(entry_type=EntryKind.DIRECTORY, date_expressions=["after 2022-01-01"])
        assert paths(chain.apply(self.entries)) == ["sub"]

    def test_invalid_expression_fails_before_any_filtering(self):
        """Test a bad date expression stops the chain before size filtering."""
        calls = []
        size_comparator = SizeComparator()
        original = size_comparator.filter_parsed

        def recording(entries, expression):
            calls.append(expression.raw)
            return original(entries, expression)

        size_comparator.filter_parsed = recording
        chain = FilterChain(
            FinderQuery(entry_type=EntryKind.FILE, size_expressions=["< 25"], date_expressions=["foo"]),
            size_comparator=size_comparator,
            date_comparator=self.date_comparator
        )
        with pytest.raises(InvalidExpression):
            chain.apply(self.entries)
        assert calls == []

    def test_invalid_size_expression_fails_before_date_filtering(self):
        """Test a bad size expression stops the chain before date filtering."""
        calls = []
        original = self.date_comparator.filter_parsed

        def recording(entries, expression):
            calls.append(expression.raw)
            return original(entries, expression)

        self.date_comparator.filter_parsed = recording
        chain = self.make_chain(
            entry_type=EntryKind.FILE,
            date_expressions=["after 2021-01-01"],
            size_expressions=["< 25 bananas"]
        )
        with pytest.raises(InvalidExpression):
            chain.apply(self.entries)
        assert calls == []

    def test_dates_run_before_sizes(self):
        """Test date filters run before size filters on the narrowed list."""
        calls = []
        size_comparator = SizeComparator()
        original_date = self.date_comparator.filter_parsed
        original_size = size_comparator.filter_parsed

        def record_date(entries, expression):
            calls.append(("date", len(entries)))
            return original_date(entries, expression)

        def record_size(entries, expression):
            calls.append(("size", len(entries)))
            return original_size(entries, expression)

        self.date_comparator.filter_parsed = record_date
        size_comparator.filter_parsed = record_size
        chain = FilterChain(
            FinderQuery(
                entry_type=EntryKind.FILE,
                only_extensions=["txt"],
                size_expressions=["< 1k"],
                date_expressions=["after 2021-01-01"]
            ),
            size_comparator=size_comparator,
            date_comparator=self.date_comparator
        )
        assert paths(chain.apply(self.entries)) == ["file2.txt"]
        # type and extension filters narrow to 3 txt files before the date step
        assert calls == [("date", 3), ("size", 2)]
