"""
Filter chain for storefinder.

Filters are applied in a fixed order, each narrowing the previous result:

    1. entry type
    2. 'only' extensions
    3. 'except' extensions
    4. date expressions (all must hold)
    5. size expressions (all must hold)

Each step returns a new list and leaves its input untouched.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from ..comparators.date import DateComparator
from ..comparators.size import SizeComparator
from ..exceptions import InvalidFilterConfiguration
from ..models.entry import Entry, EntryKind
from ..models.query import FinderQuery


logger = logging.getLogger(__name__)


def filter_by_type(entries: Iterable[Entry], entry_type: Optional[EntryKind]) -> List[Entry]:
    """Keep entries of the given kind; keep everything when kind is None."""
    if entry_type is None:
        return list(entries)
    return [entry for entry in entries if entry.kind is entry_type]


def _extension_set(extensions: Sequence[str], case_sensitive: bool) -> set:
    if case_sensitive:
        return set(extensions)
    return {ext.lower() for ext in extensions}


def _entry_extension(entry: Entry, case_sensitive: bool) -> str:
    extension = entry.get_extension()
    return extension if case_sensitive else extension.lower()


def filter_only(entries: Iterable[Entry], extensions: Sequence[str],
                case_sensitive: bool = True) -> List[Entry]:
    """Keep entries whose extension is in the allow list; skip when the list is empty."""
    if not extensions:
        return list(entries)
    allowed = _extension_set(extensions, case_sensitive)
    return [entry for entry in entries if _entry_extension(entry, case_sensitive) in allowed]


def filter_except(entries: Iterable[Entry], extensions: Sequence[str],
                  case_sensitive: bool = True) -> List[Entry]:
    """Drop entries whose extension is in the deny list; skip when the list is empty."""
    if not extensions:
        return list(entries)
    denied = _extension_set(extensions, case_sensitive)
    return [entry for entry in entries if _entry_extension(entry, case_sensitive) not in denied]


class FilterChain:
    """
    Applies the filters configured on a FinderQuery to a list of entries.

    Args:
        query: Query holding the filter configuration
        case_sensitive: Whether extension comparisons are case-sensitive
        size_comparator: Comparator used for size expressions
        date_comparator: Comparator used for date expressions
    """

    def __init__(self, query: FinderQuery, case_sensitive: bool = True,
                 size_comparator: Optional[SizeComparator] = None,
                 date_comparator: Optional[DateComparator] = None):
        self.query = query
        self.case_sensitive = case_sensitive
        self.size_comparator = size_comparator or SizeComparator()
        self.date_comparator = date_comparator or DateComparator()

    def validate(self) -> None:
        """
        Check that the configured filters can be combined.

        Raises:
            InvalidFilterConfiguration: If size expressions are configured
                without restricting the query to files
        """
        if self.query.size_expressions and self.query.entry_type is not EntryKind.FILE:
            raise InvalidFilterConfiguration(
                "Size expressions require a files-only query; directories have no size",
                self.query.size_expressions[0]
            )

    def apply(self, entries: Iterable[Entry]) -> List[Entry]:
        """
        Run every configured filter over the entries.

        All expressions are parsed before any entry is filtered, so a
        malformed expression aborts the whole run.

        Args:
            entries: Raw entries from the storage listing

        Returns:
            New list containing the entries that passed every filter

        Raises:
            InvalidExpression: If any expression is malformed or the
                configuration is invalid
        """
        self.validate()
        date_expressions = [self.date_comparator.parse(raw) for raw in self.query.date_expressions]
        size_expressions = [self.size_comparator.parse(raw) for raw in self.query.size_expressions]

        result = list(entries)
        total = len(result)

        result = filter_by_type(result, self.query.entry_type)
        result = filter_only(result, self.query.only_extensions, self.case_sensitive)
        result = filter_except(result, self.query.except_extensions, self.case_sensitive)

        for expression in date_expressions:
            result = self.date_comparator.filter_parsed(result, expression)

        for expression in size_expressions:
            result = self.size_comparator.filter_parsed(result, expression)

        logger.debug(f"Filter chain kept {len(result)} of {total} entries ({self.query})")
        return result
