"""
Finder: query builder and result collection for storefinder.

A Finder is configured through chained setters, then materialized with
get(), which lists the configured path through the StorageContext, runs the
FilterChain and applies any requested sort:

    results = (
        context.find()
        .files()
        .in_('cache')
        .only(['txt'])
        .date('after 2021-01-01')
        .sort_by_name()
        .get()
    )

Calling a setter after get() re-enters configuration and drops the previous
result. Each get() lists and filters from scratch.
"""

import logging
import time
from collections.abc import Sequence
from typing import Any, Callable, Dict, Iterator, List, Optional, Union, TYPE_CHECKING

from pydantic import ValidationError

from .comparators.date import DateComparator
from .comparators.size import SizeComparator
from .exceptions import InvalidExpression
from .filters.chain import FilterChain
from .models.entry import Entry, EntryKind
from .models.query import FinderQuery, SortKey

if TYPE_CHECKING:
    from .storage.context import StorageContext


logger = logging.getLogger(__name__)


SORT_KEY_FUNCTIONS: Dict[SortKey, Callable[[Entry], Union[int, str]]] = {
    SortKey.DATE: lambda entry: entry.last_modified,
    SortKey.SIZE: lambda entry: entry.size if entry.size is not None else 0,
    SortKey.EXTENSION: lambda entry: entry.get_extension(),
    SortKey.NAME: lambda entry: entry.get_filename(),
}


class ResultCollection(Sequence):
    """
    Ordered entries produced by one Finder.get() call.

    Iterating is restartable and never touches storage again.
    """

    def __init__(self, entries: List[Entry], execution_time: float = 0.0, total_listed: int = 0):
        self._entries = list(entries)
        self.execution_time = execution_time
        self.total_listed = total_listed

    def __getitem__(self, index):
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def sort_by(self, key: SortKey, descending: bool = False) -> 'ResultCollection':
        """Stable in-place sort; equal keys keep their relative order."""
        self._entries.sort(key=SORT_KEY_FUNCTIONS[key], reverse=descending)
        return self

    def to_list(self) -> List[Entry]:
        return list(self._entries)

    def get_paths(self) -> List[str]:
        return [entry.path for entry in self._entries]

    def __repr__(self) -> str:
        return f"ResultCollection({self.get_paths()!r})"

    def __str__(self) -> str:
        parts = [f"Found {len(self)} entries"]
        parts.append(f"Listed {self.total_listed} entries")
        parts.append(f"Took {self.execution_time:.3f}s")
        return " | ".join(parts)


class Finder:
    """
    Builds a query over a storage path and exposes the filtered entries.

    Args:
        context: Storage context to list entries through
        query: Initial query (a blank one by default)
        size_comparator: Comparator used for size expressions
        date_comparator: Comparator used for date expressions
    """

    def __init__(self, context: 'StorageContext', query: Optional[FinderQuery] = None,
                 size_comparator: Optional[SizeComparator] = None,
                 date_comparator: Optional[DateComparator] = None):
        self.context = context
        self.query = query or FinderQuery()
        self.size_comparator = size_comparator or SizeComparator()
        self.date_comparator = date_comparator or DateComparator()
        self._result: Optional[ResultCollection] = None

    def _configured(self) -> 'Finder':
        if self._result is not None:
            logger.debug("Finder reconfigured, dropping materialized result")
            self._result = None
        return self

    def in_(self, path: str, recursive: Optional[bool] = None) -> 'Finder':
        """Set the path to search in, optionally overriding recursion."""
        self.query.root_path = path
        if recursive is not None:
            self.query.recursive = recursive
        return self._configured()

    def files(self) -> 'Finder':
        """Keep only files."""
        self.query.entry_type = EntryKind.FILE
        return self._configured()

    def directories(self) -> 'Finder':
        """Keep only directories."""
        self.query.entry_type = EntryKind.DIRECTORY
        return self._configured()

    def _update(self, field: str, value: Any) -> 'Finder':
        """Assign a filter field, reporting rejected values as InvalidExpression."""
        try:
            setattr(self.query, field, value)
        except ValidationError as e:
            reason = e.errors()[0]['msg']
            raise InvalidExpression(f"Invalid value for {field}: {reason}", repr(value)) from e
        return self._configured()

    def only(self, extensions: Union[str, List[str]]) -> 'Finder':
        """Keep only entries with one of these extensions."""
        return self._update('only_extensions', extensions)

    def except_(self, extensions: Union[str, List[str]]) -> 'Finder':
        """Drop entries with any of these extensions."""
        return self._update('except_extensions', extensions)

    def size(self, expressions: Union[str, List[str]]) -> 'Finder':
        """Set the size expressions; a list means all of them must hold."""
        return self._update('size_expressions', expressions)

    def date(self, expressions: Union[str, List[str]]) -> 'Finder':
        """Set the date expressions; a list means all of them must hold."""
        return self._update('date_expressions', expressions)

    def get(self) -> ResultCollection:
        """
        List, filter and sort the configured path.

        Returns:
            The materialized ResultCollection

        Raises:
            StorageAccessError: If listing the path fails
            InvalidExpression: If a size or date expression is malformed
        """
        start = time.perf_counter()
        recursive = self.query.recursive
        if recursive is None:
            recursive = self.context.config.recursive

        logger.info(f"Finding entries under '{self.query.root_path or '/'}' (recursive={recursive})")
        entries = self.context.list_contents(self.query.root_path, recursive)

        chain = FilterChain(
            self.query,
            case_sensitive=self.context.config.case_sensitive,
            size_comparator=self.size_comparator,
            date_comparator=self.date_comparator
        )
        filtered = chain.apply(entries)

        result = ResultCollection(
            filtered,
            execution_time=time.perf_counter() - start,
            total_listed=len(entries)
        )
        if self.query.sort_key is not None:
            result.sort_by(self.query.sort_key, self.query.sort_descending)

        self._result = result
        return result

    def is_materialized(self) -> bool:
        return self._result is not None

    def count(self) -> int:
        """Number of entries in the last materialized result (0 if none)."""
        return len(self._result) if self._result is not None else 0

    def has_results(self) -> bool:
        return self.count() > 0

    def to_list(self) -> List[Entry]:
        return self._result.to_list() if self._result is not None else []

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._result if self._result is not None else ())

    def _sort(self, key: SortKey, descending: bool) -> 'Finder':
        # Sorting never invalidates; it is replayed on the next get()
        self.query.sort_key = key
        self.query.sort_descending = descending
        if self._result is not None:
            self._result.sort_by(key, descending)
        return self

    def sort_by_date(self, descending: bool = False) -> 'Finder':
        return self._sort(SortKey.DATE, descending)

    def sort_by_size(self, descending: bool = False) -> 'Finder':
        return self._sort(SortKey.SIZE, descending)

    def sort_by_extension(self, descending: bool = False) -> 'Finder':
        return self._sort(SortKey.EXTENSION, descending)

    def sort_by_name(self, descending: bool = False) -> 'Finder':
        return self._sort(SortKey.NAME, descending)

    def __str__(self) -> str:
        state = f"{self.count()} entries" if self.is_materialized() else "not materialized"
        return f"Finder({self.query}) | {state}"
