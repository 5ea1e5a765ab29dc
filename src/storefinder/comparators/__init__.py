"""
Expression parsers and comparators for storefinder.

This package implements the size and date expression languages used to
filter entries by byte count and modification time.
"""

from .operators import ComparisonOperator
from .size import SizeComparator, SizeExpression
from .date import DateComparator, DateExpression

__all__ = [
    'ComparisonOperator',
    'SizeComparator',
    'SizeExpression',
    'DateComparator',
    'DateExpression'
]
