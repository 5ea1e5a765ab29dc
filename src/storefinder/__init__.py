"""
storefinder - Core Package

A file-discovery and filtering engine over storage backends: list a path,
narrow the entries with type, extension, size and date filters, and sort the
result.
"""

from .exceptions import (
    StorageFinderError,
    InvalidExpression,
    UnsupportedUnit,
    InvalidFilterConfiguration,
    StorageAccessError
)
from .finder import Finder, ResultCollection
from .models import Entry, EntryKind, FinderQuery, SortKey, StorageConfig, Visibility
from .storage import StorageContext, FileManager, LocalFilesystemAdapter

__version__ = "0.1.0"
__author__ = "storefinder Team"

__all__ = [
    'StorageFinderError',
    'InvalidExpression',
    'UnsupportedUnit',
    'InvalidFilterConfiguration',
    'StorageAccessError',
    'Finder',
    'ResultCollection',
    'Entry',
    'EntryKind',
    'FinderQuery',
    'SortKey',
    'StorageConfig',
    'Visibility',
    'StorageContext',
    'FileManager',
    'LocalFilesystemAdapter'
]
