"""
Data models for storefinder.

This module contains the entry, query and configuration structures used
throughout the package.
"""

from .entry import Entry, EntryKind
from .query import FinderQuery, SortKey
from .config import StorageConfig, Visibility

__all__ = ['Entry', 'EntryKind', 'FinderQuery', 'SortKey', 'StorageConfig', 'Visibility']
