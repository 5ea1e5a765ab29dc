"""
Entry filtering for storefinder.

This package applies type, extension, date and size filters to storage
listings in a fixed order.
"""

from .chain import FilterChain, filter_by_type, filter_only, filter_except

__all__ = ['FilterChain', 'filter_by_type', 'filter_only', 'filter_except']
