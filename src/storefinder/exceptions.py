"""
Error types for the storefinder package.

Expression errors are raised at parse time, before any entry is evaluated.
Storage errors wrap whatever the storage adapter raised and keep the
offending path.
"""

from typing import Optional


class StorageFinderError(Exception):
    """Base class for all storefinder errors."""
    pass


class InvalidExpression(StorageFinderError, ValueError):
    """Raised when a size or date expression cannot be parsed."""

    def __init__(self, message: str, expression: Optional[str] = None):
        super().__init__(message)
        self.expression = expression


class UnsupportedUnit(InvalidExpression):
    """Raised when an expression names a unit outside the recognized set."""

    def __init__(self, unit: str, expression: Optional[str] = None):
        super().__init__(f"Unsupported unit '{unit}' in expression '{expression}'", expression)
        self.unit = unit


class InvalidFilterConfiguration(InvalidExpression):
    """Raised when a filter is combined with entries it cannot evaluate."""
    pass


class StorageAccessError(StorageFinderError):
    """
    Raised when the storage adapter fails.

    Attributes:
        path: Path the operation was working on
        operation: Name of the failed operation (e.g. 'list', 'write')
    """

    def __init__(self, message: str, path: str, operation: Optional[str] = None):
        super().__init__(message)
        self.path = path
        self.operation = operation
