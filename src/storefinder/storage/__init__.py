"""
Storage backends for storefinder.

This package contains the storage adapter protocol, the local filesystem
adapter, the explicit StorageContext and the per-path FileManager.
"""

from .adapter import StorageAdapter, LocalFilesystemAdapter, PathTraversalError
from .context import StorageContext
from .file_manager import FileManager

__all__ = [
    'StorageAdapter',
    'LocalFilesystemAdapter',
    'PathTraversalError',
    'StorageContext',
    'FileManager'
]
