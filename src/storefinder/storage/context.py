"""
Storage context for storefinder.

A StorageContext bundles a storage configuration with the adapter serving
it. It is created explicitly and handed to Finders and FileManagers; there
is no process-wide storage handle. Every operation that reaches the adapter
turns adapter failures into StorageAccessError with the offending path.
"""

import logging
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from .adapter import LocalFilesystemAdapter, StorageAdapter
from ..exceptions import StorageAccessError
from ..models.config import StorageConfig, Visibility
from ..models.entry import Entry


logger = logging.getLogger(__name__)


class StorageContext:
    """
    Explicit handle on one storage backend.

    Args:
        config: Storage configuration
        adapter: Adapter to use; a LocalFilesystemAdapter over
            config.base_path is created when omitted
    """

    def __init__(self, config: StorageConfig, adapter: Optional[StorageAdapter] = None):
        self.config = config
        self.adapter = adapter if adapter is not None else LocalFilesystemAdapter(config)

    @classmethod
    def from_path(cls, base_path: Union[str, Path], **options: Any) -> 'StorageContext':
        """Create a context over a local directory."""
        return cls(StorageConfig(base_path=str(base_path), **options))

    @classmethod
    def from_config_file(cls, config_path: Optional[Union[str, Path]] = None,
                         strict_mode: bool = False) -> 'StorageContext':
        """Create a context from a YAML configuration file (or the default search locations)."""
        from ..config.parser import load_config

        result = load_config(config_path, strict_mode=strict_mode)
        for warning in result.warnings:
            logger.warning(warning)
        return cls(result.config)

    def _call(self, operation: str, path: str, message: str, func: Callable, *args: Any) -> Any:
        """Run an adapter call, wrapping any failure in StorageAccessError."""
        try:
            return func(*args)
        except StorageAccessError:
            raise
        except Exception as e:
            logger.debug(f"Storage operation '{operation}' failed for '{path}': {e}")
            raise StorageAccessError(f"{message}: {e}", path, operation) from e

    def find(self) -> 'Finder':
        """Create a Finder over this storage."""
        from ..finder import Finder
        return Finder(self)

    def file(self, path: str) -> 'FileManager':
        """Create a FileManager for a single path."""
        from .file_manager import FileManager
        return FileManager(self, path)

    def list_contents(self, path: str = '', recursive: bool = False) -> List[Entry]:
        """List the entries under a path."""
        return self._call(
            'list', path, f"Failed to list contents for path: {path or '/'}",
            lambda: list(self.adapter.list_contents(path, recursive))
        )

    def put(self, path: str, contents: Union[str, bytes],
            visibility: Optional[Union[Visibility, str]] = None) -> None:
        """Write contents to a file, creating parent directories."""
        if isinstance(visibility, str):
            visibility = Visibility(visibility)
        self._call('write', path, f"Failed to write to path: {path}",
                   self.adapter.write, path, contents, visibility)

    def get(self, path: str) -> str:
        """Read a file's contents."""
        return self._call('read', path, f"Failed to read from path: {path}",
                          self.adapter.read, path)

    def delete(self, path: str) -> None:
        self._call('delete', path, f"Failed to delete path: {path}",
                   self.adapter.delete, path)

    def copy(self, path: str, new_path: str) -> None:
        self._call('copy', path, f"Failed to copy from {path} to {new_path}",
                   self.adapter.copy, path, new_path)

    def move(self, path: str, new_path: str) -> None:
        self._call('move', path, f"Failed to move from {path} to {new_path}",
                   self.adapter.move, path, new_path)

    def exists(self, path: str) -> bool:
        """Check whether a file or a directory exists at a path."""
        return self._call(
            'exists', path, f"Failed to check existence of path: {path}",
            lambda: self.adapter.file_exists(path) or self.adapter.directory_exists(path)
        )

    def file_exists(self, path: str) -> bool:
        return self._call('exists', path, f"Failed to check existence of path: {path}",
                          self.adapter.file_exists, path)

    def mkdir(self, path: str, visibility: Optional[Union[Visibility, str]] = None) -> None:
        if isinstance(visibility, str):
            visibility = Visibility(visibility)
        self._call('mkdir', path, f"Failed to create directory: {path}",
                   self.adapter.create_directory, path, visibility)

    def rmdir(self, path: str) -> None:
        """Delete a directory and everything below it."""
        self._call('rmdir', path, f"Failed to delete directory: {path}",
                   self.adapter.delete_directory, path)

    def last_modified(self, path: str) -> int:
        return self._call('last_modified', path, f"Failed to read modification time of: {path}",
                          self.adapter.last_modified, path)

    def size(self, path: str) -> int:
        return self._call('size', path, f"Failed to read size of: {path}",
                          self.adapter.file_size, path)

    def mime_type(self, path: str) -> Optional[str]:
        return self._call('mime_type', path, f"Failed to read MIME type of: {path}",
                          self.adapter.mime_type, path)

    def visibility(self, path: str) -> Visibility:
        return self._call('visibility', path, f"Failed to read visibility of: {path}",
                          self.adapter.visibility, path)

    def set_visibility(self, path: str, visibility: Union[Visibility, str]) -> None:
        if isinstance(visibility, str):
            visibility = Visibility(visibility)
        self._call('set_visibility', path, f"Failed to set visibility of: {path}",
                   self.adapter.set_visibility, path, visibility)

    def checksum(self, path: str, algorithm: str = 'md5') -> str:
        return self._call('checksum', path, f"Failed to compute checksum of: {path}",
                          self.adapter.checksum, path, algorithm)

    def __str__(self) -> str:
        return f"StorageContext({self.config.base_path})"
