"""
Storage adapters for storefinder.

A storage adapter is the collaborator the Finder and the StorageContext talk
to. It lists entries under a path and performs basic file operations on
paths relative to its root. LocalFilesystemAdapter implements the protocol
on top of a local base directory.
"""

import hashlib
import logging
import mimetypes
import os
import shutil
import stat
from pathlib import Path
from typing import List, Optional, Protocol, Union, runtime_checkable

from ..models.config import StorageConfig, Visibility
from ..models.entry import Entry, EntryKind


logger = logging.getLogger(__name__)


@runtime_checkable
class StorageAdapter(Protocol):
    """Interface a storage backend must provide."""

    def list_contents(self, path: str, recursive: bool = False) -> List[Entry]: ...

    def read(self, path: str) -> str: ...

    def write(self, path: str, contents: Union[str, bytes],
              visibility: Optional[Visibility] = None) -> None: ...

    def delete(self, path: str) -> None: ...

    def copy(self, source: str, destination: str) -> None: ...

    def move(self, source: str, destination: str) -> None: ...

    def create_directory(self, path: str, visibility: Optional[Visibility] = None) -> None: ...

    def delete_directory(self, path: str) -> None: ...

    def file_exists(self, path: str) -> bool: ...

    def directory_exists(self, path: str) -> bool: ...

    def last_modified(self, path: str) -> int: ...

    def file_size(self, path: str) -> int: ...

    def mime_type(self, path: str) -> Optional[str]: ...

    def visibility(self, path: str) -> Visibility: ...

    def set_visibility(self, path: str, visibility: Visibility) -> None: ...

    def checksum(self, path: str, algorithm: str = 'md5') -> str: ...


class PathTraversalError(ValueError):
    """Raised when a storage path resolves outside the storage root."""
    pass


class LocalFilesystemAdapter:
    """
    Storage adapter backed by a directory on the local filesystem.

    Paths are '/'-separated and relative to the configured base path.
    Visibility maps to Unix permission bits: public files are 0644 and
    public directories 0755, private ones 0600 and 0700.
    """

    def __init__(self, config: StorageConfig):
        """
        Initialize the adapter.

        Args:
            config: Storage configuration holding the base path and visibility defaults
        """
        self.config = config
        self.root = config.get_base_path()

        if not self.root.exists() and config.create_base_path:
            logger.info(f"Creating storage root: {self.root}")
            self.root.mkdir(parents=True, exist_ok=True)
            os.chmod(self.root, config.directory_permissions())

    def _resolve(self, path: str) -> Path:
        """Map a storage path to an absolute local path inside the root."""
        relative = path.replace('\\', '/').strip('/')
        full = Path(os.path.normpath(self.root / relative)) if relative else self.root
        if full != self.root and self.root not in full.parents:
            raise PathTraversalError(f"Path escapes the storage root: {path}")
        return full

    def _relative(self, full: Path) -> str:
        return full.relative_to(self.root).as_posix()

    def list_contents(self, path: str, recursive: bool = False) -> List[Entry]:
        """
        List the entries under a directory.

        Entries are returned in name order within each directory; a
        recursive listing returns a directory before its contents.

        Raises:
            FileNotFoundError: If the directory does not exist
            NotADirectoryError: If the path is a file
        """
        base = self._resolve(path)
        if not base.exists():
            raise FileNotFoundError(f"Directory not found: {path or '/'}")
        if not base.is_dir():
            raise NotADirectoryError(f"Not a directory: {path}")

        entries = []
        self._collect(base, recursive, entries)
        logger.debug(f"Listed {len(entries)} entries under '{path or '/'}' (recursive={recursive})")
        return entries

    def _collect(self, directory: Path, recursive: bool, entries: List[Entry]) -> None:
        with os.scandir(directory) as iterator:
            children = sorted(iterator, key=lambda item: item.name)

        for child in children:
            child_path = Path(child.path)
            try:
                stat_result = child.stat()
            except FileNotFoundError:
                # Dangling symlink or entry removed while listing
                logger.warning(f"Skipping unreadable entry: {self._relative(child_path)}")
                continue

            is_dir = stat.S_ISDIR(stat_result.st_mode)
            entries.append(self._create_entry(child_path, is_dir, stat_result))
            if recursive and is_dir and not child.is_symlink():
                self._collect(child_path, recursive, entries)

    def _create_entry(self, full: Path, is_dir: bool, stat_result: os.stat_result) -> Entry:
        if is_dir:
            return Entry(
                path=self._relative(full),
                kind=EntryKind.DIRECTORY,
                last_modified=int(stat_result.st_mtime),
                visibility=self._visibility_from_mode(stat_result.st_mode).value
            )

        mime_type, _ = mimetypes.guess_type(str(full))
        return Entry(
            path=self._relative(full),
            kind=EntryKind.FILE,
            size=stat_result.st_size,
            last_modified=int(stat_result.st_mtime),
            mime_type=mime_type,
            visibility=self._visibility_from_mode(stat_result.st_mode).value
        )

    def _visibility_from_mode(self, mode: int) -> Visibility:
        # Readable by others means public
        return Visibility.PUBLIC if stat.S_IMODE(mode) & stat.S_IROTH else Visibility.PRIVATE

    def _ensure_parent(self, full: Path) -> None:
        if not full.parent.exists():
            full.parent.mkdir(parents=True, exist_ok=True)
            os.chmod(full.parent, self.config.directory_permissions())

    def read(self, path: str) -> str:
        return self._resolve(path).read_text(encoding='utf-8')

    def write(self, path: str, contents: Union[str, bytes],
              visibility: Optional[Visibility] = None) -> None:
        full = self._resolve(path)
        self._ensure_parent(full)
        if isinstance(contents, str):
            contents = contents.encode('utf-8')
        full.write_bytes(contents)
        os.chmod(full, self.config.file_permissions(visibility))

    def delete(self, path: str) -> None:
        full = self._resolve(path)
        if full.is_dir():
            raise IsADirectoryError(f"Cannot delete a directory with delete(): {path}")
        full.unlink()

    def copy(self, source: str, destination: str) -> None:
        source_full = self._resolve(source)
        destination_full = self._resolve(destination)
        self._ensure_parent(destination_full)
        shutil.copyfile(source_full, destination_full)
        shutil.copymode(source_full, destination_full)

    def move(self, source: str, destination: str) -> None:
        source_full = self._resolve(source)
        destination_full = self._resolve(destination)
        if not source_full.exists():
            raise FileNotFoundError(f"Source not found: {source}")
        self._ensure_parent(destination_full)
        os.replace(source_full, destination_full)

    def create_directory(self, path: str, visibility: Optional[Visibility] = None) -> None:
        full = self._resolve(path)
        full.mkdir(parents=True, exist_ok=True)
        os.chmod(full, self.config.directory_permissions(visibility))

    def delete_directory(self, path: str) -> None:
        full = self._resolve(path)
        if full == self.root:
            raise PathTraversalError("Refusing to delete the storage root")
        shutil.rmtree(full)

    def file_exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def directory_exists(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def last_modified(self, path: str) -> int:
        return int(self._resolve(path).stat().st_mtime)

    def file_size(self, path: str) -> int:
        full = self._resolve(path)
        if not full.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return full.stat().st_size

    def mime_type(self, path: str) -> Optional[str]:
        full = self._resolve(path)
        if not full.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        mime_type, _ = mimetypes.guess_type(str(full))
        return mime_type

    def visibility(self, path: str) -> Visibility:
        return self._visibility_from_mode(self._resolve(path).stat().st_mode)

    def set_visibility(self, path: str, visibility: Visibility) -> None:
        full = self._resolve(path)
        if full.is_dir():
            os.chmod(full, self.config.directory_permissions(visibility))
        else:
            os.chmod(full, self.config.file_permissions(visibility))

    def checksum(self, path: str, algorithm: str = 'md5') -> str:
        digest = hashlib.new(algorithm)
        with open(self._resolve(path), 'rb') as f:
            for chunk in iter(lambda: f.read(65536), b''):
                digest.update(chunk)
        return digest.hexdigest()
