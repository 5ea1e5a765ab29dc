"""Per-path file operations on top of a StorageContext."""

from datetime import datetime
from typing import Optional, Union, TYPE_CHECKING

from ..models.config import Visibility

if TYPE_CHECKING:
    from .context import StorageContext


class FileManager:
    """
    Operations on a single storage path.

    Every call goes through the StorageContext, so adapter failures surface
    as StorageAccessError.
    """

    def __init__(self, context: 'StorageContext', path: str):
        self.context = context
        self.path = path

    def get_path(self) -> str:
        return self.path

    def put(self, contents: Union[str, bytes], visibility: Optional[Union[Visibility, str]] = None) -> None:
        self.context.put(self.path, contents, visibility)

    # Alias kept for callers used to write()
    write = put

    def get(self) -> str:
        return self.context.get(self.path)

    def delete(self) -> None:
        self.context.delete(self.path)

    def exists(self) -> bool:
        return self.context.file_exists(self.path)

    def move(self, destination: str) -> 'FileManager':
        """Move the file and return a FileManager for its new path."""
        self.context.move(self.path, destination)
        return FileManager(self.context, destination)

    def copy(self, destination: str) -> 'FileManager':
        """Copy the file and return a FileManager for the copy."""
        self.context.copy(self.path, destination)
        return FileManager(self.context, destination)

    def last_modified(self) -> int:
        return self.context.last_modified(self.path)

    def size(self) -> int:
        return self.context.size(self.path)

    def mime_type(self) -> Optional[str]:
        return self.context.mime_type(self.path)

    def visibility(self) -> Visibility:
        return self.context.visibility(self.path)

    def set_visibility(self, visibility: Union[Visibility, str]) -> None:
        self.context.set_visibility(self.path, visibility)

    def checksum(self, algorithm: str = 'md5') -> str:
        return self.context.checksum(self.path, algorithm)

    def get_datetime(self) -> datetime:
        """Get the last modification time as a local datetime."""
        return datetime.fromtimestamp(self.last_modified())

    def __repr__(self) -> str:
        return f"FileManager({self.path!r})"
