"""
Entry data models for storefinder.

An Entry is the immutable snapshot of one file or directory as reported by
the storage adapter at enumeration time.
"""

from typing import Dict, Optional, Any
from datetime import datetime
from enum import Enum
from pathlib import PurePosixPath
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class EntryKind(Enum):
    """Kinds of filesystem nodes."""
    FILE = "file"
    DIRECTORY = "dir"


class Entry(BaseModel):
    """
    One file or directory returned by listing a storage path.

    Attributes:
        path: Path relative to the storage root, '/'-separated
        kind: Whether the entry is a file or a directory
        size: Size in bytes (files only)
        last_modified: Last modification time as a Unix timestamp
        mime_type: MIME type of the file (files only, if detected)
        visibility: Visibility string ('public' or 'private')
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Path relative to the storage root")
    kind: EntryKind = Field(..., description="File or directory")
    size: Optional[int] = Field(None, ge=0, description="Size in bytes")
    last_modified: int = Field(..., description="Last modification Unix timestamp")
    mime_type: Optional[str] = Field(None, description="MIME type of the file")
    visibility: str = Field("public", description="Visibility string")

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Normalize separators and strip the leading slash."""
        normalized = v.replace('\\', '/').strip('/')
        if not normalized:
            raise ValueError("Entry path cannot be empty")
        return normalized

    @field_validator('kind', mode='before')
    @classmethod
    def validate_kind(cls, v) -> EntryKind:
        """Accept 'file' and 'dir' strings."""
        if isinstance(v, str):
            try:
                return EntryKind(v)
            except ValueError:
                raise ValueError(f"Invalid entry kind: {v}")
        return v

    @model_validator(mode='after')
    def validate_size(self):
        """Files carry a size, directories do not."""
        if self.kind is EntryKind.FILE and self.size is None:
            raise ValueError(f"File entry '{self.path}' must have a size")
        if self.kind is EntryKind.DIRECTORY and self.size is not None:
            raise ValueError(f"Directory entry '{self.path}' cannot have a size")
        return self

    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def get_filename(self) -> str:
        """Get the last path component."""
        return PurePosixPath(self.path).name

    def get_directory(self) -> str:
        """Get the path of the containing directory ('' at the root)."""
        parent = str(PurePosixPath(self.path).parent)
        return '' if parent == '.' else parent

    def get_extension(self) -> str:
        """
        Get the text after the last dot of the filename.

        Returns an empty string when the filename has no dot, so entries
        without an extension compare against ''.
        """
        filename = self.get_filename()
        if '.' not in filename:
            return ''
        return filename.rsplit('.', 1)[1]

    def get_datetime(self) -> datetime:
        """Get the last modification time as a local datetime."""
        return datetime.fromtimestamp(self.last_modified)

    def get_size_human_readable(self) -> str:
        """Get the size in human-readable format ('-' for directories)."""
        if self.size is None:
            return "-"
        size = float(self.size)
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if size < 1024.0:
                return f"{size:.1f} {unit}"
            size /= 1024.0
        return f"{size:.1f} PB"

    def to_dict(self) -> Dict[str, Any]:
        """Convert the entry to a dictionary representation."""
        data = self.model_dump()
        data['kind'] = self.kind.value
        data['filename'] = self.get_filename()
        data['extension'] = self.get_extension()
        data['modified_time'] = self.get_datetime().isoformat()
        return data

    def __str__(self) -> str:
        parts = [self.path, self.kind.value]
        if self.is_file():
            parts.append(self.get_size_human_readable())
        return " | ".join(parts)
