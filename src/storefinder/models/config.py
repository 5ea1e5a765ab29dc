"""
Configuration data models for storefinder.

This module defines the storage configuration: where the local storage root
lives, which visibility new files and directories get, and the listing
defaults Finders use.
"""

from typing import Dict, List, Optional, Any
from pathlib import Path
from enum import Enum
from pydantic import BaseModel, Field, ValidationError, field_validator


class Visibility(Enum):
    """Visibility of stored files and directories."""
    PUBLIC = "public"
    PRIVATE = "private"


# Unix permission bits for each visibility
FILE_PERMISSIONS = {
    Visibility.PUBLIC: 0o644,
    Visibility.PRIVATE: 0o600,
}

DIRECTORY_PERMISSIONS = {
    Visibility.PUBLIC: 0o755,
    Visibility.PRIVATE: 0o700,
}


class StorageConfig(BaseModel):
    """
    Configuration of a local storage backend.

    Attributes:
        base_path: Directory every storage path is resolved against
        visibility: Default visibility for written files
        directory_visibility: Default visibility for created directories
        case_sensitive: Whether extension filters compare case-sensitively
        recursive: Whether Finders list recursively by default
        create_base_path: Whether to create the base directory if missing
    """

    base_path: str = Field(..., min_length=1, description="Storage root directory")
    visibility: Visibility = Field(Visibility.PUBLIC, description="Default file visibility")
    directory_visibility: Visibility = Field(Visibility.PUBLIC, description="Default directory visibility")
    case_sensitive: bool = Field(True, description="Case-sensitive extension matching")
    recursive: bool = Field(False, description="List recursively by default")
    create_base_path: bool = Field(True, description="Create the base directory if missing")

    @field_validator('base_path')
    @classmethod
    def validate_base_path(cls, v: str) -> str:
        """Expand the user directory and resolve the base path."""
        if not v or not v.strip():
            raise ValueError("Base path cannot be empty")
        return str(Path(v.strip()).expanduser().resolve())

    @field_validator('visibility', 'directory_visibility', mode='before')
    @classmethod
    def validate_visibility(cls, v) -> Visibility:
        """Validate and convert visibility strings to the enum."""
        if isinstance(v, str):
            try:
                return Visibility(v.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid visibility: {v}")
        return v

    def get_base_path(self) -> Path:
        return Path(self.base_path)

    def file_permissions(self, visibility: Optional[Visibility] = None) -> int:
        """Get the permission bits for a file of the given visibility."""
        return FILE_PERMISSIONS[visibility or self.visibility]

    def directory_permissions(self, visibility: Optional[Visibility] = None) -> int:
        """Get the permission bits for a directory of the given visibility."""
        return DIRECTORY_PERMISSIONS[visibility or self.directory_visibility]

    def validate_configuration(self) -> List[str]:
        """Validate the configuration against the filesystem and return any warnings."""
        warnings = []
        base = self.get_base_path()

        if base.exists() and not base.is_dir():
            warnings.append(f"Base path is not a directory: {base}")
        elif not base.exists() and not self.create_base_path:
            warnings.append(f"Base path does not exist and will not be created: {base}")

        if self.visibility is Visibility.PUBLIC and self.directory_visibility is Visibility.PRIVATE:
            warnings.append("Public files inside private directories will not be reachable by other users")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        data = self.model_dump()
        data['visibility'] = self.visibility.value
        data['directory_visibility'] = self.directory_visibility.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StorageConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        parts = [f"Base path: {self.base_path}"]
        parts.append(f"Visibility: {self.visibility.value}/{self.directory_visibility.value}")
        parts.append(f"Case sensitive: {self.case_sensitive}")
        parts.append(f"Recursive: {self.recursive}")

        return " | ".join(parts)


def validate_config_dict(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a configuration dictionary.

    Args:
        config_data: Dictionary containing configuration data

    Returns:
        Validated and normalized configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    known_keys = set(StorageConfig.model_fields)
    unknown = sorted(set(config_data) - known_keys)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    try:
        config = StorageConfig.model_validate(config_data)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed: {e}") from e

    return config.to_dict()
