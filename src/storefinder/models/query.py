"""
Finder query data model for storefinder.

The FinderQuery holds the configuration a Finder accumulates through its
chained setters: where to look, which entry type to keep, extension allow
and deny lists, size and date expressions, and the requested sort order.
"""

from typing import Dict, List, Optional, Any, Union
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .entry import EntryKind


class SortKey(Enum):
    """Keys a result collection can be sorted by."""
    DATE = "date"
    SIZE = "size"
    EXTENSION = "extension"
    NAME = "name"


class FinderQuery(BaseModel):
    """
    Mutable configuration of a single Finder.

    Attributes:
        root_path: Storage path to enumerate ('' is the storage root)
        recursive: Whether to list recursively (None uses the storage default)
        entry_type: Keep only files or only directories (None keeps both)
        only_extensions: Extensions to keep (empty keeps all)
        except_extensions: Extensions to drop
        size_expressions: Size expressions, all of which must hold
        date_expressions: Date expressions, all of which must hold
        sort_key: Key to sort the materialized result by
        sort_descending: Whether the sort is descending
    """

    model_config = ConfigDict(validate_assignment=True)

    root_path: str = Field("", description="Storage path to enumerate")
    recursive: Optional[bool] = Field(None, description="List recursively")
    entry_type: Optional[EntryKind] = Field(None, description="Entry type restriction")
    only_extensions: List[str] = Field(default_factory=list, description="Extensions to keep")
    except_extensions: List[str] = Field(default_factory=list, description="Extensions to drop")
    size_expressions: List[str] = Field(default_factory=list, description="Size expressions")
    date_expressions: List[str] = Field(default_factory=list, description="Date expressions")
    sort_key: Optional[SortKey] = Field(None, description="Sort key")
    sort_descending: bool = Field(False, description="Descending sort")

    @field_validator('root_path')
    @classmethod
    def validate_root_path(cls, v: str) -> str:
        """Normalize separators and strip surrounding slashes."""
        return v.strip().replace('\\', '/').strip('/')

    @field_validator('only_extensions', 'except_extensions', mode='before')
    @classmethod
    def validate_extensions(cls, v: Union[str, List[str]]) -> List[str]:
        """Accept a single extension or a list, dropping one leading dot."""
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            raise ValueError(f"Extensions must be a string or a list, got {type(v).__name__}")
        normalized = []
        for ext in v:
            if not isinstance(ext, str):
                raise ValueError(f"Extension must be a string, got {type(ext).__name__}")
            ext = ext.strip()
            if ext.startswith('.'):
                ext = ext[1:]
            if ext not in normalized:
                normalized.append(ext)
        return normalized

    @field_validator('size_expressions', 'date_expressions', mode='before')
    @classmethod
    def validate_expressions(cls, v: Union[str, List[str]]) -> List[str]:
        """Accept a single expression or a list of expressions."""
        if isinstance(v, str):
            return [v]
        if not isinstance(v, (list, tuple)):
            raise ValueError(f"Expressions must be a string or a list, got {type(v).__name__}")
        return list(v)

    def has_filters(self) -> bool:
        """Check if any filter beyond the path is configured."""
        return bool(
            self.entry_type
            or self.only_extensions
            or self.except_extensions
            or self.size_expressions
            or self.date_expressions
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the query to a dictionary representation."""
        data = self.model_dump()
        data['entry_type'] = self.entry_type.value if self.entry_type else None
        data['sort_key'] = self.sort_key.value if self.sort_key else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FinderQuery':
        """Create a FinderQuery from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        parts = [f"Path: '{self.root_path or '/'}'"]

        if self.entry_type:
            parts.append(f"Type: {self.entry_type.value}")
        if self.only_extensions:
            parts.append(f"Only: {', '.join(self.only_extensions)}")
        if self.except_extensions:
            parts.append(f"Except: {', '.join(self.except_extensions)}")
        if self.date_expressions:
            parts.append(f"Date: {' AND '.join(self.date_expressions)}")
        if self.size_expressions:
            parts.append(f"Size: {' AND '.join(self.size_expressions)}")
        if self.sort_key:
            direction = "desc" if self.sort_descending else "asc"
            parts.append(f"Sort: {self.sort_key.value} {direction}")

        return " | ".join(parts)
