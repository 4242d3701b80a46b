"""Catalog search criteria and the filter expressions stores evaluate.

Search criteria arrive as a flat ``CatalogCriteria``; ``build_filter`` turns
them into a small clause tree:

    CatalogFilter(all of)
      AnyOf(Contains(artist), Contains(album), Contains(category))   # query
      Contains(artist)                                               # artist
      Contains(album)                                                # album
      Equals(format)                                                 # format
      Equals(category)                                               # category

Stores evaluate the tree with ``matches``; nothing is ever rendered into a
query string.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from ...exceptions import ValidationError
from .entities import CatalogEntry
from .value_objects import RecordCategory, RecordFormat, parse_enum


def _field_text(entry: CatalogEntry, name: str) -> str:
    value = getattr(entry, name)
    if isinstance(value, Enum):
        value = value.value
    return str(value)


@dataclass(frozen=True, slots=True)
class Contains:
    """Case-insensitive substring match on one field."""
    field_name: str
    needle: str

    def matches(self, entry: CatalogEntry) -> bool:
        return self.needle.lower() in _field_text(entry, self.field_name).lower()


@dataclass(frozen=True, slots=True)
class Equals:
    """Exact match on one field."""
    field_name: str
    value: Any

    def matches(self, entry: CatalogEntry) -> bool:
        return getattr(entry, self.field_name) == self.value


@dataclass(frozen=True, slots=True)
class AnyOf:
    """Logical OR over nested clauses."""
    clauses: Tuple["Clause", ...]

    def matches(self, entry: CatalogEntry) -> bool:
        return any(clause.matches(entry) for clause in self.clauses)


Clause = Union[Contains, Equals, AnyOf]


@dataclass(frozen=True, slots=True)
class CatalogFilter:
    """Logical AND over top-level clauses; an empty filter matches everything."""
    clauses: Tuple[Clause, ...] = ()

    def matches(self, entry: CatalogEntry) -> bool:
        return all(clause.matches(entry) for clause in self.clauses)

    @property
    def is_empty(self) -> bool:
        return not self.clauses


MATCH_ALL = CatalogFilter()


@dataclass(frozen=True, slots=True)
class CatalogCriteria:
    """Caller-facing search criteria; blank strings count as absent."""

    query: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    format: Optional[RecordFormat] = None
    category: Optional[RecordCategory] = None

    def __post_init__(self) -> None:
        for name in ("query", "artist", "album"):
            value = getattr(self, name)
            if value is None:
                continue
            if not isinstance(value, str):
                raise ValidationError(f"{name} must be a string, got {value!r}")
            if not value.strip():
                object.__setattr__(self, name, None)
        if self.format is not None:
            object.__setattr__(self, "format", parse_enum(RecordFormat, self.format))
        if self.category is not None:
            object.__setattr__(self, "category", parse_enum(RecordCategory, self.category))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "artist": self.artist,
            "album": self.album,
            "format": self.format.value if self.format else None,
            "category": self.category.value if self.category else None,
        }


def build_filter(criteria: CatalogCriteria) -> CatalogFilter:
    """Translate search criteria into a filter expression."""
    clauses = []

    if criteria.query:
        clauses.append(AnyOf((
            Contains("artist", criteria.query),
            Contains("album", criteria.query),
            Contains("category", criteria.query),
        )))

    if criteria.artist:
        clauses.append(Contains("artist", criteria.artist))

    if criteria.album:
        clauses.append(Contains("album", criteria.album))

    if criteria.format:
        clauses.append(Equals("format", criteria.format))

    if criteria.category:
        clauses.append(Equals("category", criteria.category))

    return CatalogFilter(tuple(clauses))
