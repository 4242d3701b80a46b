"""
Catalog Repository Implementations.

This module provides the in-memory catalog store used for testing and
development, and as the base of the file-backed store.
"""

import asyncio
import copy
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ...domain.catalog.entities import CatalogEntry
from ...domain.catalog.filters import CatalogFilter
from ...domain.catalog.repositories import CatalogEntryRepository
from ...domain.pagination import Sort
from ...exceptions import ConflictError, InsufficientStockError, NotFoundError, ValidationError


def sort_value(document: Any, key: str) -> Any:
    """Comparable value of ``document.key``; enums sort by their value."""
    value = getattr(document, key)
    if isinstance(value, Enum):
        return value.value
    return value


def sort_documents(documents: Iterable[Any], sort: Sort) -> List[Any]:
    """Stable sort on one field; ties keep insertion order."""
    return sorted(documents, key=lambda d: sort_value(d, sort.key), reverse=sort.descending)


class InMemoryCatalogEntryRepository(CatalogEntryRepository):
    """In-memory implementation of CatalogEntryRepository.

    Entries are copied in and out so callers never hold a live reference to
    stored state. All writes run under one asyncio lock.
    """

    def __init__(self):
        self._entries: Dict[str, CatalogEntry] = {}
        self._identity_index: Dict[Tuple[Any, ...], str] = {}  # (artist, album, format) -> ID
        self._lock = asyncio.Lock()

    async def _ensure_loaded(self) -> None:
        """Hook for stores that load lazily."""

    async def _persist(self) -> None:
        """Hook called after every successful write, inside the write lock."""

    def _check_identity(self, entry: CatalogEntry) -> None:
        owner = self._identity_index.get(entry.identity_key)
        if owner is not None and owner != entry.id:
            raise ConflictError(
                f'A {entry.format.value} record "{entry.album}" by {entry.artist} already exists'
            )

    def _load_entries(self, entries: Iterable[CatalogEntry]) -> None:
        self._entries = {}
        self._identity_index = {}
        for entry in entries:
            self._entries[entry.id] = entry
            self._identity_index[entry.identity_key] = entry.id

    async def insert(self, entry: CatalogEntry) -> CatalogEntry:
        """Insert a new entry."""
        await self._ensure_loaded()
        async with self._lock:
            if entry.id in self._entries:
                raise ConflictError(f"Record {entry.id} already exists")
            self._check_identity(entry)

            stored = copy.deepcopy(entry)
            self._entries[stored.id] = stored
            self._identity_index[stored.identity_key] = stored.id
            await self._persist()
            return copy.deepcopy(stored)

    async def get_by_id(self, entry_id: str) -> Optional[CatalogEntry]:
        """Find an entry by its ID."""
        await self._ensure_loaded()
        entry = self._entries.get(entry_id)
        return copy.deepcopy(entry) if entry else None

    async def update_by_id(self, entry_id: str, changes: Dict[str, Any]) -> Optional[CatalogEntry]:
        """Apply changes to an entry."""
        await self._ensure_loaded()
        async with self._lock:
            current = self._entries.get(entry_id)
            if current is None:
                return None

            updated = current.with_changes(copy.deepcopy(changes))
            self._check_identity(updated)

            del self._identity_index[current.identity_key]
            self._identity_index[updated.identity_key] = entry_id
            self._entries[entry_id] = updated
            await self._persist()
            return copy.deepcopy(updated)

    async def delete_by_id(self, entry_id: str) -> Optional[CatalogEntry]:
        """Delete an entry."""
        await self._ensure_loaded()
        async with self._lock:
            entry = self._entries.pop(entry_id, None)
            if entry is None:
                return None
            self._identity_index.pop(entry.identity_key, None)
            await self._persist()
            return entry

    async def find(self, filter_expr: CatalogFilter, sort: Sort, skip: int, limit: int) -> List[CatalogEntry]:
        """Find matching entries in sort order."""
        await self._ensure_loaded()
        matching = [e for e in self._entries.values() if filter_expr.matches(e)]
        page = sort_documents(matching, sort)[skip:skip + limit]
        return copy.deepcopy(page)

    async def count(self, filter_expr: CatalogFilter) -> int:
        """Count matching entries."""
        await self._ensure_loaded()
        return sum(1 for e in self._entries.values() if filter_expr.matches(e))

    async def increment(self, entry_id: str, field_name: str, delta: int, floor: Optional[int] = None) -> None:
        """Atomically add ``delta`` to an integer field."""
        await self._ensure_loaded()
        async with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                raise NotFoundError("record", entry_id)

            current = getattr(entry, field_name, None)
            if isinstance(current, bool) or not isinstance(current, int):
                raise ValidationError(f"Cannot increment non-integer field {field_name!r}")

            new_value = current + delta
            if floor is not None and new_value < floor:
                raise InsufficientStockError(
                    artist=entry.artist,
                    album=entry.album,
                    available=current,
                    requested=-delta,
                )

            self._entries[entry_id] = entry.with_changes({field_name: new_value})
            await self._persist()
