"""Catalog Context Repository Interfaces.

This module defines the storage contract for catalog entries.
Implementations live in ``infrastructure.repositories``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..pagination import Sort
from .entities import CatalogEntry
from .filters import CatalogFilter


class CatalogEntryRepository(ABC):
    """Repository for CatalogEntry documents."""

    @abstractmethod
    async def insert(self, entry: CatalogEntry) -> CatalogEntry:
        """Insert a new entry.

        Raises:
            ConflictError: If another entry has the same (artist, album, format).
        """
        pass

    @abstractmethod
    async def get_by_id(self, entry_id: str) -> Optional[CatalogEntry]:
        """Find an entry by its ID."""
        pass

    @abstractmethod
    async def update_by_id(self, entry_id: str, changes: Dict[str, Any]) -> Optional[CatalogEntry]:
        """Apply ``changes`` and return the updated entry, or None if absent.

        Raises:
            ConflictError: If the change collides with another entry's identity.
        """
        pass

    @abstractmethod
    async def delete_by_id(self, entry_id: str) -> Optional[CatalogEntry]:
        """Delete an entry and return it, or None if absent."""
        pass

    @abstractmethod
    async def find(self, filter_expr: CatalogFilter, sort: Sort, skip: int, limit: int) -> List[CatalogEntry]:
        """Find entries matching ``filter_expr`` in ``sort`` order."""
        pass

    @abstractmethod
    async def count(self, filter_expr: CatalogFilter) -> int:
        """Count entries matching ``filter_expr``."""
        pass

    @abstractmethod
    async def increment(self, entry_id: str, field_name: str, delta: int, floor: Optional[int] = None) -> None:
        """Atomically add ``delta`` to an integer field.

        The read and write happen as one indivisible step. With ``floor`` set,
        a change that would leave the field below it is refused.

        Raises:
            NotFoundError: If the entry does not exist.
            InsufficientStockError: If ``floor`` would be crossed.
        """
        pass
