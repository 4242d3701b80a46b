"""
Repository Implementations - Infrastructure Layer

This package contains repository implementations for data access,
following the Repository pattern from Domain-Driven Design.
"""

from .catalog_repository import InMemoryCatalogEntryRepository
from .order_repository import InMemoryOrderRepository
from .file_based_repository import FileBasedCatalogEntryRepository, FileBasedOrderRepository

__all__ = [
    "InMemoryCatalogEntryRepository",
    "InMemoryOrderRepository",
    "FileBasedCatalogEntryRepository",
    "FileBasedOrderRepository",
]
