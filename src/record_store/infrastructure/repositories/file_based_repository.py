"""
File-based Repository Implementations.

This module provides file-based repository implementations for persistence
using JSON files for storage. Each store keeps its documents in memory and
rewrites its file after every write, under the same lock that makes the
write atomic.
"""

import json
import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List
from concurrent.futures import ThreadPoolExecutor

from ...domain.catalog.entities import CatalogEntry
from ...domain.ordering.entities import Order
from ...exceptions import StorageError
from .catalog_repository import InMemoryCatalogEntryRepository
from .order_repository import InMemoryOrderRepository

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=2)


class JsonDocumentFile:
    """A JSON file holding a list of documents, read and written off the event loop."""

    def __init__(self, path: Path):
        self.path = Path(path)

    async def read(self) -> List[Dict[str, Any]]:
        def _load():
            if not self.path.exists():
                return []
            with open(self.path, 'r') as f:
                return json.load(f)

        loop = asyncio.get_running_loop()
        try:
            documents = await loop.run_in_executor(_executor, _load)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(documents, list):
            raise StorageError(f"Expected a list of documents in {self.path}")
        return documents

    async def write(self, documents: List[Dict[str, Any]]) -> None:
        def _save():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, 'w') as f:
                json.dump(documents, f, indent=2)
            os.replace(tmp_path, self.path)

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(_executor, _save)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e


async def _decode(file: JsonDocumentFile, from_dict: Callable[[Dict[str, Any]], Any]) -> List[Any]:
    documents = await file.read()
    try:
        return [from_dict(document) for document in documents]
    except (KeyError, TypeError, ValueError, ArithmeticError) as e:
        raise StorageError(f"Corrupt document in {file.path}: {e}") from e


class FileBasedCatalogEntryRepository(InMemoryCatalogEntryRepository):
    """Catalog store persisted to ``<storage_dir>/records.json``."""

    def __init__(self, storage_dir: Path):
        super().__init__()
        self.storage_dir = Path(storage_dir)
        self._file = JsonDocumentFile(self.storage_dir / "records.json")
        self._loaded = False
        self._load_lock = asyncio.Lock()

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            self._load_entries(await _decode(self._file, CatalogEntry.from_dict))
            self._loaded = True
            logger.debug(f"Loaded {len(self._entries)} records from {self._file.path}")

    async def _persist(self) -> None:
        try:
            await self._file.write([entry.to_dict() for entry in self._entries.values()])
        except StorageError:
            # Memory is ahead of disk now; reload from disk on next access.
            self._loaded = False
            raise


class FileBasedOrderRepository(InMemoryOrderRepository):
    """Order store persisted to ``<storage_dir>/orders.json``."""

    def __init__(self, storage_dir: Path):
        super().__init__()
        self.storage_dir = Path(storage_dir)
        self._file = JsonDocumentFile(self.storage_dir / "orders.json")
        self._loaded = False
        self._load_lock = asyncio.Lock()

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            self._load_orders(await _decode(self._file, Order.from_dict))
            self._loaded = True
            logger.debug(f"Loaded {len(self._orders)} orders from {self._file.path}")

    async def _persist(self) -> None:
        try:
            await self._file.write([order.to_dict() for order in self._orders.values()])
        except StorageError:
            self._loaded = False
            raise
