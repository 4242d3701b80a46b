"""In-memory Order Repository."""

import asyncio
import copy
from typing import Dict, Iterable, List, Optional

from ...domain.ordering.entities import Order
from ...domain.ordering.repositories import OrderRepository
from ...domain.pagination import Sort
from ...exceptions import ConflictError
from .catalog_repository import sort_documents


class InMemoryOrderRepository(OrderRepository):
    """In-memory implementation of OrderRepository."""

    def __init__(self):
        self._orders: Dict[str, Order] = {}
        self._lock = asyncio.Lock()

    async def _ensure_loaded(self) -> None:
        """Hook for stores that load lazily."""

    async def _persist(self) -> None:
        """Hook called after every successful write, inside the write lock."""

    def _load_orders(self, orders: Iterable[Order]) -> None:
        self._orders = {order.id: order for order in orders}

    async def insert(self, order: Order) -> Order:
        """Persist a new order."""
        await self._ensure_loaded()
        async with self._lock:
            if order.id in self._orders:
                raise ConflictError(f"Order {order.id} already exists")
            self._orders[order.id] = copy.deepcopy(order)
            await self._persist()
            return copy.deepcopy(order)

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        """Find an order by its ID."""
        await self._ensure_loaded()
        order = self._orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def find(self, sort: Sort, skip: int, limit: int) -> List[Order]:
        """Find orders in sort order."""
        await self._ensure_loaded()
        page = sort_documents(self._orders.values(), sort)[skip:skip + limit]
        return copy.deepcopy(page)

    async def count(self) -> int:
        """Get total count of orders."""
        await self._ensure_loaded()
        return len(self._orders)
