"""Ordering Context Repository Interfaces."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..pagination import Sort
from .entities import Order


class OrderRepository(ABC):
    """Repository for Order documents."""

    @abstractmethod
    async def insert(self, order: Order) -> Order:
        """Persist a new order."""
        pass

    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        """Find an order by its ID."""
        pass

    @abstractmethod
    async def find(self, sort: Sort, skip: int, limit: int) -> List[Order]:
        """Find orders in ``sort`` order."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Get total count of orders."""
        pass
