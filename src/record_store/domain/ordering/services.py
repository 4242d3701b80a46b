"""Ordering Context Domain Services.

Order placement runs in two passes over the requested lines:

1. Validation: resolve each catalog entry, check stock and snapshot the
   price. Nothing is written; any failure aborts the whole order.
2. Commit: atomically decrement each entry's stock through the store, then
   persist the order.

The bundled stores have no multi-document transactions, so a failure in the
commit pass after some decrements leaves that stock reduced without an order.
That case is logged at ERROR level and the error propagates.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ...core.cache import QueryCache
from ...exceptions import InsufficientStockError, NotFoundError, ValidationError
from ..catalog.entities import CatalogEntry
from ..catalog.repositories import CatalogEntryRepository
from ..pagination import Page, PageRequest
from ..value_objects import require_valid_id
from .entities import SORTABLE_FIELDS, Order, OrderLine, OrderLineRequest
from .repositories import OrderRepository

logger = logging.getLogger(__name__)

LineInput = Union[OrderLineRequest, Mapping[str, Any]]


class OrderFulfillmentService:
    """Places orders against catalog stock and reads them back."""

    def __init__(
        self,
        catalog_repo: CatalogEntryRepository,
        order_repo: OrderRepository,
        cache: Optional[QueryCache] = None,
    ):
        self.catalog_repo = catalog_repo
        self.order_repo = order_repo
        # Catalog reads are cached elsewhere; stock changes here must clear them.
        self.cache = cache

    async def create_order(self, lines: Sequence[LineInput]) -> Order:
        """Validate every line, decrement stock, then persist a PENDING order.

        Raises:
            ValidationError: If ``lines`` is empty or a quantity is not >= 1.
            InvalidReferenceError: If a catalog entry ID is malformed.
            NotFoundError: If a catalog entry does not exist.
            InsufficientStockError: If a line asks for more than is on hand.
        """
        if not lines:
            raise ValidationError("An order needs at least one line")

        requests = [OrderLineRequest.coerce(line) for line in lines]
        order = Order.place(await self._validate(requests))
        await self._commit(order)

        logger.info(
            f"Order {order.id} placed: {len(order.lines)} lines, "
            f"{order.item_count} items, total {order.total_amount}"
        )
        return order

    async def _validate(self, requests: List[OrderLineRequest]) -> List[OrderLine]:
        """Resolve entries and check stock without writing anything."""
        entries: Dict[str, CatalogEntry] = {}
        # Units already claimed by earlier lines of this order, per entry.
        claimed: Dict[str, int] = {}
        order_lines: List[OrderLine] = []

        for request in requests:
            entry_id = require_valid_id(request.catalog_entry_id, "record")

            entry = entries.get(entry_id)
            if entry is None:
                entry = await self.catalog_repo.get_by_id(entry_id)
                if entry is None:
                    raise NotFoundError("record", entry_id)
                entries[entry_id] = entry

            available = entry.quantity - claimed.get(entry_id, 0)
            if available < request.quantity:
                raise InsufficientStockError(
                    artist=entry.artist,
                    album=entry.album,
                    available=available,
                    requested=request.quantity,
                )

            claimed[entry_id] = claimed.get(entry_id, 0) + request.quantity
            order_lines.append(OrderLine(
                catalog_entry_id=entry_id,
                quantity=request.quantity,
                price_at_time=entry.price,
            ))

        return order_lines

    async def _commit(self, order: Order) -> None:
        """Apply stock decrements line by line, then insert the order."""
        decremented = 0
        try:
            for line in order.lines:
                await self.catalog_repo.increment(
                    line.catalog_entry_id, "quantity", -line.quantity, floor=0
                )
                decremented += 1
            await self.order_repo.insert(order)
        except Exception as e:
            if decremented:
                logger.error(
                    f"Partial order commit: order {order.id} failed after decrementing "
                    f"stock for {decremented} of {len(order.lines)} lines; decrements were "
                    f"not restored: {e}"
                )
            raise
        finally:
            # Any applied decrement is a catalog write, even when the order fails.
            if decremented and self.cache is not None:
                await self.cache.clear()

    async def get_order(self, order_id: str) -> Order:
        """Get an order by ID.

        Raises:
            InvalidReferenceError: If ``order_id`` is malformed.
            NotFoundError: If no such order exists.
        """
        order_id = require_valid_id(order_id, "order")
        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError("order", order_id)
        return order

    async def list_orders(self, page_request: Optional[PageRequest] = None) -> Page[Order]:
        """List orders, newest first unless asked otherwise."""
        page_request = page_request or PageRequest()
        sort = page_request.sort(SORTABLE_FIELDS)

        data = await self.order_repo.find(sort, page_request.skip, page_request.limit)
        total = await self.order_repo.count()
        return Page.build(data, total, page_request)
