"""Ordering Context Entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Union

from ...exceptions import ValidationError
from ..value_objects import new_id, parse_quantity, utc_now

SORTABLE_FIELDS = frozenset({"created", "total_amount", "status"})


class OrderStatus(Enum):
    """Lifecycle state of an order. Creation only ever yields PENDING."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class OrderLineRequest:
    """One requested line of a new order, before validation against stock."""

    catalog_entry_id: str
    quantity: int

    @classmethod
    def coerce(cls, line: Union["OrderLineRequest", Mapping[str, Any]]) -> "OrderLineRequest":
        """Accept either a request object or a mapping with the same keys."""
        if isinstance(line, cls):
            request = line
        elif isinstance(line, Mapping):
            try:
                request = cls(catalog_entry_id=line["catalog_entry_id"], quantity=line["quantity"])
            except KeyError as e:
                raise ValidationError(f"Order line is missing {e.args[0]!r}")
        else:
            raise ValidationError(f"Order line must be a mapping, got {type(line).__name__}")

        parse_quantity(request.quantity, minimum=1)
        return request


@dataclass(frozen=True, slots=True)
class OrderLine:
    """A validated order line with the price captured when it was ordered."""

    catalog_entry_id: str
    quantity: int
    price_at_time: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.price_at_time * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "catalog_entry_id": self.catalog_entry_id,
            "quantity": self.quantity,
            "price_at_time": str(self.price_at_time),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderLine":
        return cls(
            catalog_entry_id=data["catalog_entry_id"],
            quantity=int(data["quantity"]),
            price_at_time=Decimal(data["price_at_time"]),
        )


@dataclass(kw_only=True)
class Order:
    """
    A placed order.

    ``total_amount`` is computed from the lines when the order is created and
    is never changed afterwards.
    """

    id: str = field(default_factory=new_id)
    lines: List[OrderLine]
    total_amount: Decimal
    status: OrderStatus = OrderStatus.PENDING
    created: datetime = field(default_factory=utc_now)

    @classmethod
    def place(cls, lines: List[OrderLine]) -> "Order":
        """Create a PENDING order whose total is the sum of its line subtotals."""
        if not lines:
            raise ValidationError("An order needs at least one line")
        return cls(
            lines=list(lines),
            total_amount=sum((line.subtotal for line in lines), Decimal(0)),
        )

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "lines": [line.to_dict() for line in self.lines],
            "total_amount": str(self.total_amount),
            "status": self.status.value,
            "created": self.created.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            id=data["id"],
            lines=[OrderLine.from_dict(line) for line in data["lines"]],
            total_amount=Decimal(data["total_amount"]),
            status=OrderStatus(data["status"]),
            created=datetime.fromisoformat(data["created"]),
        )
