"""Pagination and sorting value objects shared by catalog and order listings."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Generic, List, Optional, TypeVar

from ..exceptions import ValidationError

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class SortOrder(Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class Sort:
    """A single-field sort understood by the stores."""
    key: str
    order: SortOrder = SortOrder.DESC

    @property
    def descending(self) -> bool:
        return self.order is SortOrder.DESC


@dataclass(frozen=True, slots=True)
class PageRequest:
    """Requested page, page size and ordering.

    ``page_size`` above ``max_page_size`` is capped rather than rejected.
    """

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort_by: str = "created"
    sort_order: SortOrder = SortOrder.DESC
    max_page_size: int = field(default=MAX_PAGE_SIZE, compare=False, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 1:
            raise ValidationError(f"page must be a positive integer, got {self.page!r}")
        if (isinstance(self.page_size, bool) or not isinstance(self.page_size, int)
                or self.page_size < 1):
            raise ValidationError(
                f"page_size must be a positive integer, got {self.page_size!r}"
            )
        if self.page_size > self.max_page_size:
            object.__setattr__(self, "page_size", self.max_page_size)
        if not isinstance(self.sort_order, SortOrder):
            try:
                object.__setattr__(self, "sort_order", SortOrder(str(self.sort_order).lower()))
            except ValueError:
                raise ValidationError(
                    f"sort_order must be 'asc' or 'desc', got {self.sort_order!r}"
                )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    def sort(self, allowed_fields: FrozenSet[str]) -> Sort:
        """Resolve the sort, rejecting fields outside ``allowed_fields``."""
        if self.sort_by not in allowed_fields:
            raise ValidationError(
                f"Cannot sort by {self.sort_by!r}; "
                f"allowed fields: {', '.join(sorted(allowed_fields))}"
            )
        return Sort(self.sort_by, self.sort_order)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "page_size": self.page_size,
            "sort_by": self.sort_by,
            "sort_order": self.sort_order.value,
        }


@dataclass(slots=True)
class Page(Generic[T]):
    """One page of a listing together with the totals needed to navigate it."""

    data: List[T]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(cls, data: List[T], total: int, request: PageRequest) -> "Page[T]":
        return cls(
            data=data,
            total=total,
            page=request.page,
            page_size=request.page_size,
            total_pages=math.ceil(total / request.page_size),
        )

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def to_dict(self, item_serializer: Optional[Any] = None) -> Dict[str, Any]:
        serialize = item_serializer or (lambda item: item.to_dict())
        return {
            "data": [serialize(item) for item in self.data],
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }
