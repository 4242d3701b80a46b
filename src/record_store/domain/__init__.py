"""
Domain Layer - Record Store

Bounded Contexts:
- Catalog: the records on sale, their stock and tracklists
- Ordering: orders placed against catalog stock
"""

from .pagination import Page, PageRequest, Sort, SortOrder
from .value_objects import is_valid_id, new_id

__all__ = [
    "Page",
    "PageRequest",
    "Sort",
    "SortOrder",
    "is_valid_id",
    "new_id",
]
