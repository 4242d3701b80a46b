"""Record Store

A catalog-and-ordering backend for a record shop: a cached, searchable
catalog of records and an order workflow that reserves stock.
"""

__version__ = "0.1.0"

from .application import RecordStoreApp, create_app
from .core.cache import QueryCache
from .domain.catalog import (
    CatalogCriteria,
    CatalogEntry,
    CatalogService,
    RecordCategory,
    RecordFormat,
    Track,
)
from .domain.ordering import (
    Order,
    OrderFulfillmentService,
    OrderLine,
    OrderLineRequest,
    OrderStatus,
)
from .domain.pagination import Page, PageRequest, SortOrder
from .exceptions import (
    ConflictError,
    InsufficientStockError,
    InvalidReferenceError,
    NotFoundError,
    RecordStoreError,
    ValidationError,
)
from .models.config import Config

__all__ = [
    # Application
    "RecordStoreApp",
    "create_app",
    "Config",
    "QueryCache",

    # Catalog
    "CatalogCriteria",
    "CatalogEntry",
    "CatalogService",
    "RecordCategory",
    "RecordFormat",
    "Track",

    # Ordering
    "Order",
    "OrderFulfillmentService",
    "OrderLine",
    "OrderLineRequest",
    "OrderStatus",

    # Pagination
    "Page",
    "PageRequest",
    "SortOrder",

    # Errors
    "RecordStoreError",
    "ValidationError",
    "InvalidReferenceError",
    "NotFoundError",
    "InsufficientStockError",
    "ConflictError",
]
