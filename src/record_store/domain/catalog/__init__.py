"""
Catalog Context - Managing the records on sale.

This bounded context is responsible for:
- Creating, changing and removing catalog entries
- Searching the catalog through the query cache
- Enriching entries with tracklists from MusicBrainz
"""

from .entities import CatalogEntry, validate_fields
from .value_objects import RecordFormat, RecordCategory, Track, parse_enum
from .filters import CatalogCriteria, CatalogFilter, build_filter
from .enrichment import TracklistProvider, NullTracklistProvider
from .repositories import CatalogEntryRepository
from .services import CatalogService

__all__ = [
    # Entities
    "CatalogEntry",
    # Value Objects
    "RecordFormat",
    "RecordCategory",
    "Track",
    "parse_enum",
    "validate_fields",
    # Filters
    "CatalogCriteria",
    "CatalogFilter",
    "build_filter",
    # Enrichment
    "TracklistProvider",
    "NullTracklistProvider",
    # Repositories
    "CatalogEntryRepository",
    # Services
    "CatalogService",
]
