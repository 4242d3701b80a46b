"""Catalog Context Domain Services.

The CatalogService is the only writer of catalog entries. Reads go through
the injected QueryCache; every successful write clears the whole cache,
because a single changed entry can appear under any number of
filter/pagination keys.
"""

import asyncio
import json
import logging
from typing import Any, Mapping, Optional

from ...core.cache import QueryCache
from ...exceptions import NotFoundError
from ..pagination import Page, PageRequest
from ..value_objects import require_valid_id, utc_now
from .enrichment import TracklistProvider
from .entities import SORTABLE_FIELDS, CatalogEntry, validate_fields
from .filters import CatalogCriteria, build_filter
from .repositories import CatalogEntryRepository

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "records"


class CatalogService:
    """Service for creating, changing and querying catalog entries."""

    def __init__(
        self,
        catalog_repo: CatalogEntryRepository,
        cache: QueryCache,
        tracklist_provider: TracklistProvider,
        cache_ttl_seconds: Optional[float] = None,
    ):
        self.catalog_repo = catalog_repo
        self.cache = cache
        self.tracklist_provider = tracklist_provider
        self.cache_ttl_seconds = cache_ttl_seconds

    @staticmethod
    def entry_cache_key(entry_id: str) -> str:
        return f"{CACHE_KEY_PREFIX}:id:{entry_id}"

    @staticmethod
    def query_cache_key(criteria: CatalogCriteria, page_request: PageRequest) -> str:
        payload = {"filters": criteria.to_dict(), "pagination": page_request.to_dict()}
        return f"{CACHE_KEY_PREFIX}:{json.dumps(payload, sort_keys=True)}"

    async def _invalidate_cache(self) -> None:
        await self.cache.clear()

    async def create_entry(self, fields: Mapping[str, Any]) -> CatalogEntry:
        """Create a catalog entry, fetching its tracklist when an MBID is given.

        Raises:
            ValidationError: If a field is missing, unknown or out of range.
            ConflictError: If (artist, album, format) already exists.
        """
        values = validate_fields(fields, partial=False)

        tracklist = []
        if values.get("mbid"):
            tracklist = await self.tracklist_provider.fetch_tracklist(values["mbid"])

        now = utc_now()
        entry = CatalogEntry(**values, tracklist=tracklist, created=now, last_modified=now)
        entry = await self.catalog_repo.insert(entry)

        await self._invalidate_cache()
        logger.info(f"Catalog entry created: {entry.id} ({entry.get_display_name()})")
        return entry

    async def update_entry(self, entry_id: str, fields: Mapping[str, Any]) -> CatalogEntry:
        """Apply a partial update.

        A new, different MBID replaces the tracklist wholesale with a fresh
        fetch. ``last_modified`` is stamped on every update.

        Raises:
            InvalidReferenceError: If ``entry_id`` is malformed.
            NotFoundError: If the entry does not exist.
            ValidationError: If a field is unknown or out of range.
            ConflictError: If the change collides with another entry.
        """
        entry_id = require_valid_id(entry_id, "record")
        changes = validate_fields(fields, partial=True)

        current = await self.catalog_repo.get_by_id(entry_id)
        if current is None:
            raise NotFoundError("record", entry_id)

        new_mbid = changes.get("mbid")
        if new_mbid and new_mbid != current.mbid:
            changes["tracklist"] = await self.tracklist_provider.fetch_tracklist(new_mbid)

        changes["last_modified"] = utc_now()

        updated = await self.catalog_repo.update_by_id(entry_id, changes)
        if updated is None:
            raise NotFoundError("record", entry_id)

        await self._invalidate_cache()
        logger.info(f"Catalog entry updated: {entry_id} ({', '.join(sorted(fields)) or 'touch'})")
        return updated

    async def delete_entry(self, entry_id: str) -> None:
        """Delete an entry.

        Raises:
            InvalidReferenceError: If ``entry_id`` is malformed.
            NotFoundError: If the entry does not exist.
        """
        entry_id = require_valid_id(entry_id, "record")
        deleted = await self.catalog_repo.delete_by_id(entry_id)
        if deleted is None:
            raise NotFoundError("record", entry_id)

        await self._invalidate_cache()
        logger.info(f"Catalog entry deleted: {entry_id}")

    async def get_entry(self, entry_id: str) -> CatalogEntry:
        """Get one entry, from cache when possible.

        Raises:
            InvalidReferenceError: If ``entry_id`` is malformed.
            NotFoundError: If the entry does not exist.
        """
        entry_id = require_valid_id(entry_id, "record")
        cache_key = self.entry_cache_key(entry_id)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            return cached

        generation = self.cache.generation
        entry = await self.catalog_repo.get_by_id(entry_id)
        if entry is None:
            raise NotFoundError("record", entry_id)

        await self.cache.set(cache_key, entry, self.cache_ttl_seconds, generation=generation)
        return entry

    async def find_entries(
        self,
        criteria: Optional[CatalogCriteria] = None,
        page_request: Optional[PageRequest] = None,
    ) -> Page[CatalogEntry]:
        """Search the catalog, from cache when possible.

        Raises:
            ValidationError: If the sort field is not one of created, artist,
                album, price, category or format.
        """
        criteria = criteria or CatalogCriteria()
        page_request = page_request or PageRequest()
        sort = page_request.sort(SORTABLE_FIELDS)

        cache_key = self.query_cache_key(criteria, page_request)
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return cached

        generation = self.cache.generation
        filter_expr = build_filter(criteria)
        data, total = await asyncio.gather(
            self.catalog_repo.find(filter_expr, sort, page_request.skip, page_request.limit),
            self.catalog_repo.count(filter_expr),
        )

        result = Page.build(data, total, page_request)
        await self.cache.set(cache_key, result, self.cache_ttl_seconds, generation=generation)
        return result
