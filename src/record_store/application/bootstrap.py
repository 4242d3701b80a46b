"""Assemble the record store services from a Config."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.cache import QueryCache
from ..domain.catalog.enrichment import NullTracklistProvider, TracklistProvider
from ..domain.catalog.repositories import CatalogEntryRepository
from ..domain.catalog.services import CatalogService
from ..domain.ordering.repositories import OrderRepository
from ..domain.ordering.services import OrderFulfillmentService
from ..domain.pagination import PageRequest
from ..infrastructure.external.musicbrainz_adapter import MusicBrainzAdapter
from ..infrastructure.repositories import (
    FileBasedCatalogEntryRepository,
    FileBasedOrderRepository,
    InMemoryCatalogEntryRepository,
    InMemoryOrderRepository,
)
from ..models.config import Config

logger = logging.getLogger(__name__)


@dataclass
class RecordStoreApp:
    """Everything a caller needs to drive the catalog and ordering services."""

    config: Config
    catalog_repo: CatalogEntryRepository
    order_repo: OrderRepository
    cache: QueryCache
    tracklist_provider: TracklistProvider
    catalog: CatalogService
    orders: OrderFulfillmentService

    def page_request(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_by: str = "created",
        sort_order: str = "desc",
    ) -> PageRequest:
        """Build a PageRequest with the configured size defaults applied."""
        pagination = self.config.pagination
        return PageRequest(
            page=page,
            page_size=page_size or pagination.default_page_size,
            sort_by=sort_by,
            sort_order=sort_order,
            max_page_size=pagination.max_page_size,
        )


def create_app(
    config: Optional[Config] = None,
    in_memory: bool = False,
    data_directory: Optional[Path] = None,
    tracklist_provider: Optional[TracklistProvider] = None,
) -> RecordStoreApp:
    """Wire repositories, cache, enrichment and services together.

    Args:
        config: Configuration; defaults apply when omitted.
        in_memory: Use in-memory stores instead of JSON files.
        data_directory: Overrides ``config.storage.data_directory``.
        tracklist_provider: Overrides the provider chosen from config.
    """
    config = config or Config.default()
    config.validate()

    if in_memory:
        catalog_repo = InMemoryCatalogEntryRepository()
        order_repo = InMemoryOrderRepository()
    else:
        storage_dir = Path(data_directory or config.storage.data_directory)
        catalog_repo = FileBasedCatalogEntryRepository(storage_dir)
        order_repo = FileBasedOrderRepository(storage_dir)
        logger.debug(f"Using JSON document store in {storage_dir}")

    if tracklist_provider is None:
        mb = config.musicbrainz
        if mb.enabled:
            tracklist_provider = MusicBrainzAdapter(
                base_url=mb.base_url,
                user_agent=mb.user_agent,
                rate_limit=mb.rate_limit,
                timeout=mb.timeout,
            )
        else:
            tracklist_provider = NullTracklistProvider()

    cache = QueryCache(ttl_seconds=config.cache.ttl_seconds, max_entries=config.cache.max_entries)

    return RecordStoreApp(
        config=config,
        catalog_repo=catalog_repo,
        order_repo=order_repo,
        cache=cache,
        tracklist_provider=tracklist_provider,
        catalog=CatalogService(catalog_repo, cache, tracklist_provider),
        orders=OrderFulfillmentService(catalog_repo, order_repo, cache=cache),
    )
