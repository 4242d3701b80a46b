"""Shared fixtures for record store tests."""

from decimal import Decimal
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest

from record_store.core.cache import QueryCache
from record_store.domain.catalog.entities import CatalogEntry
from record_store.domain.catalog.enrichment import TracklistProvider
from record_store.domain.catalog.services import CatalogService
from record_store.domain.catalog.value_objects import RecordCategory, RecordFormat, Track
from record_store.domain.ordering.services import OrderFulfillmentService
from record_store.infrastructure.repositories import (
    InMemoryCatalogEntryRepository,
    InMemoryOrderRepository,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_entry(
    artist: str = "The Beatles",
    album: str = "Abbey Road",
    price: str = "25",
    quantity: int = 10,
    record_format: RecordFormat = RecordFormat.VINYL,
    category: RecordCategory = RecordCategory.ROCK,
    mbid: Optional[str] = None,
    tracklist: Optional[List[Track]] = None,
) -> CatalogEntry:
    return CatalogEntry(
        artist=artist,
        album=album,
        price=Decimal(price),
        quantity=quantity,
        format=record_format,
        category=category,
        mbid=mbid,
        tracklist=tracklist or [],
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return QueryCache(ttl_seconds=60, max_entries=100, clock=clock)


@pytest.fixture
def catalog_repo():
    return InMemoryCatalogEntryRepository()


@pytest.fixture
def order_repo():
    return InMemoryOrderRepository()


@pytest.fixture
def tracklist_provider():
    provider = AsyncMock(spec=TracklistProvider)
    provider.fetch_tracklist.return_value = [
        Track(title="Come Together", position=1, duration_seconds=259),
        Track(title="Something", position=2, duration_seconds=182),
    ]
    return provider


@pytest.fixture
def catalog_service(catalog_repo, cache, tracklist_provider):
    return CatalogService(catalog_repo, cache, tracklist_provider)


@pytest.fixture
def order_service(catalog_repo, order_repo, cache):
    return OrderFulfillmentService(catalog_repo, order_repo, cache=cache)
