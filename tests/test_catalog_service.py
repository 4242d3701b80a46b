"""Tests for the catalog service and its cache behaviour."""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from record_store.domain.catalog.filters import CatalogCriteria
from record_store.domain.catalog.value_objects import RecordCategory, RecordFormat
from record_store.domain.pagination import PageRequest
from record_store.domain.value_objects import new_id
from record_store.exceptions import (
    ConflictError,
    InvalidReferenceError,
    NotFoundError,
    ValidationError,
)

ABBEY_ROAD = {
    "artist": "The Beatles",
    "album": "Abbey Road",
    "price": "25.00",
    "quantity": 10,
    "format": "Vinyl",
    "category": "Rock",
}


async def _seed(service):
    """Create a small mixed catalog and return the entries by album."""
    rows = [
        ("The Beatles", "Abbey Road", "25.00", "Vinyl", "Rock"),
        ("The Beatles", "Revolver", "22.00", "CD", "Rock"),
        ("Miles Davis", "Kind of Blue", "30.00", "Vinyl", "Jazz"),
        ("Radiohead", "OK Computer", "18.50", "CD", "Alternative"),
        ("Daft Punk", "Discovery", "21.00", "Digital", "Electronic"),
    ]
    entries = {}
    for artist, album, price, fmt, category in rows:
        entry = await service.create_entry({
            "artist": artist, "album": album, "price": price,
            "quantity": 5, "format": fmt, "category": category,
        })
        entries[album] = entry
    return entries


class TestCreateEntry:
    """Test creating catalog entries."""

    @pytest.mark.asyncio
    async def test_create_without_mbid_skips_enrichment(self, catalog_service, tracklist_provider):
        entry = await catalog_service.create_entry(ABBEY_ROAD)

        assert entry.artist == "The Beatles"
        assert entry.price == Decimal("25.00")
        assert entry.format is RecordFormat.VINYL
        assert entry.category is RecordCategory.ROCK
        assert entry.tracklist == []
        assert entry.created == entry.last_modified
        tracklist_provider.fetch_tracklist.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_with_mbid_fetches_tracklist(self, catalog_service, tracklist_provider):
        entry = await catalog_service.create_entry({**ABBEY_ROAD, "mbid": "mb-1"})

        tracklist_provider.fetch_tracklist.assert_awaited_once_with("mb-1")
        assert [t.title for t in entry.tracklist] == ["Come Together", "Something"]
        assert entry.mbid == "mb-1"

    @pytest.mark.asyncio
    async def test_create_succeeds_when_enrichment_finds_nothing(self, catalog_service, tracklist_provider):
        tracklist_provider.fetch_tracklist.return_value = []
        entry = await catalog_service.create_entry({**ABBEY_ROAD, "mbid": "missing"})
        assert entry.tracklist == []

    @pytest.mark.asyncio
    async def test_duplicate_identity_conflicts(self, catalog_service):
        await catalog_service.create_entry(ABBEY_ROAD)
        with pytest.raises(ConflictError):
            await catalog_service.create_entry(ABBEY_ROAD)

    @pytest.mark.asyncio
    async def test_same_album_in_other_format_is_allowed(self, catalog_service):
        await catalog_service.create_entry(ABBEY_ROAD)
        cd = await catalog_service.create_entry({**ABBEY_ROAD, "format": "CD"})
        assert cd.format is RecordFormat.CD

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad", [
        {"price": "-1"},
        {"quantity": -1},
        {"format": "8-track"},
        {"category": "Polka"},
        {"artist": "   "},
        {"colour": "red"},
    ])
    async def test_invalid_fields_rejected(self, catalog_service, bad):
        with pytest.raises(ValidationError):
            await catalog_service.create_entry({**ABBEY_ROAD, **bad})

    @pytest.mark.asyncio
    async def test_missing_field_rejected(self, catalog_service):
        fields = dict(ABBEY_ROAD)
        del fields["price"]
        with pytest.raises(ValidationError, match="price"):
            await catalog_service.create_entry(fields)


class TestUpdateEntry:
    """Test partial updates."""

    @pytest.mark.asyncio
    async def test_update_changes_fields_and_stamps_last_modified(self, catalog_service):
        entry = await catalog_service.create_entry(ABBEY_ROAD)
        later = entry.last_modified + timedelta(minutes=5)

        with patch("record_store.domain.catalog.services.utc_now", return_value=later):
            updated = await catalog_service.update_entry(entry.id, {"price": "19.99"})

        assert updated.price == Decimal("19.99")
        assert updated.last_modified == later
        assert updated.created == entry.created
        assert updated.quantity == 10

    @pytest.mark.asyncio
    async def test_new_mbid_replaces_tracklist(self, catalog_service, tracklist_provider):
        entry = await catalog_service.create_entry(ABBEY_ROAD)
        updated = await catalog_service.update_entry(entry.id, {"mbid": "mb-2"})

        tracklist_provider.fetch_tracklist.assert_awaited_once_with("mb-2")
        assert len(updated.tracklist) == 2

    @pytest.mark.asyncio
    async def test_same_mbid_does_not_refetch(self, catalog_service, tracklist_provider):
        entry = await catalog_service.create_entry({**ABBEY_ROAD, "mbid": "mb-1"})
        tracklist_provider.fetch_tracklist.reset_mock()

        updated = await catalog_service.update_entry(entry.id, {"mbid": "mb-1", "quantity": 3})

        tracklist_provider.fetch_tracklist.assert_not_called()
        assert updated.quantity == 3
        assert len(updated.tracklist) == 2

    @pytest.mark.asyncio
    async def test_update_missing_entry(self, catalog_service):
        with pytest.raises(NotFoundError):
            await catalog_service.update_entry(new_id(), {"price": "1"})

    @pytest.mark.asyncio
    async def test_update_malformed_id(self, catalog_service):
        with pytest.raises(InvalidReferenceError):
            await catalog_service.update_entry("not-an-id", {"price": "1"})

    @pytest.mark.asyncio
    async def test_update_into_existing_identity_conflicts(self, catalog_service):
        await catalog_service.create_entry(ABBEY_ROAD)
        cd = await catalog_service.create_entry({**ABBEY_ROAD, "format": "CD"})
        with pytest.raises(ConflictError):
            await catalog_service.update_entry(cd.id, {"format": "Vinyl"})


class TestDeleteAndGet:
    """Test deleting and fetching single entries."""

    @pytest.mark.asyncio
    async def test_delete_then_get_is_not_found(self, catalog_service):
        entry = await catalog_service.create_entry(ABBEY_ROAD)
        await catalog_service.delete_entry(entry.id)
        with pytest.raises(NotFoundError):
            await catalog_service.get_entry(entry.id)

    @pytest.mark.asyncio
    async def test_delete_missing_entry(self, catalog_service):
        with pytest.raises(NotFoundError):
            await catalog_service.delete_entry(new_id())

    @pytest.mark.asyncio
    async def test_get_malformed_id(self, catalog_service):
        with pytest.raises(InvalidReferenceError):
            await catalog_service.get_entry("123")

    @pytest.mark.asyncio
    async def test_get_is_served_from_cache(self, catalog_service, catalog_repo):
        entry = await catalog_service.create_entry(ABBEY_ROAD)

        with patch.object(catalog_repo, "get_by_id", wraps=catalog_repo.get_by_id) as spy:
            first = await catalog_service.get_entry(entry.id)
            second = await catalog_service.get_entry(entry.id)

        assert spy.await_count == 1
        assert first.id == second.id == entry.id

    @pytest.mark.asyncio
    async def test_update_invalidates_cached_entry(self, catalog_service):
        entry = await catalog_service.create_entry(ABBEY_ROAD)
        await catalog_service.get_entry(entry.id)
        await catalog_service.update_entry(entry.id, {"quantity": 1})

        fresh = await catalog_service.get_entry(entry.id)
        assert fresh.quantity == 1


class TestFindEntries:
    """Test searching, sorting and paging the catalog."""

    @pytest.mark.asyncio
    async def test_no_criteria_returns_everything(self, catalog_service):
        await _seed(catalog_service)
        page = await catalog_service.find_entries()

        assert page.total == 5
        assert page.page == 1
        assert page.page_size == 20
        assert page.total_pages == 1
        assert {e.album for e in page.data} == {
            "Abbey Road", "Revolver", "Kind of Blue", "OK Computer", "Discovery"
        }

    @pytest.mark.asyncio
    async def test_query_matches_artist_album_or_category(self, catalog_service):
        await _seed(catalog_service)

        by_artist = await catalog_service.find_entries(CatalogCriteria(query="beatles"))
        assert {e.album for e in by_artist.data} == {"Abbey Road", "Revolver"}

        by_album = await catalog_service.find_entries(CatalogCriteria(query="computer"))
        assert [e.album for e in by_album.data] == ["OK Computer"]

        by_category = await catalog_service.find_entries(CatalogCriteria(query="jazz"))
        assert [e.album for e in by_category.data] == ["Kind of Blue"]

    @pytest.mark.asyncio
    async def test_artist_filter_is_case_insensitive_substring(self, catalog_service):
        await _seed(catalog_service)
        page = await catalog_service.find_entries(CatalogCriteria(artist="DAVIS"))
        assert [e.artist for e in page.data] == ["Miles Davis"]

    @pytest.mark.asyncio
    async def test_format_and_category_are_exact(self, catalog_service):
        await _seed(catalog_service)
        page = await catalog_service.find_entries(
            CatalogCriteria(format="vinyl", category="Rock")
        )
        assert [e.album for e in page.data] == ["Abbey Road"]

    @pytest.mark.asyncio
    async def test_filters_combine_with_and(self, catalog_service):
        await _seed(catalog_service)
        page = await catalog_service.find_entries(
            CatalogCriteria(query="beatles", format="CD")
        )
        assert [e.album for e in page.data] == ["Revolver"]

    @pytest.mark.asyncio
    async def test_sort_by_price_ascending(self, catalog_service):
        await _seed(catalog_service)
        page = await catalog_service.find_entries(
            page_request=PageRequest(sort_by="price", sort_order="asc")
        )
        prices = [e.price for e in page.data]
        assert prices == sorted(prices)

    @pytest.mark.asyncio
    async def test_unknown_sort_field_rejected(self, catalog_service):
        with pytest.raises(ValidationError):
            await catalog_service.find_entries(page_request=PageRequest(sort_by="quantity"))

    @pytest.mark.asyncio
    async def test_pagination_slices_and_counts(self, catalog_service):
        await _seed(catalog_service)
        request = PageRequest(page=2, page_size=2, sort_by="album", sort_order="asc")
        page = await catalog_service.find_entries(page_request=request)

        assert [e.album for e in page.data] == ["Kind of Blue", "OK Computer"]
        assert page.total == 5
        assert page.total_pages == 3
        assert page.has_next

    @pytest.mark.asyncio
    async def test_page_beyond_range_is_empty(self, catalog_service):
        await _seed(catalog_service)
        page = await catalog_service.find_entries(page_request=PageRequest(page=9, page_size=2))
        assert page.data == []
        assert page.total == 5
        assert page.total_pages == 3

    @pytest.mark.asyncio
    async def test_empty_catalog_has_zero_pages(self, catalog_service):
        page = await catalog_service.find_entries()
        assert page.data == []
        assert page.total == 0
        assert page.total_pages == 0

    @pytest.mark.asyncio
    async def test_repeated_query_is_served_from_cache(self, catalog_service, catalog_repo):
        await _seed(catalog_service)
        criteria = CatalogCriteria(query="beatles")

        with patch.object(catalog_repo, "find", wraps=catalog_repo.find) as spy:
            await catalog_service.find_entries(criteria)
            await catalog_service.find_entries(criteria)

        assert spy.await_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("write", ["create", "update", "delete"])
    async def test_writes_invalidate_cached_queries(self, catalog_service, write):
        entries = await _seed(catalog_service)
        criteria = CatalogCriteria(artist="beatles")
        before = await catalog_service.find_entries(criteria)
        assert before.total == 2

        if write == "create":
            await catalog_service.create_entry({**ABBEY_ROAD, "album": "Let It Be"})
            expected = 3
        elif write == "update":
            await catalog_service.update_entry(entries["Revolver"].id, {"artist": "Wings"})
            expected = 1
        else:
            await catalog_service.delete_entry(entries["Revolver"].id)
            expected = 1

        after = await catalog_service.find_entries(criteria)
        assert after.total == expected

    @pytest.mark.asyncio
    async def test_cached_page_is_not_mutated_by_callers(self, catalog_service):
        await _seed(catalog_service)
        page = await catalog_service.find_entries()
        page.data.clear()

        again = await catalog_service.find_entries()
        assert len(again.data) == 5
