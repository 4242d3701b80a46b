"""Tests for the MusicBrainz tracklist adapter."""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import aiohttp
import pytest

from record_store.domain.catalog.value_objects import Track
from record_store.infrastructure.external.musicbrainz_adapter import MusicBrainzAdapter

LOGGER = "record_store.infrastructure.external.musicbrainz_adapter"

ABBEY_ROAD_RELEASE = {
    "id": "b84ee12a-09ef-421b-82de-0441a926375b",
    "title": "Abbey Road",
    "media": [
        {
            "position": 1,
            "tracks": [
                {"position": 1, "title": "Come Together", "length": 259000},
                {"position": 2, "title": "Something", "length": 182293},
            ],
        },
        {
            "position": 2,
            "tracks": [
                {"position": 1, "title": "Here Comes the Sun", "length": 185733},
            ],
        },
    ],
}


def _response_error(status):
    return aiohttp.ClientResponseError(
        request_info=Mock(real_url="https://test.musicbrainz.org"),
        history=(),
        status=status,
        message="boom",
    )


class TestParseTracklist:
    """Test conversion of release payloads into Tracks."""

    def test_parses_every_medium_in_order(self):
        tracks = MusicBrainzAdapter.parse_tracklist(ABBEY_ROAD_RELEASE)

        assert [t.title for t in tracks] == ["Come Together", "Something", "Here Comes the Sun"]
        assert [t.position for t in tracks] == [1, 2, 1]
        assert tracks[0] == Track(title="Come Together", position=1, duration_seconds=259)

    def test_lengths_round_to_nearest_second(self):
        tracks = MusicBrainzAdapter.parse_tracklist(ABBEY_ROAD_RELEASE)
        assert [t.duration_seconds for t in tracks] == [259, 182, 186]

    def test_title_falls_back_to_recording_then_unknown(self):
        release = {"media": [{"tracks": [
            {"position": 1, "recording": {"title": "Because"}},
            {"position": 2},
        ]}]}
        tracks = MusicBrainzAdapter.parse_tracklist(release)
        assert [t.title for t in tracks] == ["Because", "Unknown"]

    def test_missing_position_uses_running_index(self):
        release = {"media": [{"tracks": [
            {"title": "A"},
            {"title": "B", "position": 0},
            {"title": "C", "position": "x"},
        ]}]}
        tracks = MusicBrainzAdapter.parse_tracklist(release)
        assert [t.position for t in tracks] == [1, 2, 3]

    def test_missing_length_is_none(self):
        release = {"media": [{"tracks": [{"title": "Her Majesty", "position": 1}]}]}
        assert MusicBrainzAdapter.parse_tracklist(release)[0].duration_seconds is None

    @pytest.mark.parametrize("release", [{}, {"media": None}, {"media": "bad"}, [], None])
    def test_malformed_payload_gives_empty_list(self, release):
        assert MusicBrainzAdapter.parse_tracklist(release) == []


class TestFetchTracklist:
    """Test that every failure resolves to an empty tracklist."""

    @pytest.fixture
    def adapter(self):
        return MusicBrainzAdapter(
            base_url="https://test.musicbrainz.org/ws/2",
            user_agent="test-agent/1.0",
            rate_limit=1000.0,
            timeout=5.0,
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mbid", [None, ""])
    async def test_empty_mbid_skips_request(self, adapter, mbid):
        with patch.object(adapter, "_fetch_release", new_callable=AsyncMock) as fetch:
            assert await adapter.fetch_tracklist(mbid) == []
        fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_success(self, adapter):
        with patch.object(adapter, "_fetch_release", new_callable=AsyncMock) as fetch:
            fetch.return_value = ABBEY_ROAD_RELEASE
            tracks = await adapter.fetch_tracklist("mbid-1")
        fetch.assert_awaited_once_with("mbid-1")
        assert len(tracks) == 3

    @pytest.mark.asyncio
    async def test_not_found_logs_warning(self, adapter, caplog):
        with patch.object(adapter, "_fetch_release", new_callable=AsyncMock) as fetch:
            fetch.side_effect = _response_error(404)
            with caplog.at_level(logging.WARNING, logger=LOGGER):
                assert await adapter.fetch_tracklist("mbid-404") == []

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "MusicBrainz release not found: mbid-404" in record.getMessage()

    @pytest.mark.asyncio
    async def test_server_error_logs_error(self, adapter, caplog):
        with patch.object(adapter, "_fetch_release", new_callable=AsyncMock) as fetch:
            fetch.side_effect = _response_error(503)
            with caplog.at_level(logging.WARNING, logger=LOGGER):
                assert await adapter.fetch_tracklist("mbid-503") == []

        assert caplog.records[-1].levelno == logging.ERROR
        assert "503" in caplog.records[-1].getMessage()

    @pytest.mark.asyncio
    async def test_timeout_logs_error(self, adapter, caplog):
        with patch.object(adapter, "_fetch_release", new_callable=AsyncMock) as fetch:
            fetch.side_effect = asyncio.TimeoutError()
            with caplog.at_level(logging.WARNING, logger=LOGGER):
                assert await adapter.fetch_tracklist("mbid-slow") == []

        assert caplog.records[-1].levelno == logging.ERROR
        assert "timeout" in caplog.records[-1].getMessage()

    @pytest.mark.asyncio
    async def test_connection_error_returns_empty(self, adapter, caplog):
        with patch.object(adapter, "_fetch_release", new_callable=AsyncMock) as fetch:
            fetch.side_effect = aiohttp.ClientConnectionError("refused")
            with caplog.at_level(logging.WARNING, logger=LOGGER):
                assert await adapter.fetch_tracklist("mbid-down") == []
        assert caplog.records[-1].levelno == logging.ERROR

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_empty(self, adapter):
        with patch.object(adapter, "_fetch_release", new_callable=AsyncMock) as fetch:
            fetch.side_effect = ValueError("bad json")
            assert await adapter.fetch_tracklist("mbid-odd") == []

    @pytest.mark.asyncio
    async def test_request_shape(self, adapter):
        response = MagicMock()
        response.raise_for_status = Mock()
        response.json = AsyncMock(return_value=ABBEY_ROAD_RELEASE)
        response.__aenter__ = AsyncMock(return_value=response)
        response.__aexit__ = AsyncMock(return_value=False)

        session = MagicMock()
        session.get = Mock(return_value=response)
        session.__aenter__ = AsyncMock(return_value=session)
        session.__aexit__ = AsyncMock(return_value=False)

        with patch("aiohttp.ClientSession", return_value=session) as session_cls:
            tracks = await adapter.fetch_tracklist("b84ee12a-09ef-421b-82de-0441a926375b")

        assert len(tracks) == 3
        session.get.assert_called_once_with(
            "https://test.musicbrainz.org/ws/2/release/b84ee12a-09ef-421b-82de-0441a926375b",
            params={"inc": "recordings", "fmt": "json"},
        )
        kwargs = session_cls.call_args.kwargs
        assert kwargs["headers"]["User-Agent"] == "test-agent/1.0"
        assert kwargs["timeout"].total == 5.0
