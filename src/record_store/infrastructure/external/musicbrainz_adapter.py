"""
MusicBrainz Adapter - Anti-Corruption Layer for MusicBrainz API.

This adapter isolates the catalog from the MusicBrainz web service,
turning a release lookup into a list of domain Tracks.
"""

import asyncio
import logging
import math
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from ...domain.catalog.enrichment import TracklistProvider
from ...domain.catalog.value_objects import Track

logger = logging.getLogger(__name__)


class MusicBrainzAdapter(TracklistProvider):
    """
    Adapter for the MusicBrainz release lookup.

    Every failure mode (missing release, timeout, transport or HTTP error,
    malformed payload) is logged and resolves to an empty tracklist.
    """

    def __init__(
        self,
        base_url: str = "https://musicbrainz.org/ws/2",
        user_agent: str = "RecordStore/1.0 (https://github.com/nibzard/record-store)",
        rate_limit: float = 1.0,  # requests per second
        timeout: float = 10.0
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.rate_limit = rate_limit
        self.timeout = timeout
        self._last_request_time = 0.0
        self._rate_lock = asyncio.Lock()

    async def fetch_tracklist(self, external_id: Optional[str]) -> List[Track]:
        """Fetch the tracklist of a release by its MBID."""
        if not external_id:
            return []

        try:
            release = await self._fetch_release(external_id)
            return self.parse_tracklist(release)
        except aiohttp.ClientResponseError as e:
            if e.status == 404:
                logger.warning(f"MusicBrainz release not found: {external_id}")
            else:
                logger.error(f"MusicBrainz API error for MBID {external_id}: HTTP {e.status} {e.message}")
        except asyncio.TimeoutError:
            logger.error(f"MusicBrainz request timeout for MBID: {external_id}")
        except aiohttp.ClientError as e:
            logger.error(f"MusicBrainz API error for MBID {external_id}: {e}")
        except Exception as e:
            logger.error(f"Error fetching tracklist for MBID {external_id}: {e}", exc_info=True)

        return []

    async def _fetch_release(self, mbid: str) -> Dict[str, Any]:
        """GET the release with its recordings as JSON."""
        await self._rate_limit()

        url = f"{self.base_url}/release/{quote(mbid, safe='')}"
        params = {"inc": "recordings", "fmt": "json"}

        async with aiohttp.ClientSession(
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        ) as session:
            async with session.get(url, params=params) as response:
                response.raise_for_status()
                return await response.json()

    async def _rate_limit(self) -> None:
        """Implement rate limiting."""
        async with self._rate_lock:
            current_time = time.monotonic()
            time_since_last = current_time - self._last_request_time
            min_interval = 1.0 / self.rate_limit

            if time_since_last < min_interval:
                await asyncio.sleep(min_interval - time_since_last)

            self._last_request_time = time.monotonic()

    @staticmethod
    def parse_tracklist(release: Any) -> List[Track]:
        """
        Convert a release payload into Tracks across all media.

        Title falls back to the nested recording title, then "Unknown".
        Position falls back to the 1-based running index.
        Lengths arrive in milliseconds and are rounded to whole seconds.
        """
        media = release.get("media") if isinstance(release, dict) else None
        if not isinstance(media, list):
            return []

        tracklist: List[Track] = []
        for medium in media:
            tracks = medium.get("tracks") if isinstance(medium, dict) else None
            if not isinstance(tracks, list):
                continue

            for track in tracks:
                if not isinstance(track, dict):
                    continue

                recording = track.get("recording")
                recording_title = recording.get("title") if isinstance(recording, dict) else None

                position = track.get("position")
                if isinstance(position, bool) or not isinstance(position, int) or position <= 0:
                    position = len(tracklist) + 1

                tracklist.append(Track(
                    title=track.get("title") or recording_title or "Unknown",
                    position=position,
                    duration_seconds=_ms_to_seconds(track.get("length")),
                ))

        return tracklist


def _ms_to_seconds(length: Any) -> Optional[int]:
    """Round a millisecond length half-up to whole seconds."""
    if isinstance(length, bool) or not isinstance(length, (int, float)):
        return None
    if not math.isfinite(length) or length <= 0:
        return None
    return int(length + 500) // 1000
