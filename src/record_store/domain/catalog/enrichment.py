"""Tracklist enrichment contract for the Catalog context."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .value_objects import Track


class TracklistProvider(ABC):
    """Best-effort source of tracklists keyed by an external release ID.

    Implementations must never raise: every failure resolves to an empty list.
    """

    @abstractmethod
    async def fetch_tracklist(self, external_id: Optional[str]) -> List[Track]:
        """Fetch the tracklist for a release."""
        pass


class NullTracklistProvider(TracklistProvider):
    """Provider used when enrichment is switched off."""

    async def fetch_tracklist(self, external_id: Optional[str]) -> List[Track]:
        return []
