"""Catalog Context Entities.

A CatalogEntry is one sellable record: an (artist, album, format) triple with
a price, stock on hand and an optional tracklist pulled from MusicBrainz.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ...exceptions import ValidationError
from ..value_objects import new_id, parse_price, parse_quantity, parse_text, utc_now
from .value_objects import RecordCategory, RecordFormat, Track, parse_enum

# Fields a caller may set on create or update; the rest are store-managed.
EDITABLE_FIELDS = frozenset({"artist", "album", "price", "quantity", "format", "category", "mbid"})
REQUIRED_FIELDS = ("artist", "album", "price", "quantity", "format", "category")

SORTABLE_FIELDS = frozenset({"created", "artist", "album", "price", "category", "format"})


@dataclass(kw_only=True)
class CatalogEntry:
    """
    A record in the catalog.

    ``quantity`` is the stock on hand and is only decremented through the
    store's atomic increment, never by assigning to a loaded instance.
    """

    id: str = field(default_factory=new_id)

    artist: str
    album: str
    price: Decimal
    quantity: int
    format: RecordFormat
    category: RecordCategory

    created: datetime = field(default_factory=utc_now)
    last_modified: datetime = field(default_factory=utc_now)

    mbid: Optional[str] = None
    tracklist: List[Track] = field(default_factory=list)

    @property
    def identity_key(self) -> Tuple[str, str, RecordFormat]:
        """The (artist, album, format) triple that must be unique in a store."""
        return (self.artist, self.album, self.format)

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    def get_display_name(self) -> str:
        return f"{self.artist} - {self.album} ({self.format.value})"

    def has_stock_for(self, requested: int) -> bool:
        return self.quantity >= requested

    def with_changes(self, changes: Mapping[str, Any]) -> "CatalogEntry":
        """Return a copy with already-validated ``changes`` applied."""
        return replace(self, **dict(changes))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe document."""
        return {
            "id": self.id,
            "artist": self.artist,
            "album": self.album,
            "price": str(self.price),
            "quantity": self.quantity,
            "format": self.format.value,
            "category": self.category.value,
            "created": self.created.isoformat(),
            "last_modified": self.last_modified.isoformat(),
            "mbid": self.mbid,
            "tracklist": [track.to_dict() for track in self.tracklist],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogEntry":
        """Rebuild an entry from a document produced by ``to_dict``."""
        return cls(
            id=data["id"],
            artist=data["artist"],
            album=data["album"],
            price=Decimal(data["price"]),
            quantity=int(data["quantity"]),
            format=RecordFormat(data["format"]),
            category=RecordCategory(data["category"]),
            created=datetime.fromisoformat(data["created"]),
            last_modified=datetime.fromisoformat(data["last_modified"]),
            mbid=data.get("mbid"),
            tracklist=[Track.from_dict(t) for t in data.get("tracklist", [])],
        )


def validate_fields(fields: Mapping[str, Any], *, partial: bool) -> Dict[str, Any]:
    """Validate and normalise caller-supplied catalog fields.

    With ``partial=False`` every required field must be present (a new
    entry); with ``partial=True`` any subset is accepted (an update).
    Returns a new dict holding parsed values.
    """
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown catalog fields: {', '.join(sorted(unknown))}")

    if not partial:
        missing = [name for name in REQUIRED_FIELDS if fields.get(name) is None]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    parsed: Dict[str, Any] = {}
    for name, value in fields.items():
        if name == "mbid":
            if value is None:
                parsed[name] = None
            elif isinstance(value, str):
                parsed[name] = value.strip() or None
            else:
                raise ValidationError("mbid must be a string")
        elif value is None:
            raise ValidationError(f"{name} cannot be null")
        elif name in ("artist", "album"):
            parsed[name] = parse_text(value, name)
        elif name == "price":
            parsed[name] = parse_price(value)
        elif name == "quantity":
            parsed[name] = parse_quantity(value)
        elif name == "format":
            parsed[name] = parse_enum(RecordFormat, value)
        elif name == "category":
            parsed[name] = parse_enum(RecordCategory, value)
    return parsed
