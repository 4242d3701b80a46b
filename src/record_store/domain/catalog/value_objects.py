"""Catalog Context Value Objects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from ...exceptions import ValidationError

E = TypeVar("E", bound=Enum)


class RecordFormat(Enum):
    """Physical or digital medium a record is sold on."""
    VINYL = "Vinyl"
    CD = "CD"
    CASSETTE = "Cassette"
    DIGITAL = "Digital"


class RecordCategory(Enum):
    """Genre bucket a record is shelved under."""
    ROCK = "Rock"
    JAZZ = "Jazz"
    POP = "Pop"
    CLASSICAL = "Classical"
    ALTERNATIVE = "Alternative"
    HIP_HOP = "Hip-Hop"
    ELECTRONIC = "Electronic"
    INDIE = "Indie"


def parse_enum(enum_type: Type[E], value: Any) -> E:
    """Resolve ``value`` to a member of ``enum_type`` by value or by name.

    Matching ignores case, so "vinyl", "Vinyl" and "VINYL" all resolve to
    RecordFormat.VINYL. Anything else raises ValidationError listing the
    accepted values.
    """
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        for member in enum_type:
            if wanted in (member.value.lower(), member.name.lower()):
                return member
    allowed = ", ".join(member.value for member in enum_type)
    raise ValidationError(f"Invalid {enum_type.__name__} {value!r}; expected one of: {allowed}")


@dataclass(frozen=True, slots=True)
class Track:
    """A single track of a release's tracklist."""

    title: str
    position: int
    duration_seconds: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "position": self.position,
            "duration_seconds": self.duration_seconds,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Track":
        return cls(
            title=data["title"],
            position=data["position"],
            duration_seconds=data.get("duration_seconds"),
        )

    def formatted_duration(self) -> str:
        """Duration as m:ss, or an empty string when unknown."""
        if self.duration_seconds is None:
            return ""
        minutes, seconds = divmod(self.duration_seconds, 60)
        return f"{minutes}:{seconds:02d}"
