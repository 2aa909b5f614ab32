"""Venue and review data models.

Decoupled from venuereview_core so the store layer can be used on its own
and the core has no knowledge of how a snapshot is laid out on disk.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

RATING_CATEGORIES = ("bathrooms", "food", "parking", "fields")

_REVIEW_KEYS = ("id", "author", "text", "ratings", "photos", "createdAt")
_VENUE_KEYS = ("id", "name", "city", "coords", "reviews")


def coerce_rating(value: Any) -> int | float:
    """Turn raw input into a number, falling back to 0.

    Missing, empty, or unparseable input becomes 0, as does anything too
    large to average. There is no range check: -5 and 999 are kept as given.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value if isinstance(value, (int, float)) else str(value).strip())
    except (ValueError, OverflowError):
        return 0
    if isinstance(value, int):
        return value
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


@dataclass
class Ratings:
    """The four-category score block attached to every review."""

    bathrooms: int | float = 0
    food: int | float = 0
    parking: int | float = 0
    fields: int | float = 0

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in RATING_CATEGORIES}

    @classmethod
    def from_dict(cls, d: dict | None) -> Ratings:
        d = d or {}
        # A persisted review may be missing a category or hold it as a string.
        return cls(**{name: coerce_rating(d.get(name)) for name in RATING_CATEGORIES})


@dataclass
class Coords:
    lat: float
    lng: float


@dataclass
class Review:
    """A single submitted review. Never updated once created."""

    id: str
    author: str
    text: str
    ratings: Ratings
    created_at: str  # ISO-8601 UTC timestamp
    photos: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Venue:
    """A location that accumulates reviews, newest first."""

    id: str
    name: str
    city: str
    coords: Coords | None = None
    reviews: list[Review] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Snapshot:
    """The whole persisted collection, loaded and saved as one unit.

    ``meta`` carries any top-level keys other than ``venues``, and each
    venue and review keeps its own unrecognised keys in ``extra``, so a
    save never drops data this codebase doesn't know about.
    """

    venues: list[Venue] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)

    def find_venue(self, venue_id: str) -> Venue | None:
        for venue in self.venues:
            if venue.id == venue_id:
                return venue
        return None

    def review_ids(self) -> set[str]:
        return {r.id for v in self.venues for r in v.reviews}

    def validate(self) -> None:
        """Raise ValueError if two venues share an identifier."""
        seen: set[str] = set()
        for venue in self.venues:
            if venue.id in seen:
                raise ValueError(f"Duplicate venue id: {venue.id!r}")
            seen.add(venue.id)


# ---------------------------------------------------------------------------
# Document codec
# ---------------------------------------------------------------------------


def _unknown_keys(d: dict, known: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if k not in known}


def review_to_dict(review: Review) -> dict:
    return {
        **review.extra,
        "id": review.id,
        "author": review.author,
        "text": review.text,
        "ratings": review.ratings.to_dict(),
        "photos": list(review.photos),
        "createdAt": review.created_at,
    }


def review_from_dict(d: dict) -> Review:
    return Review(
        id=d.get("id", ""),
        author=d.get("author", ""),
        text=d.get("text", ""),
        ratings=Ratings.from_dict(d.get("ratings")),
        created_at=d.get("createdAt", ""),
        photos=list(d.get("photos") or []),
        extra=_unknown_keys(d, _REVIEW_KEYS),
    )


def venue_to_dict(venue: Venue) -> dict:
    return {
        **venue.extra,
        "id": venue.id,
        "name": venue.name,
        "city": venue.city,
        "coords": {"lat": venue.coords.lat, "lng": venue.coords.lng} if venue.coords else None,
        "reviews": [review_to_dict(r) for r in venue.reviews],
    }


def venue_from_dict(d: dict) -> Venue:
    coords = d.get("coords")
    return Venue(
        id=d["id"],
        name=d.get("name", ""),
        city=d.get("city", ""),
        coords=Coords(lat=coords["lat"], lng=coords["lng"]) if coords else None,
        reviews=[review_from_dict(r) for r in d.get("reviews") or []],
        extra=_unknown_keys(d, _VENUE_KEYS),
    )


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    return {**snapshot.meta, "venues": [venue_to_dict(v) for v in snapshot.venues]}


def snapshot_from_dict(data: Any) -> Snapshot:
    """Decode a persisted document.

    Raises ValueError if the document does not have the expected shape;
    callers turn that into StoreUnavailable.
    """
    if not isinstance(data, dict) or not isinstance(data.get("venues"), list):
        raise ValueError("document must be an object with a 'venues' list")
    try:
        venues = [venue_from_dict(v) for v in data["venues"]]
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"malformed venue entry: {e}") from e
    meta = {k: v for k, v in data.items() if k != "venues"}
    snapshot = Snapshot(venues=venues, meta=meta)
    snapshot.validate()
    return snapshot
