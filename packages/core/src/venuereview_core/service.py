"""Venue listing, venue detail, and review submission over a BaseStore."""

from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable

from venuereview_core.aggregator import average_ratings
from venuereview_core.payload import ReviewPayload, normalize_author, normalize_ratings, normalize_text
from venuereview_store.base import BaseStore
from venuereview_store.models import Coords, Ratings, Review, Venue, venue_to_dict

logger = logging.getLogger(__name__)

_MAX_ID_ATTEMPTS = 10


class NotFound(LookupError):
    """The requested venue does not exist. Transport maps this to a 404."""

    status_code = 404
    default_message = "Not found"

    def __init__(self, venue_id: str, message: str | None = None):
        super().__init__(message or self.default_message)
        self.venue_id = venue_id


class VenueNotFound(NotFound):
    """Raised when a review targets a venue that does not exist."""

    default_message = "Venue not found"


@dataclass
class VenueSummary:
    """One row of the venue list. Carries no review bodies."""

    id: str
    name: str
    city: str
    coords: Coords | None
    avg_ratings: Ratings
    review_count: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "city": self.city,
            "coords": {"lat": self.coords.lat, "lng": self.coords.lng} if self.coords else None,
            "avgRatings": self.avg_ratings.to_dict(),
            "reviewCount": self.review_count,
        }


@dataclass
class VenueDetail:
    """The full venue record plus its computed averages."""

    venue: Venue
    avg_ratings: Ratings

    def to_dict(self) -> dict:
        return {**venue_to_dict(self.venue), "avgRatings": self.avg_ratings.to_dict()}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_review_id() -> str:
    return secrets.token_urlsafe(16)[:21]


def _isoformat(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class ReviewService:
    """Read and mutate venues through an explicit store handle.

    Every call loads a fresh snapshot; nothing is cached between calls.
    create_review() is serialized per instance so two writers in the same
    process cannot lose each other's review. Separate processes sharing one
    backing medium still race: the last save wins.
    """

    def __init__(
        self,
        store: BaseStore,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self._store = store
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _new_review_id
        self._write_lock = threading.Lock()

    @property
    def store(self) -> BaseStore:
        return self._store

    def list_venues(self) -> list[VenueSummary]:
        snapshot = self._store.load()
        return [
            VenueSummary(
                id=v.id,
                name=v.name,
                city=v.city,
                coords=v.coords,
                avg_ratings=average_ratings(v),
                review_count=len(v.reviews),
            )
            for v in snapshot.venues
        ]

    def get_venue(self, venue_id: str) -> VenueDetail:
        snapshot = self._store.load()
        venue = snapshot.find_venue(venue_id)
        if venue is None:
            logger.debug("Venue %s not found", venue_id)
            raise NotFound(venue_id)
        return VenueDetail(venue=venue, avg_ratings=average_ratings(venue))

    def create_review(
        self,
        venue_id: str,
        payload: ReviewPayload,
        photo_refs: Iterable[str] = (),
    ) -> Review:
        """Prepend a new review to the venue and persist the snapshot.

        ``photo_refs`` are references already produced by the photo store;
        they are attached in the given order.
        """
        with self._write_lock:
            snapshot = self._store.load()
            venue = snapshot.find_venue(venue_id)
            if venue is None:
                logger.debug("Cannot review unknown venue %s", venue_id)
                raise VenueNotFound(venue_id)

            review = Review(
                id=self._unique_id(snapshot.review_ids()),
                author=normalize_author(payload.author),
                text=normalize_text(payload.text),
                ratings=normalize_ratings(payload),
                created_at=_isoformat(self._clock()),
                photos=list(photo_refs),
            )
            venue.reviews.insert(0, review)
            self._store.save(snapshot)

        logger.info(
            "Created review %s for venue %s (%d photo(s))",
            review.id,
            venue_id,
            len(review.photos),
        )
        return review

    def _unique_id(self, taken: set[str]) -> str:
        for _ in range(_MAX_ID_ATTEMPTS):
            candidate = self._id_factory()
            if candidate not in taken:
                return candidate
        raise RuntimeError(f"Could not generate a unique review id after {_MAX_ID_ATTEMPTS} attempts.")
