"""Tests for ReviewService over an in-memory store."""

from __future__ import annotations

import itertools
import json
import threading
from datetime import datetime, timezone

import pytest

from venuereview_core.payload import ReviewPayload
from venuereview_core.service import NotFound, ReviewService, VenueNotFound
from venuereview_store.base import StoreUnavailable
from venuereview_store.json_file import JSONFileStore
from venuereview_store.memory import MemoryStore
from venuereview_store.models import Coords, Ratings, Review, Snapshot, Venue

_FIXED_NOW = datetime(2024, 6, 1, 9, 30, 15, 123456, tzinfo=timezone.utc)


def _review(review_id, bathrooms=0, food=0, parking=0, fields=0):
    return Review(
        id=review_id,
        author="Sam",
        text="",
        ratings=Ratings(bathrooms=bathrooms, food=food, parking=parking, fields=fields),
        created_at="2024-05-01T12:00:00.000Z",
    )


def _snapshot():
    return Snapshot(
        venues=[
            Venue(
                id="v1",
                name="Riverside Park",
                city="Austin",
                coords=Coords(lat=30.26, lng=-97.74),
                reviews=[_review("r2", bathrooms=4, food=2), _review("r1", bathrooms=3, food=5)],
            ),
            Venue(id="v2", name="North Fields", city="Dallas", coords=Coords(lat=32.78, lng=-96.8)),
        ]
    )


def _make_service(store=None, ids=None):
    counter = itertools.count(1)
    return ReviewService(
        store or MemoryStore(_snapshot()),
        clock=lambda: _FIXED_NOW,
        id_factory=ids or (lambda: f"new{next(counter)}"),
    )


# ---------------------------------------------------------------------------
# list_venues
# ---------------------------------------------------------------------------


class TestListVenues:
    def test_summaries_in_load_order(self):
        summaries = _make_service().list_venues()
        assert [s.id for s in summaries] == ["v1", "v2"]

    def test_summary_fields(self):
        first, second = _make_service().list_venues()
        assert first.name == "Riverside Park"
        assert first.city == "Austin"
        assert first.coords == Coords(lat=30.26, lng=-97.74)
        assert first.review_count == 2
        assert first.avg_ratings == Ratings(bathrooms=4, food=4, parking=0, fields=0)
        assert second.review_count == 0
        assert second.avg_ratings == Ratings()

    def test_summary_dict_has_no_review_bodies(self):
        data = _make_service().list_venues()[0].to_dict()
        assert "reviews" not in data
        assert data["reviewCount"] == 2
        assert data["avgRatings"] == {"bathrooms": 4, "food": 4, "parking": 0, "fields": 0}
        assert data["coords"] == {"lat": 30.26, "lng": -97.74}

    def test_store_failure_propagates(self):
        with pytest.raises(StoreUnavailable):
            _make_service(store=MemoryStore()).list_venues()


# ---------------------------------------------------------------------------
# get_venue
# ---------------------------------------------------------------------------


class TestGetVenue:
    def test_returns_full_venue_with_averages(self):
        detail = _make_service().get_venue("v1")
        assert [r.id for r in detail.venue.reviews] == ["r2", "r1"]
        assert detail.avg_ratings.bathrooms == 4

    def test_detail_dict_includes_reviews_and_averages(self):
        data = _make_service().get_venue("v1").to_dict()
        assert data["id"] == "v1"
        assert [r["id"] for r in data["reviews"]] == ["r2", "r1"]
        assert data["avgRatings"]["food"] == 4

    def test_unknown_venue_raises_not_found(self):
        store = MemoryStore(_snapshot())
        with pytest.raises(NotFound) as exc_info:
            _make_service(store=store).get_venue("nope")

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "Not found"
        assert store.save_count == 0


# ---------------------------------------------------------------------------
# create_review
# ---------------------------------------------------------------------------


class TestCreateReview:
    def test_normalizes_loose_payload(self):
        payload = ReviewPayload(author="", text="hi", bathrooms="5", food="bad")
        review = _make_service().create_review("v2", payload)

        assert review.author == "Anonymous"
        assert review.text == "hi"
        assert review.ratings == Ratings(bathrooms=5, food=0, parking=0, fields=0)
        assert review.photos == []

    def test_stamps_id_and_utc_timestamp(self):
        review = _make_service().create_review("v2", ReviewPayload())
        assert review.id == "new1"
        assert review.created_at == "2024-06-01T09:30:15.123Z"

    def test_real_clock_timestamp_is_utc(self):
        service = ReviewService(MemoryStore(_snapshot()))
        review = service.create_review("v2", ReviewPayload())

        parsed = datetime.fromisoformat(review.created_at.replace("Z", "+00:00"))
        assert parsed.utcoffset().total_seconds() == 0
        assert len(review.id) == 21

    def test_new_review_is_prepended_and_persisted(self):
        store = MemoryStore(_snapshot())
        service = _make_service(store=store)

        review = service.create_review("v1", ReviewPayload(author="Dana", bathrooms="1"))

        assert store.save_count == 1
        detail = service.get_venue("v1")
        assert [r.id for r in detail.venue.reviews] == [review.id, "r2", "r1"]
        assert detail.venue.reviews[0] == review

    def test_review_count_increases_by_one(self):
        service = _make_service()
        before = {s.id: s.review_count for s in service.list_venues()}

        service.create_review("v1", ReviewPayload())

        after = {s.id: s.review_count for s in service.list_venues()}
        assert after == {"v1": before["v1"] + 1, "v2": before["v2"]}

    def test_photo_refs_attached_in_order(self):
        refs = ["/uploads/b.jpg", "/uploads/a.jpg"]
        review = _make_service().create_review("v1", ReviewPayload(), refs)

        assert review.photos == refs
        assert review.photos is not refs

    def test_unknown_venue_raises_and_saves_nothing(self):
        store = MemoryStore(_snapshot())
        with pytest.raises(VenueNotFound) as exc_info:
            _make_service(store=store).create_review("nope", ReviewPayload(text="x"))

        assert isinstance(exc_info.value, NotFound)
        assert str(exc_info.value) == "Venue not found"
        assert store.save_count == 0

    def test_id_collision_is_retried(self):
        ids = iter(["r1", "r2", "fresh"])
        review = _make_service(ids=lambda: next(ids)).create_review("v2", ReviewPayload())
        assert review.id == "fresh"

    def test_gives_up_when_ids_keep_colliding(self):
        service = _make_service(ids=lambda: "r1")
        with pytest.raises(RuntimeError):
            service.create_review("v2", ReviewPayload())

    def test_failed_save_propagates(self, mocker):
        store = MemoryStore(_snapshot())
        mocker.patch.object(store, "save", side_effect=StoreUnavailable("disk full"))

        with pytest.raises(StoreUnavailable, match="disk full"):
            _make_service(store=store).create_review("v1", ReviewPayload())

        assert len(store.load().venues[0].reviews) == 2

    def test_concurrent_writes_in_one_process_are_not_lost(self):
        store = MemoryStore(_snapshot())
        service = ReviewService(store)

        threads = [
            threading.Thread(target=service.create_review, args=("v2", ReviewPayload(text=str(i)))) for i in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(service.get_venue("v2").venue.reviews) == 8
        assert store.save_count == 8


# ---------------------------------------------------------------------------
# Round-trip through a real store
# ---------------------------------------------------------------------------


def test_created_review_survives_reload(tmp_path):
    store = JSONFileStore(path=str(tmp_path / "db.json"))
    store.save(_snapshot())
    service = _make_service(store=store)

    review = service.create_review("v1", ReviewPayload(author="Lee", text="nice", parking="4"), ["/uploads/p.jpg"])

    reloaded = JSONFileStore(path=str(tmp_path / "db.json")).load()
    assert reloaded.venues[0].reviews[0] == review


def test_create_review_keeps_unknown_venue_and_review_keys(tmp_path):
    path = tmp_path / "db.json"
    path.write_text(
        json.dumps(
            {
                "venues": [
                    {
                        "id": "v1",
                        "name": "Riverside Park",
                        "city": "Austin",
                        "coords": {"lat": 30.26, "lng": -97.74},
                        "address": "1 Main St",
                        "sports": ["soccer"],
                        "reviews": [{"id": "r1", "author": "Sam", "ratings": {}, "visitDate": "2024-04-28"}],
                    }
                ]
            }
        )
    )
    service = _make_service(store=JSONFileStore(path=str(path)))

    service.create_review("v1", ReviewPayload(text="x"))

    saved = json.loads(path.read_text())["venues"][0]
    assert saved["address"] == "1 Main St"
    assert saved["sports"] == ["soccer"]
    assert saved["reviews"][1]["visitDate"] == "2024-04-28"
    assert service.get_venue("v1").to_dict()["address"] == "1 Main St"


def test_string_ratings_on_disk_are_averaged(tmp_path):
    path = tmp_path / "db.json"
    review = {"id": "r1", "author": "Sam", "text": "", "ratings": {"food": "4", "bathrooms": "bad"}}
    path.write_text(json.dumps({"venues": [{"id": "v1", "name": "A", "city": "B", "reviews": [review]}]}))

    (summary,) = _make_service(store=JSONFileStore(path=str(path))).list_venues()

    assert summary.avg_ratings == Ratings(bathrooms=0, food=4, parking=0, fields=0)
