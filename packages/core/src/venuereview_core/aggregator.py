"""Per-category rating averages for a venue."""

from __future__ import annotations

import math

from venuereview_store.models import RATING_CATEGORIES, Ratings, Venue


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity (2.5 -> 3)."""
    return math.floor(value + 0.5)


def average_ratings(venue: Venue) -> Ratings:
    """Average each category across the venue's reviews.

    A venue with no reviews averages to all zeros. Recomputed on every call;
    nothing is cached on the venue.
    """
    count = max(len(venue.reviews), 1)
    sums = dict.fromkeys(RATING_CATEGORIES, 0)
    for review in venue.reviews:
        for name in RATING_CATEGORIES:
            sums[name] += getattr(review.ratings, name) or 0
    return Ratings(**{name: round_half_up(total / count) for name, total in sums.items()})
