"""Loosely-typed review input and its normalization.

Client input arrives as strings (form fields, CLI options) or not at all.
The numeric rule is shared with the store codec (coerce_rating) so a
rating reads the same whether it was just submitted or loaded from disk.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

from venuereview_store.models import RATING_CATEGORIES, Ratings, coerce_rating

ANONYMOUS_AUTHOR = "Anonymous"


@dataclass
class ReviewPayload:
    """Raw review fields as submitted. Every field is optional."""

    author: Any = None
    text: Any = None
    bathrooms: Any = None
    food: Any = None
    parking: Any = None
    fields: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ReviewPayload:
        """Build a payload from a form-like mapping, ignoring unknown keys."""
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def normalize_ratings(payload: ReviewPayload) -> Ratings:
    return Ratings(**{name: coerce_rating(getattr(payload, name)) for name in RATING_CATEGORIES})


def normalize_author(value: Any) -> str:
    author = str(value).strip() if value is not None else ""
    return author or ANONYMOUS_AUTHOR


def normalize_text(value: Any) -> str:
    return str(value) if value is not None else ""
