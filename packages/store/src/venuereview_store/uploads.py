"""Local blob store for review photos.

The review core never touches photo bytes. It receives the reference
strings this module hands back (e.g. `/uploads/V1StGXR8_Z5jdHi6B-myT.jpg`)
and stores them on the review as-is.
"""

from __future__ import annotations

import logging
import secrets
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_PHOTOS = 5


class TooManyPhotos(ValueError):
    """More than MAX_PHOTOS attachments were offered for one review."""


def new_blob_name(extension: str = "") -> str:
    """Return a fresh 21-character URL-safe name, keeping ``extension``."""
    return secrets.token_urlsafe(16)[:21] + extension


class LocalPhotoStore:
    """Copies photos into ``upload_dir`` and returns URL-style references."""

    def __init__(self, upload_dir: str = "uploads", url_prefix: str = "/uploads"):
        self._upload_dir = Path(upload_dir)
        self._url_prefix = url_prefix.rstrip("/")

    def put(self, source_path: str) -> str:
        source = Path(source_path)
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        name = new_blob_name(source.suffix)
        shutil.copyfile(source, self._upload_dir / name)
        logger.debug("Stored photo %s as %s", source, name)
        return f"{self._url_prefix}/{name}"

    def put_many(self, source_paths: list[str]) -> list[str]:
        """Store every photo in order. Nothing is copied if there are too many.

        If a copy fails part way, the photos already stored are removed
        before the OSError propagates.
        """
        if len(source_paths) > MAX_PHOTOS:
            raise TooManyPhotos(f"At most {MAX_PHOTOS} photos per review (got {len(source_paths)}).")
        refs: list[str] = []
        try:
            for p in source_paths:
                refs.append(self.put(p))
        except OSError:
            self.discard(refs)
            raise
        return refs

    def discard(self, refs: list[str]) -> None:
        """Remove previously stored photos. Missing files are ignored."""
        for ref in refs:
            name = ref.rsplit("/", 1)[-1]
            try:
                (self._upload_dir / name).unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove photo %s: %s", name, e)
            else:
                logger.debug("Removed photo %s", name)
