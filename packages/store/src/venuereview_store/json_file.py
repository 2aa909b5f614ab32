"""JSONFileStore: the whole snapshot in one pretty-printed JSON file.

This is the default backend. The file is small enough to parse on every
request, and a human can edit or seed it by hand.

Writes go to a temp file in the same directory which is then renamed over
the target, so a crash mid-write leaves the previous document in place.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from venuereview_store.base import BaseStore, StoreUnavailable
from venuereview_store.models import Snapshot, snapshot_from_dict, snapshot_to_dict

logger = logging.getLogger(__name__)


class JSONFileStore(BaseStore):
    """Stores the snapshot as a JSON document at ``path``.

    Configure via .venuereview.yml: `store: json` and `store_path: db.json`.
    """

    def __init__(self, path: str = "db.json"):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> Snapshot:
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            snapshot = snapshot_from_dict(data)
        except (OSError, ValueError) as e:
            # json.JSONDecodeError is a ValueError.
            logger.warning("JSONFileStore.load() failed for %s: %s", self._path, e)
            raise StoreUnavailable(f"Cannot load {self._path}: {e}") from e
        logger.debug("Loaded %d venue(s) from %s", len(snapshot.venues), self._path)
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        content = json.dumps(snapshot_to_dict(snapshot), indent=2, ensure_ascii=False)
        directory = self._path.parent
        tmp_path = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self._path.name}.", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, self._path)
            tmp_path = None
        except OSError as e:
            logger.warning("JSONFileStore.save() failed for %s: %s", self._path, e)
            raise StoreUnavailable(f"Cannot write {self._path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        logger.debug("Saved %d venue(s) to %s", len(snapshot.venues), self._path)
