"""SQLiteStore: the snapshot document kept in a local SQLite file.

Why SQLite as an alternative to the plain JSON file:
- Batteries included: ships with Python, no extra dependencies.
- Transactional replace: the old document is swapped for the new one inside
  a single transaction, so readers never see a partial write.
- Convenient when the database file is shared with other local tooling.

Schema:
  snapshot: exactly one row (id = 1) holding the encoded document. The
            snapshot is always read and written whole, so there is no
            point splitting venues and reviews into their own tables.
"""

from __future__ import annotations

import json
import logging
import sqlite3

from venuereview_store.base import BaseStore, StoreUnavailable
from venuereview_store.models import Snapshot, snapshot_from_dict, snapshot_to_dict

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS snapshot (
    id          INTEGER PRIMARY KEY CHECK (id = 1),
    document    TEXT NOT NULL,
    updated_at  TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SQLiteStore(BaseStore):
    """Stores the snapshot in a local SQLite database file.

    The database file path defaults to `venuereview.db` in the current
    working directory. Configure via .venuereview.yml:
    `store: sqlite` and `store_path: /path/to/venuereview.db`.
    """

    def __init__(self, db_path: str = "venuereview.db"):
        try:
            self._conn = sqlite3.connect(db_path)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open SQLite database {db_path}: {e}") from e
        self._db_path = db_path

    def exists(self) -> bool:
        row = self._conn.execute("SELECT 1 FROM snapshot WHERE id = 1").fetchone()
        return row is not None

    def load(self) -> Snapshot:
        try:
            row = self._conn.execute("SELECT document FROM snapshot WHERE id = 1").fetchone()
        except sqlite3.Error as e:
            logger.warning("SQLiteStore.load() failed: %s", e)
            raise StoreUnavailable(f"Cannot read {self._db_path}: {e}") from e
        if row is None:
            raise StoreUnavailable(f"No snapshot stored in {self._db_path}. Run `venuereview init` first.")
        try:
            snapshot = snapshot_from_dict(json.loads(row["document"]))
        except ValueError as e:
            logger.warning("SQLiteStore.load() found a corrupt document: %s", e)
            raise StoreUnavailable(f"Corrupt snapshot in {self._db_path}: {e}") from e
        logger.debug("Loaded %d venue(s) from %s", len(snapshot.venues), self._db_path)
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        document = json.dumps(snapshot_to_dict(snapshot))
        try:
            with self._conn:
                self._conn.execute(
                    """
                    INSERT INTO snapshot (id, document, updated_at)
                    VALUES (1, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(id) DO UPDATE SET
                      document = excluded.document,
                      updated_at = excluded.updated_at
                    """,
                    (document,),
                )
        except sqlite3.Error as e:
            logger.warning("SQLiteStore.save() failed: %s", e)
            raise StoreUnavailable(f"Cannot write {self._db_path}: {e}") from e
        logger.debug("Saved %d venue(s) to %s", len(snapshot.venues), self._db_path)

    def close(self) -> None:
        self._conn.close()
