"""In-process store: the explicit test double for BaseStore.

Holds the encoded document rather than live objects, so callers that
mutate a loaded Snapshot never change what the store holds until they
call save(). That mirrors how the file-backed stores behave.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from venuereview_store.base import BaseStore, StoreUnavailable
from venuereview_store.models import snapshot_from_dict, snapshot_to_dict

if TYPE_CHECKING:
    from venuereview_store.models import Snapshot


class MemoryStore(BaseStore):
    """Keeps the snapshot in memory. Not selectable from config."""

    def __init__(self, snapshot: Snapshot | None = None):
        self._document: dict | None = snapshot_to_dict(snapshot) if snapshot is not None else None
        self.save_count = 0

    def load(self) -> Snapshot:
        if self._document is None:
            raise StoreUnavailable("MemoryStore is empty.")
        return snapshot_from_dict(copy.deepcopy(self._document))

    def save(self, snapshot: Snapshot) -> None:
        self._document = snapshot_to_dict(snapshot)
        self.save_count += 1
