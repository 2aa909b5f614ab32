"""Abstract store interface.

Any storage backend (JSON file, SQLite, Gist) implements this interface.
The service depends on BaseStore, not on a concrete backend, so backends
are swappable without touching service or CLI code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from venuereview_store.models import Snapshot


class StoreUnavailable(Exception):
    """The backing medium is missing, unreadable, unwritable, or corrupt."""


class BaseStore(ABC):
    """Whole-snapshot persistence for venues and their reviews.

    There is no partial access: load() reads everything and save() replaces
    everything. Writers must load immediately before mutating, otherwise a
    save clobbers whatever another writer persisted in between.
    """

    @abstractmethod
    def load(self) -> Snapshot:
        """Read the full persisted collection.

        Raises StoreUnavailable instead of returning an empty snapshot when
        the medium is missing or its content cannot be parsed.
        """

    @abstractmethod
    def save(self, snapshot: Snapshot) -> None:
        """Replace the persisted collection with ``snapshot``.

        Raises StoreUnavailable on failure. A failed save must leave the
        previous content intact.
        """

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional. Subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
