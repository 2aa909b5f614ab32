"""GistStore: zero-infrastructure shared venue database via GitHub Gist.

Why a Gist backend:
- Zero infra: no DB to provision, no server to maintain.
- Built-in access control: Gist ACL == GitHub account access.
- The document stays human readable and versioned by GitHub.

Data format: a single JSON file named `venuereview_db.json` inside the Gist,
holding the same document the JSON file store writes. Every save uploads
the complete document; GitHub replaces the file contents in one edit.
"""

from __future__ import annotations

import json
import logging

from venuereview_store.base import BaseStore, StoreUnavailable
from venuereview_store.models import Snapshot, snapshot_from_dict, snapshot_to_dict

logger = logging.getLogger(__name__)

_GIST_FILENAME = "venuereview_db.json"


class GistStore(BaseStore):
    """Stores the snapshot in a GitHub Gist file.

    The Gist ID is stored in .venuereview.yml under `gist_id`. The token
    comes from GITHUB_TOKEN and needs the `gist` scope.
    """

    def __init__(self, gist_id: str, token: str):
        from github import Github

        self._gist_id = gist_id
        self._gh = Github(token)

    def _get_gist(self):
        return self._gh.get_gist(self._gist_id)

    def load(self) -> Snapshot:
        from github import GithubException

        try:
            gist = self._get_gist()
        except GithubException as e:
            logger.warning("GistStore.load() failed (%s): %s", type(e).__name__, e)
            raise StoreUnavailable(f"Cannot fetch Gist {self._gist_id}: {e}") from e

        file_obj = gist.files.get(_GIST_FILENAME)
        if file_obj is None:
            raise StoreUnavailable(f"Gist {self._gist_id} has no {_GIST_FILENAME} file.")
        try:
            snapshot = snapshot_from_dict(json.loads(file_obj.content))
        except (TypeError, ValueError) as e:
            logger.warning("GistStore.load() found a corrupt document: %s", e)
            raise StoreUnavailable(f"Corrupt {_GIST_FILENAME} in Gist {self._gist_id}: {e}") from e
        logger.debug("Loaded %d venue(s) from Gist %s", len(snapshot.venues), self._gist_id)
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        from github import GithubException
        from github.InputFileContent import InputFileContent

        content = json.dumps(snapshot_to_dict(snapshot), indent=2, ensure_ascii=False)
        try:
            gist = self._get_gist()
            gist.edit(files={_GIST_FILENAME: InputFileContent(content)})
        except GithubException as e:
            logger.warning("GistStore.save() failed (%s): %s", type(e).__name__, e)
            raise StoreUnavailable(f"Cannot update Gist {self._gist_id}: {e}") from e
        logger.debug("Saved %d venue(s) to Gist %s", len(snapshot.venues), self._gist_id)
