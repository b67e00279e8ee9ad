"""
JSON file batch store.

One `<batch id>.json` file per batch in a directory.  Writes go to a
temporary file in the same directory which is then `os.replace`d over
the target, so readers see either the previous or the new version of
a batch and never a half-written file.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List, Union

from ..errors import BatchNotFoundError, PersistenceError
from ..rank.schema import Batch
from .base import BatchStore

logger = logging.getLogger(__name__)

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonFileBatchStore(BatchStore):
    """Persist batches as JSON documents under `directory`."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    def _path(self, batch_id: str) -> Path:
        if not _SAFE_ID_RE.match(batch_id):
            raise BatchNotFoundError(batch_id)
        return self.directory / f"{batch_id}.json"

    def save_batch(self, batch: Batch) -> None:
        if not _SAFE_ID_RE.match(batch.id):
            raise PersistenceError(f"batch id {batch.id!r} is not a valid file name")
        target = self._path(batch.id)
        payload = json.dumps(batch.to_dict(), indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{batch.id}.", suffix=".tmp", dir=self.directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"cannot write batch {batch.id} to {target}: {exc}") from exc
        logger.debug("Wrote batch %s to %s", batch.id, target)

    def load_batch(self, batch_id: str) -> Batch:
        path = self._path(batch_id)
        if not path.exists():
            raise BatchNotFoundError(batch_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Batch.from_dict(data)
        except OSError as exc:
            raise PersistenceError(f"cannot read batch {batch_id}: {exc}") from exc
        except (ValueError, KeyError, TypeError) as exc:
            raise PersistenceError(f"batch file {path} is corrupt: {exc}") from exc

    def list_batches(self) -> List[Batch]:
        if not self.directory.exists():
            return []
        batches = [self.load_batch(p.stem) for p in sorted(self.directory.glob("*.json"))]
        return sorted(batches, key=lambda b: b.created_at)

    def delete_batch(self, batch_id: str) -> None:
        path = self._path(batch_id)
        try:
            path.unlink()
        except FileNotFoundError:
            raise BatchNotFoundError(batch_id) from None
        except OSError as exc:
            raise PersistenceError(f"cannot delete batch {batch_id}: {exc}") from exc
        logger.debug("Deleted batch file %s", path)
