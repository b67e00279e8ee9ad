"""In-process batch store, used by tests and one-shot CLI runs."""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Dict, List

from ..errors import BatchNotFoundError
from ..rank.schema import Batch
from .base import BatchStore

logger = logging.getLogger(__name__)


class InMemoryBatchStore(BatchStore):
    """Keeps serialized snapshots so later edits to a batch object never
    leak into the store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._batches: Dict[str, Dict[str, Any]] = {}

    def save_batch(self, batch: Batch) -> None:
        snapshot = batch.to_dict()
        with self._lock:
            self._batches[batch.id] = snapshot
        logger.debug("Saved batch %s (%s)", batch.id, batch.status.value)

    def load_batch(self, batch_id: str) -> Batch:
        with self._lock:
            snapshot = self._batches.get(batch_id)
            if snapshot is None:
                raise BatchNotFoundError(batch_id)
            snapshot = copy.deepcopy(snapshot)
        return Batch.from_dict(snapshot)

    def list_batches(self) -> List[Batch]:
        with self._lock:
            snapshots = copy.deepcopy(list(self._batches.values()))
        batches = [Batch.from_dict(s) for s in snapshots]
        return sorted(batches, key=lambda b: b.created_at)

    def delete_batch(self, batch_id: str) -> None:
        with self._lock:
            if self._batches.pop(batch_id, None) is None:
                raise BatchNotFoundError(batch_id)
        logger.debug("Deleted batch %s", batch_id)
