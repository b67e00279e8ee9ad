"""
Batch store interface.

The ranker never writes partial results: the service persists a batch
with a single `save_batch` call once a pass has finished, so an
implementation only needs to make that one upsert atomic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..rank.schema import Batch


class BatchStore(ABC):
    """Abstract base class for batch persistence."""

    @abstractmethod
    def save_batch(self, batch: Batch) -> None:
        """Insert or replace a batch atomically.

        Raises:
            PersistenceError: If the batch could not be written.
        """
        raise NotImplementedError

    @abstractmethod
    def load_batch(self, batch_id: str) -> Batch:
        """Return the stored batch.

        Raises:
            BatchNotFoundError: If no batch has this id.
            PersistenceError: If the stored batch cannot be read.
        """
        raise NotImplementedError

    @abstractmethod
    def list_batches(self) -> List[Batch]:
        """Return every stored batch, oldest first."""
        raise NotImplementedError

    @abstractmethod
    def delete_batch(self, batch_id: str) -> None:
        """Remove a batch.

        Raises:
            BatchNotFoundError: If no batch has this id.
        """
        raise NotImplementedError
