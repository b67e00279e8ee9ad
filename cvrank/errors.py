"""
Error taxonomy for cvrank.

Per-candidate errors (`InsufficientTextError`, `ScoringOverflowError`)
are recovered by the batch ranker: the candidate is excluded from the
ranking and reported in the batch's failure list.  Batch-level errors
(`InvalidBatchError`, `PersistenceError`, `BatchNotFoundError`) are
surfaced to the caller and are fatal to that call.
"""

from __future__ import annotations


class CVRankError(Exception):
    """Base class for all cvrank errors."""


class InsufficientTextError(CVRankError):
    """Raised when a document is empty or shorter than the minimum length."""

    def __init__(self, length: int, minimum: int) -> None:
        super().__init__(
            f"document text has {length} characters; at least {minimum} required"
        )
        self.length = length
        self.minimum = minimum


class InvalidBatchError(CVRankError):
    """Raised when a batch cannot be created or ranked as submitted."""


class ScoringOverflowError(CVRankError):
    """Raised when a sub-score falls outside [0, 100] or is not finite.

    Clamping in the scorer makes this unreachable for a correct matcher,
    so an occurrence always indicates a bug upstream.
    """


class PersistenceError(CVRankError):
    """Raised when the batch store fails to read or write a batch."""


class BatchNotFoundError(CVRankError, KeyError):
    """Raised when a batch id is unknown to the store."""

    def __init__(self, batch_id: str) -> None:
        super().__init__(batch_id)
        self.batch_id = batch_id

    def __str__(self) -> str:
        return f"batch {self.batch_id!r} not found"


class ConfigError(CVRankError):
    """Raised when the ruleset or runtime configuration is malformed."""
