"""
Batch persistence for cvrank.

`BatchStore` is the outbound boundary the service writes ranked
batches through.  Two implementations ship with the package: an
in-memory store and a directory of JSON files.
"""

from .base import BatchStore  # noqa: F401
from .memory import InMemoryBatchStore  # noqa: F401
from .json_store import JsonFileBatchStore  # noqa: F401
