"""Atomic multi-file commits built from the Git object model"""

from .builder import CommitBuilder
from .queue import DEFAULT_MESSAGE, Batch, new_batch
from .resolver import collapse_operations, resolve_tree_entries

__all__ = [
    "Batch",
    "CommitBuilder",
    "DEFAULT_MESSAGE",
    "collapse_operations",
    "new_batch",
    "resolve_tree_entries",
]
