"""
Protocol definitions for ghbatch component interfaces.

The commit engine depends only on these protocols, so the concrete GitHub
transport can be replaced by any implementation (an in-memory fake in
tests, a GitHub Enterprise client, ...).

Usage:
    >>> from ghbatch.protocols import ObjectStore
    >>>
    >>> class MyStore:
    ...     async def get_ref(self, owner, repo, ref): ...
"""

from .object_store_protocol import CancelSignal, ObjectStore

__all__ = [
    "CancelSignal",
    "ObjectStore",
]
