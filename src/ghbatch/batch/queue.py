"""Batch: queue file writes and deletes, then apply them as one commit"""

import logging
import threading
from typing import List, Optional

from .. import pathutil
from ..error_handling import (
    BatchCancelledError,
    BatchCommittedError,
    EmptyPathError,
)
from ..models import BatchOperation, CommitAuthor, OperationKind
from ..protocols import CancelSignal, ObjectStore
from .builder import CommitBuilder

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Batch update"


class Batch:
    """Accumulates file operations to be committed atomically.

    A batch is single use. ``write`` and ``delete`` only queue work;
    ``commit`` performs all network I/O and consumes the batch whatever
    its outcome. To retry after a failure, build a new batch so it reads
    a fresh branch head.

    All methods are safe to call from several threads. ``commit`` claims
    the batch under the lock before doing any I/O, so concurrent calls
    cannot both run the protocol.
    """

    def __init__(
        self,
        store: ObjectStore,
        owner: str,
        repo: str,
        branch: str,
        message: str = "",
        author: Optional[CommitAuthor] = None,
    ):
        self.store = store
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.message = message or DEFAULT_MESSAGE
        self.author = author
        self._operations: List[BatchOperation] = []
        self._committed = False
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"Batch({self.owner}/{self.repo}@{self.branch}, "
            f"operations={self.len()}, committed={self.committed})"
        )

    def __len__(self) -> int:
        return self.len()

    def _queue(self, op_kind: OperationKind, path: str, content: Optional[bytes]) -> None:
        with self._lock:
            if self._committed:
                raise BatchCommittedError()

            pathutil.validate(path)
            normalized = pathutil.normalize(path)
            # "/", "." and the like name the repository root
            if normalized == "":
                raise EmptyPathError()

            self._operations.append(
                BatchOperation(kind=op_kind, path=normalized, content=content)
            )

    def write(self, path: str, content: bytes) -> None:
        """Queue a create-or-replace of ``path`` with ``content``.

        Raises:
            PathError: path fails validation
            EmptyPathError: path is empty
            BatchCommittedError: the batch was already committed
            TypeError: content is not text or bytes-like
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        if not isinstance(content, (bytes, bytearray, memoryview)):
            raise TypeError(f"content must be str or bytes, not {type(content).__name__}")
        self._queue(OperationKind.WRITE, path, bytes(content))

    def delete(self, path: str) -> None:
        """Queue a removal of ``path``.

        Deleting a path that does not exist at commit time is a no-op.
        Raises the same errors as ``write``.
        """
        self._queue(OperationKind.DELETE, path, None)

    def len(self) -> int:
        with self._lock:
            return len(self._operations)

    def operations(self) -> List[BatchOperation]:
        """Return a copy of the queued operations."""
        with self._lock:
            return list(self._operations)

    @property
    def committed(self) -> bool:
        with self._lock:
            return self._committed

    async def commit(self, cancel_event: Optional[CancelSignal] = None) -> Optional[str]:
        """Apply all queued operations in a single commit.

        Args:
            cancel_event: checked once before any network call

        Returns:
            SHA of the new commit, or None when there was nothing to change

        Raises:
            BatchCommittedError: the batch was already committed
            BatchCancelledError: ``cancel_event`` was already set
            BatchStepError: a protocol step failed; see ``step`` and ``cause``
        """
        with self._lock:
            if self._committed:
                raise BatchCommittedError()
            # Claimed from here on, whatever the outcome
            self._committed = True
            operations = list(self._operations)

        if cancel_event is not None and cancel_event.is_set():
            raise BatchCancelledError()

        if not operations:
            logger.debug(f"Empty batch for {self.owner}/{self.repo}@{self.branch}, nothing to commit")
            return None

        builder = CommitBuilder(
            self.store,
            self.owner,
            self.repo,
            self.branch,
            self.message,
            self.author,
        )
        return await builder.build(operations)


def new_batch(
    store: ObjectStore,
    owner: str,
    repo: str,
    branch: str,
    message: str = "",
    *,
    author: Optional[CommitAuthor] = None,
    cancel_event: Optional[CancelSignal] = None,
) -> Batch:
    """Create a batch, refusing when ``cancel_event`` is already set."""
    if cancel_event is not None and cancel_event.is_set():
        raise BatchCancelledError()

    return Batch(store, owner, repo, branch, message=message, author=author)
