"""
Object store protocol for remote Git object-model operations.

This module defines the narrow capability surface the commit engine needs
from a hosted Git service: reading a branch head and its tree, creating
content-addressed objects, moving a ref, and checking whether a path exists.
"""

from abc import abstractmethod
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from ..models import CommitAuthor, TreeEntry


@runtime_checkable
class CancelSignal(Protocol):
    """Anything that can report cancellation (``asyncio.Event``, ``threading.Event``)."""

    def is_set(self) -> bool:
        ...


@runtime_checkable
class ObjectStore(Protocol):
    """Protocol for remote Git object storage.

    Implementations raise ``GitHubAPIError`` (already classified) on failure.
    Object creation has no effect on any branch until ``update_ref`` points
    a ref at the new commit.
    """

    @abstractmethod
    async def get_ref(self, owner: str, repo: str, ref: str) -> str:
        """
        Resolve a fully qualified ref to a commit SHA.

        Args:
            owner: Repository owner
            repo: Repository name
            ref: Fully qualified ref, e.g. ``refs/heads/main``

        Returns:
            SHA of the commit the ref points at

        Example:
            >>> head = await store.get_ref("octo", "hello", "refs/heads/main")
        """
        ...

    @abstractmethod
    async def get_commit(self, owner: str, repo: str, commit_sha: str) -> str:
        """
        Look up a commit and return the SHA of its root tree.

        Args:
            owner: Repository owner
            repo: Repository name
            commit_sha: Commit to inspect

        Returns:
            SHA of the commit's tree
        """
        ...

    @abstractmethod
    async def create_blob(self, owner: str, repo: str, content: bytes) -> str:
        """Store raw file content and return the blob SHA."""
        ...

    @abstractmethod
    async def create_tree(
        self, owner: str, repo: str, base_tree: str, entries: Sequence[TreeEntry]
    ) -> str:
        """
        Create a tree from ``base_tree`` with ``entries`` applied.

        Paths not mentioned are inherited from the base tree, entries with
        a SHA add or replace a path, entries without one remove it.

        Returns:
            SHA of the new tree
        """
        ...

    @abstractmethod
    async def create_commit(
        self,
        owner: str,
        repo: str,
        tree_sha: str,
        parents: List[str],
        message: str,
        author: Optional[CommitAuthor] = None,
    ) -> str:
        """Create a commit object and return its SHA."""
        ...

    @abstractmethod
    async def update_ref(
        self, owner: str, repo: str, ref: str, sha: str, force: bool = False
    ) -> None:
        """
        Move ``ref`` to ``sha``.

        With ``force=False`` the update must be rejected (as a conflict) when
        ``sha`` does not descend from the ref's current target.
        """
        ...

    @abstractmethod
    async def exists(self, owner: str, repo: str, path: str, ref: str) -> bool:
        """Report whether an object exists at ``path`` on ``ref``."""
        ...
