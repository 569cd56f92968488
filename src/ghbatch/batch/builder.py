"""Commit builder: applies resolved operations as one commit.

The protocol composes dependent object-store calls into a single logical
transaction:

1. resolve the branch head from its ref
2. resolve the head commit's tree
3. resolve tree entries (blobs for writes, existence checks for deletes)
4. stop without a commit when nothing changes
5. create a tree on top of the base tree
6. create a commit whose only parent is the old head
7. move the branch with a non-force ref update

Nothing is visible on the branch before step 7, and step 7 is rejected by
the server when another writer moved the branch after step 1.
"""

import logging
import time
from typing import Optional, Sequence

from ..error_handling import BatchStep, BatchStepError
from ..models import BatchOperation, CommitAuthor
from ..protocols import ObjectStore
from .resolver import resolve_tree_entries

logger = logging.getLogger(__name__)


class CommitBuilder:
    """Runs the commit protocol for one branch of one repository."""

    def __init__(
        self,
        store: ObjectStore,
        owner: str,
        repo: str,
        branch: str,
        message: str,
        author: Optional[CommitAuthor] = None,
    ):
        self.store = store
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.message = message
        self.author = author

    @property
    def ref(self) -> str:
        return f"refs/heads/{self.branch}"

    def _log_extra(self, **fields):
        fields.update(owner=self.owner, repo=self.repo, branch=self.branch)
        return fields

    async def build(self, operations: Sequence[BatchOperation]) -> Optional[str]:
        """
        Apply ``operations`` as one commit on the branch.

        Returns:
            SHA of the new commit, or None when the operations change nothing

        Raises:
            BatchStepError: tagged with the protocol step that failed
        """
        started = time.monotonic()
        target = f"{self.owner}/{self.repo}@{self.branch}"

        logger.debug(f"Resolving head of {target}", extra=self._log_extra(step=BatchStep.GET_REF))
        try:
            head_sha = await self.store.get_ref(self.owner, self.repo, self.ref)
        except Exception as e:
            self._log_failure(BatchStep.GET_REF, e)
            raise BatchStepError(BatchStep.GET_REF, e) from e

        try:
            base_tree = await self.store.get_commit(self.owner, self.repo, head_sha)
        except Exception as e:
            self._log_failure(BatchStep.GET_COMMIT, e)
            raise BatchStepError(BatchStep.GET_COMMIT, e) from e

        try:
            entries = await resolve_tree_entries(
                self.store, self.owner, self.repo, self.branch, operations
            )
        except BatchStepError as e:
            self._log_failure(e.step, e.cause)
            raise

        if not entries:
            logger.info(f"Nothing to commit on {target}", extra=self._log_extra())
            return None

        removals = sum(1 for entry in entries if entry.is_removal)
        logger.debug(
            f"Creating tree on {base_tree[:8]} with {len(entries) - removals} "
            f"additions and {removals} removals",
            extra=self._log_extra(step=BatchStep.CREATE_TREE),
        )
        try:
            tree_sha = await self.store.create_tree(
                self.owner, self.repo, base_tree, entries
            )
        except Exception as e:
            self._log_failure(BatchStep.CREATE_TREE, e)
            raise BatchStepError(BatchStep.CREATE_TREE, e) from e

        try:
            commit_sha = await self.store.create_commit(
                self.owner, self.repo, tree_sha, [head_sha], self.message, self.author
            )
        except Exception as e:
            self._log_failure(BatchStep.CREATE_COMMIT, e)
            raise BatchStepError(BatchStep.CREATE_COMMIT, e) from e

        try:
            await self.store.update_ref(
                self.owner, self.repo, self.ref, commit_sha, force=False
            )
        except Exception as e:
            self._log_failure(BatchStep.UPDATE_REF, e)
            raise BatchStepError(BatchStep.UPDATE_REF, e) from e

        duration_ms = round((time.monotonic() - started) * 1000, 2)
        logger.info(
            f"✅ Committed {len(entries)} changes to {target} as {commit_sha[:8]}",
            extra=self._log_extra(commit_sha=commit_sha, duration_ms=duration_ms),
        )
        return commit_sha

    def _log_failure(self, step: str, error: BaseException) -> None:
        logger.warning(
            f"Batch commit to {self.owner}/{self.repo}@{self.branch} failed at {step}: {error}",
            extra=self._log_extra(step=step),
        )
