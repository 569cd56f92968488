"""Turn queued batch operations into tree entries"""

import logging
from typing import Dict, List, Sequence

from ..error_handling import BatchStep, BatchStepError
from ..models import BatchOperation, OperationKind, TreeEntry
from ..protocols import ObjectStore

logger = logging.getLogger(__name__)


def collapse_operations(operations: Sequence[BatchOperation]) -> List[BatchOperation]:
    """Keep only the last operation for each path.

    The result is ordered by the position of each path's last operation,
    so a path written and later deleted resolves as a delete.
    """
    latest: Dict[str, BatchOperation] = {}
    for op in operations:
        latest.pop(op.path, None)
        latest[op.path] = op
    return list(latest.values())


async def resolve_tree_entries(
    store: ObjectStore,
    owner: str,
    repo: str,
    branch: str,
    operations: Sequence[BatchOperation],
) -> List[TreeEntry]:
    """
    Resolve operations into tree entries against ``branch``.

    Writes create a blob and yield an add/replace entry. Deletes yield a
    removal entry only when the path currently exists on the branch; a
    delete of a missing path contributes nothing.

    Raises:
        BatchStepError: tagged ``create blob`` or ``check file exists``
    """
    collapsed = collapse_operations(operations)
    if len(collapsed) != len(operations):
        logger.debug(
            f"Collapsed {len(operations)} operations to {len(collapsed)} distinct paths"
        )

    entries: List[TreeEntry] = []
    for op in collapsed:
        if op.kind is OperationKind.WRITE:
            try:
                blob_sha = await store.create_blob(owner, repo, op.content or b"")
            except Exception as e:
                raise BatchStepError(BatchStep.CREATE_BLOB, e) from e
            entries.append(TreeEntry(path=op.path, sha=blob_sha))
            continue

        try:
            exists = await store.exists(owner, repo, op.path, branch)
        except Exception as e:
            raise BatchStepError(BatchStep.CHECK_FILE_EXISTS, e) from e

        if exists:
            entries.append(TreeEntry(path=op.path, sha=None))
        else:
            logger.debug(f"Skipping delete of missing path {op.path}")

    return entries
