"""ghbatch - atomic multi-file commits over the GitHub Git Data API"""

from .batch import Batch, CommitBuilder, new_batch
from .cli import main
from .error_handling import (
    BatchCancelledError,
    BatchCommittedError,
    BatchStep,
    BatchStepError,
    EmptyPathError,
    ErrorKind,
    GitHubAPIError,
    GitHubBatchError,
    InvalidPathError,
    PathError,
    PathTraversalError,
)
from .github import GitHubClient, GitHubObjectStore, get_github_client
from .models import BatchOperation, CommitAuthor, OperationKind, TreeEntry
from .protocols import ObjectStore

__version__ = "0.1.0"

__all__ = [
    "Batch",
    "BatchCancelledError",
    "BatchCommittedError",
    "BatchOperation",
    "BatchStep",
    "BatchStepError",
    "CommitAuthor",
    "CommitBuilder",
    "EmptyPathError",
    "ErrorKind",
    "GitHubAPIError",
    "GitHubBatchError",
    "GitHubClient",
    "GitHubObjectStore",
    "InvalidPathError",
    "ObjectStore",
    "OperationKind",
    "PathError",
    "PathTraversalError",
    "TreeEntry",
    "get_github_client",
    "main",
    "new_batch",
]
