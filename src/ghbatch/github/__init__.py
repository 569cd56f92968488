"""GitHub integration for ghbatch"""

from .api import (
    branch_exists,
    create_branch,
    delete_branch,
    file_exists,
    get_branch_sha,
    get_file_content,
    parse_repo_url,
    raw_file_url,
)
from .client import GitHubClient, check_response, get_github_client
from .object_store import GitHubObjectStore

__all__ = [
    "GitHubClient",
    "GitHubObjectStore",
    "check_response",
    "get_github_client",
    # Branch operations
    "get_branch_sha",
    "branch_exists",
    "create_branch",
    "delete_branch",
    # Content operations
    "file_exists",
    "get_file_content",
    "parse_repo_url",
    "raw_file_url",
]
