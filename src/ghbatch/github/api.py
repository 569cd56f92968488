"""GitHub branch and content helpers"""

import base64
import logging
from typing import Optional, Tuple
from urllib.parse import quote

from ..error_handling import GitHubAPIError
from .client import GitHubClient, check_response

logger = logging.getLogger(__name__)

RAW_BASE_URL = "https://raw.githubusercontent.com"


async def get_branch_sha(client: GitHubClient, owner: str, repo: str, branch: str) -> str:
    """Return the SHA the branch currently points at"""
    response = await client.get(f"/repos/{owner}/{repo}/git/ref/heads/{quote(branch, safe='/')}")
    data = await check_response(response, 200)
    return data["object"]["sha"]


async def branch_exists(client: GitHubClient, owner: str, repo: str, branch: str) -> bool:
    response = await client.get(f"/repos/{owner}/{repo}/git/ref/heads/{quote(branch, safe='/')}")
    if response.status == 404:
        return False
    await check_response(response, 200)
    return True


async def create_branch(
    client: GitHubClient, owner: str, repo: str, branch: str, base_sha: str
) -> bool:
    """Create ``branch`` at ``base_sha``.

    Returns:
        True if the branch was created, False if it already existed
    """
    response = await client.post(
        f"/repos/{owner}/{repo}/git/refs",
        json={"ref": f"refs/heads/{branch}", "sha": base_sha},
    )
    try:
        await check_response(response, 200, 201)
    except GitHubAPIError as e:
        if e.status_code == 422 and "already exists" in e.message.lower():
            logger.info(f"Branch {branch} already exists in {owner}/{repo}")
            return False
        raise
    logger.info(f"✅ Created branch {branch} at {base_sha[:8]} in {owner}/{repo}")
    return True


async def delete_branch(client: GitHubClient, owner: str, repo: str, branch: str) -> None:
    response = await client.delete(f"/repos/{owner}/{repo}/git/refs/heads/{quote(branch, safe='/')}")
    await check_response(response, 200, 204)


async def _get_contents(
    client: GitHubClient, owner: str, repo: str, path: str, ref: Optional[str]
):
    params = {"ref": ref} if ref else {}
    return await client.get(
        f"/repos/{owner}/{repo}/contents/{quote(path, safe='/')}", params=params
    )


async def file_exists(
    client: GitHubClient, owner: str, repo: str, path: str, ref: Optional[str] = None
) -> bool:
    """True only when ``path`` exists and is a regular file (not a directory)"""
    response = await _get_contents(client, owner, repo, path, ref)
    if response.status == 404:
        return False
    data = await check_response(response, 200)
    return isinstance(data, dict) and data.get("type") == "file"


async def get_file_content(
    client: GitHubClient, owner: str, repo: str, path: str, ref: Optional[str] = None
) -> bytes:
    """Fetch and decode a single file.

    Raises:
        GitHubAPIError: the file does not exist or the request failed
        ValueError: the path is a directory or not a regular file
    """
    response = await _get_contents(client, owner, repo, path, ref)
    data = await check_response(response, 200)

    if isinstance(data, list):
        raise ValueError(f"path is a directory, not a file: {path}")
    if data.get("type") != "file":
        raise ValueError(f"path is not a file: {path} (type: {data.get('type')})")

    if data.get("encoding") == "base64":
        return base64.b64decode(data.get("content", ""))
    if data.get("content") is None:
        raise ValueError(f"no content returned for {path}")
    return data["content"].encode("utf-8")


def parse_repo_url(repo_url: str) -> Tuple[str, str]:
    """
    Parse a repository reference into ``(owner, repo)``.

    Supports ``owner/repo``, ``https://github.com/owner/repo(.git)`` and
    ``git@github.com:owner/repo.git``.

    Raises:
        ValueError: the reference cannot be parsed
    """
    value = repo_url.strip()

    if "://" not in value and "@" not in value:
        parts = value.split("/")
        if len(parts) == 2 and all(parts):
            return parts[0], parts[1].removesuffix(".git")
        raise ValueError(f"invalid repo format: {repo_url}")

    if value.startswith("git@"):
        _, _, value = value.partition(":")
        parts = value.removesuffix(".git").split("/")
        if len(parts) == 2 and all(parts):
            return parts[0], parts[1]
        raise ValueError(f"invalid git SSH URL: {repo_url}")

    value = value.split("://", 1)[1]
    parts = value.removesuffix("/").removesuffix(".git").split("/")
    # parts[0] is the host
    if len(parts) >= 3 and parts[1] and parts[2]:
        return parts[1], parts[2]
    raise ValueError(f"invalid GitHub URL: {repo_url}")


def raw_file_url(owner: str, repo: str, path: str, ref: str = "") -> str:
    """URL of the raw file; public repositories need no authentication."""
    return f"{RAW_BASE_URL}/{owner}/{repo}/{ref or 'main'}/{path.lstrip('/')}"
