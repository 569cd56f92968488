"""GitHub Git Data API implementation of the ObjectStore protocol"""

import base64
import logging
from typing import List, Optional, Sequence
from urllib.parse import quote

from ..models import CommitAuthor, TreeEntry
from .client import GitHubClient, check_response

logger = logging.getLogger(__name__)


def _ref_path(ref: str) -> str:
    # The refs endpoints take "heads/<branch>", not "refs/heads/<branch>"
    if ref.startswith("refs/"):
        ref = ref[len("refs/"):]
    return quote(ref, safe="/")


class GitHubObjectStore:
    """Creates blobs, trees and commits and moves refs through the REST API."""

    def __init__(self, client: GitHubClient):
        self.client = client

    async def get_ref(self, owner: str, repo: str, ref: str) -> str:
        response = await self.client.get(f"/repos/{owner}/{repo}/git/ref/{_ref_path(ref)}")
        data = await check_response(response, 200)
        return data["object"]["sha"]

    async def get_commit(self, owner: str, repo: str, commit_sha: str) -> str:
        response = await self.client.get(f"/repos/{owner}/{repo}/git/commits/{commit_sha}")
        data = await check_response(response, 200)
        return data["tree"]["sha"]

    async def create_blob(self, owner: str, repo: str, content: bytes) -> str:
        payload = {
            "content": base64.b64encode(content).decode("ascii"),
            "encoding": "base64",
        }
        response = await self.client.post(f"/repos/{owner}/{repo}/git/blobs", json=payload)
        data = await check_response(response, 200, 201)
        logger.debug(f"Created blob {data['sha'][:8]} ({len(content)} bytes)")
        return data["sha"]

    async def create_tree(
        self, owner: str, repo: str, base_tree: str, entries: Sequence[TreeEntry]
    ) -> str:
        payload = {
            "base_tree": base_tree,
            # sha must be sent as null for removals
            "tree": [entry.model_dump() for entry in entries],
        }
        response = await self.client.post(f"/repos/{owner}/{repo}/git/trees", json=payload)
        data = await check_response(response, 200, 201)
        return data["sha"]

    async def create_commit(
        self,
        owner: str,
        repo: str,
        tree_sha: str,
        parents: List[str],
        message: str,
        author: Optional[CommitAuthor] = None,
    ) -> str:
        payload = {"message": message, "tree": tree_sha, "parents": list(parents)}
        if author is not None:
            payload["author"] = author.model_dump()
        response = await self.client.post(f"/repos/{owner}/{repo}/git/commits", json=payload)
        data = await check_response(response, 200, 201)
        return data["sha"]

    async def update_ref(
        self, owner: str, repo: str, ref: str, sha: str, force: bool = False
    ) -> None:
        response = await self.client.patch(
            f"/repos/{owner}/{repo}/git/refs/{_ref_path(ref)}",
            json={"sha": sha, "force": force},
        )
        await check_response(response, 200)

    async def exists(self, owner: str, repo: str, path: str, ref: str) -> bool:
        response = await self.client.get(
            f"/repos/{owner}/{repo}/contents/{quote(path, safe='/')}",
            params={"ref": ref},
        )
        if response.status == 404:
            response.release()
            return False
        await check_response(response, 200)
        return True
