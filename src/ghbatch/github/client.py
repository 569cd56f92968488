"""GitHub API client and authentication"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from ..configuration import DEFAULT_BASE_URL, GitHubConfig
from ..error_handling import translate_error

logger = logging.getLogger(__name__)

USER_AGENT = "ghbatch/0.1.0"


@dataclass
class GitHubClient:
    """GitHub API client with token authentication."""

    token: str
    session: aiohttp.ClientSession
    base_url: str = DEFAULT_BASE_URL

    def __post_init__(self):
        """Validate GitHub token format"""
        if not self._is_valid_github_token(self.token):
            logger.warning("⚠️ GitHub token format appears invalid")

    @staticmethod
    def _is_valid_github_token(token: str) -> bool:
        """Validate GitHub token format"""
        if not token or len(token.strip()) == 0:
            return False

        # GitHub token patterns
        patterns = [
            r"^ghp_[a-zA-Z0-9]{36}$",  # Personal access tokens (classic)
            r"^github_pat_[a-zA-Z0-9_]{82}$",  # Fine-grained personal access tokens
            r"^ghs_[a-zA-Z0-9]{36}$",  # GitHub App installation tokens
            r"^ghu_[a-zA-Z0-9]{36}$",  # GitHub App user tokens
        ]

        return any(re.match(pattern, token.strip()) for pattern in patterns)

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }

    async def get(self, endpoint: str, **kwargs) -> aiohttp.ClientResponse:
        """Make GET request to GitHub API"""
        return await self.session.get(self._url(endpoint), headers=self._headers(), **kwargs)

    async def post(self, endpoint: str, **kwargs) -> aiohttp.ClientResponse:
        """Make POST request to GitHub API"""
        return await self.session.post(self._url(endpoint), headers=self._headers(), **kwargs)

    async def patch(self, endpoint: str, **kwargs) -> aiohttp.ClientResponse:
        """Make PATCH request to GitHub API"""
        return await self.session.patch(self._url(endpoint), headers=self._headers(), **kwargs)

    async def delete(self, endpoint: str, **kwargs) -> aiohttp.ClientResponse:
        """Make DELETE request to GitHub API"""
        return await self.session.delete(self._url(endpoint), headers=self._headers(), **kwargs)

    async def close(self) -> None:
        if not self.session.closed:
            await self.session.close()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def get_github_client(config: Optional[GitHubConfig] = None) -> Optional[GitHubClient]:
    """Get GitHub client from a config, or from GITHUB_TOKEN in the environment."""
    token = config.token if config is not None else os.getenv("GITHUB_TOKEN")
    if not token:
        logger.debug("🔍 No GitHub token found (config or GITHUB_TOKEN)")
        return None

    base_url = config.base_url if config is not None else DEFAULT_BASE_URL

    # Create aiohttp session (caller is responsible for closing)
    session = aiohttp.ClientSession()
    return GitHubClient(token=token, session=session, base_url=base_url)


async def read_json(response: aiohttp.ClientResponse) -> Any:
    """Decode a JSON body; empty or non-JSON bodies decode to None."""
    try:
        return await response.json(content_type=None)
    except ValueError:
        return None


async def check_response(response: aiohttp.ClientResponse, *ok_statuses: int) -> Any:
    """Return the decoded body, or raise a classified GitHubAPIError."""
    data = await read_json(response)
    if response.status not in ok_statuses:
        raise translate_error(response.status, data)
    return data
