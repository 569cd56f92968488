"""Configuration module for ghbatch.

Configuration is a Pydantic model so values are typed and validated, and
it binds to the conventional GitHub environment variables:

    ```bash
    export GITHUB_OWNER=octo
    export GITHUB_REPO=hello-world
    export GITHUB_BRANCH=main
    export GITHUB_TOKEN=ghp_xxxxxxxxxxxx
    export GITHUB_API_URL=https://github.example.com/api/v3/   # Enterprise
    ```

Usage examples:
    >>> from ghbatch.configuration import GitHubConfig, load_environment_variables
    >>>
    >>> load_environment_variables()          # pick up .env files
    >>> config = GitHubConfig.from_env()
    >>> config.check_required()
    >>>
    >>> config = GitHubConfig.from_mapping({"owner": "octo", "repo": "hello"})
    >>> config.branch
    'main'
"""

import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import dotenv_values, load_dotenv
from pydantic import BaseModel, field_validator

from ..error_handling import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"
DEFAULT_BASE_URL = "https://api.github.com/"
DEFAULT_UPLOAD_URL = "https://uploads.github.com/"

ENV_OWNER = "GITHUB_OWNER"
ENV_REPO = "GITHUB_REPO"
ENV_BRANCH = "GITHUB_BRANCH"
ENV_TOKEN = "GITHUB_TOKEN"
ENV_BASE_URL = "GITHUB_API_URL"
ENV_UPLOAD_URL = "GITHUB_UPLOAD_URL"

# Common placeholder values that should be overridden
GITHUB_TOKEN_PLACEHOLDERS = ["", "YOUR_TOKEN_HERE", "REPLACE_ME", "TODO", "CHANGEME"]


class GitHubConfig(BaseModel):
    """Settings for talking to one GitHub repository."""

    owner: str = ""
    repo: str = ""
    branch: str = DEFAULT_BRANCH
    token: str = ""
    base_url: str = DEFAULT_BASE_URL
    upload_url: str = DEFAULT_UPLOAD_URL

    @field_validator("branch")
    @classmethod
    def _default_branch(cls, value: str) -> str:
        return value or DEFAULT_BRANCH

    @field_validator("base_url")
    @classmethod
    def _default_base_url(cls, value: str) -> str:
        return value or DEFAULT_BASE_URL

    @field_validator("upload_url")
    @classmethod
    def _default_upload_url(cls, value: str) -> str:
        return value or DEFAULT_UPLOAD_URL

    @classmethod
    def from_mapping(cls, values: Mapping[str, Optional[str]]) -> "GitHubConfig":
        """Build a config from a plain mapping; unknown keys are ignored."""
        known = {k: v for k, v in values.items() if k in cls.model_fields and v is not None}
        return cls(**known)

    @classmethod
    def from_env(cls) -> "GitHubConfig":
        return cls(
            owner=os.getenv(ENV_OWNER, ""),
            repo=os.getenv(ENV_REPO, ""),
            branch=os.getenv(ENV_BRANCH, ""),
            token=os.getenv(ENV_TOKEN, ""),
            base_url=os.getenv(ENV_BASE_URL, ""),
            upload_url=os.getenv(ENV_UPLOAD_URL, ""),
        )

    def check_required(self) -> None:
        """Raise ConfigurationError naming the first missing required field."""
        for field in ("owner", "repo", "token"):
            if not getattr(self, field):
                raise ConfigurationError(f"{field} is required")

    @property
    def is_enterprise(self) -> bool:
        return bool(self.base_url) and self.base_url != DEFAULT_BASE_URL


def should_override_github_token(token: Optional[str]) -> bool:
    """Check if a GitHub token should be overridden."""
    if token is None:
        return True
    return token.strip() in GITHUB_TOKEN_PLACEHOLDERS


def _load_env_file(env_file: Path) -> None:
    github_token_before = os.getenv(ENV_TOKEN)
    load_dotenv(env_file, override=False)  # Don't override existing env vars

    # Empty and placeholder tokens lose to a real value from the file
    if should_override_github_token(github_token_before):
        file_token = dotenv_values(env_file).get(ENV_TOKEN)
        if file_token and not should_override_github_token(file_token):
            os.environ[ENV_TOKEN] = file_token


def load_environment_variables(repository_path: Optional[Path] = None) -> List[str]:
    """
    Load environment variables from .env files.

    The current directory's .env is loaded first, then the one in
    ``repository_path`` if given. Existing variables are kept, except an
    empty or placeholder GITHUB_TOKEN.

    Returns:
        Paths of the files that were loaded
    """
    loaded_files: List[str] = []
    candidates = [Path.cwd() / ".env"]
    if repository_path:
        candidates.append(Path(repository_path) / ".env")

    for env_file in candidates:
        if not env_file.exists() or str(env_file) in loaded_files:
            continue
        try:
            _load_env_file(env_file)
        except OSError as e:
            logger.warning(f"Failed to load .env file {env_file}: {e}")
            continue
        loaded_files.append(str(env_file))
        logger.info(f"Loaded environment variables from {env_file}")

    return loaded_files


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_BRANCH",
    "DEFAULT_UPLOAD_URL",
    "GITHUB_TOKEN_PLACEHOLDERS",
    "GitHubConfig",
    "load_environment_variables",
    "should_override_github_token",
]
