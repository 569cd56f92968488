"""Error taxonomy for ghbatch.

Two families live here:

* Batch errors raised by the operation queue and the commit builder
  (path problems, lifecycle violations, step failures).
* ``GitHubAPIError``, the single error type raised by the transport. HTTP
  failures are classified into an ``ErrorKind`` exactly once, at the
  boundary, by ``translate_error``.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class GitHubBatchError(Exception):
    """Base class for every error raised by ghbatch."""


class PathError(GitHubBatchError, ValueError):
    """A path was rejected by validation."""

    reason = "invalid path"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{self.reason}: {path!r}")


class PathTraversalError(PathError):
    reason = "path traversal not allowed"


class InvalidPathError(PathError):
    reason = "invalid path"


class EmptyPathError(GitHubBatchError, ValueError):
    def __init__(self):
        super().__init__("empty path not allowed")


class BatchCommittedError(GitHubBatchError):
    def __init__(self):
        super().__init__("batch already committed")


class BatchCancelledError(GitHubBatchError):
    def __init__(self):
        super().__init__("batch operation cancelled")


class ConfigurationError(GitHubBatchError, ValueError):
    """Required configuration is missing or malformed."""


class BatchStep:
    """Tags identifying where in the commit protocol a failure happened."""

    GET_REF = "get ref"
    GET_COMMIT = "get commit"
    CREATE_BLOB = "create blob"
    CHECK_FILE_EXISTS = "check file exists"
    CREATE_TREE = "create tree"
    CREATE_COMMIT = "create commit"
    UPDATE_REF = "update ref"


class BatchStepError(GitHubBatchError):
    """A commit protocol step failed; ``cause`` holds the underlying error."""

    def __init__(self, step: str, cause: BaseException):
        self.step = step
        self.cause = cause
        super().__init__(f"batch {step} failed: {cause}")


class ErrorKind(Enum):
    """Classification of transport failures."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    RATE_LIMITED = "rate_limited"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"


class GitHubAPIError(GitHubBatchError):
    """Error returned by the GitHub API, already classified."""

    def __init__(
        self,
        status_code: int,
        message: str = "",
        kind: ErrorKind = ErrorKind.UNKNOWN,
    ):
        self.status_code = status_code
        self.message = message
        self.kind = kind
        if message:
            text = f"github api error {status_code}: {message}"
        else:
            text = f"github api error {status_code}: {kind.value.replace('_', ' ')}"
        super().__init__(text)


_STATUS_KINDS: Dict[int, ErrorKind] = {
    401: ErrorKind.PERMISSION_DENIED,
    403: ErrorKind.PERMISSION_DENIED,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    422: ErrorKind.VALIDATION,
    429: ErrorKind.RATE_LIMITED,
    500: ErrorKind.SERVER_ERROR,
    502: ErrorKind.SERVER_ERROR,
    503: ErrorKind.SERVER_ERROR,
}


def _payload_message(payload: Any) -> str:
    if isinstance(payload, dict):
        return str(payload.get("message") or "")
    if isinstance(payload, str):
        return payload
    return ""


def translate_error(status_code: int, payload: Any = None) -> GitHubAPIError:
    """Convert an HTTP failure into a classified ``GitHubAPIError``.

    Args:
        status_code: HTTP status of the response
        payload: decoded response body (GitHub sends ``{"message": ...}``)
    """
    message = _payload_message(payload)
    lowered = message.lower()
    kind = _STATUS_KINDS.get(status_code, ErrorKind.UNKNOWN)

    if status_code == 403 and "rate limit" in lowered:
        kind = ErrorKind.RATE_LIMITED
    elif status_code == 422 and "fast forward" in lowered:
        # Non-force ref update rejected because the branch moved
        kind = ErrorKind.CONFLICT

    logger.debug(f"Translated HTTP {status_code} to {kind.value}: {message}")
    return GitHubAPIError(status_code, message, kind)


def _api_error(error: Optional[BaseException]) -> Optional[GitHubAPIError]:
    while error is not None:
        if isinstance(error, GitHubAPIError):
            return error
        if isinstance(error, BatchStepError):
            error = error.cause
        else:
            error = error.__cause__
    return None


def _is_kind(error: BaseException, kind: ErrorKind) -> bool:
    api_error = _api_error(error)
    return api_error is not None and api_error.kind is kind


def is_not_found(error: BaseException) -> bool:
    return _is_kind(error, ErrorKind.NOT_FOUND)


def is_permission_denied(error: BaseException) -> bool:
    return _is_kind(error, ErrorKind.PERMISSION_DENIED)


def is_rate_limited(error: BaseException) -> bool:
    return _is_kind(error, ErrorKind.RATE_LIMITED)


def is_conflict(error: BaseException) -> bool:
    return _is_kind(error, ErrorKind.CONFLICT)


def is_validation(error: BaseException) -> bool:
    return _is_kind(error, ErrorKind.VALIDATION)


def is_server_error(error: BaseException) -> bool:
    return _is_kind(error, ErrorKind.SERVER_ERROR)


def status_code(error: BaseException) -> int:
    """HTTP status carried by an error chain, or 0 when there is none."""
    api_error = _api_error(error)
    return api_error.status_code if api_error is not None else 0
