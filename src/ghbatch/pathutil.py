"""Path validation and normalization for repository paths.

Repository paths are always relative, forward-slash separated strings.
The empty string stands for the repository root.
"""

import posixpath
from typing import Tuple

from .error_handling import InvalidPathError, PathTraversalError


def _has_control_chars(path: str) -> bool:
    return any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in path)


def validate(path: str) -> None:
    """Validate a repository path.

    Raises:
        PathTraversalError: if any segment is ``..``
        InvalidPathError: if the path contains control characters

    An empty path is valid and represents the repository root.
    """
    if path == "":
        return

    if ".." in path.replace("\\", "/").split("/"):
        raise PathTraversalError(path)

    if _has_control_chars(path):
        raise InvalidPathError(path)


def normalize(path: str) -> str:
    """Normalize a path for the GitHub API.

    Backslashes become forward slashes, redundant separators and ``.``
    segments are collapsed, and leading slashes are stripped. Root
    representations (``""``, ``"."``, ``"/"``) normalize to ``""``.
    """
    if path == "":
        return ""

    path = posixpath.normpath(path.replace("\\", "/"))
    # normpath keeps a leading "//"
    path = path.lstrip("/")

    if path == ".":
        return ""

    return path


def validate_and_normalize(path: str) -> str:
    validate(path)
    return normalize(path)


def join(*parts: str) -> str:
    """Join path parts, ignoring empty ones, and normalize the result."""
    filtered = [p for p in parts if p]
    if not filtered:
        return ""
    return normalize(posixpath.join(*filtered))


def split(path: str) -> Tuple[str, str]:
    """Split into ``(dir/, base)``; the directory keeps its trailing slash."""
    path = normalize(path)
    idx = path.rfind("/") + 1
    return path[:idx], path[idx:]


def dirname(path: str) -> str:
    directory, _ = split(path)
    return directory.rstrip("/")


def basename(path: str) -> str:
    path = normalize(path)
    if path == "":
        return ""
    return posixpath.basename(path)


def ext(path: str) -> str:
    return posixpath.splitext(basename(path))[1]


def has_prefix(path: str, prefix: str) -> bool:
    """Report whether ``path`` lies under ``prefix`` (segment aware)."""
    path = normalize(path)
    prefix = normalize(prefix)

    if prefix == "" or path == prefix:
        return True

    return path.startswith(prefix + "/")
