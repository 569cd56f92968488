"""Data models shared by the batch engine and the transport"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel

REGULAR_FILE_MODE = "100644"


class OperationKind(Enum):
    WRITE = "write"
    DELETE = "delete"


@dataclass(frozen=True)
class BatchOperation:
    """A queued write or delete; ``path`` is already normalized."""

    kind: OperationKind
    path: str
    content: Optional[bytes] = None


class CommitAuthor(BaseModel):
    name: str
    email: str


class TreeEntry(BaseModel):
    """Tree mutation relative to a base tree.

    ``sha=None`` removes ``path`` from the resulting tree.
    """

    path: str
    mode: str = REGULAR_FILE_MODE
    type: str = "blob"
    sha: Optional[str] = None

    @property
    def is_removal(self) -> bool:
        return self.sha is None
